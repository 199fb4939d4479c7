"""Base classes for pydantic models."""

from datetime import UTC, date, datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def today_iso() -> str:
    """Return today's date as YYYY-MM-DD (the format the editor stores)."""
    return date.today().isoformat()


def utc_now_iso() -> str:
    """Return current UTC datetime as ISO string."""
    return datetime.now(UTC).isoformat()


class CamelModel(BaseModel):
    """
    Base class for all persisted models.

    На диске и в API ключи в camelCase (ownerId, targetDate),
    в Python - snake_case. populate_by_name позволяет создавать
    модели из обоих вариантов.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        """Dump the model the way it is written to disk."""
        return self.model_dump(mode="json", by_alias=True)
