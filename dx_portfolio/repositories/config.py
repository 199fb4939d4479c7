"""Taxonomy configuration repository (data/config.json)."""

from pydantic import ValidationError

from ..core.logging import get_logger
from ..models import AppConfig
from .base import JsonDocumentRepository

logger = get_logger(__name__)

CONFIG_FILE = "data/config.json"


class ConfigRepository(JsonDocumentRepository):
    """Single config document."""

    path = CONFIG_FILE

    async def load(self) -> AppConfig:
        """
        Загрузить конфигурацию.

        Returns:
            AppConfig; пустой AppConfig если файла нет или он повреждён
            (lookup'ы тогда возвращают {})
        """
        document = await self.read_document()
        if document is None:
            return AppConfig()
        try:
            return AppConfig.model_validate(document)
        except ValidationError as e:
            logger.error("Malformed config document", extra={"path": self.path, "error": str(e)})
            return AppConfig()

    async def save(self, config: AppConfig) -> bool:
        return await self.write_document(config.to_json_dict())
