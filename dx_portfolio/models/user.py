"""User model."""

from pydantic import Field

from .base import CamelModel, utc_now_iso


class User(CamelModel):
    """
    A portfolio user.

    Пользователи создаются только из seed-данных (data/users.json).
    Пароль хранится в открытом виде: это локальный однопользовательский
    "замок", а не граница безопасности.
    """

    id: str
    username: str
    password: str
    name: str = ""
    role: str = ""
    email: str = ""
    avatar: str | None = None
    created_at: str = Field(default_factory=utc_now_iso)

    def public_dict(self) -> dict:
        """Serialized user without the password."""
        data = self.to_json_dict()
        data.pop("password", None)
        return data
