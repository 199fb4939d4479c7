"""Base repositories for JSON documents stored through the backend."""

from typing import Any, Generic, TypeVar

from pydantic import ValidationError

from ..core.logging import get_logger
from ..models.base import CamelModel
from ..storage import StorageBackend

logger = get_logger(__name__)

# TypeVar для Generic класса - позволяет работать с любой моделью
ModelType = TypeVar("ModelType", bound=CamelModel)


class JsonDocumentRepository:
    """
    Репозиторий одного JSON-документа.

    Пример использования:
        repo = ConfigRepository(backend)
        data = await repo.read_document()
    """

    path: str = ""

    def __init__(self, backend: StorageBackend):
        """
        Инициализация репозитория.

        Args:
            backend: Файловое хранилище (корень приложения)
        """
        self.backend = backend

    async def exists(self) -> bool:
        result = await self.backend.exists(self.path)
        return bool(result.success and result.data)

    async def read_document(self) -> dict[str, Any] | None:
        """
        Прочитать документ.

        Returns:
            Содержимое JSON или None, если файла нет или он повреждён
        """
        result = await self.backend.read_json(self.path)
        if not result.success:
            return None
        if not isinstance(result.data, dict):
            logger.error("Unexpected JSON document shape", extra={"path": self.path})
            return None
        return result.data

    async def write_document(self, data: dict[str, Any]) -> bool:
        """Перезаписать документ целиком."""
        result = await self.backend.write_json(self.path, data)
        return result.success


class JsonCollectionRepository(JsonDocumentRepository, Generic[ModelType]):
    """
    Репозиторий коллекции моделей внутри JSON-документа: { "<key>": [...] }.

    Generic[ModelType] означает, что класс работает с любой моделью,
    наследующейся от CamelModel.
    """

    model: type[ModelType]
    key: str = ""

    async def load_all(self) -> list[ModelType] | None:
        """
        Загрузить все элементы коллекции.

        Returns:
            Список моделей; [] если файла нет;
            None если файл повреждён (JSON или схема)
        """
        if not await self.exists():
            return []

        document = await self.read_document()
        if document is None:
            return None

        try:
            return [self.model.model_validate(item) for item in document.get(self.key) or []]
        except ValidationError as e:
            logger.error(
                "Malformed collection document",
                extra={"path": self.path, "error": str(e)},
            )
            return None

    async def save_all(self, items: list[ModelType]) -> bool:
        """Перезаписать коллекцию целиком."""
        return await self.write_document({self.key: [item.to_json_dict() for item in items]})
