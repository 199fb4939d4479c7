"""Per-project detail records: users/<owner>/projects/<id>/project.json."""

from pydantic import ValidationError

from ..core.logging import get_logger
from ..models import Project
from .base import JsonDocumentRepository

logger = get_logger(__name__)

MEDIA_SUBDIRS = ("images", "videos", "gantt")
DETAIL_FILE_NAME = "project.json"
GANTT_FILE_NAME = "gantt.png"


def projects_dir(owner_id: str) -> str:
    return f"users/{owner_id}/projects"


def project_dir(owner_id: str, project_id: str) -> str:
    return f"{projects_dir(owner_id)}/{project_id}"


def detail_path(owner_id: str, project_id: str) -> str:
    return f"{project_dir(owner_id, project_id)}/{DETAIL_FILE_NAME}"


def media_path(owner_id: str, project_id: str, subdir: str, file_name: str) -> str:
    return f"{project_dir(owner_id, project_id)}/{subdir}/{file_name}"


def gantt_path(owner_id: str, project_id: str) -> str:
    return media_path(owner_id, project_id, "gantt", GANTT_FILE_NAME)


class ProjectDetailRepository(JsonDocumentRepository):
    """
    Репозиторий полных записей проектов.

    Один файл на проект; путь зависит от владельца и ID,
    поэтому self.path не используется - методы принимают owner_id/project_id.
    """

    async def create_project_dir(self, owner_id: str, project_id: str) -> bool:
        """Create the project directory with images/, videos/ and gantt/."""
        base = project_dir(owner_id, project_id)
        result = await self.backend.make_dirs(base, *(f"{base}/{sub}" for sub in MEDIA_SUBDIRS))
        return result.success

    async def detail_exists(self, owner_id: str, project_id: str) -> bool:
        result = await self.backend.exists(detail_path(owner_id, project_id))
        return bool(result.success and result.data)

    async def read(self, owner_id: str, project_id: str) -> Project | None:
        """
        Прочитать project.json.

        Returns:
            Project (медиа в виде path) или None, если файла нет,
            JSON повреждён или запись не проходит валидацию
        """
        path = detail_path(owner_id, project_id)
        result = await self.backend.read_json(path)
        if not result.success:
            return None
        try:
            return Project.model_validate(result.data)
        except ValidationError as e:
            logger.error("Malformed project record", extra={"path": path, "error": str(e)})
            return None

    async def write(self, project: Project) -> bool:
        """Overwrite project.json with the given record (no merge)."""
        result = await self.backend.write_json(
            detail_path(project.owner_id, project.id), project.to_json_dict()
        )
        return result.success

    async def delete_project_dir(self, owner_id: str, project_id: str) -> bool:
        """Remove the whole project tree (JSON and media). Idempotent."""
        result = await self.backend.delete_dir(project_dir(owner_id, project_id))
        return result.success

    async def list_project_ids(self, owner_id: str) -> list[str]:
        """
        ID проектов пользователя по содержимому диска.

        Учитываются только папки, в которых есть project.json.
        """
        listing = await self.backend.list_dir(projects_dir(owner_id))
        if not listing.success:
            return []
        return [
            name for name in listing.data if await self.detail_exists(owner_id, name)
        ]
