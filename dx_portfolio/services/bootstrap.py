"""First-run data initialization.

Seeds ``data/users.json`` and ``data/config.json`` when they are missing and
builds ``data/projects-index.json``, importing a legacy flat ``projects.json``
into the per-project layout when one is present.
"""

from dataclasses import dataclass, field

from pydantic import ValidationError

from ..core.logging import get_logger
from ..models import DEFAULT_CONFIG, AppConfig, Project, User, utc_now_iso
from ..repositories import ConfigRepository, UserRepository
from ..storage import StorageBackend
from .project_store import ProjectStore

logger = get_logger(__name__)

DEFAULT_PASSWORD = "password123"


def default_users() -> list[User]:
    """Bootstrap user set."""
    created_at = utc_now_iso()
    return [
        User(
            id="user1",
            username="hiram",
            password=DEFAULT_PASSWORD,
            name="Hiram",
            role="DX Engineer",
            email="hiram@dx.com",
            created_at=created_at,
        ),
        User(
            id="user2",
            username="ana",
            password=DEFAULT_PASSWORD,
            name="Ana García",
            role="DX Lead",
            email="ana@dx.com",
            created_at=created_at,
        ),
    ]


@dataclass
class BootstrapReport:
    """What the initializer had to create."""

    seeded_users: bool = False
    seeded_config: bool = False
    created_index: bool = False
    imported_projects: int = 0
    skipped_projects: list[str] = field(default_factory=list)


class DataBootstrapper:
    """
    Инициализация структуры данных при первом запуске.

    Бизнес-правила:
    1. Нет users.json - создаём пользователей по умолчанию и их папки
    2. Нет config.json - создаём таксономии по умолчанию
    3. Нет projects-index.json - импортируем legacy projects.json
       (через ProjectStore.save, медиа выносятся в файлы),
       иначе создаём пустой индекс
    """

    def __init__(
        self,
        backend: StorageBackend,
        store: ProjectStore,
        legacy_projects_file: str = "projects.json",
    ):
        self.backend = backend
        self.store = store
        self.user_repo = UserRepository(backend)
        self.config_repo = ConfigRepository(backend)
        self.legacy_projects_file = legacy_projects_file

    async def run(self) -> BootstrapReport:
        report = BootstrapReport()

        await self.backend.make_dirs("data", "users")

        if not await self.user_repo.exists():
            report.seeded_users = await self._seed_users()

        if not await self.config_repo.exists():
            report.seeded_config = await self.config_repo.save(AppConfig.model_validate(DEFAULT_CONFIG))
            logger.info("Default config created")

        if not await self.store.index_repo.exists():
            await self._create_index(report)

        return report

    async def _seed_users(self) -> bool:
        users = default_users()
        if not await self.user_repo.save_all(users):
            logger.error("Failed to seed users file")
            return False
        for user in users:
            await self.user_repo.create_user_dir(user.id)
        logger.info("Default users created", extra={"users": len(users)})
        return True

    async def _create_index(self, report: BootstrapReport) -> None:
        self.store.projects = []
        report.created_index = True

        legacy = await self._read_legacy_projects()
        for raw in legacy:
            try:
                project = Project.model_validate(raw)
            except ValidationError as e:
                project_id = str(raw.get("id", "?")) if isinstance(raw, dict) else "?"
                logger.warning(
                    "Skipping invalid legacy project",
                    extra={"project_id": project_id, "error": str(e)},
                )
                report.skipped_projects.append(project_id)
                continue

            if await self.store.save(project.owner_id, project):
                report.imported_projects += 1
            else:
                report.skipped_projects.append(project.id)

        # Пустой импорт (или его отсутствие) - всё равно пишем пустой индекс
        if report.imported_projects == 0:
            await self.store.index_repo.save_all([])

        logger.info(
            "Project index created",
            extra={
                "imported": report.imported_projects,
                "skipped": len(report.skipped_projects),
            },
        )

    async def _read_legacy_projects(self) -> list:
        exists = await self.backend.exists(self.legacy_projects_file)
        if not (exists.success and exists.data):
            return []

        result = await self.backend.read_json(self.legacy_projects_file)
        if not result.success or not isinstance(result.data, dict):
            logger.warning(
                "Legacy projects file unreadable, starting with an empty index",
                extra={"path": self.legacy_projects_file},
            )
            return []

        projects = result.data.get("projects") or []
        logger.info("Importing legacy projects", extra={"projects": len(projects)})
        return projects
