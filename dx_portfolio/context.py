"""Application context: every piece of process-wide state in one object.

The top-level process creates a single ``AppContext``, calls ``init()`` once
at startup and ``close()`` at shutdown. Storage, the project index and the
current session are reached through it rather than through module globals.
"""

from pathlib import Path

from .core.logging import get_logger
from .models import AppConfig
from .repositories import ConfigRepository, UserRepository
from .services import BootstrapReport, DataBootstrapper, ProjectStore, SessionService
from .storage import StorageBackend

logger = get_logger(__name__)


class AppContext:
    """Owns the backend, the project store, the session and the loaded config."""

    def __init__(self, root: str | Path, legacy_projects_file: str = "projects.json"):
        self.backend = StorageBackend(root)
        self.store = ProjectStore(self.backend)
        self.session = SessionService(UserRepository(self.backend))
        self.config_repo = ConfigRepository(self.backend)
        self.config = AppConfig()
        self.legacy_projects_file = legacy_projects_file
        self.ready = False

    async def init(self) -> BootstrapReport:
        """Seed missing data files, then load users, config and the index."""
        report = await DataBootstrapper(
            self.backend, self.store, self.legacy_projects_file
        ).run()

        await self.session.load_users()
        self.config = await self.config_repo.load()
        await self.store.load_index()

        for user in self.session.users:
            orphans = await self.store.find_orphans(user.id)
            if orphans:
                logger.warning(
                    "Project folders missing from the index",
                    extra={"owner_id": user.id, "project_ids": orphans},
                )

        self.ready = True
        logger.info(
            "Application context ready",
            extra={
                "root": str(self.backend.root),
                "users": len(self.session.users),
                "projects": len(self.store.projects),
            },
        )
        return report

    async def close(self) -> None:
        """Drop session and in-memory state. Nothing is written on close."""
        self.session.logout()
        self.store.projects = []
        self.ready = False
        logger.info("Application context closed")
