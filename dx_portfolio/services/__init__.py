"""Service layer with business logic."""

from .bootstrap import BootstrapReport, DataBootstrapper, default_users
from .project_store import ProjectLoad, ProjectStore
from .session import SessionService

__all__ = [
    "ProjectStore",
    "ProjectLoad",
    "SessionService",
    "DataBootstrapper",
    "BootstrapReport",
    "default_users",
]
