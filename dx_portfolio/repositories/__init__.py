"""Repository layer for file-backed data access."""

from .base import JsonCollectionRepository, JsonDocumentRepository
from .config import ConfigRepository
from .project_detail import ProjectDetailRepository
from .project_index import ProjectIndexRepository
from .user import UserRepository

__all__ = [
    "JsonDocumentRepository",
    "JsonCollectionRepository",
    "UserRepository",
    "ConfigRepository",
    "ProjectIndexRepository",
    "ProjectDetailRepository",
]
