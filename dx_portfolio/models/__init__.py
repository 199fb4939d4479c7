"""Pydantic models for DX Portfolio."""

from .base import CamelModel, today_iso, utc_now_iso
from .index import IndexEntry, derive_index_entry
from .media import EmbeddedMedia, ExternalizedMedia, MediaMeta, MediaRef
from .project import (
    Blocker,
    BlockerType,
    Project,
    ProjectPriority,
    ProjectStatus,
    new_draft,
)
from .taxonomy import DEFAULT_CONFIG, AppConfig, TaxonomyEntry
from .user import User

__all__ = [
    "CamelModel",
    "today_iso",
    "utc_now_iso",
    "User",
    "Project",
    "ProjectStatus",
    "ProjectPriority",
    "Blocker",
    "BlockerType",
    "new_draft",
    "MediaMeta",
    "MediaRef",
    "EmbeddedMedia",
    "ExternalizedMedia",
    "IndexEntry",
    "derive_index_entry",
    "AppConfig",
    "TaxonomyEntry",
    "DEFAULT_CONFIG",
]
