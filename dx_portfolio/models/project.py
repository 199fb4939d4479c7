"""Project model."""

import enum
import time
from typing import Any

from pydantic import Field, field_validator, model_validator

from .base import CamelModel, today_iso
from .media import EmbeddedMedia, ExternalizedMedia, MediaRef, media_from_legacy

DEFAULT_ICON = "📋"
DRAFT_TITLE = "New project"


class ProjectStatus(str, enum.Enum):
    """Project status enum."""

    DISCOVERY = "discovery"
    IN_PROGRESS = "in-progress"
    HOLD = "hold"
    PAUSED = "paused"
    COMPLETED = "completed"


class ProjectPriority(str, enum.Enum):
    """Project priority enum."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BlockerType(str, enum.Enum):
    """Blocker severity enum."""

    INFO = "info"
    WARNING = "warning"
    ALERT = "alert"
    SUCCESS = "success"


class Blocker(CamelModel):
    """Current blocker note shown on the project slide."""

    type: BlockerType = BlockerType.INFO
    message: str = ""


class Project(CamelModel):
    """
    Full project record.

    В памяти и в UI медиа встроены (EmbeddedMedia с data URI),
    в project.json на диске - вынесены в файлы (ExternalizedMedia с path).
    Преобразование делает ProjectStore при save/load.
    """

    id: str
    owner_id: str
    title: str = ""
    icon: str = DEFAULT_ICON
    status: ProjectStatus = ProjectStatus.DISCOVERY
    priority: ProjectPriority = ProjectPriority.MEDIUM
    progress: int = Field(default=0, ge=0, le=100)
    target_date: str = ""
    current_phase: str = ""

    # YYYY-MM -> text
    achievements: dict[str, str] = Field(default_factory=dict)
    blockers: Blocker = Field(default_factory=Blocker)
    next_steps: dict[str, str] = Field(default_factory=dict)

    gantt_image: MediaRef | None = None
    images: list[MediaRef] = Field(default_factory=list)
    videos: list[MediaRef] = Field(default_factory=list)

    created_at: str = Field(default_factory=today_iso)
    updated_at: str = Field(default_factory=today_iso)

    @model_validator(mode="before")
    @classmethod
    def _legacy_gantt_path(cls, data: Any) -> Any:
        # Старый формат: ganttImagePath отдельным полем на верхнем уровне
        if isinstance(data, dict) and data.get("ganttImagePath") and not data.get("ganttImage"):
            data = dict(data)
            data["ganttImage"] = data.pop("ganttImagePath")
        return data

    @field_validator("gantt_image", mode="before")
    @classmethod
    def _normalize_gantt(cls, value: Any) -> Any:
        return media_from_legacy(value)

    @field_validator("images", "videos", "achievements", "next_steps", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any, info) -> Any:
        if value is None:
            return [] if info.field_name in ("images", "videos") else {}
        return value

    @field_validator("blockers", mode="before")
    @classmethod
    def _none_blockers(cls, value: Any) -> Any:
        return value if value is not None else {}

    def media_items(self) -> list[EmbeddedMedia | ExternalizedMedia]:
        """Gantt (if any), images and videos as one flat list."""
        items: list[EmbeddedMedia | ExternalizedMedia] = []
        if self.gantt_image is not None:
            items.append(self.gantt_image)
        return [*items, *self.images, *self.videos]

    def is_fully_externalized(self) -> bool:
        return all(isinstance(item, ExternalizedMedia) for item in self.media_items())


def new_draft(owner_id: str) -> Project:
    """
    Создать черновик проекта.

    ID временный (proj<epoch-ms>): постоянный ID назначается
    при первом сохранении через ProjectStore.generate_id().
    """
    today = today_iso()
    return Project(
        id=f"proj{int(time.time() * 1000)}",
        owner_id=owner_id,
        title=DRAFT_TITLE,
        target_date=today,
        created_at=today,
        updated_at=today,
    )
