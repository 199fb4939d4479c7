"""Project index entry and its derivation from a full record."""

from pydantic import Field

from .base import CamelModel
from .media import EmbeddedMedia, ExternalizedMedia
from .project import DEFAULT_ICON, Blocker, Project, ProjectPriority, ProjectStatus


class IndexEntry(CamelModel):
    """
    Lightweight per-project summary stored in data/projects-index.json.

    Scalar fields mirror the full record; media are reduced to counts and
    ``{path|src, title}`` descriptors, so an entry can never be used to
    reconstruct the media themselves.
    """

    id: str
    owner_id: str
    title: str = ""
    icon: str = DEFAULT_ICON
    status: ProjectStatus = ProjectStatus.DISCOVERY
    priority: ProjectPriority = ProjectPriority.MEDIUM
    progress: int = 0
    target_date: str = ""
    current_phase: str = ""
    achievements: dict[str, str] = Field(default_factory=dict)
    blockers: Blocker = Field(default_factory=Blocker)
    next_steps: dict[str, str] = Field(default_factory=dict)
    created_at: str = ""
    updated_at: str = ""

    gantt_image: str = ""
    images: list[dict[str, str]] = Field(default_factory=list)
    videos: list[dict[str, str]] = Field(default_factory=list)
    has_gantt: bool = False
    image_count: int = 0
    video_count: int = 0


def _descriptor(media: EmbeddedMedia | ExternalizedMedia, default_title: str) -> dict[str, str]:
    title = media.title or default_title
    if isinstance(media, ExternalizedMedia):
        return {"path": media.path, "title": title}
    return {"src": media.src, "title": title}


def derive_index_entry(project: Project) -> IndexEntry:
    """Project the full record onto its index entry.

    Pure function: the same record always yields the same entry.
    """
    gantt = project.gantt_image
    if isinstance(gantt, ExternalizedMedia):
        gantt_ref = gantt.path
    elif isinstance(gantt, EmbeddedMedia):
        gantt_ref = gantt.src
    else:
        gantt_ref = ""

    return IndexEntry(
        id=project.id,
        owner_id=project.owner_id,
        title=project.title,
        icon=project.icon or DEFAULT_ICON,
        status=project.status,
        priority=project.priority,
        progress=project.progress,
        target_date=project.target_date,
        current_phase=project.current_phase,
        achievements=dict(project.achievements),
        blockers=project.blockers.model_copy(),
        next_steps=dict(project.next_steps),
        created_at=project.created_at,
        updated_at=project.updated_at,
        gantt_image=gantt_ref,
        images=[_descriptor(image, "Image") for image in project.images],
        videos=[_descriptor(video, "Video") for video in project.videos],
        has_gantt=gantt is not None,
        image_count=len(project.images),
        video_count=len(project.videos),
    )
