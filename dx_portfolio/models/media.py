"""Media reference models.

A media reference is either embedded (``src`` holds a data URI, used in memory
and by the UI) or externalized (``path`` points at a file relative to the
application root, used in the persisted detail record).
"""

from typing import Annotated, Any

from pydantic import Discriminator, Tag

from .base import CamelModel


class MediaMeta(CamelModel):
    """Metadata shared by both media shapes."""

    title: str = ""
    file_name: str = ""
    file_type: str = ""
    file_size: int = 0


class EmbeddedMedia(MediaMeta):
    """Media carried inline as ``data:<mime>;base64,<payload>``."""

    src: str


class ExternalizedMedia(MediaMeta):
    """Media stored as a file under the project directory."""

    path: str


def _media_kind(value: Any) -> str:
    if isinstance(value, ExternalizedMedia):
        return "externalized"
    if isinstance(value, EmbeddedMedia):
        return "embedded"
    if isinstance(value, dict) and value.get("path"):
        return "externalized"
    return "embedded"


MediaRef = Annotated[
    Annotated[EmbeddedMedia, Tag("embedded")] | Annotated[ExternalizedMedia, Tag("externalized")],
    Discriminator(_media_kind),
]


def media_from_legacy(value: Any) -> Any:
    """Normalize legacy gantt values.

    Old records stored the gantt chart as a bare string: a data URI before the
    first save, a relative path afterwards. Empty strings mean "no gantt".
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        if value.startswith("data:"):
            return {"src": value, "fileName": "gantt.png", "fileType": "image/png"}
        return {"path": value, "fileName": "gantt.png", "fileType": "image/png"}
    return value
