"""Conversion between data-URI media and media files on disk.

The helpers at module level are pure. ``MediaCodec`` performs the two I/O
steps (externalize / embed) through a ``StorageBackend``.
"""

import base64
import binascii
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from ..core.logging import get_logger
from ..models.media import EmbeddedMedia, ExternalizedMedia

if TYPE_CHECKING:
    from .backend import StorageBackend

logger = get_logger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"

_IMAGE_EXTENSIONS = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
}
_VIDEO_EXTENSIONS = {
    "mp4": "video/mp4",
    "webm": "video/webm",
    "ogg": "video/ogg",
    "mov": "video/quicktime",
}

# Upload allow-lists, checked where media enters the system (API), not here
ALLOWED_IMAGE_TYPES = frozenset({"image/png", "image/jpeg", "image/gif", "image/webp"})
ALLOWED_VIDEO_TYPES = frozenset({"video/mp4", "video/webm", "video/ogg", "video/quicktime"})


@dataclass
class DecodedMedia:
    """Raw bytes of a data URI with its declared MIME type."""

    mime_type: str
    payload: bytes


def mime_type_for(path: str) -> str:
    """Guess MIME type from the file extension."""
    ext = PurePosixPath(path).suffix.lower().lstrip(".")
    return _IMAGE_EXTENSIONS.get(ext) or _VIDEO_EXTENSIONS.get(ext) or DEFAULT_MIME_TYPE


def parse_data_uri(data_uri: str) -> DecodedMedia:
    """Split ``data:<mime>;base64,<payload>`` and decode the payload.

    A string without a comma is treated as a bare base64 payload.

    Raises:
        ValueError: payload is not valid base64
    """
    mime_type = DEFAULT_MIME_TYPE
    payload = data_uri
    if "," in data_uri:
        header, payload = data_uri.split(",", 1)
        if header.startswith("data:"):
            declared = header[len("data:"):].split(";", 1)[0]
            mime_type = declared or DEFAULT_MIME_TYPE
    try:
        payload_bytes = base64.b64decode("".join(payload.split()), validate=True)
        return DecodedMedia(mime_type=mime_type, payload=payload_bytes)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e


def build_data_uri(payload: bytes, mime_type: str) -> str:
    """Encode bytes as ``data:<mime>;base64,<payload>``."""
    return f"data:{mime_type};base64,{base64.b64encode(payload).decode('ascii')}"


def declared_mime_type(data_uri: str) -> str:
    """MIME type declared in a data URI header, without decoding the payload."""
    if data_uri.startswith("data:") and "," in data_uri:
        return data_uri[len("data:"):].split(",", 1)[0].split(";", 1)[0]
    return ""


def is_allowed_upload(kind: str, mime_type: str) -> bool:
    """Check an uploaded MIME type against the allow-list for ``image`` / ``video``."""
    if kind == "video":
        return mime_type in ALLOWED_VIDEO_TYPES
    return mime_type in ALLOWED_IMAGE_TYPES


class MediaCodec:
    """Externalize / embed media references through the storage backend."""

    def __init__(self, backend: "StorageBackend"):
        self.backend = backend

    async def externalize(
        self, media: EmbeddedMedia, dest_path: str, default_type: str = ""
    ) -> ExternalizedMedia | None:
        """Write an embedded media item to ``dest_path``.

        Args:
            media: Media carrying a data URI
            dest_path: Destination path relative to the storage root
            default_type: fileType to record when the upload declared none

        Returns:
            Externalized reference, or None if the write failed
        """
        result = await self.backend.save_media(dest_path, media.src)
        if not result.success:
            logger.error(
                "Failed to write media file",
                extra={"path": dest_path, "error": result.error},
            )
            return None

        return ExternalizedMedia(
            path=dest_path,
            title=media.title,
            file_name=media.file_name or PurePosixPath(dest_path).name,
            file_type=media.file_type or default_type,
            file_size=media.file_size,
        )

    async def embed(self, media: ExternalizedMedia) -> EmbeddedMedia | None:
        """Read a media file back as a data URI.

        Returns:
            Embedded reference with the original metadata, or None if the file
            could not be read
        """
        result = await self.backend.read_media(media.path)
        if not result.success:
            logger.warning(
                "Media file unreadable, dropping it from the record",
                extra={"path": media.path, "error": result.error},
            )
            return None

        return EmbeddedMedia(
            src=result.data,
            title=media.title,
            file_name=media.file_name,
            file_type=media.file_type,
            file_size=media.file_size,
        )
