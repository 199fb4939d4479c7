"""Local file storage: backend primitives and the media codec."""

from .backend import StorageBackend, StorageResult
from .media_codec import (
    ALLOWED_IMAGE_TYPES,
    ALLOWED_VIDEO_TYPES,
    MediaCodec,
    build_data_uri,
    declared_mime_type,
    is_allowed_upload,
    mime_type_for,
    parse_data_uri,
)

__all__ = [
    "StorageBackend",
    "StorageResult",
    "MediaCodec",
    "ALLOWED_IMAGE_TYPES",
    "ALLOWED_VIDEO_TYPES",
    "build_data_uri",
    "declared_mime_type",
    "is_allowed_upload",
    "mime_type_for",
    "parse_data_uri",
]
