"""Local file storage backend.

All paths are relative to the application root. Every operation returns a
``StorageResult`` instead of raising, so I/O failures never cross this
boundary as exceptions.
"""

import json
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from anyio import Path as AsyncPath
from anyio import to_thread

from ..core.logging import get_logger
from .media_codec import build_data_uri, mime_type_for, parse_data_uri

logger = get_logger(__name__)


@dataclass
class StorageResult:
    """Outcome of a storage operation."""

    success: bool
    data: Any = None
    error: str | None = None
    mime_type: str | None = None

    @classmethod
    def ok(cls, data: Any = None, mime_type: str | None = None) -> "StorageResult":
        return cls(success=True, data=data, mime_type=mime_type)

    @classmethod
    def fail(cls, error: str) -> "StorageResult":
        return cls(success=False, error=error)


class StorageBackend:
    """Async file operations rooted at the application directory."""

    def __init__(self, root: str | Path):
        """Initialize backend with the application root.

        Args:
            root: Directory that holds ``data/`` and ``users/``
        """
        self.root = Path(root).resolve()

    def resolve(self, relative_path: str) -> Path:
        """Absolute path for ``relative_path``.

        Raises:
            ValueError: the path escapes the root
        """
        full_path = (self.root / relative_path).resolve()
        if full_path != self.root and self.root not in full_path.parents:
            raise ValueError(f"Path escapes storage root: {relative_path}")
        return full_path

    def _failure(self, operation: str, path: str, error: Exception) -> StorageResult:
        logger.error(
            f"Storage {operation} failed",
            extra={"path": path, "error": str(error)},
        )
        return StorageResult.fail(str(error))

    # ==================== JSON ====================

    async def read_json(self, path: str) -> StorageResult:
        """Read and parse a JSON file."""
        try:
            content = await AsyncPath(self.resolve(path)).read_text(encoding="utf-8")
            return StorageResult.ok(json.loads(content))
        except (OSError, ValueError) as e:
            return self._failure("readJSON", path, e)

    async def write_json(self, path: str, data: Any) -> StorageResult:
        """Write ``data`` as pretty-printed JSON, creating parent directories."""
        try:
            target = AsyncPath(self.resolve(path))
            await target.parent.mkdir(parents=True, exist_ok=True)
            await target.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
            return StorageResult.ok()
        except (OSError, TypeError, ValueError) as e:
            return self._failure("writeJSON", path, e)

    # ==================== MEDIA ====================

    async def save_media(self, path: str, data_uri: str) -> StorageResult:
        """Decode a data URI (or bare base64) and write the bytes to ``path``."""
        try:
            decoded = parse_data_uri(data_uri)
            target = AsyncPath(self.resolve(path))
            await target.parent.mkdir(parents=True, exist_ok=True)
            await target.write_bytes(decoded.payload)
            return StorageResult.ok(path)
        except (OSError, ValueError) as e:
            return self._failure("saveMedia", path, e)

    async def read_media(self, path: str) -> StorageResult:
        """Read a file and return it as a data URI (``data``) with its MIME type."""
        try:
            payload = await AsyncPath(self.resolve(path)).read_bytes()
        except (OSError, ValueError) as e:
            return self._failure("readMedia", path, e)
        mime_type = mime_type_for(path)
        return StorageResult.ok(build_data_uri(payload, mime_type), mime_type=mime_type)

    # ==================== FILES & DIRECTORIES ====================

    async def delete(self, path: str) -> StorageResult:
        """Delete a single file."""
        try:
            await AsyncPath(self.resolve(path)).unlink()
            return StorageResult.ok()
        except (OSError, ValueError) as e:
            return self._failure("delete", path, e)

    async def delete_dir(self, path: str) -> StorageResult:
        """Delete a directory tree. A missing directory is not an error."""
        try:
            target = self.resolve(path)
            if not await AsyncPath(target).exists():
                return StorageResult.ok()
            await to_thread.run_sync(shutil.rmtree, target)
            return StorageResult.ok()
        except (OSError, ValueError) as e:
            return self._failure("deleteDir", path, e)

    async def exists(self, path: str) -> StorageResult:
        """Check whether a file or directory exists."""
        try:
            return StorageResult.ok(await AsyncPath(self.resolve(path)).exists())
        except (OSError, ValueError) as e:
            return self._failure("exists", path, e)

    async def list_dir(self, path: str) -> StorageResult:
        """List entry names of a directory (sorted)."""
        try:
            names = [child.name async for child in AsyncPath(self.resolve(path)).iterdir()]
            return StorageResult.ok(sorted(names))
        except (OSError, ValueError) as e:
            return self._failure("listDir", path, e)

    async def make_dirs(self, *paths: str) -> StorageResult:
        """Create directories (with parents). Existing ones are kept."""
        try:
            for path in paths:
                await AsyncPath(self.resolve(path)).mkdir(parents=True, exist_ok=True)
            return StorageResult.ok()
        except (OSError, ValueError) as e:
            return self._failure("mkdir", ", ".join(paths), e)
