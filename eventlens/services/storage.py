"""Local filesystem storage for uploaded photo bytes."""

import logging
import uuid
from pathlib import Path

from eventlens.core.errors import ExternalServiceError

logger = logging.getLogger(__name__)


class LocalPhotoStorage:
    """Stores image bytes under a root directory.

    The storage locator handed back by ``save`` is the file path, which is
    what ``Photo.storage_path`` records.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def generate_key(self, prefix: str, filename: str) -> str:
        """Generate a unique relative key for an upload."""
        ext = Path(filename).suffix.lower() or ".jpg"
        return f"{prefix}/{uuid.uuid4().hex[:12]}{ext}"

    def save(self, prefix: str, filename: str, data: bytes) -> str:
        path = self.root / self.generate_key(prefix, filename)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            logger.error(f"Failed to store {filename}: {e}")
            raise ExternalServiceError("Failed to store photo") from e
        return str(path)

    def read(self, locator: str) -> bytes:
        try:
            return Path(locator).read_bytes()
        except OSError as e:
            raise ExternalServiceError(f"Failed to read photo at {locator}") from e

    def delete(self, locator: str) -> None:
        """Release a stored file. Missing files are ignored."""
        path = Path(locator)
        if path.exists():
            path.unlink()
            logger.info(f"Deleted stored photo {locator}")
