"""Flat-directory storage for student profile images."""

import logging
from pathlib import Path

from institute_api.core.exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)

# Longest file name (in bytes) common filesystems accept
MAX_FILENAME_BYTES = 255


def image_filename(student_id: int, name: str) -> str:
    """Conventional image filename for a student: ``{id}_{name}.jpg``."""
    return f"{student_id}_{name}.jpg"


def is_valid_filename(filename: str) -> bool:
    """Whether ``filename`` can be used as a key in a single flat directory."""
    if not filename or filename in (".", ".."):
        return False
    if "\x00" in filename or "\\" in filename or Path(filename).name != filename:
        return False
    return len(filename.encode("utf-8")) <= MAX_FILENAME_BYTES


class ImageStore:
    """Reads and writes JPEG files keyed by filename in a single directory."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, filename: str) -> Path:
        if not is_valid_filename(filename):
            raise ValidationError(
                "Invalid image filename",
                details={"filename": filename},
            )
        return self.directory / filename

    def exists(self, filename: str) -> bool:
        return self._path(filename).is_file()

    def write(self, filename: str, data: bytes) -> None:
        """Write ``data`` to ``filename``, replacing any existing file."""
        path = self._path(filename)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to write image {path}: {e}")
            raise StorageError(f"Could not write image '{filename}'", filename) from e
        logger.info(f"Stored image {filename} ({len(data)} bytes)")

    def read(self, filename: str) -> bytes:
        """Return the raw bytes of ``filename``."""
        path = self._path(filename)
        try:
            return path.read_bytes()
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read image {path}: {e}")
            raise StorageError(f"Could not read image '{filename}'", filename) from e

    def delete(self, filename: str) -> bool:
        """Remove ``filename``. Returns False if there was nothing to remove."""
        path = self._path(filename)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except (OSError, ValueError) as e:
            logger.error(f"Failed to delete image {path}: {e}")
            raise StorageError(f"Could not delete image '{filename}'", filename) from e
        logger.info(f"Deleted image {filename}")
        return True
