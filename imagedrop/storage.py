import logging
import os
import secrets
import time
from pathlib import Path
from typing import Callable

from imagedrop.errors import StorageUnavailable

logger = logging.getLogger(__name__)

RANDOM_CEILING = 10**9


def _random_token() -> int:
    return secrets.randbelow(RANDOM_CEILING + 1)


def ensure_directory(path: Path) -> Path:
    """Create the upload directory if missing; existing contents are left alone."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error("cannot create upload directory %s: %s", path, e)
        raise StorageUnavailable() from e
    if not path.is_dir():
        logger.error("upload directory %s is not a directory", path)
        raise StorageUnavailable()
    return path


def extension_of(original_name: str) -> str:
    # ".bashrc" has no extension, "photo.JPG" keeps its case
    return os.path.splitext(os.path.basename(original_name or ""))[1]


def generate_name(
    original_name: str,
    now: Callable[[], float] = time.time,
    rand: Callable[[], int] = _random_token,
) -> str:
    """Return ``<millis>-<random><ext>`` for an uploaded file.

    No filesystem access happens here; callers pin ``now`` and ``rand`` in tests.
    """
    millis = int(now() * 1000)
    return f"{millis}-{rand()}{extension_of(original_name)}"


def discard(path: Path | None) -> bool:
    """Best-effort removal of a stored file. Returns True if something was deleted."""
    if path is None:
        return False
    try:
        path.unlink()
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning("cleanup failed for %s: %s", path, e)
        return False
