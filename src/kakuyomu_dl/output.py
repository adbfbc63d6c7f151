"""Writing downloaded novels to disk."""

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def save_text_file(path: Path, text: str) -> None:
    """Write text atomically (temp file, fsync, rename) as UTF-8.

    Parent directories are created as needed.

    Args:
        path: Target file path
        text: Full file content

    Raises:
        OSError: If write or sync fails
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    # Same directory keeps the rename on one filesystem
    temp_fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=".txt")

    try:
        with open(temp_fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())

        Path(temp_path).replace(path)
    except Exception:
        Path(temp_path).unlink(missing_ok=True)
        raise

    logger.debug(f"Wrote {len(text)} characters to {path}")
