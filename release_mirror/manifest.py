"""Local manifest file handling."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from .errors import ManifestWriteError

logger = logging.getLogger(__name__)


def write_manifest(path: Path, content: str) -> None:
    """Atomically replace the manifest file with new content.

    The text is written to a temporary file next to the target and then
    renamed over it, so readers never see a partially written manifest.

    Args:
        path: Manifest file to overwrite
        content: New file content, written as UTF-8

    Raises:
        ManifestWriteError: If any filesystem operation fails
    """
    directory = path.parent
    tmp_name = None

    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=directory
        )
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        # mkstemp creates 0600 files; keep the mode of the file being replaced
        try:
            mode = path.stat().st_mode & 0o777
        except FileNotFoundError:
            mode = 0o644
        os.chmod(tmp_name, mode)

        os.replace(tmp_name, path)
        tmp_name = None

        logger.info(f"Saved manifest to {path}")
    except OSError as e:
        logger.error(f"Failed to save manifest to {path}: {e}")
        raise ManifestWriteError(path, e) from e
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                logger.debug(f"Could not remove temporary file {tmp_name}")
