"""Copy real files and directories aside before a link replaces them."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from dotlayer.errors import BackupError

# Second precision: two runs within one second collide, see ensure_preserved().
TIMESTAMP_FORMAT = "%Y-%m-%d-%H%M%S"


def backup_path_for(destination: Path, when: datetime) -> Path:
    """``<destination>.bak.<timestamp>``."""
    return destination.with_name(
        f"{destination.name}.bak.{when.strftime(TIMESTAMP_FORMAT)}"
    )


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


class BackupPolicy:
    """Preserve pre-existing real content at a destination.

    Symlinks and missing paths are left alone.  A real file or directory is
    copied to a timestamped sibling, and only once the copy has completed is
    the original removed.
    """

    def __init__(
        self,
        logger: logging.Logger,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.logger = logger
        self.clock = clock

    def needs_backup(self, destination: Path) -> bool:
        """True if *destination* exists and is not a symlink."""
        return not destination.is_symlink() and destination.exists()

    def ensure_preserved(self, destination: Path) -> Path | None:
        """Move real content at *destination* aside; return the backup path.

        Returns None when nothing needed preserving.  Raises BackupError if
        the backup name is already taken, or if copying or removing fails.
        A failed copy never leaves a partial backup behind, and the
        original is untouched in that case.
        """
        if not self.needs_backup(destination):
            return None

        backup = backup_path_for(destination, self.clock())
        if backup.is_symlink() or backup.exists():
            raise BackupError(
                f"Backup target already exists: {backup} "
                f"(refusing to overwrite an earlier backup of {destination})"
            )

        try:
            if destination.is_dir():
                shutil.copytree(destination, backup, symlinks=True)
            else:
                shutil.copy2(destination, backup, follow_symlinks=False)
        except OSError as e:
            if backup.is_symlink() or backup.exists():
                _remove_partial(backup, self.logger)
            raise BackupError(f"Cannot back up {destination} to {backup}: {e}") from e

        try:
            _remove(destination)
        except OSError as e:
            raise BackupError(
                f"Backed up {destination} to {backup} but cannot remove the original: {e}"
            ) from e

        self.logger.info("Backed up %s -> %s", destination, backup)
        return backup


def _remove_partial(backup: Path, logger: logging.Logger) -> None:
    """Best-effort removal of an incomplete backup copy."""
    try:
        _remove(backup)
    except OSError as e:
        logger.warning("Could not remove partial backup %s: %s", backup, e)
