"""Create or refresh a single symlink, backing up real content first."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotlayer.backup import BackupPolicy
from dotlayer.errors import LinkError
from dotlayer.log import SUCCESS


def _temp_link_path(destination: Path) -> Path:
    return destination.with_name(f".{destination.name}.dotlayer-{os.getpid()}.tmp")


def replace_symlink(source: Path, destination: Path) -> None:
    """Point *destination* at *source* with a single rename.

    The new link is created under a temporary sibling name and renamed over
    *destination*, so other processes see either the old entry or the new
    link, never a missing path.  Raises OSError; the temporary link is
    removed on failure.
    """
    tmp = _temp_link_path(destination)
    if tmp.is_symlink() or tmp.exists():
        # Left over from an interrupted run with the same pid.
        tmp.unlink()
    os.symlink(source, tmp)
    try:
        os.replace(tmp, destination)
    except OSError:
        tmp.unlink()
        raise


class Linker:
    """Idempotently link source files into place.

    Calling :meth:`link` twice for the same destination with different
    sources leaves the second source in place.
    """

    def __init__(
        self,
        logger: logging.Logger,
        backup: BackupPolicy | None = None,
        *,
        dry_run: bool = False,
    ) -> None:
        self.logger = logger
        self.backup = backup or BackupPolicy(logger)
        self.dry_run = dry_run

    def link(self, source: Path, destination: Path) -> None:
        """Make *destination* a symlink to *source*.

        Raises LinkError if the parent directory or the link cannot be
        created, and lets BackupError from the backup step through.
        """
        if self.dry_run:
            if self.backup.needs_backup(destination):
                self.logger.info("Would back up %s", destination)
            self.logger.info("Would link %s -> %s", destination, source)
            return

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LinkError(
                f"Cannot create directory {destination.parent} for {destination}: {e}"
            ) from e

        self.backup.ensure_preserved(destination)

        try:
            replace_symlink(source, destination)
        except OSError as e:
            raise LinkError(f"Cannot link {destination} -> {source}: {e}") from e

        self.logger.log(SUCCESS, "Linked %s -> %s", destination, source)
