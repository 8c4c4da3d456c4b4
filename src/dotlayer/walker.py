"""Enumerate the regular files of a source tree as relative paths."""

from __future__ import annotations

import os
import stat
from collections.abc import Callable, Iterator
from pathlib import Path


def walk(
    tree_root: Path,
    onerror: Callable[[OSError], None] | None = None,
) -> Iterator[Path]:
    """Yield every regular file under *tree_root*, relative to it.

    Symlinks are never followed: linked directories are not descended and
    symlink entries are not yielded.  Entries are sorted at every level so
    the order is stable for a given tree.  A missing *tree_root* yields
    nothing.

    A directory that cannot be listed or an entry that cannot be examined
    is passed to *onerror* (the OSError carries the offending path in
    ``filename``) and the walk continues.  Without *onerror* the error is
    raised.
    """
    def _fail(e: OSError) -> None:
        if onerror is None:
            raise e
        onerror(e)

    if not tree_root.is_dir():
        return
    for dirpath, dirnames, filenames in os.walk(tree_root, onerror=_fail, followlinks=False):
        dirnames.sort()
        base = Path(dirpath)
        for name in sorted(filenames):
            path = base / name
            try:
                st = os.lstat(path)
            except OSError as e:
                _fail(e)
                continue
            if not stat.S_ISREG(st.st_mode):
                continue
            yield path.relative_to(tree_root)
