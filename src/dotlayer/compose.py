"""Apply the common tree, then the host override tree, onto a destination root."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from dotlayer.errors import DotlayerError
from dotlayer.linker import Linker
from dotlayer.paths import LinkTarget, SourceTree, TreeRole
from dotlayer.walker import walk


@dataclass
class FileError:
    """One destination that could not be linked."""

    role: TreeRole
    source: Path
    destination: Path
    cause: str

    def __str__(self) -> str:
        return f"{self.destination} -> {self.source}: {self.cause}"


@dataclass
class RunResult:
    """Outcome of a compose run: links made per tree and per-file failures."""

    linked: dict[TreeRole, int] = field(
        default_factory=lambda: {role: 0 for role in TreeRole}
    )
    errors: list[FileError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def total_linked(self) -> int:
        return sum(self.linked.values())


class OverlayComposer:
    """Link two source trees into one destination root, override tree last.

    The common tree is processed to completion before the override tree
    starts.  Since each link replaces whatever is at its destination, a
    path present in both trees ends up pointing at the override copy.
    """

    def __init__(self, linker: Linker, logger: logging.Logger, overlay_id: str = "") -> None:
        self.linker = linker
        self.logger = logger
        self.overlay_id = overlay_id

    def compose(
        self,
        common: SourceTree,
        override: SourceTree,
        destination_root: Path,
    ) -> RunResult:
        """Link every file of *common*, then of *override*, under *destination_root*.

        Never raises for a single file: failures are logged and collected
        in the returned RunResult.
        """
        result = RunResult()
        for tree in (common, override):
            if not tree.root.is_dir():
                self._report_missing(tree)
                continue
            self._apply(tree, destination_root, result)
        return result

    def _apply(self, tree: SourceTree, destination_root: Path, result: RunResult) -> None:
        root = tree.root.absolute()
        self.logger.debug("Linking %s tree %s", tree.role.value, root)

        def unreadable(e: OSError) -> None:
            path = Path(e.filename) if e.filename else root
            destination = destination_root / _relative_or_empty(path, root)
            result.errors.append(FileError(tree.role, path, destination, str(e)))
            self.logger.error("Cannot read %s: %s", path, e)

        for rel in walk(root, onerror=unreadable):
            source = root / rel
            destination = destination_root / rel
            try:
                self.linker.link(source, destination)
            except (DotlayerError, OSError) as e:
                err = FileError(tree.role, source, destination, str(e))
                result.errors.append(err)
                self.logger.error(
                    "Failed to link %s -> %s: %s", destination, source, e,
                )
                continue
            result.linked[tree.role] += 1

    def _report_missing(self, tree: SourceTree) -> None:
        if tree.role is TreeRole.override:
            self.logger.warning(
                "No host dir for '%s' (looked in: %s)", self.overlay_id, tree.root,
            )
        else:
            self.logger.info("No common dir at: %s", tree.root)


def _relative_or_empty(path: Path, root: Path) -> Path:
    try:
        return path.relative_to(root)
    except ValueError:
        return Path()


def plan(
    common: SourceTree,
    override: SourceTree,
    destination_root: Path,
    onerror: Callable[[OSError], None] | None = None,
) -> dict[Path, LinkTarget]:
    """Map each relative path to the link a compose run would leave behind.

    Override entries replace common ones.  Nothing is touched on disk.
    Unreadable paths go to *onerror* as in :func:`dotlayer.walker.walk`.
    """
    targets: dict[Path, LinkTarget] = {}
    for tree in (common, override):
        root = tree.root.absolute()
        for rel in walk(root, onerror=onerror):
            targets[rel] = LinkTarget(root / rel, destination_root / rel)
    return dict(sorted(targets.items()))
