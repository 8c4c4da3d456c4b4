"""dotlayer status: show the link state of every planned destination."""

from __future__ import annotations

import argparse
import os
from pathlib import Path

from dotlayer.commands._common import add_path_arguments, load_effective_config
from dotlayer.compose import plan
from dotlayer.paths import LinkTarget, resolve_run_paths


def add_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "status",
        help="Show which destinations are linked, stale, or blocked",
        description=(
            "List every destination a link run would manage, with its state:\n"
            "  linked    symlink already points at the winning source\n"
            "  stale     symlink points somewhere else (will be replaced)\n"
            "  conflict  real file or directory (will be backed up)\n"
            "  missing   nothing there yet"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    add_path_arguments(p)
    p.set_defaults(func=run)


def link_state(target: LinkTarget) -> str:
    """Classify the current destination of *target*."""
    dest = target.destination
    if dest.is_symlink():
        if Path(os.readlink(dest)) == target.source:
            return "linked"
        return "stale"
    if dest.exists():
        return "conflict"
    return "missing"


def _display_source(source: Path, repo_root: Path) -> Path:
    """*source* relative to *repo_root*, or absolute when it lives elsewhere."""
    try:
        return source.relative_to(repo_root)
    except ValueError:
        return source


def run(args: argparse.Namespace) -> int:
    config = load_effective_config(args)
    paths = resolve_run_paths(config, args.invocation_path, log_to_file=False)

    print(f"Repository:  {paths.repo_root}")
    print(f"Host:        {paths.overlay_id}")
    print(f"Destination: {paths.destination_root}")
    if not paths.override.root.is_dir():
        print(f"(no host dir at {paths.override.root})")
    print()

    unreadable: list[OSError] = []
    targets = plan(
        paths.common, paths.override, paths.destination_root,
        onerror=unreadable.append,
    )
    for e in unreadable:
        print(f"  unreadable {e.filename}: {e.strerror}")
    if not targets:
        print("No files to link.")
        return 0

    counts: dict[str, int] = {}
    width = max(len(str(rel)) for rel in targets)
    for rel, target in targets.items():
        state = link_state(target)
        counts[state] = counts.get(state, 0) + 1
        origin = _display_source(target.source, paths.repo_root)
        print(f"  {state:<9} {str(rel):<{width}}  <- {origin}")
    print()
    print(", ".join(f"{n} {state}" for state, n in sorted(counts.items())))
    return 0
