"""dotlayer link: link the common and host trees into the destination root."""

from __future__ import annotations

import argparse

from dotlayer.backup import BackupPolicy
from dotlayer.commands._common import add_path_arguments, load_effective_config
from dotlayer.compose import OverlayComposer
from dotlayer.linker import Linker
from dotlayer.log import SUCCESS, get_logger, setup_logging
from dotlayer.paths import TreeRole, resolve_run_paths


def add_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "link",
        help="Link dotfiles into the destination (default command)",
        description=(
            "Link every file of common/ into the destination root, then every "
            "file of hosts/HOST/ on top of it.  Existing real files are copied "
            "to <path>.bak.<timestamp> before being replaced."
        ),
    )
    add_path_arguments(p)
    p.add_argument(
        "-n", "--dry-run", action="store_true",
        help="Report what would be linked and backed up without changing anything",
    )
    p.add_argument(
        "--log-file", default=None, metavar="FILE",
        help="Append the run log to FILE (default: $XDG_STATE_HOME/dotlayer/dotlayer.log)",
    )
    p.add_argument(
        "--no-log-file", action="store_true",
        help="Do not write a log file",
    )
    p.set_defaults(func=run)


def run(args: argparse.Namespace) -> int:
    config = load_effective_config(args)
    paths = resolve_run_paths(
        config, args.invocation_path, log_to_file=not args.no_log_file,
    )
    setup_logging(verbose=args.verbose, log_file=paths.log_file)
    logger = get_logger("link")

    logger.info(
        "dotlayer: linking dotfiles (common + hosts/%s) into %s%s",
        paths.overlay_id, paths.destination_root,
        " [dry run]" if args.dry_run else "",
    )
    logger.debug("Repository: %s", paths.repo_root)

    backup = BackupPolicy(logger)
    linker = Linker(logger, backup, dry_run=args.dry_run)
    composer = OverlayComposer(linker, logger, overlay_id=paths.overlay_id)
    result = composer.compose(paths.common, paths.override, paths.destination_root)

    if not result.ok:
        logger.error(
            "Done with %d error(s); %d linked", len(result.errors), result.total_linked,
        )
        return 1
    logger.log(
        SUCCESS, "Done: %d linked (%d common, %d host)",
        result.total_linked,
        result.linked[TreeRole.common],
        result.linked[TreeRole.override],
    )
    return 0
