"""Full argparse tree with subparsers, dispatcher, and main() entry point."""

from __future__ import annotations

import argparse
import sys

from dotlayer import __version__
from dotlayer.errors import DotlayerError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dotlayer",
        description="Link common and per-host dotfiles into your home directory.",
        epilog=(
            "common switches (for default 'link' command):\n"
            "  --repo DIR          dotfiles repository (default: script directory)\n"
            "  --dest DIR          destination root (default: $HOME)\n"
            "  --host NAME         override tree hosts/NAME (default: host name)\n"
            "  -n, --dry-run       show what would change without touching anything\n"
            "  -v, --verbose       show debug output\n"
            "\n"
            "run 'dotlayer COMMAND --help' for subcommand-specific options"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    from dotlayer.commands.config_cmd import add_parser as add_config_parser
    from dotlayer.commands.link import add_parser as add_link_parser
    from dotlayer.commands.status import add_parser as add_status_parser

    add_link_parser(subparsers)
    add_status_parser(subparsers)
    add_config_parser(subparsers)

    return parser


_SUBCOMMANDS = {"link", "status", "config"}


def main(argv: list[str] | None = None, invocation_path: str | None = None) -> None:
    parser = build_parser()

    import argcomplete
    argcomplete.autocomplete(parser)

    effective = list(argv if argv is not None else sys.argv[1:])

    # Extract -v/--verbose before subcommand dispatch.
    verbose = "-v" in effective or "--verbose" in effective
    effective = [a for a in effective if a not in ("-v", "--verbose")]

    from dotlayer.log import setup_logging
    setup_logging(verbose=verbose)

    # Handle top-level --help and --version before argparse dispatch
    # (kept off the parser so they don't appear in tab-completion).
    if effective and effective[0] in ("-h", "--help"):
        parser.print_help()
        sys.exit(0)
    elif effective and effective[0] == "--version":
        print(f"dotlayer {__version__}")
        sys.exit(0)

    # If the first arg isn't a known subcommand, default to "link".
    if not effective or effective[0] not in _SUBCOMMANDS:
        effective = ["link"] + effective
    args = parser.parse_args(effective)
    args.verbose = verbose
    args.invocation_path = invocation_path or sys.argv[0]

    try:
        rc = args.func(args)
    except DotlayerError as e:
        print(f"Error: {e}", file=sys.stderr)
        rc = 1
    except KeyboardInterrupt:
        print()
        rc = 130

    sys.exit(rc)
