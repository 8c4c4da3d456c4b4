"""dotlayer config: show effective settings or write a default config file."""

from __future__ import annotations

import argparse
import sys

from dotlayer.config import (
    apply_overrides,
    config_file_path,
    config_items,
    env_overrides,
    load_config,
    write_config,
)
from dotlayer.paths import xdg


def add_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "config",
        help="Show configuration or write a default config file",
        description=(
            "Show the effective configuration (dotlayer.toml plus DOTLAYER_* "
            "environment overrides).  Empty values are detected at run time."
        ),
    )
    p.add_argument(
        "--init", action="store_true",
        help="Write a default dotlayer.toml if none exists",
    )
    p.add_argument(
        "--force", action="store_true",
        help="With --init, overwrite an existing config file",
    )
    p.set_defaults(func=run)


def run(args: argparse.Namespace) -> int:
    path = config_file_path(xdg("XDG_CONFIG_HOME", ".config"))

    if args.init:
        if path.exists() and not args.force:
            print(f"Config file already exists: {path}", file=sys.stderr)
            print("Use --force to overwrite it.", file=sys.stderr)
            return 1
        write_config(path)
        print(f"Wrote {path}")
        return 0

    config = load_config(path)
    apply_overrides(config, env_overrides())
    print(f"# {path}{'' if path.exists() else ' (not found, using defaults)'}")
    for key, value in config_items(config):
        print(f"{key} = {value!r}")
    return 0
