"""Shared argument handling for the link and status commands."""

from __future__ import annotations

import argparse

from dotlayer.config import (
    DotlayerConfig,
    apply_overrides,
    config_file_path,
    env_overrides,
    load_config,
)
from dotlayer.paths import xdg


def add_path_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--repo", default=None, metavar="DIR",
        help="Dotfiles repository holding common/ and hosts/ (default: script directory)",
    )
    p.add_argument(
        "--dest", default=None, metavar="DIR",
        help="Destination root to link into (default: $HOME)",
    )
    p.add_argument(
        "--host", default=None, metavar="NAME",
        help="Use hosts/NAME as the override tree (default: detected host name)",
    )


def load_effective_config(args: argparse.Namespace) -> DotlayerConfig:
    """Defaults < dotlayer.toml < DOTLAYER_* environment < command-line flags."""
    config = load_config(config_file_path(xdg("XDG_CONFIG_HOME", ".config")))
    apply_overrides(config, env_overrides())
    apply_overrides(config, {
        "paths_repo": args.repo,
        "paths_destination": args.dest,
        "host_name": args.host,
        "paths_log_file": getattr(args, "log_file", None),
    })
    return config
