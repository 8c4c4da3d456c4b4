"""XDG resolution, repo root and host detection, source tree construction."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import NamedTuple

from dotlayer.config import DotlayerConfig
from dotlayer.errors import ConfigError

DEFAULT_HOST = "default"

# Tried in order; first non-empty stdout wins.
_HOST_COMMANDS = (
    ["hostnamectl", "--static"],
    ["hostname"],
)


class TreeRole(Enum):
    """Precedence layer a source tree belongs to."""

    common = "common"
    override = "override"


@dataclass(frozen=True)
class SourceTree:
    """A source tree root and the layer it is applied in."""

    root: Path
    role: TreeRole


class LinkTarget(NamedTuple):
    """Absolute source file and the destination path that should point at it."""

    source: Path
    destination: Path


@dataclass
class RunPaths:
    """Everything a link or status run needs, resolved to absolute paths."""

    repo_root: Path
    overlay_id: str
    destination_root: Path
    common: SourceTree
    override: SourceTree
    log_file: Path | None


def xdg(env_var: str, default_suffix: str) -> Path:
    """Resolve an XDG directory from environment or default under $HOME."""
    val = os.environ.get(env_var, "")
    if val:
        return Path(val).resolve()
    return Path.home() / default_suffix


def repo_root_for(invocation_path: str | os.PathLike) -> Path:
    """Absolute directory holding the source trees for a script at *invocation_path*.

    A file resolves to its parent directory, a directory to itself.  The
    result does not depend on the current working directory of the caller
    beyond resolving a relative *invocation_path* once.
    """
    path = Path(invocation_path).resolve()
    if path.is_dir():
        return path
    return path.parent


def detect_host() -> str:
    """Return the static host name, falling back to ``hostname``, then ``"default"``.

    Never raises: a missing binary, a non-zero exit, or empty output all
    move on to the next lookup.
    """
    for cmd in _HOST_COMMANDS:
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=5)
        except (OSError, subprocess.SubprocessError):
            continue
        if result.returncode != 0:
            continue
        name = result.stdout.strip()
        if name:
            return name
    return DEFAULT_HOST


def resolve(invocation_path: str | os.PathLike) -> tuple[Path, str]:
    """Return ``(repo_root, overlay_id)`` for a script at *invocation_path*."""
    return repo_root_for(invocation_path), detect_host()


def source_trees(repo_root: Path, overlay_id: str, config: DotlayerConfig) -> tuple[SourceTree, SourceTree]:
    """Build the common and override trees under *repo_root*.

    ``<repo>/common`` and ``<repo>/hosts/<overlay_id>`` with the directory
    names taken from *config*.
    """
    common = SourceTree(repo_root / config.paths_common, TreeRole.common)
    override = SourceTree(
        repo_root / config.paths_hosts / overlay_id, TreeRole.override,
    )
    return common, override


def default_log_file() -> Path:
    """``$XDG_STATE_HOME/dotlayer/dotlayer.log``."""
    return xdg("XDG_STATE_HOME", ".local/state") / "dotlayer" / "dotlayer.log"


def resolve_run_paths(
    config: DotlayerConfig,
    invocation_path: str | os.PathLike,
    *,
    log_to_file: bool = True,
) -> RunPaths:
    """Resolve the repo root, host, destination and trees for a run.

    Configured values (already merged from file, environment and CLI) win;
    empty values fall back to detection.  Raises ConfigError if the repo
    root does not exist.
    """
    if config.paths_repo:
        repo_root = Path(config.paths_repo).expanduser().resolve()
    else:
        repo_root = repo_root_for(invocation_path)
    if not repo_root.is_dir():
        raise ConfigError(f"Dotfiles repository not found: {repo_root}")

    overlay_id = config.host_name or detect_host()

    if config.paths_destination:
        destination_root = Path(config.paths_destination).expanduser().resolve()
    else:
        destination_root = Path.home()

    log_file: Path | None = None
    if log_to_file:
        if config.paths_log_file:
            log_file = Path(config.paths_log_file).expanduser()
        else:
            log_file = default_log_file()

    common, override = source_trees(repo_root, overlay_id, config)
    return RunPaths(
        repo_root=repo_root,
        overlay_id=overlay_id,
        destination_root=destination_root,
        common=common,
        override=override,
        log_file=log_file,
    )
