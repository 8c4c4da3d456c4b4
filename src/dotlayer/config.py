"""TOML config loading, writing, and defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path

# Python 3.11+ stdlib
import tomllib

from dotlayer.errors import ConfigError


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

_DEFAULTS = {
    "paths_repo": "",
    "paths_destination": "",
    "paths_common": "common",
    "paths_hosts": "hosts",
    "paths_log_file": "",
    "host_name": "",
}


@dataclass
class DotlayerConfig:
    """Merged configuration (hardcoded defaults < dotlayer.toml < environment < CLI).

    Empty strings mean "detect at run time": the repo root from the invoking
    script, the destination from ``$HOME``, the host name from the system.
    """

    paths_repo: str = _DEFAULTS["paths_repo"]
    paths_destination: str = _DEFAULTS["paths_destination"]
    paths_common: str = _DEFAULTS["paths_common"]
    paths_hosts: str = _DEFAULTS["paths_hosts"]
    paths_log_file: str = _DEFAULTS["paths_log_file"]
    host_name: str = _DEFAULTS["host_name"]


def _flatten_toml(data: dict, prefix: str = "") -> dict[str, str]:
    """Flatten nested TOML dict into underscore-joined keys.

    ``{"paths": {"repo": "x"}}`` → ``{"paths_repo": "x"}``
    """
    out: dict[str, str] = {}
    for k, v in data.items():
        key = f"{prefix}_{k}" if prefix else k
        if isinstance(v, dict):
            out.update(_flatten_toml(v, key))
        else:
            out[key] = str(v)
    return out


def config_file_path(config_home: Path) -> Path:
    """Return the path to dotlayer.toml under *config_home*."""
    return config_home / "dotlayer" / "dotlayer.toml"


def load_config(path: Path) -> DotlayerConfig:
    """Read a single TOML file and return a DotlayerConfig with defaults filled in.

    A missing file yields the defaults.  Raises ConfigError if the file
    exists but is not valid TOML.
    """
    cfg = DotlayerConfig()
    if not path.exists():
        return cfg
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Malformed config file {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    flat = _flatten_toml(data)
    valid_keys = {fld.name for fld in fields(cfg)}
    for k, v in flat.items():
        if k in valid_keys:
            setattr(cfg, k, v)
    return cfg


def apply_overrides(cfg: DotlayerConfig, overrides: dict[str, str | None]) -> DotlayerConfig:
    """Overlay non-empty *overrides* (flat keys) onto *cfg* in place and return it.

    Unknown keys are ignored.  ``None`` and empty values leave the
    configured value alone.
    """
    valid_keys = {fld.name for fld in fields(cfg)}
    for k, v in overrides.items():
        if k in valid_keys and v:
            setattr(cfg, k, v)
    return cfg


def write_config(path: Path, cfg: DotlayerConfig | None = None) -> None:
    """Write a TOML config file with the structured layout.

    If *cfg* is None, writes defaults.
    """
    if cfg is None:
        cfg = DotlayerConfig()
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [
        "[paths]",
        "# Empty repo: directory of the dotlayer script. Empty destination: $HOME.",
        f'repo = "{cfg.paths_repo}"',
        f'destination = "{cfg.paths_destination}"',
        f'common = "{cfg.paths_common}"',
        f'hosts = "{cfg.paths_hosts}"',
        f'log_file = "{cfg.paths_log_file}"',
        "",
        "[host]",
        "# Empty name: hostnamectl --static, then hostname, then \"default\".",
        f'name = "{cfg.host_name}"',
        "",
    ]
    path.write_text("\n".join(lines))


def config_items(cfg: DotlayerConfig) -> list[tuple[str, str]]:
    """Return ``(flat_key, value)`` pairs in declaration order."""
    return [(fld.name, getattr(cfg, fld.name)) for fld in fields(cfg)]


# Environment variable -> flat config key.
_ENV_KEYS = {
    "DOTLAYER_REPO": "paths_repo",
    "DOTLAYER_DEST": "paths_destination",
    "DOTLAYER_HOST": "host_name",
}


def env_overrides(environ: dict[str, str] | None = None) -> dict[str, str | None]:
    """Return flat config overrides taken from ``DOTLAYER_*`` variables."""
    env = os.environ if environ is None else environ
    return {key: env.get(var) for var, key in _ENV_KEYS.items()}
