"""Shared fixtures for dotlayer tests."""

from __future__ import annotations

import logging

import pytest

from dotlayer.paths import SourceTree, TreeRole


@pytest.fixture
def tmp_home(tmp_path, monkeypatch):
    """Set HOME, XDG dirs, and CWD to an isolated temp tree."""
    home = tmp_path / "home"
    home.mkdir()
    config_home = tmp_path / "config"
    state_home = tmp_path / "state"
    for d in (config_home, state_home):
        d.mkdir()

    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setenv("XDG_STATE_HOME", str(state_home))
    for var in ("DOTLAYER_REPO", "DOTLAYER_DEST", "DOTLAYER_HOST"):
        monkeypatch.delenv(var, raising=False)

    elsewhere = tmp_path / "cwd"
    elsewhere.mkdir()
    monkeypatch.chdir(elsewhere)

    return tmp_path


@pytest.fixture
def dotfiles_repo(tmp_path):
    """A repository with a common tree and an override tree for host ``box``.

    common/.bashrc, common/.config/app/app.conf, common/.config/app/theme.conf
    hosts/box/.config/app/app.conf, hosts/box/.local/bin/tool
    """
    repo = tmp_path / "dotfiles"
    common = repo / "common"
    host = repo / "hosts" / "box"
    (common / ".config" / "app").mkdir(parents=True)
    (host / ".config" / "app").mkdir(parents=True)
    (host / ".local" / "bin").mkdir(parents=True)

    (common / ".bashrc").write_text("common bashrc\n")
    (common / ".config" / "app" / "app.conf").write_text("common app\n")
    (common / ".config" / "app" / "theme.conf").write_text("common theme\n")
    (host / ".config" / "app" / "app.conf").write_text("host app\n")
    (host / ".local" / "bin" / "tool").write_text("#!/bin/sh\n")
    return repo


@pytest.fixture
def trees(dotfiles_repo):
    """``(common, override)`` SourceTrees for the sample repository."""
    return (
        SourceTree(dotfiles_repo / "common", TreeRole.common),
        SourceTree(dotfiles_repo / "hosts" / "box", TreeRole.override),
    )


@pytest.fixture
def dest(tmp_path):
    d = tmp_path / "dest"
    d.mkdir()
    return d


@pytest.fixture
def logger():
    return logging.getLogger("test.dotlayer")


@pytest.fixture(autouse=True)
def _reset_dotlayer_logging():
    """Drop handlers main() attached so they don't outlive capsys streams."""
    yield
    root = logging.getLogger("dotlayer")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.NOTSET)
