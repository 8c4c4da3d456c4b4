"""Tests for dotlayer.backup."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from dotlayer.backup import BackupPolicy, backup_path_for
from dotlayer.errors import BackupError

FIXED = datetime(2026, 3, 14, 15, 9, 26)


@pytest.fixture
def policy(logger):
    return BackupPolicy(logger, clock=lambda: FIXED)


class TestBackupPathFor:
    def test_appends_timestamp_suffix(self, tmp_path):
        assert backup_path_for(tmp_path / ".bashrc", FIXED) == (
            tmp_path / ".bashrc.bak.2026-03-14-150926"
        )


class TestEnsurePreserved:
    def test_missing_destination_is_noop(self, policy, tmp_path):
        assert policy.ensure_preserved(tmp_path / "absent") is None
        assert list(tmp_path.iterdir()) == []

    def test_symlink_destination_is_noop(self, policy, tmp_path):
        target = tmp_path / "target"
        target.write_text("t")
        link = tmp_path / "link"
        os.symlink(target, link)
        assert policy.ensure_preserved(link) is None
        assert link.is_symlink()
        assert sorted(p.name for p in tmp_path.iterdir()) == ["link", "target"]

    def test_broken_symlink_is_noop(self, policy, tmp_path):
        link = tmp_path / "link"
        os.symlink(tmp_path / "gone", link)
        assert policy.ensure_preserved(link) is None
        assert link.is_symlink()

    def test_real_file_is_copied_then_removed(self, policy, tmp_path):
        dest = tmp_path / "a.conf"
        dest.write_text("OLD")
        backup = policy.ensure_preserved(dest)
        assert backup == tmp_path / "a.conf.bak.2026-03-14-150926"
        assert backup.read_text() == "OLD"
        assert not dest.exists()

    def test_real_directory_is_copied_recursively(self, policy, tmp_path):
        dest = tmp_path / "nvim"
        (dest / "lua").mkdir(parents=True)
        (dest / "lua" / "init.lua").write_text("-- old")
        os.symlink("lua/init.lua", dest / "init")
        backup = policy.ensure_preserved(dest)
        assert (backup / "lua" / "init.lua").read_text() == "-- old"
        assert (backup / "init").is_symlink()
        assert os.readlink(backup / "init") == "lua/init.lua"
        assert not dest.exists()

    def test_existing_backup_name_is_an_error(self, policy, tmp_path):
        dest = tmp_path / "a.conf"
        dest.write_text("NEW")
        earlier = tmp_path / "a.conf.bak.2026-03-14-150926"
        earlier.write_text("EARLIER")
        with pytest.raises(BackupError, match="already exists"):
            policy.ensure_preserved(dest)
        assert dest.read_text() == "NEW"
        assert earlier.read_text() == "EARLIER"

    def test_copy_failure_keeps_original(self, policy, tmp_path):
        dest = tmp_path / "a.conf"
        dest.write_text("OLD")
        with patch("dotlayer.backup.shutil.copy2", side_effect=OSError("disk full")):
            with pytest.raises(BackupError, match="disk full"):
                policy.ensure_preserved(dest)
        assert dest.read_text() == "OLD"

    def test_partial_directory_copy_is_removed(self, policy, tmp_path):
        dest = tmp_path / "dir"
        dest.mkdir()
        (dest / "f").write_text("x")

        def half_copy(src, dst, symlinks=False):
            Path(dst).mkdir()
            (Path(dst) / "partial").write_text("")
            raise OSError("interrupted")

        with patch("dotlayer.backup.shutil.copytree", side_effect=half_copy):
            with pytest.raises(BackupError):
                policy.ensure_preserved(dest)
        assert not (tmp_path / "dir.bak.2026-03-14-150926").exists()
        assert (dest / "f").read_text() == "x"

    def test_remove_failure_keeps_backup(self, policy, tmp_path):
        dest = tmp_path / "a.conf"
        dest.write_text("OLD")
        with patch.object(Path, "unlink", side_effect=PermissionError("denied")):
            with pytest.raises(BackupError, match="cannot remove"):
                policy.ensure_preserved(dest)
        assert (tmp_path / "a.conf.bak.2026-03-14-150926").read_text() == "OLD"

    def test_logs_backup(self, policy, tmp_path, caplog):
        dest = tmp_path / "a.conf"
        dest.write_text("OLD")
        with caplog.at_level("INFO", logger="test.dotlayer"):
            policy.ensure_preserved(dest)
        assert "Backed up" in caplog.text
