"""Shared fixtures for rsyncdir tests."""

from datetime import datetime, timezone
from uuid import UUID

import pytest

from rsyncdir.constants import SwapStrategy
from rsyncdir.settings import RsyncSettings
from rsyncdir.settings import main as settings_main
from rsyncdir.utils.clock import FixedClock

SESSION_ID = UUID("c1a0a7b1-6f4e-4d5e-9d0b-1f8a3c2e7b64")
OTHER_SESSION_ID = UUID("0e6f3d2a-8b7c-4a1e-b5d9-2c4f6a8e0b13")
NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Keep the settings singleton and RSYNC_/LOG_ env vars out of each test."""
    for name in ("RSYNC_BASE_DIR", "RSYNC_SWAP_STRATEGY", "RSYNC_CLEANUP_AFTER",
                 "RSYNC_REMOVE_ORPHANS", "LOG_LEVEL", "LOG_FORMAT", "APP_ENV"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(settings_main, "_settings", None)
    yield
    settings_main._settings = None


@pytest.fixture
def base_dir(tmp_path):
    path = tmp_path / "rsync"
    path.mkdir()
    return path


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def make_settings(base_dir):
    def _make(strategy=SwapStrategy.SYMLINK, cleanup_after=600, remove_orphans=False):
        return RsyncSettings(
            base_dir=base_dir,
            swap_strategy=strategy,
            cleanup_after=cleanup_after,
            remove_orphans=remove_orphans,
        )
    return _make


@pytest.fixture
def settings(make_settings):
    return make_settings()
