"""Shared fixtures: throwaway SQLite board and errors log per test."""

import pytest

import config
from src.database import SqliteStore


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Point the database and errors log at tmp_path."""
    db_path = tmp_path / "board.db"
    monkeypatch.setenv("TRACKER_DATABASE_PATH", str(db_path))
    monkeypatch.setattr(config, "ERRORS_LOG_PATH", tmp_path / "errors.log")
    return tmp_path


@pytest.fixture
def store(isolated_env):
    """Initialized store seeded with the default statuses."""
    s = SqliteStore(isolated_env / "board.db")
    s.init()
    return s


def make_status(status_id, name=None, order=0, is_default=False, is_system=False, color="#000000"):
    return {
        "id": status_id,
        "name": name or status_id.replace("-", " ").title(),
        "color": color,
        "order": order,
        "is_default": is_default,
        "is_system": is_system,
    }


@pytest.fixture
def status_factory():
    return make_status


@pytest.fixture
def default_board():
    """Copy of the shipped statuses."""
    return [dict(s) for s in config.DEFAULT_STATUSES]
