"""
Unit tests for StatusManager write-through.

Runs against the real SQLite store and against an in-memory store to check
the manager only relies on the load/save contract.
"""

import pytest

from src.errors import (
    InvalidFallbackStatus,
    LastStatusUndeletable,
    SystemStatusProtected,
    SystemStatusRenameRejected,
)
from src.status_manager import StatusManager, log_error


class MemoryStore:
    def __init__(self, statuses, jobs=None):
        self.statuses = [dict(s) for s in statuses]
        self.jobs = [dict(j) for j in jobs or []]
        self.saves = []

    def load_statuses(self):
        return [dict(s) for s in self.statuses]

    def save_statuses(self, statuses):
        self.saves.append("statuses")
        self.statuses = statuses

    def load_jobs(self):
        return [dict(j) for j in self.jobs]

    def save_board(self, statuses, jobs=None, migrations=None, operation=""):
        self.saves.append(operation)
        self.statuses = statuses
        if jobs is not None:
            self.jobs = jobs


@pytest.fixture
def manager(store):
    return StatusManager(store)


class TestWriteThrough:
    def test_add_persists(self, manager, store):
        manager.add("Phone Screen", color="#ff00ff")

        added = [s for s in store.load_statuses() if s["id"] == "phone-screen"]
        assert added and added[0]["order"] == 4
        assert added[0]["color"] == "#ff00ff"

    def test_update_persists(self, manager, store):
        manager.update({"id": "interview", "color": "#000000", "is_default": True})

        statuses = {s["id"]: s for s in store.load_statuses()}
        assert statuses["interview"]["color"] == "#000000"
        assert statuses["interview"]["is_default"] is True
        assert statuses["wishlist"]["is_default"] is False

    def test_set_default_persists(self, manager):
        manager.set_default("applied")

        assert manager.default_status()["id"] == "applied"

    def test_moves_persist(self, manager, store):
        manager.move(3, 0)
        manager.move_down(0)
        manager.move_up(3)

        assert [s["id"] for s in store.load_statuses()] == ["wishlist", "rejected", "interview", "applied"]

    def test_delete_migrates_persisted_jobs(self, manager, store):
        manager.add("Phone Screen")
        job_id = store.add_job("Acme", "Engineer", "phone-screen")
        other_id = store.add_job("Globex", "Analyst", "applied")

        statuses, migrations = manager.delete("phone-screen")

        assert "phone-screen" not in [s["id"] for s in statuses]
        assert migrations == [{"job_id": job_id, "old_status": "phone-screen", "new_status": "wishlist"}]
        jobs = {j["id"]: j for j in store.load_jobs()}
        assert jobs[job_id]["status"] == "wishlist"
        assert jobs[other_id]["status"] == "applied"
        assert store.get_migration_log()[0]["operation"] == "delete:phone-screen"

    def test_restore_defaults_persists(self, manager, store):
        manager.add("Phone Screen")
        manager.update({"id": "wishlist", "color": "#111111"})
        job_id = store.add_job("Acme", "Engineer", "phone-screen")

        statuses, migrations = manager.restore_defaults("applied")

        assert [s["id"] for s in store.load_statuses()] == ["wishlist", "applied", "interview", "rejected"]
        assert store.load_statuses()[0]["color"] == "#4A90E2"
        assert store.load_jobs()[0]["status"] == "applied"
        assert migrations[0]["job_id"] == job_id


class TestRejectedOperations:
    def test_rejected_delete_writes_nothing(self, manager, store):
        store.add_job("Acme", "Engineer", "applied")
        before = (store.load_statuses(), store.load_jobs())

        with pytest.raises(SystemStatusProtected):
            manager.delete("applied")

        assert (store.load_statuses(), store.load_jobs()) == before
        assert store.get_migration_log() == []

    def test_rejected_rename_writes_nothing(self, manager, store):
        before = store.load_statuses()

        with pytest.raises(SystemStatusRenameRejected):
            manager.update({"id": "wishlist", "name": "Ideas"})

        assert store.load_statuses() == before

    def test_invalid_fallback_writes_nothing(self, status_factory):
        memory = MemoryStore([status_factory("custom", is_default=True)], [{"id": 1, "status": "custom"}])

        with pytest.raises(InvalidFallbackStatus):
            StatusManager(memory).restore_defaults("custom")

        assert memory.saves == []

    def test_last_status(self, status_factory):
        memory = MemoryStore([status_factory("only", is_default=True)])

        with pytest.raises(LastStatusUndeletable):
            StatusManager(memory).delete("only")

        assert memory.saves == []


class TestInjectedStore:
    def test_memory_store_round_trip(self, status_factory):
        memory = MemoryStore(
            [status_factory("todo", order=0, is_default=True), status_factory("doing", order=1)],
            [{"id": 1, "status": "doing"}],
        )
        manager = StatusManager(memory)

        manager.add("Done")
        manager.delete("doing")

        assert [s["id"] for s in memory.statuses] == ["todo", "done"]
        assert memory.jobs == [{"id": 1, "status": "todo"}]
        assert memory.saves == ["statuses", "delete:doing"]


def test_log_error_appends(isolated_env):
    log_error("first")
    log_error("second")

    lines = (isolated_env / "errors.log").read_text().splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("] first")
