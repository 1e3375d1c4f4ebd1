"""
Unit tests for the SQLite store.

Tests:
- Schema creation and default seeding
- Whole-collection overwrites
- save_board is all-or-nothing
- Migration log
"""

import pytest

from src.database import SqliteStore, get_connection


class TestInitDatabase:
    def test_seeds_default_statuses(self, store):
        statuses = store.load_statuses()

        assert [s["id"] for s in statuses] == ["wishlist", "applied", "interview", "rejected"]
        assert [s["id"] for s in statuses if s["is_default"]] == ["wishlist"]
        assert all(s["is_system"] for s in statuses)

    def test_init_twice_does_not_reseed(self, store, status_factory):
        store.save_statuses([status_factory("only", is_default=True)])

        store.init()

        assert [s["id"] for s in store.load_statuses()] == ["only"]

    def test_tables_exist(self, store):
        conn = get_connection(store.db_path)
        try:
            names = {
                row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
            }
        finally:
            conn.close()

        assert {"statuses", "jobs", "status_migrations"} <= names

    def test_default_path_from_env(self, isolated_env):
        assert SqliteStore().db_path == isolated_env / "board.db"


class TestStatusesAndJobs:
    def test_statuses_loaded_in_order(self, store, status_factory):
        store.save_statuses([
            status_factory("c", order=2),
            status_factory("a", order=0, is_default=True),
            status_factory("b", order=1),
        ])

        assert [s["id"] for s in store.load_statuses()] == ["a", "b", "c"]

    def test_add_and_load_jobs(self, store):
        job_id = store.add_job("Vercel", "Frontend Developer", "applied", notes="referral")

        jobs = store.load_jobs()

        assert len(jobs) == 1
        assert jobs[0]["id"] == job_id
        assert jobs[0]["status"] == "applied"
        assert jobs[0]["notes"] == "referral"
        assert jobs[0]["last_updated"]

    def test_save_jobs_overwrites_status(self, store):
        store.add_job("Vercel", "Frontend Developer", "applied")
        jobs = store.load_jobs()

        store.save_jobs([{**jobs[0], "status": "interview"}])

        reloaded = store.load_jobs()
        assert reloaded[0]["status"] == "interview"
        assert reloaded[0]["company"] == "Vercel"
        assert reloaded[0]["id"] == jobs[0]["id"]


class TestSaveBoard:
    def test_writes_both_collections_and_log(self, store, status_factory):
        job_id = store.add_job("Acme", "Engineer", "interview")
        statuses = [status_factory("wishlist", order=0, is_default=True)]
        jobs = [{**store.load_jobs()[0], "status": "wishlist"}]
        migrations = [{"job_id": job_id, "old_status": "interview", "new_status": "wishlist"}]

        store.save_board(statuses, jobs, migrations, operation="delete:interview")

        assert [s["id"] for s in store.load_statuses()] == ["wishlist"]
        assert store.load_jobs()[0]["status"] == "wishlist"
        log = store.get_migration_log()
        assert log[0]["operation"] == "delete:interview"
        assert log[0]["job_id"] == job_id
        assert log[0]["old_status"] == "interview"

    def test_failed_write_leaves_board_untouched(self, store, status_factory):
        store.add_job("Acme", "Engineer", "applied")
        before_statuses = store.load_statuses()
        before_jobs = store.load_jobs()

        with pytest.raises(KeyError):
            # job without a status fails after statuses were already written
            store.save_board([status_factory("x", is_default=True)], [{"id": 1, "company": "Acme"}])

        assert store.load_statuses() == before_statuses
        assert store.load_jobs() == before_jobs

    def test_migration_log_newest_first_and_limited(self, store):
        for i in range(3):
            store.save_board(
                store.load_statuses(), None,
                [{"job_id": i, "old_status": "a", "new_status": "wishlist"}],
                operation=f"op-{i}",
            )

        log = store.get_migration_log(limit=2)

        assert [entry["operation"] for entry in log] == ["op-2", "op-1"]