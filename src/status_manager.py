"""Status board operations with write-through persistence.

StatusManager loads the current collections from its store, runs the workflow
engine over them and writes the result back. A rejected operation raises
before anything is written.
"""

from datetime import datetime, timezone
from typing import Optional

import config
from src import workflow
from src.database import SqliteStore


def log_error(msg: str) -> None:
    with open(config.ERRORS_LOG_PATH, "a") as f:
        f.write(f"[{datetime.now(timezone.utc).isoformat()}] {msg}\n")


class StatusManager:
    """
    store needs load_statuses, save_statuses, load_jobs and
    save_board(statuses, jobs, migrations, operation).
    """

    def __init__(self, store=None):
        self.store = store if store is not None else SqliteStore()

    def statuses(self) -> list[dict]:
        return workflow.sort_statuses(self.store.load_statuses())

    def jobs(self) -> list[dict]:
        return self.store.load_jobs()

    def default_status(self) -> Optional[dict]:
        return workflow.get_default_status(self.statuses())

    def _save_statuses(self, statuses: list[dict]) -> list[dict]:
        workflow.check_invariants(statuses)
        self.store.save_statuses(statuses)
        return statuses

    def add(self, name: str, color: str = "", is_default: bool = False) -> list[dict]:
        updated = workflow.add_status(
            self.store.load_statuses(),
            {"name": name, "color": color, "is_default": is_default},
        )
        return self._save_statuses(updated)

    def update(self, status: dict) -> list[dict]:
        return self._save_statuses(workflow.update_status(self.store.load_statuses(), status))

    def set_default(self, status_id: str) -> list[dict]:
        return self._save_statuses(workflow.set_default_status(self.store.load_statuses(), status_id))

    def move(self, from_index: int, to_index: int) -> list[dict]:
        return self._save_statuses(workflow.move_status(self.store.load_statuses(), from_index, to_index))

    def move_up(self, index: int) -> list[dict]:
        return self._save_statuses(workflow.move_status_up(self.store.load_statuses(), index))

    def move_down(self, index: int) -> list[dict]:
        return self._save_statuses(workflow.move_status_down(self.store.load_statuses(), index))

    def delete(self, status_id: str) -> tuple[list[dict], list[dict]]:
        """Delete a status after user confirmation. Returns (statuses, migrations)."""
        statuses, jobs, migrations = workflow.delete_status(
            self.store.load_statuses(), status_id, self.store.load_jobs(),
        )
        workflow.check_invariants(statuses, jobs)
        self.store.save_board(statuses, jobs, migrations, operation=f"delete:{status_id}")
        return statuses, migrations

    def restore_defaults(self, fallback_status_id: str) -> tuple[list[dict], list[dict]]:
        """Replace every status with the shipped defaults after user confirmation."""
        statuses, jobs, migrations = workflow.restore_defaults(
            self.store.load_statuses(), self.store.load_jobs(), fallback_status_id,
        )
        workflow.check_invariants(statuses, jobs)
        self.store.save_board(statuses, jobs, migrations, operation="restore-defaults")
        return statuses, migrations
