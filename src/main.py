"""Command line front end for the status board."""

from dotenv import load_dotenv
from pathlib import Path
load_dotenv(Path(__file__).parent.parent / ".env")

import argparse
import sys
from typing import Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import config
from src import sheets_sync
from src.database import SqliteStore
from src.errors import StatusNotFound, WorkflowError
from src.status_manager import StatusManager, log_error
from src.workflow import find_status


def _print_statuses(statuses: list[dict]) -> None:
    for index, status in enumerate(statuses):
        flags = ""
        if status.get("is_default"):
            flags += " [default]"
        if status.get("is_system"):
            flags += " [system]"
        print(f"{index:>3}. {status['name']} ({status['id']}) {status['color']}{flags}")


def _print_migrations(migrations: list[dict]) -> None:
    if not migrations:
        print("No jobs moved.")
        return
    print(f"Moved {len(migrations)} job(s):")
    for m in migrations:
        print(f"  job {m['job_id']}: {m['old_status']} → {m['new_status']}")


def _confirm(prompt: str, assume_yes: bool) -> bool:
    if assume_yes:
        return True
    answer = input(f"{prompt} [y/N] ").strip().lower()
    return answer in ("y", "yes")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Job Status Board")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="Show statuses in board order")

    p = sub.add_parser("add", help="Add a status")
    p.add_argument("name")
    p.add_argument("--color", default=config.DEFAULT_STATUS_COLOR)
    p.add_argument("--default", action="store_true", help="Make it the default status")

    p = sub.add_parser("update", help="Edit a status")
    p.add_argument("status_id")
    p.add_argument("--name")
    p.add_argument("--color")
    p.add_argument("--default", action=argparse.BooleanOptionalAction, default=None)

    p = sub.add_parser("set-default", help="Make a status the default")
    p.add_argument("status_id")

    p = sub.add_parser("delete", help="Delete a status, moving its jobs to the default")
    p.add_argument("status_id")
    p.add_argument("--yes", action="store_true", help="Skip confirmation")

    p = sub.add_parser("move", help="Move a status from one position to another")
    p.add_argument("from_index", type=int)
    p.add_argument("to_index", type=int)

    p = sub.add_parser("up", help="Move a status one position earlier")
    p.add_argument("index", type=int)

    p = sub.add_parser("down", help="Move a status one position later")
    p.add_argument("index", type=int)

    p = sub.add_parser("restore-defaults", help="Replace all statuses with the shipped defaults")
    p.add_argument("--fallback", required=True, help="Default status id for jobs on custom statuses")
    p.add_argument("--yes", action="store_true", help="Skip confirmation")

    sub.add_parser("jobs", help="List jobs")

    p = sub.add_parser("add-job", help="Add a job to the board")
    p.add_argument("company")
    p.add_argument("position")
    p.add_argument("--status", help="Status id (default status if omitted)")
    p.add_argument("--date-applied", default="")
    p.add_argument("--notes", default="")
    p.add_argument("--url", default="")

    sub.add_parser("history", help="Show recent job migrations")
    sub.add_parser("export", help="Push the board to Google Sheets")
    return parser


def run_command(args: argparse.Namespace, store: SqliteStore) -> int:
    manager = StatusManager(store)

    if args.command == "list":
        _print_statuses(manager.statuses())

    elif args.command == "add":
        statuses = manager.add(args.name, color=args.color, is_default=args.default)
        print(f"Added status: {args.name}")
        _print_statuses(statuses)

    elif args.command == "update":
        change = {"id": args.status_id}
        if args.name is not None:
            change["name"] = args.name
        if args.color is not None:
            change["color"] = args.color
        if args.default is not None:
            change["is_default"] = args.default
        statuses = manager.update(change)
        print(f"Updated status: {args.status_id}")
        _print_statuses(statuses)

    elif args.command == "set-default":
        _print_statuses(manager.set_default(args.status_id))

    elif args.command == "delete":
        if not _confirm(f"Delete status '{args.status_id}' and move its jobs to the default?", args.yes):
            print("Cancelled.")
            return 0
        statuses, migrations = manager.delete(args.status_id)
        print(f"Deleted status: {args.status_id}")
        _print_migrations(migrations)
        _print_statuses(statuses)

    elif args.command in ("move", "up", "down"):
        if args.command == "move":
            statuses = manager.move(args.from_index, args.to_index)
        elif args.command == "up":
            statuses = manager.move_up(args.index)
        else:
            statuses = manager.move_down(args.index)
        _print_statuses(statuses)

    elif args.command == "restore-defaults":
        prompt = (
            "This replaces every status with the defaults. Jobs on custom statuses "
            f"move to '{args.fallback}'. Continue?"
        )
        if not _confirm(prompt, args.yes):
            print("Cancelled.")
            return 0
        statuses, migrations = manager.restore_defaults(args.fallback)
        print("Statuses restored to defaults.")
        _print_migrations(migrations)
        _print_statuses(statuses)

    elif args.command == "jobs":
        statuses = manager.statuses()
        for job in manager.jobs():
            status = find_status(statuses, job["status"])
            name = status["name"] if status else job["status"]
            print(f"{job['id']:>4}. {job['company']} / {job['position']} [{name}]")

    elif args.command == "add-job":
        statuses = manager.statuses()
        status_id = args.status or manager.default_status()["id"]
        if find_status(statuses, status_id) is None:
            raise StatusNotFound(status_id)
        job_id = store.add_job(
            args.company, args.position, status_id,
            date_applied=args.date_applied, notes=args.notes, url=args.url,
        )
        print(f"NEW JOB: id={job_id} company={args.company} position={args.position} status={status_id}")

    elif args.command == "history":
        for entry in store.get_migration_log():
            print(
                f"[{entry['timestamp']}] {entry['operation']}: job {entry['job_id']} "
                f"{entry['old_status']} → {entry['new_status']}"
            )

    elif args.command == "export":
        spreadsheet_id = config.get_spreadsheet_id()
        if not spreadsheet_id:
            spreadsheet_id = sheets_sync.create_new_spreadsheet()
            config.save_spreadsheet_id_to_env(spreadsheet_id)
            print(f"\n>>> CREATED NEW SPREADSHEET <<<")
            print(f"Saved SPREADSHEET_ID to .env: {spreadsheet_id}")
        sheets_sync.sync_board(spreadsheet_id, manager.statuses(), manager.jobs())
        _print_urls(spreadsheet_id)

    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    store = SqliteStore()
    store.init()
    try:
        return run_command(args, store)
    except WorkflowError as e:
        print(f"Error: {e.message}")
        log_error(f"{args.command}: {e.message}")
        return 1


def _print_urls(spreadsheet_id: str) -> None:
    print(f"\nGoogle Sheet: {sheets_sync.get_sheet_url(spreadsheet_id)}")
    print(f"Excel Download: {sheets_sync.get_excel_download_url(spreadsheet_id)}")


if __name__ == "__main__":
    sys.exit(main())
