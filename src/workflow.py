"""Status workflow engine - ordered status columns and the jobs that reference them.

Every function takes the current collections and returns new ones. Inputs are
never mutated: statuses and jobs come back as fresh dicts in fresh lists.

A valid collection has at least one status, exactly one default, unique ids
and unique orders. Every operation starts and ends in that state.
"""

import re
import time
from typing import Optional

import config
from src.errors import (
    EmptyName,
    InvalidFallbackStatus,
    InvalidStatusIndex,
    InvariantViolation,
    LastStatusUndeletable,
    StatusNotFound,
    SystemStatusProtected,
    SystemStatusRenameRejected,
)

# Slug cleanup, applied in order
WHITESPACE_RE = re.compile(r"\s+")
NON_SLUG_RE = re.compile(r"[^\w-]+", re.ASCII)
REPEATED_HYPHEN_RE = re.compile(r"--+")


def _epoch_millis() -> int:
    return int(time.time() * 1000)


def slugify_status_id(name: str) -> str:
    """
    URL-safe id from a display name: "Technical Interview" -> "technical-interview".
    Falls back to a time-based id when nothing slug-worthy is left.
    """
    s = (name or "").lower()
    s = WHITESPACE_RE.sub("-", s)
    s = NON_SLUG_RE.sub("", s)
    s = REPEATED_HYPHEN_RE.sub("-", s)
    s = s.strip("-")
    return s or f"state-{_epoch_millis()}"


def _copy_status(status: dict) -> dict:
    copied = dict(status)
    copied["is_default"] = bool(status.get("is_default"))
    copied["is_system"] = bool(status.get("is_system"))
    return copied


def sort_statuses(statuses: list[dict]) -> list[dict]:
    """Copies of statuses sorted by order (stable for equal orders)."""
    return sorted((_copy_status(s) for s in statuses), key=lambda s: s["order"])


def find_status(statuses: list[dict], status_id: str) -> Optional[dict]:
    for status in statuses:
        if status["id"] == status_id:
            return status
    return None


def get_default_status(statuses: list[dict]) -> Optional[dict]:
    """The default status, or None for an empty collection."""
    for status in statuses:
        if status.get("is_default"):
            return status
    return None


def _with_default(statuses: list[dict], status_id: str) -> list[dict]:
    return [{**s, "is_default": s["id"] == status_id} for s in statuses]


def _ensure_single_default(statuses: list[dict]) -> list[dict]:
    """Keep the first default by order; promote the first status if there is none."""
    if not statuses:
        return []
    current = get_default_status(statuses)
    return _with_default(statuses, current["id"] if current else statuses[0]["id"])


def _unique_status_id(statuses: list[dict], base: str) -> str:
    """base, else base-<millis>, else base-<millis>-2, -3, ... until free."""
    if find_status(statuses, base) is None:
        return base
    stamped = f"{base}-{_epoch_millis()}"
    candidate = stamped
    n = 2
    while find_status(statuses, candidate) is not None:
        candidate = f"{stamped}-{n}"
        n += 1
    return candidate


def add_status(statuses: list[dict], candidate: dict) -> list[dict]:
    """
    Append a new status built from candidate {name, color, is_default}.
    The first status of an empty collection is always the default.
    """
    name = (candidate.get("name") or "").strip()
    if not name:
        raise EmptyName()

    current = sort_statuses(statuses)
    status_id = _unique_status_id(current, slugify_status_id(name))

    new_status = {
        "id": status_id,
        "name": name,
        "color": candidate.get("color") or config.DEFAULT_STATUS_COLOR,
        "order": max(s["order"] for s in current) + 1 if current else 0,
        "is_default": bool(candidate.get("is_default")),
        "is_system": False,
    }

    updated = current + [new_status]
    if new_status["is_default"] or not current:
        updated = _with_default(updated, status_id)
    return updated


def update_status(statuses: list[dict], status: dict) -> list[dict]:
    """
    Replace the status with the same id. Name, color and default flag come from
    the update; order and the system flag stay as stored.
    """
    current = sort_statuses(statuses)
    existing = find_status(current, status.get("id"))
    if existing is None:
        raise StatusNotFound(status.get("id"))

    name = status.get("name", existing["name"])
    name = (name or "").strip()
    if not name:
        raise EmptyName()
    if existing["is_system"] and name != existing["name"]:
        raise SystemStatusRenameRejected(existing["id"], existing["name"], name)

    replaced = {
        **existing,
        "name": name,
        "color": status.get("color") or existing["color"],
        "is_default": bool(status.get("is_default", existing["is_default"])),
    }
    updated = [replaced if s["id"] == replaced["id"] else s for s in current]

    if replaced["is_default"]:
        return _with_default(updated, replaced["id"])
    return _ensure_single_default(updated)


def set_default_status(statuses: list[dict], status_id: str) -> list[dict]:
    """Move the default flag to status_id."""
    current = sort_statuses(statuses)
    if find_status(current, status_id) is None:
        raise StatusNotFound(status_id)
    return _with_default(current, status_id)


def _migrate_jobs(jobs: list[dict], resolve) -> tuple[list[dict], list[dict]]:
    """Apply resolve(job) -> new status id to every job; collect what changed."""
    updated_jobs = []
    migrations = []
    for job in jobs:
        new_status = resolve(job)
        if new_status != job.get("status"):
            migrations.append({
                "job_id": job.get("id"),
                "old_status": job.get("status"),
                "new_status": new_status,
            })
        updated_jobs.append({**job, "status": new_status})
    return updated_jobs, migrations


def delete_status(
    statuses: list[dict],
    status_id: str,
    jobs: list[dict],
) -> tuple[list[dict], list[dict], list[dict]]:
    """
    Remove a status and move its jobs to the default status.
    Returns (statuses, jobs, migrations).
    - The last remaining status can't be deleted
    - System statuses can't be deleted
    - Deleting the default promotes the first remaining status
    - Jobs already pointing at a missing status are moved too
    """
    current = sort_statuses(statuses)
    target = find_status(current, status_id)
    if target is None:
        raise StatusNotFound(status_id)
    if len(current) <= 1:
        raise LastStatusUndeletable(status_id)
    if target["is_system"]:
        raise SystemStatusProtected(status_id)

    remaining = _ensure_single_default([s for s in current if s["id"] != status_id])
    default_id = get_default_status(remaining)["id"]
    valid_ids = {s["id"] for s in remaining}

    def resolve(job: dict) -> str:
        return job.get("status") if job.get("status") in valid_ids else default_id

    updated_jobs, migrations = _migrate_jobs(jobs, resolve)
    return remaining, updated_jobs, migrations


def _check_index(index: int, size: int) -> None:
    if not 0 <= index < size:
        raise InvalidStatusIndex(index, size)


def move_status(statuses: list[dict], from_index: int, to_index: int) -> list[dict]:
    """
    Move the status at from_index (position in the order-sorted collection) to
    to_index, then renumber order = position for every status.
    """
    current = sort_statuses(statuses)
    _check_index(from_index, len(current))
    _check_index(to_index, len(current))
    moved = current.pop(from_index)
    current.insert(to_index, moved)
    return [{**s, "order": i} for i, s in enumerate(current)]


def move_status_up(statuses: list[dict], index: int) -> list[dict]:
    _check_index(index, len(statuses))
    return move_status(statuses, index, max(index - 1, 0))


def move_status_down(statuses: list[dict], index: int) -> list[dict]:
    _check_index(index, len(statuses))
    return move_status(statuses, index, min(index + 1, len(statuses) - 1))


def restore_defaults(
    statuses: list[dict],
    jobs: list[dict],
    fallback_status_id: str,
    defaults: Optional[list[dict]] = None,
) -> tuple[list[dict], list[dict], list[dict]]:
    """
    Replace the whole collection with the shipped defaults and re-home every job.
    Returns (statuses, jobs, migrations).

    Per job, against the collection being replaced:
    - id already a default id -> unchanged
    - status name matches a default name (case-insensitive) -> that default's id
    - anything else, including orphaned ids -> fallback_status_id
    """
    template = sort_statuses(defaults if defaults is not None else config.DEFAULT_STATUSES)
    template_ids = [s["id"] for s in template]
    if fallback_status_id not in template_ids:
        raise InvalidFallbackStatus(fallback_status_id, template_ids)

    by_id = {s["id"]: s for s in statuses}
    template_by_name = {s["name"].lower(): s["id"] for s in template}

    def resolve(job: dict) -> str:
        status_id = job.get("status")
        if status_id in template_ids:
            return status_id
        current = by_id.get(status_id)
        if current is None:
            return fallback_status_id
        return template_by_name.get((current.get("name") or "").lower(), fallback_status_id)

    updated_jobs, migrations = _migrate_jobs(jobs, resolve)
    return template, updated_jobs, migrations


def check_invariants(statuses: list[dict], jobs: Optional[list[dict]] = None) -> None:
    """Raise InvariantViolation listing every broken rule, or return None."""
    problems = []
    if not statuses:
        problems.append("no statuses")
    else:
        defaults = [s["id"] for s in statuses if s.get("is_default")]
        if len(defaults) != 1:
            problems.append(f"expected exactly one default status, found {len(defaults)}")

    ids = [s["id"] for s in statuses]
    if len(set(ids)) != len(ids):
        problems.append("duplicate status ids")
    orders = [s["order"] for s in statuses]
    if len(set(orders)) != len(orders):
        problems.append("duplicate status orders")
    if any(not (s.get("name") or "").strip() for s in statuses):
        problems.append("status with empty name")

    if jobs is not None:
        valid_ids = set(ids)
        dangling = sorted({str(j.get("status")) for j in jobs if j.get("status") not in valid_ids})
        if dangling:
            problems.append(f"jobs reference missing statuses: {', '.join(dangling)}")

    if problems:
        raise InvariantViolation(problems)
