"""Typed failures for status workflow operations.

Every failure is a user-input problem: raised before anything is persisted,
never retried, surfaced to the caller for correction.
"""


class WorkflowError(Exception):
    """Base for all rejected status operations."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EmptyName(WorkflowError):
    def __init__(self):
        super().__init__("Status name cannot be empty")


class LastStatusUndeletable(WorkflowError):
    def __init__(self, status_id: str):
        super().__init__(f"Cannot delete '{status_id}': must retain at least one status")
        self.status_id = status_id


class SystemStatusProtected(WorkflowError):
    def __init__(self, status_id: str):
        super().__init__(f"Cannot delete '{status_id}': system statuses are protected")
        self.status_id = status_id


class SystemStatusRenameRejected(WorkflowError):
    def __init__(self, status_id: str, current_name: str, requested_name: str):
        super().__init__(
            f"Cannot rename system status '{status_id}' from '{current_name}' to '{requested_name}'"
        )
        self.status_id = status_id
        self.current_name = current_name
        self.requested_name = requested_name


class InvalidFallbackStatus(WorkflowError):
    def __init__(self, fallback_status_id: str, valid_ids: list[str]):
        super().__init__(
            f"Fallback status '{fallback_status_id}' is not one of the default statuses: "
            f"{', '.join(valid_ids)}"
        )
        self.fallback_status_id = fallback_status_id
        self.valid_ids = valid_ids


class StatusNotFound(WorkflowError):
    def __init__(self, status_id: str):
        super().__init__(f"No status with id '{status_id}'")
        self.status_id = status_id


class InvalidStatusIndex(WorkflowError):
    def __init__(self, index: int, size: int):
        super().__init__(f"Status position {index} is out of range for {size} statuses")
        self.index = index
        self.size = size


class InvariantViolation(WorkflowError):
    def __init__(self, problems: list[str]):
        super().__init__("Status collection is invalid: " + "; ".join(problems))
        self.problems = problems
