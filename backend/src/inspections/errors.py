"""Exceptions shared by the inspection, review and settings services."""

from __future__ import annotations


class PackScanError(RuntimeError):
    """Base class for errors surfaced to operators."""


class ExtractionError(PackScanError):
    """Raised when the extraction oracle is unreachable or returns nothing usable."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Extraction failed: {reason}")


class AuthorizationError(PackScanError):
    """Raised when an actor lacks the role required for a mutation."""


class NotFoundError(PackScanError):
    """Raised when a list or record id no longer exists."""

    def __init__(self, kind: str, object_id: str) -> None:
        self.kind = kind
        self.object_id = object_id
        super().__init__(f"{kind} {object_id} not found")


class ValidationError(PackScanError):
    """Raised when a payload is rejected before any write."""


class InvalidTransitionError(ValidationError):
    """Raised when a review transition targets a state that is not reachable."""


class IncompleteDeletionError(PackScanError):
    """Raised when a list's records were deleted but the list itself was not.

    The caller must retry the list deletion; the records must not be re-created.
    """

    def __init__(self, list_id: str, cause: Exception | None = None) -> None:
        self.list_id = list_id
        message = f"Records of list {list_id} were deleted but the list was not; retry the deletion"
        if cause is not None:
            message = f"{message} ({cause})"
        super().__init__(message)
