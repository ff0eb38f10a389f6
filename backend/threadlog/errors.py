"""
Store and workflow error taxonomy.

Input problems are `validation.ValidationError` (raised before any write).
Everything here is raised once a store or collaborator call is involved.
"""

from __future__ import annotations


class StoreError(Exception):
    """Raised when the transaction store rejects or cannot serve a call."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class StoreConnectionError(StoreError):
    """Store unreachable or locked; transient, user-retryable."""


class ConstraintViolation(StoreError):
    """Insert/update rejected by a database constraint (e.g., duplicate id)."""


class NotFoundError(StoreError):
    """Target row or order no longer exists."""


class ProviderError(Exception):
    """Outbound collaborator (SMS, geographic lookup) failed."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class PartialFailureError(Exception):
    """
    A multi-write workflow where some writes committed and others did not.

    `succeeded` lists the ids that committed, `failed` lists
    {"id": ..., "error": ...} entries. Nothing is rolled back, so the next
    refold shows the mixed state.
    """
    def __init__(self, message: str, succeeded: list | None = None, failed: list | None = None):
        super().__init__(message)
        self.succeeded = list(succeeded or [])
        self.failed = list(failed or [])

    def to_dict(self) -> dict:
        return {
            "error": str(self),
            "succeeded": self.succeeded,
            "failed": self.failed,
        }
