"""Error taxonomy for catalog synchronization.

Build errors describe malformed table facts or configuration and always
propagate. Submission and timeout errors are never raised on their own by the
engine: they are recorded on per-proposal outcomes and only surface through a
single `SyncFailure` when the propagate policy is active.
"""

from __future__ import annotations


class CatalogSyncError(RuntimeError):
    """Base class for all catalog synchronization errors."""


class BuildError(CatalogSyncError):
    """Raised when table facts cannot be turned into proposals."""


class SubmissionError(CatalogSyncError):
    """Raised when the catalog transport rejects a proposal."""


class ProposalTimeoutError(CatalogSyncError, TimeoutError):
    """Raised when a proposal did not complete within the per-call timeout."""


class SyncFailure(CatalogSyncError):
    """
    Aggregate failure of a sync batch.

    Attributes:
        cause: The first failure recorded for the batch (completion order).
        failure_count: Total number of failed or timed-out proposals.
    """

    def __init__(self, message: str, *, cause: BaseException | None, failure_count: int):
        super().__init__(message)
        self.cause = cause
        self.failure_count = failure_count
