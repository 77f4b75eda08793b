"""Aggregation of per-proposal outcomes into one batch result."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from catalogsync.core.config import SyncPolicy
from catalogsync.core.errors import SyncFailure
from catalogsync.core.proposals import Outcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncRunResult:
    """
    Result of one orchestration call.

    Attributes:
        succeeded_count: Number of proposals that were accepted by the catalog.
        failed_outcomes: Failed or timed-out outcomes, in completion order.
        policy: Failure policy the batch was aggregated under.
    """

    succeeded_count: int
    failed_outcomes: tuple[Outcome, ...]
    policy: SyncPolicy

    @property
    def failure_count(self) -> int:
        return len(self.failed_outcomes)

    @property
    def total(self) -> int:
        return self.succeeded_count + self.failure_count

    @property
    def ok(self) -> bool:
        return not self.failed_outcomes


def aggregate_outcomes(
    outcomes: Iterable[Outcome],
    policy: SyncPolicy,
    *,
    context: str = "batch",
) -> SyncRunResult:
    """
    Reduce outcomes to a single result under the given policy.

    Under PROPAGATE_FIRST_ERROR, a batch with at least one failed or timed-out
    outcome raises SyncFailure chained to the first failure (completion order).
    Under SUPPRESS_ERRORS every failure is logged and the call returns normally.
    An empty batch is always successful.
    """
    succeeded = 0
    failed: list[Outcome] = []
    for outcome in outcomes:
        if outcome.ok:
            succeeded += 1
        else:
            failed.append(outcome)

    result = SyncRunResult(
        succeeded_count=succeeded, failed_outcomes=tuple(failed), policy=policy
    )

    if not failed:
        logger.info("Synced %s: %d operation(s) succeeded", context, succeeded)
        return result

    if policy == SyncPolicy.PROPAGATE_FIRST_ERROR:
        first = failed[0].error
        raise SyncFailure(
            f"Failed to sync {len(failed)} operation(s) for {context}",
            cause=first,
            failure_count=len(failed),
        ) from first

    for outcome in failed:
        logger.error(
            "Failed to sync operation %s (%s)",
            outcome.proposal.describe(),
            outcome.status.value,
            exc_info=outcome.error,
        )
    logger.info(
        "Synced %s with errors: %d succeeded, %d failed",
        context,
        succeeded,
        len(failed),
    )
    return result
