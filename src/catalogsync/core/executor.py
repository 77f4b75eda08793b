"""Concurrent emission of proposals to the catalog.

Every proposal is submitted and awaited on its own worker thread, so a batch
completes in roughly the time of its slowest proposal. Each wait is bounded by
the per-proposal timeout, which starts at that proposal's submission and never
affects siblings. Failures are returned as outcomes rather than raised, and
the catalog channel is released exactly once per call.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Any, Protocol, Sequence

from catalogsync.core.config import DEFAULT_EMIT_TIMEOUT_SECONDS
from catalogsync.core.errors import ProposalTimeoutError, SubmissionError
from catalogsync.core.proposals import Outcome, Proposal

logger = logging.getLogger(__name__)


class CatalogChannel(Protocol):
    """An open connection to the catalog, safe for concurrent submissions."""

    def submit(self, proposal: Proposal) -> Future[Any]:
        """Start emitting a proposal and return a handle for its response."""
        ...

    def close(self) -> None:
        """Release the connection."""
        ...


class CatalogTransport(Protocol):
    """Factory for catalog channels (one channel per emission call)."""

    def open(self) -> CatalogChannel:
        """Open a channel to the catalog."""
        ...


def _submission_error(message: str, exc: BaseException) -> SubmissionError:
    if isinstance(exc, SubmissionError):
        return exc
    error = SubmissionError(f"{message}: {exc}")
    error.__cause__ = exc
    return error


def _emit_one(channel: CatalogChannel, proposal: Proposal, timeout_s: float) -> Outcome:
    """Submit one proposal and wait for its response, never raising."""
    try:
        handle = channel.submit(proposal)
    except Exception as exc:  # noqa: BLE001
        return Outcome.failed(
            proposal, _submission_error(f"Failed to submit {proposal.describe()}", exc)
        )

    try:
        handle.result(timeout=timeout_s)
    except FuturesTimeoutError as exc:
        if handle.done():
            # the handle itself failed with a TimeoutError
            return Outcome.failed(proposal, exc)
        error = ProposalTimeoutError(
            f"Operation timed out after {timeout_s}s: {proposal.describe()}"
        )
        error.__cause__ = exc
        return Outcome.timed_out(proposal, error)
    except Exception as exc:  # noqa: BLE001
        return Outcome.failed(proposal, exc)

    logger.debug("Emitted %s (%s)", proposal.describe(), proposal.change_type)
    return Outcome.succeeded(proposal)


def emit_proposals(
    transport: CatalogTransport,
    proposals: Sequence[Proposal],
    *,
    timeout_s: float = DEFAULT_EMIT_TIMEOUT_SECONDS,
    max_parallel: int | None = None,
) -> list[Outcome]:
    """
    Emit a batch of proposals concurrently.

    Args:
        transport: Catalog transport used to open one channel for the batch.
        proposals: Proposals to emit. All of them are attempted.
        timeout_s: Per-proposal wait before the outcome is TIMED_OUT.
        max_parallel: Maximum concurrent emissions (defaults to batch size).

    Returns:
        One Outcome per proposal, in completion order (not submission order).
    """
    if timeout_s <= 0:
        raise ValueError("timeout_s must be > 0")
    if max_parallel is not None and max_parallel < 1:
        raise ValueError("max_parallel must be >= 1")
    if not proposals:
        return []

    try:
        channel = transport.open()
    except Exception as exc:  # noqa: BLE001
        error = _submission_error("Failed to open catalog channel", exc)
        logger.debug("Channel open failed; marking %d proposal(s) failed", len(proposals))
        return [Outcome.failed(p, error) for p in proposals]

    outcomes: list[Outcome] = []
    workers = min(max_parallel or len(proposals), len(proposals))
    try:
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="catalogsync-emit"
        ) as pool:
            futures = [pool.submit(_emit_one, channel, p, timeout_s) for p in proposals]

            for f in as_completed(futures):
                outcomes.append(f.result())
    finally:
        channel.close()

    return outcomes
