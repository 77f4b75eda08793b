import logging

import pytest

from catalogsync.core.config import SyncPolicy
from catalogsync.core.errors import ProposalTimeoutError, SubmissionError, SyncFailure
from catalogsync.core.outcomes import aggregate_outcomes
from catalogsync.core.proposals import AspectKind, EntityKind, Outcome, Proposal


def _proposal(urn: str) -> Proposal:
    return Proposal(
        entity_urn=urn,
        entity_kind=EntityKind.CONTAINER,
        aspect_kind=AspectKind.SUB_TYPES,
        payload={"typeNames": ["Database"]},
    )


@pytest.mark.parametrize("policy", list(SyncPolicy))
def test_aggregate_empty_batch_is_successful(policy):
    result = aggregate_outcomes([], policy)

    assert result.ok is True
    assert result.succeeded_count == 0
    assert result.failed_outcomes == ()


@pytest.mark.parametrize("policy", list(SyncPolicy))
def test_aggregate_all_succeeded(policy):
    outcomes = [Outcome.succeeded(_proposal(f"urn:{i}")) for i in range(3)]

    result = aggregate_outcomes(outcomes, policy)

    assert result.ok is True
    assert result.succeeded_count == 3
    assert result.failed_outcomes == ()
    assert result.policy == policy


def test_aggregate_suppress_reports_every_failure(caplog):
    timeout = Outcome.timed_out(_proposal("urn:2"), ProposalTimeoutError("timed out"))
    failure = Outcome.failed(_proposal("urn:3"), SubmissionError("HTTP 500"))
    outcomes = [Outcome.succeeded(_proposal("urn:1")), timeout, failure]

    with caplog.at_level(logging.ERROR, logger="catalogsync.core.outcomes"):
        result = aggregate_outcomes(outcomes, SyncPolicy.SUPPRESS_ERRORS)

    assert result.ok is False
    assert result.succeeded_count == 1
    assert result.failed_outcomes == (timeout, failure)
    assert result.failure_count == 2
    assert result.total == 3
    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 2


def test_aggregate_propagate_raises_first_failure_in_completion_order():
    first = ProposalTimeoutError("first to complete")
    second = SubmissionError("second to complete")
    outcomes = [
        Outcome.succeeded(_proposal("urn:1")),
        Outcome.timed_out(_proposal("urn:9"), first),
        Outcome.failed(_proposal("urn:2"), second),
    ]

    with pytest.raises(SyncFailure, match="2 operation") as excinfo:
        aggregate_outcomes(outcomes, SyncPolicy.PROPAGATE_FIRST_ERROR, context="dataset x")

    assert excinfo.value.cause is first
    assert excinfo.value.__cause__ is first
    assert excinfo.value.failure_count == 2
    assert "dataset x" in str(excinfo.value)
