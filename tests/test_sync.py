import threading
from concurrent.futures import Future
from dataclasses import replace

import pytest

from catalogsync.core.config import SyncConfig
from catalogsync.core.errors import SyncFailure
from catalogsync.core.properties import LAST_COMMIT_TIME_SYNC
from catalogsync.core.proposals import AspectKind, EntityKind, OutcomeStatus, Proposal
from catalogsync.core.sync import CatalogSyncClient, last_synced_marker


class _RecordingChannel:
    """Resolves every handle except those whose aspect is listed in `hang`/`fail`."""

    def __init__(self, hang=(), fail=()):
        self.hang = set(hang)
        self.fail = set(fail)
        self.submitted: list[Proposal] = []
        self.closed = 0
        self._lock = threading.Lock()

    def submit(self, proposal: Proposal) -> Future:
        with self._lock:
            self.submitted.append(proposal)
        handle: Future = Future()
        if proposal.aspect_kind in self.fail:
            handle.set_exception(RuntimeError("HTTP 500"))
        elif proposal.aspect_kind not in self.hang:
            handle.set_result({})
        return handle

    def close(self) -> None:
        self.closed += 1


class _Transport:
    def __init__(self, channel):
        self.channel = channel

    def open(self):
        return self.channel


class _Tables:
    def __init__(self, facts):
        self.facts = facts
        self.reads: list[str] = []

    def read_table(self, full_name):
        self.reads.append(full_name)
        return self.facts


def _client(config, facts, identity, channel) -> CatalogSyncClient:
    return CatalogSyncClient(config, _Transport(channel), _Tables(facts), identity)


def test_sync_schema_emits_container_and_dataset_batch(config, facts, identity):
    channel = _RecordingChannel()
    client = _client(config, facts, identity, channel)

    result = client.sync_schema("main.sales.orders")

    assert result.ok
    assert result.succeeded_count == len(channel.submitted) == 9
    assert channel.closed == 1


def test_update_table_schema_uses_given_schema_without_reading_table(
    config, facts, identity, fields
):
    channel = _RecordingChannel()
    tables = _Tables(facts)
    client = CatalogSyncClient(config, _Transport(channel), tables, identity)

    assert client.update_table_schema("main.sales.orders", fields[2:]) is None

    schema = [p for p in channel.submitted if p.aspect_kind == AspectKind.SCHEMA][0]
    assert [f["fieldPath"] for f in schema.payload["fields"]] == ["order_id", "amount", "dt"]
    assert tables.reads == []


def test_hanging_proposal_times_out_while_siblings_succeed(facts, identity):
    config = SyncConfig(emit_timeout_s=0.1)
    proposals = [
        Proposal(identity.dataset_urn, EntityKind.DATASET, AspectKind.STATUS, {"removed": False}),
        Proposal(identity.dataset_urn, EntityKind.DATASET, AspectKind.SUB_TYPES, {"typeNames": []}),
        Proposal(identity.dataset_urn, EntityKind.DATASET, AspectKind.DOMAINS, {"domains": []}),
    ]
    channel = _RecordingChannel(hang={AspectKind.SUB_TYPES})
    client = _client(config, facts, identity, channel)

    result = client._run(proposals, context="three proposals")

    assert result.succeeded_count == 2
    assert len(result.failed_outcomes) == 1
    assert result.failed_outcomes[0].status == OutcomeStatus.TIMED_OUT
    assert result.failed_outcomes[0].proposal.aspect_kind == AspectKind.SUB_TYPES


def test_propagate_attempts_every_proposal_before_raising(config, facts, identity):
    config = replace(config, suppress_exceptions=False)
    channel = _RecordingChannel(fail={AspectKind.STATUS})
    client = _client(config, facts, identity, channel)
    batch = client.build_schema_proposals("main.sales.orders")

    with pytest.raises(SyncFailure) as excinfo:
        client.update_table_schema("main.sales.orders")

    assert len(channel.submitted) == len(batch)
    # status is emitted for both the container and the dataset
    assert excinfo.value.failure_count == 2
    assert "HTTP 500" in str(excinfo.value.cause)


def test_update_table_properties_patches_only_given_keys(config, facts, identity):
    config = replace(config, table_properties="")
    channel = _RecordingChannel()
    client = _client(config, facts, identity, channel)

    assert client.update_table_properties(
        "orders", {"hudi.table.type": "COPY_ON_WRITE"}
    ) is True

    [proposal] = channel.submitted
    assert proposal.is_patch
    assert dict(proposal.payload["customProperties"]) == {
        "hudi.table.type": "COPY_ON_WRITE"
    }


def test_update_table_properties_returns_false_on_suppressed_failure(
    config, facts, identity
):
    channel = _RecordingChannel(fail={AspectKind.DATASET_PROPERTIES})
    client = _client(config, facts, identity, channel)

    assert client.update_table_properties("orders", {"a": "b"}) is False


def test_update_last_commit_time_synced(config, facts, identity):
    channel = _RecordingChannel()
    client = _client(config, facts, identity, channel)

    assert client.update_last_commit_time_synced("main.sales.orders") is True
    [proposal] = channel.submitted
    assert dict(proposal.payload["customProperties"]) == {
        LAST_COMMIT_TIME_SYNC: "20240101120000000"
    }


def test_update_last_commit_time_synced_without_commits(config, facts, identity):
    channel = _RecordingChannel()
    client = _client(config, replace(facts, last_commit_time=None), identity, channel)

    assert client.update_last_commit_time_synced("main.sales.orders") is False
    assert channel.submitted == []


def test_sync_table_runs_schema_then_properties(config, facts, identity):
    channel = _RecordingChannel()
    client = _client(config, facts, identity, channel)

    report = client.sync_table("main.sales.orders")

    assert report.ok
    assert report.schema.succeeded_count == 9
    assert report.properties.succeeded_count == 1
    patch = [p for p in channel.submitted if p.is_patch][0]
    props = patch.payload["customProperties"]
    assert props[LAST_COMMIT_TIME_SYNC] == "20240101120000000"
    assert props["hudi.table.type"] == "COPY_ON_WRITE"
    assert patch.payload["name"] == "orders"


def test_last_synced_marker_unsupported_returns_none(config, facts, identity):
    client = _client(config, facts, identity, _RecordingChannel())

    assert last_synced_marker(client, "main.sales.orders") is None


def test_last_synced_marker_delegates_when_supported():
    class _MarkerClient:
        def get_last_synced_marker(self, table_name):
            return f"{table_name}@42"

    assert last_synced_marker(_MarkerClient(), "orders") == "orders@42"
