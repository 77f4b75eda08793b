"""Catalog sync client.

Composes builders, executor and aggregator for one table. Every call is a
single complete attempt: nothing is retried and nothing is compared with what
the catalog already holds, so each invocation republishes the full set of
proposals and relies on upsert/patch semantics to be safely reapplied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

from catalogsync.core.builders import properties_patch_proposal, schema_sync_proposals
from catalogsync.core.config import SyncConfig
from catalogsync.core.executor import CatalogTransport, emit_proposals
from catalogsync.core.identity import DatasetIdentity
from catalogsync.core.outcomes import SyncRunResult, aggregate_outcomes
from catalogsync.core.properties import LAST_COMMIT_TIME_SYNC, table_properties
from catalogsync.core.proposals import Proposal
from catalogsync.core.schema import SchemaField
from catalogsync.core.tables import TableMetadataReader

logger = logging.getLogger(__name__)


class PropertyUpdater(Protocol):
    """Capability: patch dataset properties in the catalog."""

    def update_table_properties(
        self, table_name: str, properties: Mapping[str, str]
    ) -> bool: ...


class SchemaUpdater(Protocol):
    """Capability: publish the structural schema of a table."""

    def update_table_schema(
        self,
        table_name: str,
        schema: Sequence[SchemaField] | None = None,
        schema_difference: Any = None,
    ) -> None: ...


@runtime_checkable
class LastSyncedMarkerReader(Protocol):
    """Capability: read back the last synced commit marker from the catalog."""

    def get_last_synced_marker(self, table_name: str) -> str | None: ...


def last_synced_marker(client: object, table_name: str) -> str | None:
    """Return the last synced marker, or None when the client cannot provide it."""
    if isinstance(client, LastSyncedMarkerReader):
        return client.get_last_synced_marker(table_name)
    logger.debug(
        "Last synced marker is not supported by %s (table %s)",
        type(client).__name__,
        table_name,
    )
    return None


@dataclass(frozen=True)
class SyncReport:
    """Results of a full table sync (schema batch, then properties batch)."""

    table_name: str
    schema: SyncRunResult
    properties: SyncRunResult

    @property
    def ok(self) -> bool:
        return self.schema.ok and self.properties.ok


class CatalogSyncClient:
    """
    Sync one table's metadata into the catalog.

    Implements PropertyUpdater and SchemaUpdater. All collaborators are passed
    in explicitly; the client holds no other state between calls.
    """

    def __init__(
        self,
        config: SyncConfig,
        transport: CatalogTransport,
        tables: TableMetadataReader,
        identity: DatasetIdentity,
    ) -> None:
        self.config = config
        self.transport = transport
        self.tables = tables
        self.identity = identity

    def _run(self, proposals: Sequence[Proposal], *, context: str) -> SyncRunResult:
        logger.info("Emitting %d proposal(s) for %s", len(proposals), context)
        outcomes = emit_proposals(
            self.transport,
            proposals,
            timeout_s=self.config.emit_timeout_s,
            max_parallel=self.config.max_parallel,
        )
        return aggregate_outcomes(outcomes, self.config.policy, context=context)

    def build_schema_proposals(
        self, table_name: str, schema: Sequence[SchemaField] | None = None
    ) -> list[Proposal]:
        """Build the schema batch without emitting it (used for dry runs)."""
        fields = schema if schema is not None else self.tables.read_table(table_name).schema
        return schema_sync_proposals(self.identity, fields, self.config)

    def sync_schema(
        self, table_name: str, schema: Sequence[SchemaField] | None = None
    ) -> SyncRunResult:
        """Register container and dataset and publish the schema."""
        proposals = self.build_schema_proposals(table_name, schema)
        return self._run(proposals, context=f"dataset {self.identity.dataset_urn}")

    def update_table_schema(
        self,
        table_name: str,
        schema: Sequence[SchemaField] | None = None,
        schema_difference: Any = None,
    ) -> None:
        """
        Publish the table schema.

        The full schema is always republished; `schema_difference` is accepted
        so callers holding a diff can pass it, but it does not narrow the batch.
        Raises SyncFailure when the policy is PROPAGATE_FIRST_ERROR and any
        proposal failed.
        """
        self.sync_schema(table_name, schema)

    def patch_properties(
        self, table_name: str | None, properties: Mapping[str, str]
    ) -> SyncRunResult:
        proposal = properties_patch_proposal(
            self.identity, properties, table_name=table_name
        )
        return self._run(
            [proposal], context=f"properties of {self.identity.dataset_urn}"
        )

    def update_table_properties(
        self, table_name: str, properties: Mapping[str, str]
    ) -> bool:
        """
        Patch dataset properties (unlisted keys are left untouched).

        Returns True on success and False when a failure was suppressed.
        """
        return self.patch_properties(table_name, properties).ok

    def sync_table_properties(self, table_name: str) -> bool:
        """Derive the property map from table facts and patch it."""
        facts = self.tables.read_table(table_name)
        return self.update_table_properties(
            self.identity.table_name, table_properties(self.config, facts)
        )

    def update_last_commit_time_synced(self, table_name: str) -> bool:
        """Record the table's latest commit time in the dataset properties."""
        facts = self.tables.read_table(table_name)
        if facts.last_commit_time is None:
            logger.info("No commits found for %s; last commit time not synced", table_name)
            return False
        return self.update_table_properties(
            self.identity.table_name, {LAST_COMMIT_TIME_SYNC: facts.last_commit_time}
        )

    def sync_table(self, table_name: str) -> SyncReport:
        """Publish schema, then the derived properties (incl. last commit time)."""
        facts = self.tables.read_table(table_name)
        props = table_properties(self.config, facts)
        if facts.last_commit_time is not None:
            props[LAST_COMMIT_TIME_SYNC] = facts.last_commit_time

        schema_result = self.sync_schema(table_name, facts.schema)
        properties_result = self.patch_properties(self.identity.table_name, props)
        return SyncReport(
            table_name=table_name, schema=schema_result, properties=properties_result
        )
