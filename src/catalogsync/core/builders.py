"""Proposal builders.

Pure functions that turn table facts and identities into catalog proposals.
Nothing here performs I/O. Builders for optional aspects return `None` when
the aspect does not apply; the composing functions drop those explicitly so
the executor only ever sees real proposals.

Build order convention: container proposals come before dataset proposals.
This is a readability convention for logs, not an execution guarantee.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Mapping, Sequence

from catalogsync.core.config import SyncConfig
from catalogsync.core.identity import DatasetIdentity
from catalogsync.core.proposals import AspectKind, EntityKind, Proposal
from catalogsync.core.schema import SchemaField, schema_metadata_payload

logger = logging.getLogger(__name__)

_DOMAIN_URN_RX = re.compile(r"^urn:li:domain:\S+$")


def _present(proposals: Iterable[Proposal | None]) -> list[Proposal]:
    """Drop builders' `None` results (aspects that do not apply)."""
    return [p for p in proposals if p is not None]


def _upsert(
    urn: str, kind: EntityKind, aspect: AspectKind, payload: Mapping[str, object]
) -> Proposal:
    return Proposal(entity_urn=urn, entity_kind=kind, aspect_kind=aspect, payload=payload)


def status_proposal(urn: str, kind: EntityKind, config: SyncConfig) -> Proposal | None:
    """Undo a soft delete of the entity (only when enabled in config)."""
    if not config.undo_soft_delete:
        return None
    return _upsert(urn, kind, AspectKind.STATUS, {"removed": False})


def sub_type_proposal(urn: str, kind: EntityKind, sub_type: str) -> Proposal:
    return _upsert(urn, kind, AspectKind.SUB_TYPES, {"typeNames": [sub_type]})


def browse_paths_proposal(
    urn: str, kind: EntityKind, path: Sequence[Mapping[str, str]]
) -> Proposal:
    return _upsert(urn, kind, AspectKind.BROWSE_PATHS, {"path": [dict(p) for p in path]})


def container_membership_proposal(dataset_urn: str, container_urn: str) -> Proposal:
    return _upsert(
        dataset_urn, EntityKind.DATASET, AspectKind.CONTAINER, {"container": container_urn}
    )


def domain_proposal(urn: str, kind: EntityKind, config: SyncConfig) -> Proposal | None:
    """
    Attach the entity to the configured domain.

    Returns None when no domain is configured. A malformed domain identifier
    is logged and skipped rather than failing the whole batch.
    """
    if not config.attach_domain:
        return None
    domain = (config.domain_identifier or "").strip()
    if not _DOMAIN_URN_RX.match(domain):
        logger.warning("Failed to create domain urn from string: %s", domain)
        return None
    return _upsert(urn, kind, AspectKind.DOMAINS, {"domains": [domain]})


def container_proposals(identity: DatasetIdentity, config: SyncConfig) -> list[Proposal]:
    """Register the database container of the table."""
    urn = identity.container_urn
    kind = EntityKind.CONTAINER
    return _present(
        [
            _upsert(
                urn, kind, AspectKind.CONTAINER_PROPERTIES, {"name": identity.database_name}
            ),
            sub_type_proposal(urn, kind, "Database"),
            browse_paths_proposal(urn, kind, []),
            status_proposal(urn, kind, config),
            domain_proposal(urn, kind, config),
        ]
    )


def dataset_proposals(
    identity: DatasetIdentity,
    fields: Sequence[SchemaField],
    config: SyncConfig,
    *,
    raw_schema: str | None = None,
) -> list[Proposal]:
    """Register the table itself, its container membership and its schema."""
    urn = identity.dataset_urn
    kind = EntityKind.DATASET
    schema_payload = schema_metadata_payload(
        identity,
        fields,
        reserved_prefix=config.reserved_field_prefix,
        raw_schema=raw_schema,
    )
    return _present(
        [
            status_proposal(urn, kind, config),
            sub_type_proposal(urn, kind, "Table"),
            browse_paths_proposal(
                urn,
                kind,
                [{"id": identity.database_name, "urn": identity.container_urn}],
            ),
            container_membership_proposal(urn, identity.container_urn),
            _upsert(urn, kind, AspectKind.SCHEMA, schema_payload),
            domain_proposal(urn, kind, config),
        ]
    )


def schema_sync_proposals(
    identity: DatasetIdentity,
    fields: Sequence[SchemaField],
    config: SyncConfig,
    *,
    raw_schema: str | None = None,
) -> list[Proposal]:
    """Full batch for a schema sync: container proposals, then dataset proposals."""
    return container_proposals(identity, config) + dataset_proposals(
        identity, fields, config, raw_schema=raw_schema
    )


def properties_patch_proposal(
    identity: DatasetIdentity,
    properties: Mapping[str, str] | None,
    *,
    table_name: str | None = None,
) -> Proposal:
    """
    Patch the dataset properties.

    Only the supplied keys (and the name, when given) are asserted; any other
    custom property already stored in the catalog is left untouched.
    """
    payload: dict[str, object] = {"customProperties": dict(properties or {})}
    if table_name is not None:
        payload["name"] = table_name
    return Proposal(
        entity_urn=identity.dataset_urn,
        entity_kind=EntityKind.DATASET,
        aspect_kind=AspectKind.DATASET_PROPERTIES,
        payload=payload,
        is_patch=True,
    )
