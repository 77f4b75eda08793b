"""Core data shapes for catalog mutations.

A `Proposal` describes one desired change against one catalog entity and an
`Outcome` records what happened when it was emitted. Both are immutable and
free of transport or CLI concerns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class EntityKind(str, Enum):
    """Catalog entity categories (used for transport routing only)."""

    DATASET = "dataset"
    CONTAINER = "container"


class AspectKind(str, Enum):
    """
    Mutation categories, named after the DataHub aspects they address.

    Values:
        STATUS: Soft-delete flag of an entity.
        SUB_TYPES: Sub-type labels ("Database", "Table").
        CONTAINER: Membership of a dataset in its container.
        BROWSE_PATHS: Browse path shown in the catalog UI.
        DOMAINS: Domain membership.
        SCHEMA: Structural schema of a dataset.
        CONTAINER_PROPERTIES: Name of a container.
        DATASET_PROPERTIES: Name and custom properties of a dataset.
    """

    STATUS = "status"
    SUB_TYPES = "subTypes"
    CONTAINER = "container"
    BROWSE_PATHS = "browsePathsV2"
    DOMAINS = "domains"
    SCHEMA = "schemaMetadata"
    CONTAINER_PROPERTIES = "containerProperties"
    DATASET_PROPERTIES = "datasetProperties"


@dataclass(frozen=True)
class Proposal:
    """
    One desired mutation against one catalog entity.

    Attributes:
        entity_urn: Stable identifier of the target entity.
        entity_kind: Category of the target entity.
        aspect_kind: Category of the mutation.
        payload: JSON-serializable mutation body. Stored as a read-only mapping.
        is_patch: True when the payload must be merged into the existing
                  aspect instead of replacing it.
    """

    entity_urn: str
    entity_kind: EntityKind
    aspect_kind: AspectKind
    payload: Mapping[str, Any] = field(default_factory=dict)
    is_patch: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    @property
    def change_type(self) -> str:
        """Return the catalog change type for this proposal."""
        return "PATCH" if self.is_patch else "UPSERT"

    def describe(self) -> str:
        """Short label used in logs and result tables."""
        return f"{self.aspect_kind.value}@{self.entity_urn}"


class OutcomeStatus(str, Enum):
    """Result of emitting a single proposal."""

    SUCCEEDED = "SUCCEEDED"
    TIMED_OUT = "TIMED_OUT"
    FAILED = "FAILED"


@dataclass(frozen=True)
class Outcome:
    """
    Result of attempting to emit one proposal.

    Attributes:
        proposal: The proposal this outcome belongs to.
        status: Whether the proposal succeeded, timed out or failed.
        error: The cause for TIMED_OUT and FAILED outcomes.
    """

    proposal: Proposal
    status: OutcomeStatus
    error: BaseException | None = None

    @classmethod
    def succeeded(cls, proposal: Proposal) -> Outcome:
        return cls(proposal=proposal, status=OutcomeStatus.SUCCEEDED)

    @classmethod
    def timed_out(cls, proposal: Proposal, error: BaseException) -> Outcome:
        return cls(proposal=proposal, status=OutcomeStatus.TIMED_OUT, error=error)

    @classmethod
    def failed(cls, proposal: Proposal, error: BaseException) -> Outcome:
        return cls(proposal=proposal, status=OutcomeStatus.FAILED, error=error)

    @property
    def ok(self) -> bool:
        return self.status == OutcomeStatus.SUCCEEDED
