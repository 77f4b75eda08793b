"""Configuration for catalog synchronization.

`SyncConfig` is built once by the caller (CLI, automation, tests) and passed
explicitly into the sync client. `SyncConfig.from_env` resolves defaults from
`CATALOGSYNC_*` environment variables; invalid numeric values fall back to the
defaults instead of failing.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping

DEFAULT_EMIT_TIMEOUT_SECONDS = 30.0
DEFAULT_SCHEMA_STRING_LENGTH_THRESHOLD = 4000
DEFAULT_RESERVED_FIELD_PREFIX = "_hoodie_"


class SyncPolicy(str, Enum):
    """
    How batch-level partial failure is reported to the caller.

    Values:
        SUPPRESS_ERRORS: Log every failure and return normally.
        PROPAGATE_FIRST_ERROR: Raise one error carrying the first failure.
    """

    SUPPRESS_ERRORS = "SUPPRESS_ERRORS"
    PROPAGATE_FIRST_ERROR = "PROPAGATE_FIRST_ERROR"

    @classmethod
    def from_suppress(cls, suppress: bool) -> SyncPolicy:
        return cls.SUPPRESS_ERRORS if suppress else cls.PROPAGATE_FIRST_ERROR


@dataclass(frozen=True)
class SyncConfig:
    """
    Settings consumed by the sync engine.

    Attributes:
        server: Base URL of the DataHub GMS endpoint.
        token: Optional personal access token for DataHub.
        emit_timeout_s: Per-proposal wait before an outcome is marked timed out.
        suppress_exceptions: Log failures instead of raising them.
        domain_identifier: Domain urn to attach to the container and dataset.
        table_properties: Extra dataset properties, `key1=val1,key2=val2`.
        serde_properties: Extra serde properties, `key1=val1,key2=val2`.
        schema_string_length_threshold: Max length of one Spark schema part.
        spark_version: Spark version recorded in the table properties.
        base_file_format: Base file format of the table when not known from facts.
        reserved_field_prefix: Prefix of internal fields moved to the schema end.
        undo_soft_delete: Emit `status(removed=false)` for both entities.
        max_parallel: Upper bound for concurrent emissions (None = batch size).
        platform: DataHub platform name of the table.
        env: DataHub fabric/environment of the dataset urn.
    """

    server: str = "http://localhost:8080"
    token: str | None = None
    emit_timeout_s: float = DEFAULT_EMIT_TIMEOUT_SECONDS
    suppress_exceptions: bool = True
    domain_identifier: str | None = None
    table_properties: str = ""
    serde_properties: str = ""
    schema_string_length_threshold: int = DEFAULT_SCHEMA_STRING_LENGTH_THRESHOLD
    spark_version: str | None = None
    base_file_format: str = "PARQUET"
    reserved_field_prefix: str = DEFAULT_RESERVED_FIELD_PREFIX
    undo_soft_delete: bool = True
    max_parallel: int | None = None
    platform: str = "hudi"
    env: str = "PROD"

    def __post_init__(self) -> None:
        if self.emit_timeout_s <= 0:
            raise ValueError("emit_timeout_s must be > 0")
        if self.schema_string_length_threshold < 1:
            raise ValueError("schema_string_length_threshold must be >= 1")
        if self.max_parallel is not None and self.max_parallel < 1:
            raise ValueError("max_parallel must be >= 1")

    @property
    def policy(self) -> SyncPolicy:
        return SyncPolicy.from_suppress(self.suppress_exceptions)

    @property
    def attach_domain(self) -> bool:
        return bool(self.domain_identifier and self.domain_identifier.strip())

    def with_overrides(self, **overrides: Any) -> SyncConfig:
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SyncConfig:
        """Build a config from `CATALOGSYNC_*` environment variables."""
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            server=env.get("CATALOGSYNC_DATAHUB_SERVER") or defaults.server,
            token=env.get("CATALOGSYNC_DATAHUB_TOKEN") or None,
            emit_timeout_s=_positive_float(
                env.get("CATALOGSYNC_EMIT_TIMEOUT"), defaults.emit_timeout_s
            ),
            suppress_exceptions=_flag(
                env.get("CATALOGSYNC_SUPPRESS_EXCEPTIONS"), defaults.suppress_exceptions
            ),
            domain_identifier=env.get("CATALOGSYNC_DOMAIN") or None,
            table_properties=env.get("CATALOGSYNC_TABLE_PROPERTIES", ""),
            serde_properties=env.get("CATALOGSYNC_SERDE_PROPERTIES", ""),
            schema_string_length_threshold=_positive_int(
                env.get("CATALOGSYNC_SCHEMA_STRING_LENGTH_THRESHOLD"),
                defaults.schema_string_length_threshold,
            ),
            spark_version=env.get("CATALOGSYNC_SPARK_VERSION") or None,
            base_file_format=(
                env.get("CATALOGSYNC_BASE_FILE_FORMAT") or defaults.base_file_format
            ).upper(),
            reserved_field_prefix=env.get(
                "CATALOGSYNC_RESERVED_FIELD_PREFIX", defaults.reserved_field_prefix
            ),
            undo_soft_delete=_flag(
                env.get("CATALOGSYNC_UNDO_SOFT_DELETE"), defaults.undo_soft_delete
            ),
            max_parallel=_positive_int(env.get("CATALOGSYNC_MAX_PARALLEL"), None),
            platform=env.get("CATALOGSYNC_PLATFORM") or defaults.platform,
            env=env.get("CATALOGSYNC_ENV") or defaults.env,
        )


def _flag(raw: str | None, default: bool) -> bool:
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _positive_float(raw: str | None, default: float) -> float:
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _positive_int(raw: str | None, default: int | None) -> int | None:
    """Parse a whole number >= 1; anything else (incl. '0.5') gives the default."""
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return value if value > 0 else default
