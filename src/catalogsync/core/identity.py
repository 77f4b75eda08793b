"""Stable catalog identities for a table and its database container."""

from __future__ import annotations

import hashlib
import json
import re
from dataclasses import dataclass

from catalogsync.core.errors import BuildError

_NAME_RX = re.compile(r"^[A-Za-z0-9_\-$]+$")


@dataclass(frozen=True)
class DatasetIdentity:
    """
    Pre-resolved identities used to address catalog entities.

    Attributes:
        dataset_urn: Urn of the table (dataset entity).
        container_urn: Urn of the database (container entity).
        table_name: Table name without database prefix.
        database_name: Database the table lives in.
        platform: DataHub platform name.
    """

    dataset_urn: str
    container_urn: str
    table_name: str
    database_name: str
    platform: str

    @property
    def platform_urn(self) -> str:
        return platform_urn(self.platform)


def platform_urn(platform: str) -> str:
    return f"urn:li:dataPlatform:{platform}"


def datahub_guid(key: dict[str, str]) -> str:
    """Deterministic guid for a container key (md5 of its canonical JSON)."""
    canonical = json.dumps(key, separators=(",", ":"), sort_keys=True)
    return hashlib.md5(canonical.encode("utf-8")).hexdigest()


def build_dataset_identity(
    database: str,
    table: str,
    *,
    platform: str = "hudi",
    env: str = "PROD",
) -> DatasetIdentity:
    """Derive dataset and container urns for `database.table`."""
    for label, value in (("database", database), ("table", table)):
        if not value or not _NAME_RX.match(value):
            raise BuildError(f"Invalid {label} name: {value!r}")

    container_key = {"platform": platform, "database": database, "env": env}
    return DatasetIdentity(
        dataset_urn=(
            f"urn:li:dataset:({platform_urn(platform)},{database}.{table},{env})"
        ),
        container_urn=f"urn:li:container:{datahub_guid(container_key)}",
        table_name=table,
        database_name=database,
        platform=platform,
    )
