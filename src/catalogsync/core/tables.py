"""Table facts consumed by the proposal builders.

These models describe a managed table in a simple, immutable form. They are
intentionally free of Databricks SDK types so builders and tests can work with
plain values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from catalogsync.core.schema import SchemaField


@dataclass(frozen=True)
class TableFacts:
    """
    Read-only facts about one table.

    Attributes:
        full_name: Fully qualified name as known to the metadata source.
        table_type: Table type, e.g. COPY_ON_WRITE or MERGE_ON_READ.
        table_version: Table format version.
        base_path: Storage location of the table.
        partition_fields: Partition column names, in declaration order.
        schema: Structural schema of the table.
        base_file_format: Base file format (PARQUET, ORC, ...), if known.
        last_commit_time: Latest commit instant of the table, if any.
    """

    full_name: str
    table_type: str
    table_version: str
    base_path: str
    partition_fields: tuple[str, ...] = ()
    schema: tuple[SchemaField, ...] = field(default_factory=tuple)
    base_file_format: str | None = None
    last_commit_time: str | None = None


class TableMetadataReader(Protocol):
    """Interface for reading table facts used by the sync client."""

    def read_table(self, full_name: str) -> TableFacts:
        """Return the current facts for a table."""
        ...


def parse_schema_full_name(schema_full_name: str) -> tuple[str, str]:
    """Split `catalog.schema` into (catalog, schema)."""
    parts = schema_full_name.strip().split(".")
    if len(parts) != 2 or not all(parts):
        raise ValueError("Schema must be in the form `catalog.schema`.")
    catalog, schema = parts
    return catalog, schema


def parse_table_full_name(table_full_name: str) -> tuple[str, str, str]:
    """Split `catalog.schema.table` into (catalog, schema, table)."""
    parts = table_full_name.strip().split(".")
    if len(parts) != 3 or not all(parts):
        raise ValueError("Table must be in the form `catalog.schema.table`.")
    catalog, schema, table = parts
    return catalog, schema, table
