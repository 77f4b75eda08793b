from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from databricks.sdk import WorkspaceClient

from catalogsync.core.errors import BuildError
from catalogsync.core.schema import SchemaField
from catalogsync.core.tables import TableFacts

_DEFAULT_TABLE_TYPE = "COPY_ON_WRITE"
_DEFAULT_TABLE_VERSION = "UNKNOWN"


def _enum_value(value: Any) -> str | None:
    """SDK fields are enums or plain strings depending on the SDK version."""
    if value is None:
        return None
    return str(getattr(value, "value", value))


def _instant_from_millis(millis: int | None) -> str | None:
    """Render an epoch-millis timestamp as a commit instant (yyyyMMddHHmmssSSS)."""
    if not millis:
        return None
    dt = datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
    return dt.strftime("%Y%m%d%H%M%S") + f"{dt.microsecond // 1000:03d}"


def column_to_field(column: Any) -> SchemaField:
    """Map an SDK ColumnInfo to a SchemaField."""
    name = getattr(column, "name", None)
    type_text = getattr(column, "type_text", None) or _enum_value(
        getattr(column, "type_name", None)
    )
    if not name or not type_text:
        raise BuildError(f"Column without name or type: {column!r}")

    raw_json = getattr(column, "type_json", None)
    try:
        type_json = json.loads(raw_json) if raw_json else None
    except json.JSONDecodeError:
        type_json = None

    nullable = getattr(column, "nullable", None)
    return SchemaField(
        field_path=name,
        native_type=type_text,
        nullable=True if nullable is None else bool(nullable),
        description=getattr(column, "comment", None) or None,
        type_json=type_json,
    )


class UnityCatalogTableReader:
    """Adapter around Databricks SDK Unity Catalog APIs (table facts)."""

    def __init__(self, client: WorkspaceClient) -> None:
        self.client = client

    def list_table_names(self, catalog: str, schema: str) -> list[str]:
        """List table full names in a given catalog.schema."""
        out: list[str] = []
        for t in self.client.tables.list(catalog_name=catalog, schema_name=schema):
            full_name = getattr(t, "full_name", None)
            if full_name:
                out.append(full_name)
        return out

    def read_table(self, full_name: str) -> TableFacts:
        """Read a table by full name and map it to TableFacts."""
        info = self.client.tables.get(full_name=full_name)
        properties = dict(getattr(info, "properties", None) or {})

        base_path = getattr(info, "storage_location", None)
        if not base_path:
            raise BuildError(f"Table {full_name} has no storage location.")

        columns = list(getattr(info, "columns", None) or [])
        fields = tuple(column_to_field(c) for c in columns)
        partitioned = sorted(
            (c for c in columns if getattr(c, "partition_index", None) is not None),
            key=lambda c: c.partition_index,
        )

        file_format = properties.get("hoodie.table.base.file.format") or _enum_value(
            getattr(info, "data_source_format", None)
        )

        return TableFacts(
            full_name=getattr(info, "full_name", None) or full_name,
            table_type=properties.get("hoodie.table.type", _DEFAULT_TABLE_TYPE),
            table_version=properties.get("hoodie.table.version", _DEFAULT_TABLE_VERSION),
            base_path=base_path,
            partition_fields=tuple(c.name for c in partitioned),
            schema=fields,
            base_file_format=file_format if file_format in {"PARQUET", "ORC", "HFILE"} else None,
            last_commit_time=_instant_from_millis(getattr(info, "updated_at", None)),
        )
