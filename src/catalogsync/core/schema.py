"""Structural schema helpers.

Converts table columns into the DataHub `schemaMetadata` aspect and into the
Spark `StructType` JSON stored in the table properties. Everything here is a
pure transformation on field lists.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from catalogsync.core.errors import BuildError
from catalogsync.core.identity import DatasetIdentity


@dataclass(frozen=True)
class SchemaField:
    """
    One column of a table schema.

    Attributes:
        field_path: Column name (dotted path for nested fields).
        native_type: Type as declared by the table format, e.g. `decimal(10,2)`.
        nullable: Whether the column accepts nulls.
        description: Optional column comment.
        type_json: Spark field JSON when the metadata source provides it.
    """

    field_path: str
    native_type: str
    nullable: bool = True
    description: str | None = None
    type_json: Mapping[str, Any] | None = None


def reorder_prefixed_fields(
    fields: Sequence[SchemaField], prefix: str
) -> list[SchemaField]:
    """
    Move fields whose path starts with `prefix` after all other fields.

    Relative order inside both groups is preserved, so applying the function
    twice gives the same list as applying it once.
    """
    if not prefix:
        return list(fields)
    regular = [f for f in fields if not f.field_path.startswith(prefix)]
    reserved = [f for f in fields if f.field_path.startswith(prefix)]
    return regular + reserved


# Spark primitive type names keyed by the (lower-cased) declared type.
_SPARK_PRIMITIVES = {
    "string": "string",
    "varchar": "string",
    "char": "string",
    "int": "integer",
    "integer": "integer",
    "bigint": "long",
    "long": "long",
    "smallint": "short",
    "short": "short",
    "tinyint": "byte",
    "byte": "byte",
    "double": "double",
    "float": "float",
    "real": "float",
    "boolean": "boolean",
    "binary": "binary",
    "date": "date",
    "timestamp": "timestamp",
    "timestamp_ntz": "timestamp_ntz",
}

_DECIMAL_RX = re.compile(r"^decimal\(\s*(\d+)\s*,\s*(\d+)\s*\)$")
_PARAMETERIZED_RX = re.compile(r"^(varchar|char)\(\s*\d+\s*\)$")

# DataHub type classes keyed by Spark type (prefix match for complex types).
_DATAHUB_TYPES = {
    "string": "StringType",
    "integer": "NumberType",
    "long": "NumberType",
    "short": "NumberType",
    "byte": "NumberType",
    "double": "NumberType",
    "float": "NumberType",
    "decimal": "NumberType",
    "boolean": "BooleanType",
    "binary": "BytesType",
    "date": "DateType",
    "timestamp": "TimeType",
    "timestamp_ntz": "TimeType",
    "array": "ArrayType",
    "map": "MapType",
    "struct": "RecordType",
}


def _spark_type(field: SchemaField) -> Any:
    if field.type_json is not None:
        return field.type_json.get("type")

    declared = field.native_type.strip().lower()
    if _PARAMETERIZED_RX.match(declared):
        return "string"
    if _DECIMAL_RX.match(declared):
        return declared.replace(" ", "")
    spark = _SPARK_PRIMITIVES.get(declared)
    if spark is None:
        raise BuildError(
            f"Cannot express type '{field.native_type}' of field "
            f"'{field.field_path}' as a Spark type."
        )
    return spark


def _datahub_type(field: SchemaField) -> str:
    declared = field.native_type.strip().lower()
    if _PARAMETERIZED_RX.match(declared):
        return "StringType"
    for key, type_class in _DATAHUB_TYPES.items():
        if declared == key or declared.startswith(f"{key}<") or declared.startswith(
            f"{key}("
        ):
            return type_class
    spark = _SPARK_PRIMITIVES.get(declared)
    if spark is not None:
        return _DATAHUB_TYPES[spark]
    return "NullType"


def spark_schema(fields: Iterable[SchemaField]) -> dict[str, Any]:
    """Return the Spark `StructType` representation of the fields."""
    return {
        "type": "struct",
        "fields": [
            {
                "name": f.field_path,
                "type": _spark_type(f),
                "nullable": f.nullable,
                "metadata": dict((f.type_json or {}).get("metadata") or {}),
            }
            for f in fields
        ],
    }


def spark_schema_json(fields: Iterable[SchemaField]) -> str:
    """Compact JSON string of the Spark schema (what Spark stores in TBLPROPERTIES)."""
    return json.dumps(spark_schema(fields), separators=(",", ":"))


def _field_payload(field: SchemaField) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "fieldPath": field.field_path,
        "nullable": field.nullable,
        "nativeDataType": field.native_type,
        "type": {"type": {f"com.linkedin.schema.{_datahub_type(field)}": {}}},
        "recursive": False,
        "isPartOfKey": False,
    }
    if field.description:
        payload["description"] = field.description
    return payload


def schema_metadata_payload(
    identity: DatasetIdentity,
    fields: Sequence[SchemaField],
    *,
    reserved_prefix: str,
    raw_schema: str | None = None,
) -> dict[str, Any]:
    """
    Build the `schemaMetadata` aspect for a dataset.

    Reserved fields are moved after user-visible ones before rendering.
    """
    if not fields:
        raise BuildError(f"Table {identity.table_name} has no schema fields.")
    ordered = reorder_prefixed_fields(fields, reserved_prefix)
    raw = raw_schema if raw_schema is not None else spark_schema_json(fields)
    return {
        "schemaName": identity.table_name,
        "platform": identity.platform_urn,
        "version": 0,
        "hash": "",
        "platformSchema": {"com.linkedin.schema.OtherSchema": {"rawSchema": raw}},
        "fields": [_field_payload(f) for f in ordered],
    }
