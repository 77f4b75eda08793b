"""Dataset properties derived from table facts.

The property map published to the catalog combines basic table facts, the
user-declared extra properties, the Spark data source properties (schema
split into bounded parts) and the serde properties of the base file format.
"""

from __future__ import annotations

import logging

from catalogsync.core.config import SyncConfig
from catalogsync.core.errors import BuildError
from catalogsync.core.schema import SchemaField, spark_schema_json
from catalogsync.core.tables import TableFacts

logger = logging.getLogger(__name__)

LAST_COMMIT_TIME_SYNC = "last_commit_time_sync"

# (inputFormat, outputFormat, serdeClass) per base file format.
_FORMAT_CLASSES = {
    "PARQUET": (
        "org.apache.hudi.hadoop.HoodieParquetInputFormat",
        "org.apache.hadoop.hive.ql.io.parquet.MapredParquetOutputFormat",
        "org.apache.hadoop.hive.ql.io.parquet.serde.ParquetHiveSerDe",
    ),
    "ORC": (
        "org.apache.hadoop.hive.ql.io.orc.OrcInputFormat",
        "org.apache.hadoop.hive.ql.io.orc.OrcOutputFormat",
        "org.apache.hadoop.hive.ql.io.orc.OrcSerde",
    ),
    "HFILE": (
        "org.apache.hudi.hadoop.HoodieHFileInputFormat",
        "org.apache.hadoop.hive.ql.io.HiveIgnoreKeyTextOutputFormat",
        "org.apache.hadoop.hive.serde2.lazy.LazySimpleSerDe",
    ),
}


def parse_properties_string(raw: str | None) -> dict[str, str]:
    """
    Parse `key1=val1,key2=val2` into a dict.

    Blank input yields an empty dict. Whitespace around keys and values is
    stripped; values may contain `=`.
    """
    if raw is None or not raw.strip():
        return {}
    out: dict[str, str] = {}
    for entry in raw.split(","):
        if not entry.strip():
            continue
        if "=" not in entry:
            raise BuildError(f"Invalid property entry: '{entry}' (expected key=value)")
        key, value = entry.split("=", 1)
        key = key.strip()
        if not key:
            raise BuildError(f"Invalid property entry: '{entry}' (empty key)")
        out[key] = value.strip()
    return out


def _fields_with_partitions_last(
    fields: tuple[SchemaField, ...], partition_fields: tuple[str, ...]
) -> list[SchemaField]:
    partitions = set(partition_fields)
    regular = [f for f in fields if f.field_path not in partitions]
    by_name = {f.field_path: f for f in fields}
    return regular + [by_name[p] for p in partition_fields if p in by_name]


def spark_table_properties(
    facts: TableFacts, *, threshold: int, spark_version: str | None
) -> dict[str, str]:
    """Spark data source properties: provider, schema parts and partition columns."""
    props = {"spark.sql.sources.provider": "hudi"}
    if spark_version:
        props["spark.sql.create.version"] = spark_version

    schema_json = spark_schema_json(
        _fields_with_partitions_last(facts.schema, facts.partition_fields)
    )
    parts = [
        schema_json[i : i + threshold] for i in range(0, len(schema_json), threshold)
    ]
    props["spark.sql.sources.schema.numParts"] = str(len(parts))
    for i, part in enumerate(parts):
        props[f"spark.sql.sources.schema.part.{i}"] = part

    if facts.partition_fields:
        props["spark.sql.sources.schema.numPartCols"] = str(len(facts.partition_fields))
        for i, name in enumerate(facts.partition_fields):
            props[f"spark.sql.sources.schema.partCol.{i}"] = name
    return props


def serde_properties(
    config: SyncConfig, facts: TableFacts, *, read_as_optimized: bool = False
) -> dict[str, str]:
    """Serde properties of the base file format plus the configured extensions."""
    file_format = (facts.base_file_format or config.base_file_format).upper()
    try:
        input_format, output_format, serde_class = _FORMAT_CLASSES[file_format]
    except KeyError as exc:
        raise BuildError(f"Unsupported base file format: {file_format}") from exc

    props = parse_properties_string(config.serde_properties)
    props["inputFormat"] = input_format
    props["outputFormat"] = output_format
    props["serdeClass"] = serde_class

    spark_serde = {
        "hoodie.query.as.ro.table": str(read_as_optimized).lower(),
        "path": facts.base_path,
    }
    for key, value in spark_serde.items():
        props.setdefault(key if key.startswith("spark.") else f"spark.{key}", value)
    logger.debug("Serde properties for %s: %s", facts.full_name, props)
    return props


def table_properties(config: SyncConfig, facts: TableFacts) -> dict[str, str]:
    """Return the full property map published for a table."""
    props = {
        "hudi.table.type": facts.table_type,
        "hudi.table.version": facts.table_version,
        "hudi.base.path": facts.base_path,
    }
    if facts.partition_fields:
        props["hudi.partition.fields"] = ",".join(facts.partition_fields)

    props.update(parse_properties_string(config.table_properties))
    props.update(
        spark_table_properties(
            facts,
            threshold=config.schema_string_length_threshold,
            spark_version=config.spark_version,
        )
    )
    props.update(serde_properties(config, facts))
    return props
