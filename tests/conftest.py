from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from catalogsync.core.config import SyncConfig  # noqa: E402
from catalogsync.core.identity import build_dataset_identity  # noqa: E402
from catalogsync.core.schema import SchemaField  # noqa: E402
from catalogsync.core.tables import TableFacts  # noqa: E402


@pytest.fixture
def identity():
    return build_dataset_identity("sales", "orders")


@pytest.fixture
def config():
    return SyncConfig(server="http://datahub.test:8080", emit_timeout_s=1.0)


@pytest.fixture
def fields():
    return (
        SchemaField("_hoodie_commit_time", "string"),
        SchemaField("_hoodie_record_key", "string"),
        SchemaField("order_id", "bigint", nullable=False),
        SchemaField("amount", "decimal(10,2)"),
        SchemaField("dt", "string"),
    )


@pytest.fixture
def facts(fields):
    return TableFacts(
        full_name="main.sales.orders",
        table_type="COPY_ON_WRITE",
        table_version="6",
        base_path="s3://lake/sales/orders",
        partition_fields=("dt",),
        schema=fields,
        base_file_format="PARQUET",
        last_commit_time="20240101120000000",
    )
