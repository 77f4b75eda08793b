import pytest

from catalogsync.core.errors import BuildError
from catalogsync.core.identity import build_dataset_identity, datahub_guid


def test_build_dataset_identity_urns():
    identity = build_dataset_identity("sales", "orders")

    assert identity.dataset_urn == (
        "urn:li:dataset:(urn:li:dataPlatform:hudi,sales.orders,PROD)"
    )
    assert identity.container_urn.startswith("urn:li:container:")
    assert identity.table_name == "orders"
    assert identity.database_name == "sales"
    assert identity.platform_urn == "urn:li:dataPlatform:hudi"


def test_container_urn_is_shared_by_tables_of_one_database():
    orders = build_dataset_identity("sales", "orders")
    refunds = build_dataset_identity("sales", "refunds")
    other = build_dataset_identity("finance", "orders")

    assert orders.container_urn == refunds.container_urn
    assert orders.container_urn != other.container_urn


def test_container_urn_depends_on_env():
    prod = build_dataset_identity("sales", "orders")
    dev = build_dataset_identity("sales", "orders", env="DEV")

    assert prod.container_urn != dev.container_urn
    assert dev.dataset_urn.endswith(",DEV)")


def test_datahub_guid_ignores_key_order():
    assert datahub_guid({"a": "1", "b": "2"}) == datahub_guid({"b": "2", "a": "1"})


@pytest.mark.parametrize("database,table", [("", "orders"), ("sales", "or ders"), ("sa.les", "x")])
def test_build_dataset_identity_rejects_invalid_names(database, table):
    with pytest.raises(BuildError):
        build_dataset_identity(database, table)
