import pytest

from catalogsync.core.builders import (
    container_proposals,
    dataset_proposals,
    domain_proposal,
    properties_patch_proposal,
    schema_sync_proposals,
)
from catalogsync.core.config import SyncConfig
from catalogsync.core.errors import BuildError
from catalogsync.core.proposals import AspectKind, EntityKind


def _aspects(proposals):
    return [p.aspect_kind for p in proposals]


def test_schema_sync_proposals_put_containers_first(identity, fields, config):
    proposals = schema_sync_proposals(identity, fields, config)

    kinds = [p.entity_kind for p in proposals]
    first_dataset = kinds.index(EntityKind.DATASET)
    assert all(k == EntityKind.CONTAINER for k in kinds[:first_dataset])
    assert all(k == EntityKind.DATASET for k in kinds[first_dataset:])
    assert {p.entity_urn for p in proposals[:first_dataset]} == {identity.container_urn}
    assert {p.entity_urn for p in proposals[first_dataset:]} == {identity.dataset_urn}


def test_container_proposals_without_domain(identity, config):
    proposals = container_proposals(identity, config)

    assert _aspects(proposals) == [
        AspectKind.CONTAINER_PROPERTIES,
        AspectKind.SUB_TYPES,
        AspectKind.BROWSE_PATHS,
        AspectKind.STATUS,
    ]
    assert proposals[0].payload["name"] == "sales"
    assert proposals[1].payload["typeNames"] == ["Database"]


def test_dataset_proposals_link_container_and_schema(identity, fields, config):
    proposals = dataset_proposals(identity, fields, config)
    by_aspect = {p.aspect_kind: p for p in proposals}

    assert len(proposals) == 5
    assert by_aspect[AspectKind.CONTAINER].payload["container"] == identity.container_urn
    assert by_aspect[AspectKind.BROWSE_PATHS].payload["path"] == [
        {"id": "sales", "urn": identity.container_urn}
    ]
    assert by_aspect[AspectKind.SUB_TYPES].payload["typeNames"] == ["Table"]
    assert by_aspect[AspectKind.SCHEMA].payload["schemaName"] == "orders"
    assert AspectKind.DOMAINS not in by_aspect


def test_domain_attached_to_both_entities_when_configured(identity, fields):
    config = SyncConfig(domain_identifier="urn:li:domain:sales")

    proposals = schema_sync_proposals(identity, fields, config)
    domains = [p for p in proposals if p.aspect_kind == AspectKind.DOMAINS]

    assert {p.entity_urn for p in domains} == {
        identity.container_urn,
        identity.dataset_urn,
    }
    assert all(p.payload["domains"] == ["urn:li:domain:sales"] for p in domains)


@pytest.mark.parametrize("domain", [None, "", "   "])
def test_domain_proposal_absent_when_not_configured(identity, domain):
    config = SyncConfig(domain_identifier=domain)

    assert domain_proposal(identity.dataset_urn, EntityKind.DATASET, config) is None


def test_invalid_domain_is_skipped_with_warning(identity, fields, caplog):
    config = SyncConfig(domain_identifier="marketing")

    with caplog.at_level("WARNING", logger="catalogsync.core.builders"):
        with_invalid = schema_sync_proposals(identity, fields, config)
    without = schema_sync_proposals(identity, fields, SyncConfig())

    assert len(with_invalid) == len(without)
    assert "marketing" in caplog.text


def test_status_proposals_absent_when_soft_delete_undo_disabled(identity, fields):
    config = SyncConfig(undo_soft_delete=False)

    proposals = schema_sync_proposals(identity, fields, config)

    assert AspectKind.STATUS not in _aspects(proposals)


def test_dataset_proposals_fail_on_empty_schema(identity, config):
    with pytest.raises(BuildError):
        dataset_proposals(identity, [], config)


def test_properties_patch_asserts_only_given_keys(identity):
    proposal = properties_patch_proposal(identity, {"hudi.table.type": "COPY_ON_WRITE"})

    assert proposal.is_patch is True
    assert proposal.change_type == "PATCH"
    assert proposal.aspect_kind == AspectKind.DATASET_PROPERTIES
    assert proposal.entity_urn == identity.dataset_urn
    assert dict(proposal.payload) == {
        "customProperties": {"hudi.table.type": "COPY_ON_WRITE"}
    }


def test_properties_patch_with_name_and_no_properties(identity):
    proposal = properties_patch_proposal(identity, None, table_name="orders")

    assert dict(proposal.payload) == {"customProperties": {}, "name": "orders"}
