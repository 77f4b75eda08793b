"""Application context management for the CLI."""

from dataclasses import dataclass

from databricks.sdk import WorkspaceClient

from catalogsync.cli.common.exits import die
from catalogsync.core.adapters.datahub import DataHubRestTransport
from catalogsync.core.adapters.unitycatalog import UnityCatalogTableReader
from catalogsync.core.auth import AuthError, get_client
from catalogsync.core.config import SyncConfig
from catalogsync.core.identity import build_dataset_identity
from catalogsync.core.sync import CatalogSyncClient
from catalogsync.core.tables import parse_table_full_name


@dataclass
class SyncAppContext:
    """Application context holding the Databricks client, table reader and sync settings."""

    profile: str | None
    client: WorkspaceClient
    reader: UnityCatalogTableReader
    config: SyncConfig
    transport: DataHubRestTransport

    def sync_client(self, table_full_name: str) -> CatalogSyncClient:
        """Build a sync client for one `catalog.schema.table`."""
        try:
            _, schema, table = parse_table_full_name(table_full_name)
        except ValueError as exc:
            die(str(exc), code=2)
        identity = build_dataset_identity(
            schema, table, platform=self.config.platform, env=self.config.env
        )
        return CatalogSyncClient(self.config, self.transport, self.reader, identity)


def build_sync_context(profile: str | None, config: SyncConfig) -> SyncAppContext:
    """Build and return the application context for sync commands."""
    try:
        client = get_client(profile)
    except AuthError as exc:
        die(str(exc), code=1)
    try:
        transport = DataHubRestTransport.from_config(config)
    except ValueError as exc:
        die(str(exc), code=2)
    return SyncAppContext(
        profile=profile,
        client=client,
        reader=UnityCatalogTableReader(client),
        config=config,
        transport=transport,
    )
