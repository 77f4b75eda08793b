"""Common CLI options for the CLI."""

import typer

ProfileOpt = typer.Option(
    None,
    "--profile",
    "-p",
    help="Databricks CLI profile (from ~/.databrickscfg)",
)

ServerOpt = typer.Option(
    None,
    "--server",
    help="DataHub GMS URL (default: $CATALOGSYNC_DATAHUB_SERVER)",
)

TokenOpt = typer.Option(
    None,
    "--token",
    help="DataHub access token (default: $CATALOGSYNC_DATAHUB_TOKEN)",
    show_default=False,
)

TimeoutOpt = typer.Option(
    None,
    "--timeout",
    help="Seconds to wait for each proposal (default: 30)",
)

SuppressOpt = typer.Option(
    None,
    "--suppress/--propagate",
    help="Log sync failures instead of failing the command",
    show_default=False,
)

DomainOpt = typer.Option(
    None,
    "--domain",
    help="Domain urn to attach, e.g. urn:li:domain:sales",
)

PropertiesOpt = typer.Option(
    None,
    "--properties",
    help="Extra dataset properties: key1=val1,key2=val2",
)

ParallelOpt = typer.Option(
    None,
    "--parallel",
    "-n",
    help="Maximum number of proposals emitted in parallel",
)

DryRunOpt = typer.Option(
    False,
    "--dry-run",
    help="Show the proposals that would be emitted, but don't emit anything",
)

ConfirmOpt = typer.Option(
    True,
    "--confirm/--no-confirm",
    help="Ask for confirmation before syncing selected tables",
)

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Log every emitted proposal",
)

PlatformOpt = typer.Option(
    None,
    "--platform",
    help="DataHub platform of the tables (default: hudi)",
)

EnvOpt = typer.Option(
    None,
    "--env",
    help="DataHub environment of the dataset urns (default: PROD)",
)

BaseFormatOpt = typer.Option(
    None,
    "--base-file-format",
    help="Base file format when the table does not declare one: PARQUET, ORC or HFILE",
)

ReservedPrefixOpt = typer.Option(
    None,
    "--reserved-prefix",
    help="Fields with this prefix are listed after user fields (default: _hoodie_)",
)

UndoSoftDeleteOpt = typer.Option(
    None,
    "--undo-soft-delete/--keep-soft-delete",
    help="Mark the container and dataset as not removed",
    show_default=False,
)
