"""Commands for syncing Unity Catalog tables into DataHub."""

from __future__ import annotations

import re
from contextlib import contextmanager

import typer
from databricks.sdk.errors import NotFound, PermissionDenied

from catalogsync.cli.common.context import SyncAppContext, build_sync_context
from catalogsync.cli.common.exits import (
    die,
    exit_from_exc,
    exit_if_failed,
    ok_exit,
    warn_exit,
)
from catalogsync.cli.common.options import (
    BaseFormatOpt,
    ConfirmOpt,
    DomainOpt,
    DryRunOpt,
    EnvOpt,
    ParallelOpt,
    PlatformOpt,
    ProfileOpt,
    PropertiesOpt,
    ReservedPrefixOpt,
    ServerOpt,
    SuppressOpt,
    TimeoutOpt,
    TokenOpt,
    UndoSoftDeleteOpt,
    VerboseOpt,
)
from catalogsync.cli.common.output import configure_logging, out
from catalogsync.cli.tui import select_tables
from catalogsync.core.config import SyncConfig
from catalogsync.core.errors import BuildError, SyncFailure
from catalogsync.core.properties import table_properties
from catalogsync.core.tables import parse_schema_full_name

sync_app = typer.Typer(
    help="Sync table metadata into DataHub.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@sync_app.callback()
def _init(
    ctx: typer.Context,
    profile: str | None = ProfileOpt,
    server: str | None = ServerOpt,
    token: str | None = TokenOpt,
    timeout: float | None = TimeoutOpt,
    suppress: bool | None = SuppressOpt,
    domain: str | None = DomainOpt,
    properties: str | None = PropertiesOpt,
    parallel: int | None = ParallelOpt,
    platform: str | None = PlatformOpt,
    env: str | None = EnvOpt,
    base_file_format: str | None = BaseFormatOpt,
    reserved_prefix: str | None = ReservedPrefixOpt,
    undo_soft_delete: bool | None = UndoSoftDeleteOpt,
    verbose: bool = VerboseOpt,
):
    """Initialize sync context (CLI flags override CATALOGSYNC_* env vars)."""
    configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)
    try:
        config = SyncConfig.from_env().with_overrides(
            server=server,
            token=token,
            emit_timeout_s=timeout,
            suppress_exceptions=suppress,
            domain_identifier=domain,
            table_properties=properties,
            max_parallel=parallel,
            platform=platform,
            env=env,
            base_file_format=base_file_format.upper() if base_file_format else None,
            reserved_field_prefix=reserved_prefix,
            undo_soft_delete=undo_soft_delete,
        )
    except ValueError as exc:
        exit_from_exc(exc, message=f"Invalid configuration: {exc}", code=2)
    ctx.obj = build_sync_context(profile, config)


@contextmanager
def _sync_errors(table: str):
    """Turn sync and lookup errors into CLI exits."""
    try:
        yield
    except BuildError as exc:
        exit_from_exc(exc, message=f"Cannot build metadata for {table}: {exc}", code=2)
    except SyncFailure as exc:
        exit_from_exc(
            exc,
            message=f"{exc} (first error: {exc.cause})",
            code=1,
        )
    except NotFound as exc:
        exit_from_exc(exc, message=f"Table '{table}' does not exist.", code=1)
    except PermissionDenied as exc:
        exit_from_exc(exc, message=f"No permission to read table '{table}'.", code=1)


@sync_app.command("schema")
def sync_schema(
    ctx: typer.Context,
    table: str = typer.Argument(..., help="Table in the form catalog.schema.table"),
    dry_run: bool = DryRunOpt,
):
    """Register the table, its database container and its schema."""
    appctx: SyncAppContext = ctx.obj
    with _sync_errors(table):
        client = appctx.sync_client(table)
        if dry_run:
            with out.status("Reading table metadata..."):
                proposals = client.build_schema_proposals(table)
            out.proposals_table(proposals, title=f"Proposals for {table}")
            warn_exit("Dry-run enabled: nothing was emitted", code=0)

        with out.status("Syncing schema..."):
            result = client.sync_schema(table)

    out.run_result(f"Schema of {table}", result)
    exit_if_failed(result)


@sync_app.command("properties")
def sync_properties(
    ctx: typer.Context,
    table: str = typer.Argument(..., help="Table in the form catalog.schema.table"),
    dry_run: bool = DryRunOpt,
):
    """Patch the dataset properties derived from the table."""
    appctx: SyncAppContext = ctx.obj
    with _sync_errors(table):
        client = appctx.sync_client(table)
        if dry_run:
            with out.status("Reading table metadata..."):
                props = table_properties(appctx.config, appctx.reader.read_table(table))
            out.header(f"Properties for {table}")
            out.kv(props)
            warn_exit("Dry-run enabled: nothing was emitted", code=0)

        with out.status("Syncing properties..."):
            ok = client.sync_table_properties(table)

    if not ok:
        warn_exit(f"Properties of {table} were not synced (see log)", code=1)
    out.success(f"Properties of {table} synced")


@sync_app.command("table")
def sync_table(
    ctx: typer.Context,
    table: str = typer.Argument(..., help="Table in the form catalog.schema.table"),
):
    """Sync schema and properties of one table."""
    appctx: SyncAppContext = ctx.obj
    with _sync_errors(table):
        client = appctx.sync_client(table)
        with out.status(f"Syncing {table}..."):
            report = client.sync_table(table)

    out.run_result(f"Schema of {table}", report.schema)
    out.run_result(f"Properties of {table}", report.properties)
    exit_if_failed(report.schema, report.properties)


@sync_app.command("tables")
def sync_tables(
    ctx: typer.Context,
    schema: str = typer.Argument(..., help="Schema in the form catalog.schema"),
    name: str | None = typer.Option(
        None, "--name", help="Regex filter for table full names"
    ),
    confirm: bool = ConfirmOpt,
):
    """Pick tables of a schema interactively and sync each of them."""
    appctx: SyncAppContext = ctx.obj

    try:
        catalog, schema_name = parse_schema_full_name(schema)
    except ValueError as exc:
        exit_from_exc(exc, message=str(exc), code=2)
    try:
        name_rx = re.compile(name) if name else None
    except re.error as exc:
        exit_from_exc(exc, message=f"Invalid regex for --name: {exc}", code=2)

    try:
        with out.status("Loading tables..."):
            names = appctx.reader.list_table_names(catalog=catalog, schema=schema_name)
    except NotFound as exc:
        exit_from_exc(exc, message=f"Schema '{schema}' does not exist.", code=1)
    except PermissionDenied as exc:
        exit_from_exc(exc, message=f"No permission to access schema '{schema}'.", code=1)

    if name_rx:
        names = [n for n in names if name_rx.search(n)]
    if not names:
        warn_exit("No tables found", code=0)

    selected = select_tables(names)
    if not selected:
        warn_exit("No tables selected", code=0)

    out.tables_table(selected, title="Selected tables")
    if confirm and not out.confirm(f"Sync {len(selected)} table(s) to DataHub?"):
        ok_exit("Cancelled")

    failed: list[str] = []
    for table in selected:
        try:
            client = appctx.sync_client(table)
            with out.status(f"Syncing {table}..."):
                report = client.sync_table(table)
        except (BuildError, SyncFailure, NotFound, PermissionDenied) as exc:
            out.error(f"{table}: {exc}")
            failed.append(table)
            continue
        out.run_result(f"Schema of {table}", report.schema)
        out.run_result(f"Properties of {table}", report.properties)
        if not report.ok:
            failed.append(table)

    if failed:
        die(f"{len(failed)} of {len(selected)} table(s) not fully synced", code=1)
    out.success(f"Synced {len(selected)} table(s)")
