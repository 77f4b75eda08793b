"""CLI application for catalog metadata sync."""

import typer

from catalogsync.cli.commands.sync import sync_app

app = typer.Typer(
    help="catalogsync - publish table metadata to DataHub",
    no_args_is_help=True,
)

app.add_typer(sync_app, name="sync")


if __name__ == "__main__":
    app()
