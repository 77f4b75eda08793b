"""Output formatting utilities for the CLI."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import questionary
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.theme import Theme

from catalogsync.cli.common.tui_style import QUESTIONARY_STYLE_CONFIRM, rich_styles
from catalogsync.core.outcomes import SyncRunResult
from catalogsync.core.proposals import Outcome, OutcomeStatus, Proposal

_THEME = Theme(rich_styles())

console = Console(theme=_THEME)

_STATUS_STYLE = {
    OutcomeStatus.SUCCEEDED: "ok",
    OutcomeStatus.TIMED_OUT: "warn",
    OutcomeStatus.FAILED: "err",
}


def configure_logging(verbose: bool) -> None:
    """Route library logging through Rich on the shared console."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {msg}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {msg}")

    def header(self, title: str) -> None:
        """Print a header message."""
        console.print(f"[title]{title}[/]")

    def kv(self, items: Mapping[str, Any]) -> None:
        """Print key-value pairs."""
        for k, v in items.items():
            console.print(f"[meta]{k}[/]: {v}")

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """Ask the user for confirmation using a styled Questionary prompt."""
        console.print("[meta]Use y/n then Enter[/]")
        prompt = questionary.confirm(
            f"[catalogsync] {message}",
            default=default,
            style=QUESTIONARY_STYLE_CONFIRM,
            qmark="✦",
            auto_enter=False,
        )
        return bool(prompt.ask())

    def proposals_table(self, proposals: Iterable[Proposal], title: str = "Proposals") -> None:
        """Render the proposals of a batch in build order."""
        t = Table(title=title, show_lines=False)
        t.add_column("#", style="meta", no_wrap=True)
        t.add_column("Entity", style="ok")
        t.add_column("Aspect")
        t.add_column("Change", style="meta")

        for i, p in enumerate(proposals, start=1):
            t.add_row(str(i), p.entity_urn, p.aspect_kind.value, p.change_type)

        console.print(t)

    def outcomes_table(self, outcomes: Iterable[Outcome], title: str = "Outcomes") -> None:
        """Render per-proposal outcomes (completion order)."""
        t = Table(title=title, show_lines=False)
        t.add_column("Entity", style="ok")
        t.add_column("Aspect")
        t.add_column("Result")
        t.add_column("Error", style="err")

        for o in outcomes:
            style = _STATUS_STYLE[o.status]
            t.add_row(
                o.proposal.entity_urn,
                o.proposal.aspect_kind.value,
                f"[{style}]{o.status.value}[/{style}]",
                str(o.error or ""),
            )

        console.print(t)

    def run_result(self, label: str, result: SyncRunResult) -> None:
        """Print a one-line summary of a batch, plus its failures."""
        if result.ok:
            self.success(f"{label}: {result.succeeded_count} operation(s) synced")
            return
        self.warn(
            f"{label}: {result.succeeded_count}/{result.total} synced, "
            f"{result.failure_count} failed"
        )
        self.outcomes_table(result.failed_outcomes, title=f"{label} failures")

    def tables_table(self, tables: Iterable[str], title: str = "Tables") -> None:
        """Render a list of Unity Catalog table full names."""
        t = Table(title=title, show_lines=False)
        t.add_column("Full name", style="ok")

        for name in tables:
            t.add_row(name)

        console.print(t)


out = Out()
