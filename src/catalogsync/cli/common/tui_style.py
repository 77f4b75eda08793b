"""Shared colour palette for rich output and questionary prompts.

Rich renders tables and messages, questionary (prompt_toolkit) renders the
table picker and confirmations. Both are derived from `PALETTE` so a synced
table, a selected table and a SUCCEEDED outcome share one colour.
"""

from __future__ import annotations

from prompt_toolkit.styles import Style

# role -> (rich style, prompt_toolkit style)
PALETTE: dict[str, tuple[str, str]] = {
    "ok": ("bold green", "bold ansibrightgreen"),
    "warn": ("yellow", "ansiyellow"),
    "err": ("bold red", "bold ansired"),
    "title": ("bold cyan", "bold ansibrightcyan"),
    "meta": ("dim", "ansibrightblack"),
}


def rich_styles() -> dict[str, str]:
    """Style names for `rich.theme.Theme`, keyed by palette role."""
    return {role: rich for role, (rich, _) in PALETTE.items()}


def _prompt_style(**roles: str) -> Style:
    """Map prompt_toolkit classes to palette roles."""
    return Style.from_dict({cls: PALETTE[role][1] for cls, role in roles.items()})


QUESTIONARY_STYLE_SELECT = _prompt_style(
    question="title",
    answer="ok",
    pointer="ok",
    highlighted="ok",
    selected="ok",
    checkbox="meta",
    instruction="meta",
    disabled="meta",
    error="err",
    **{"checkbox-selected": "ok"},
)

QUESTIONARY_STYLE_CONFIRM = _prompt_style(
    question="title",
    answer="title",
    pointer="title",
    instruction="meta",
    error="err",
)
