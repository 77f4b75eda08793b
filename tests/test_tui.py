from catalogsync.cli.common.tui_style import (
    PALETTE,
    QUESTIONARY_STYLE_SELECT,
    rich_styles,
)
from catalogsync.cli.tui import _MAX_TABLE_NAME_WIDTH, _table_choice_title, _truncate


def test_table_choice_title_shows_table_before_catalog_schema():
    assert _table_choice_title("main.sales.orders") == "orders  (main.sales)"


def test_table_choice_title_without_namespace():
    assert _table_choice_title("orders") == "orders"


def test_table_choice_title_truncates_long_names():
    long_name = "main.sales." + "x" * (_MAX_TABLE_NAME_WIDTH + 10)
    rendered = _table_choice_title(long_name)

    assert len(rendered) == _MAX_TABLE_NAME_WIDTH
    assert rendered.endswith("...")
    assert _truncate("abc", 10) == "abc"


def test_rich_styles_cover_every_palette_role():
    assert rich_styles() == {role: rich for role, (rich, _) in PALETTE.items()}
    assert {"ok", "warn", "err"} <= set(rich_styles())


def test_select_style_uses_palette_for_selected_tables():
    rules = dict(QUESTIONARY_STYLE_SELECT.style_rules)

    assert rules["checkbox-selected"] == PALETTE["ok"][1]
    assert rules["question"] == PALETTE["title"][1]
