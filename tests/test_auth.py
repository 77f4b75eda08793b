import pytest

from catalogsync.core.auth import _format_auth_error, bearer_headers, sanitize_host


@pytest.mark.parametrize(
    "host,expected",
    [
        ("https://adb-1.azuredatabricks.net/?o=123", "https://adb-1.azuredatabricks.net"),
        ("https://adb-1.azuredatabricks.net//", "https://adb-1.azuredatabricks.net"),
        (None, None),
        ("", ""),
    ],
)
def test_sanitize_host(host, expected):
    assert sanitize_host(host) == expected


def test_format_auth_error_suggests_login_with_profile():
    message = "refresh token is invalid, run: databricks auth login --host https://x"

    rendered = _format_auth_error(message, "dev")

    assert "$ databricks auth login --profile dev" in rendered


def test_format_auth_error_passes_other_messages_through():
    assert _format_auth_error("boom", None) == "Databricks authentication failed: boom"


@pytest.mark.parametrize("token", [None, "", "  "])
def test_bearer_headers_empty_without_token(token):
    assert bearer_headers(token) == {}


def test_bearer_headers_strips_token():
    assert bearer_headers(" abc \n") == {"Authorization": "Bearer abc"}
