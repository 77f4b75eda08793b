"""Authentication helpers for both ends of a sync.

Table facts are read from Unity Catalog, so the CLI needs a Databricks
WorkspaceClient; proposals are posted to DataHub GMS with an optional
personal access token. Both endpoints share the same URL normalization
(query strings and trailing slashes break request URLs).
"""

import re

from databricks.sdk import WorkspaceClient
from databricks.sdk.core import Config

from catalogsync.core.errors import CatalogSyncError


class AuthError(CatalogSyncError):
    """Raised when Databricks authentication fails."""


def _format_auth_error(message: str, profile: str | None) -> str:
    if re.search(r"databricks auth login \S+", message):
        cmd = "databricks auth login"
        if profile:
            cmd = f"{cmd} --profile {profile}"
        return (
            "Databricks authentication failed. Your refresh token is invalid.\n"
            f"Re-authenticate with:\n  $ {cmd}"
        )
    return f"Databricks authentication failed: {message}"


def sanitize_host(host: str | None) -> str | None:
    """Drop the query string (e.g. '?o=123456789') and trailing slashes of a URL."""
    if not host:
        return host
    return host.split("?", 1)[0].rstrip("/")


def bearer_headers(token: str | None) -> dict[str, str]:
    """Authorization header for a DataHub access token (empty without token)."""
    if not token or not token.strip():
        return {}
    return {"Authorization": f"Bearer {token.strip()}"}


def get_client(profile: str | None = None) -> WorkspaceClient:
    """
    Create a Databricks WorkspaceClient for reading table metadata.

    The profile is resolved through Databricks unified authentication
    (~/.databrickscfg or environment variables).
    """
    try:
        cfg = Config(profile=profile) if profile else Config()
    except ValueError as exc:
        raise AuthError(_format_auth_error(str(exc), profile)) from exc
    cfg.host = sanitize_host(cfg.host)
    return WorkspaceClient(config=cfg)
