from __future__ import annotations

import json
import threading
from concurrent.futures import Future
from typing import Any, Callable, Mapping

import requests

from catalogsync.core.auth import bearer_headers, sanitize_host
from catalogsync.core.config import SyncConfig
from catalogsync.core.errors import SubmissionError
from catalogsync.core.proposals import Proposal

_INGEST_PATH = "/aspects?action=ingestProposal"
_JSON = "application/json"
_JSON_PATCH = "application/json-patch+json"


def _escape_pointer(token: str) -> str:
    """Escape one JSON pointer reference token (RFC 6901)."""
    return token.replace("~", "~0").replace("/", "~1")


def patch_operations(payload: Mapping[str, Any]) -> list[dict[str, Any]]:
    """
    Translate a patch payload into JSON Patch `add` operations.

    Mapping values are patched key by key so sibling keys already stored in
    the catalog survive; scalar values are set directly.
    """
    ops: list[dict[str, Any]] = []
    for key, value in payload.items():
        base = f"/{_escape_pointer(key)}"
        if isinstance(value, Mapping):
            for sub_key, sub_value in value.items():
                ops.append(
                    {"op": "add", "path": f"{base}/{_escape_pointer(sub_key)}", "value": sub_value}
                )
        else:
            ops.append({"op": "add", "path": base, "value": value})
    return ops


def to_mcp(proposal: Proposal) -> dict[str, Any]:
    """Render a proposal as a DataHub MetadataChangeProposal (REST JSON form)."""
    if proposal.is_patch:
        value = json.dumps(patch_operations(proposal.payload))
        content_type = _JSON_PATCH
    else:
        value = json.dumps(dict(proposal.payload))
        content_type = _JSON
    return {
        "entityType": proposal.entity_kind.value,
        "entityUrn": proposal.entity_urn,
        "changeType": proposal.change_type,
        "aspectName": proposal.aspect_kind.value,
        "aspect": {"value": value, "contentType": content_type},
    }


class DataHubRestChannel:
    """
    One open connection to DataHub GMS.

    Every submission starts its own request thread immediately, so a
    proposal's wait always begins when its request is sent and never queues
    behind a slow sibling. Concurrency is bounded by the caller.
    """

    def __init__(
        self,
        session: requests.Session,
        server: str,
        *,
        request_timeout_s: float,
    ) -> None:
        self.session = session
        self.url = f"{server}{_INGEST_PATH}"
        self.request_timeout_s = request_timeout_s
        self._closed = False
        self._lock = threading.Lock()

    def _post(self, proposal: Proposal) -> dict[str, Any]:
        try:
            response = self.session.post(
                self.url,
                json={"proposal": to_mcp(proposal)},
                timeout=self.request_timeout_s,
            )
        except requests.RequestException as exc:
            raise SubmissionError(
                f"Request for {proposal.describe()} failed: {exc}"
            ) from exc

        if response.status_code >= 400:
            raise SubmissionError(
                f"DataHub rejected {proposal.describe()}: "
                f"HTTP {response.status_code} {response.text[:300]}"
            )
        try:
            return response.json()
        except ValueError:
            return {}

    def _resolve(self, handle: Future[dict[str, Any]], proposal: Proposal) -> None:
        if not handle.set_running_or_notify_cancel():
            return
        try:
            result = self._post(proposal)
        except BaseException as exc:  # noqa: BLE001
            handle.set_exception(exc)
        else:
            handle.set_result(result)

    def submit(self, proposal: Proposal) -> Future[dict[str, Any]]:
        """Send the proposal on a new request thread and return its response handle."""
        with self._lock:
            if self._closed:
                raise SubmissionError(
                    f"Channel is closed; cannot submit {proposal.describe()}"
                )
            handle: Future[dict[str, Any]] = Future()
            threading.Thread(
                target=self._resolve,
                args=(handle, proposal),
                name=f"catalogsync-datahub-{proposal.aspect_kind.value}",
                daemon=True,
            ).start()
        return handle

    def close(self) -> None:
        """Stop accepting submissions and release the session (idempotent)."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self.session.close()

    def __enter__(self) -> DataHubRestChannel:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class DataHubRestTransport:
    """Adapter around the DataHub GMS REST ingestion endpoint."""

    def __init__(
        self,
        server: str,
        token: str | None = None,
        *,
        request_timeout_s: float = 30.0,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        server = sanitize_host(server)
        if not server:
            raise ValueError("DataHub server URL is required.")
        if request_timeout_s <= 0:
            raise ValueError("request_timeout_s must be > 0")
        self.server = server
        self.token = token
        self.request_timeout_s = request_timeout_s
        self._session_factory = session_factory

    @classmethod
    def from_config(cls, config: SyncConfig) -> DataHubRestTransport:
        return cls(config.server, config.token, request_timeout_s=config.emit_timeout_s)

    def open(self) -> DataHubRestChannel:
        """Open a channel; the caller must close it."""
        session = self._session_factory()
        session.headers.update(
            {
                "Content-Type": _JSON,
                "X-RestLi-Protocol-Version": "2.0.0",
            }
        )
        session.headers.update(bearer_headers(self.token))
        return DataHubRestChannel(
            session, self.server, request_timeout_s=self.request_timeout_s
        )
