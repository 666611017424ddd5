"""Go server REST client — pipeline details and root material changes."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from buildherald.gocd.errors import DetailsNotFoundError, GoServerError, MalformedPayloadError
from buildherald.models.events import PipelineEvent
from buildherald.models.pipeline import MaterialRevision, PipelineDetails

logger = logging.getLogger(__name__)

HTTP_TIMEOUT_SECONDS = 15
PIPELINE_INSTANCE_ACCEPT = "application/vnd.go.cd.v1+json"


def parse_pipeline_revision(revision: str | None) -> tuple[str, int] | None:
    """Split a dependency revision (``name/counter/stage/counter``)."""
    if not revision:
        return None
    parts = revision.split("/")
    if len(parts) < 2:
        return None
    try:
        return parts[0], int(parts[1])
    except ValueError:
        return None


class GoServerClient:
    """Fetches pipeline data from a Go server over HTTP.

    Implements both ``DetailsFetcher`` and ``ChangesFetcher``.

    Parameters
    ----------
    host:
        Server base URL, e.g. ``https://go.example.com``.
    username, password:
        Basic-auth credentials (optional).
    token:
        Bearer token; wins over basic auth when both are set.
    timeout:
        Per-request timeout in seconds.
    transport:
        Optional ``httpx`` transport, used by tests (``httpx.MockTransport``).
    """

    def __init__(
        self,
        host: str,
        username: str = "",
        password: str = "",
        token: str = "",
        timeout: float = HTTP_TIMEOUT_SECONDS,
        proxy: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._host = host.rstrip("/")
        self._timeout = timeout
        self._proxy = proxy or None
        self._transport = transport
        self._headers = {"Accept": PIPELINE_INSTANCE_ACCEPT}
        self._auth: httpx.Auth | None = None
        if token:
            self._headers["Authorization"] = f"Bearer {token}"
        elif username:
            self._auth = httpx.BasicAuth(username, password)

    def _client(self) -> httpx.Client:
        kwargs: dict[str, Any] = {
            "timeout": self._timeout,
            "headers": self._headers,
            "auth": self._auth,
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        elif self._proxy:
            kwargs["proxy"] = self._proxy
        return httpx.Client(**kwargs)

    # ------------------------------------------------------------------
    # Raw API
    # ------------------------------------------------------------------

    def get_pipeline_instance(self, name: str, counter: int) -> PipelineDetails:
        url = f"{self._host}/go/api/pipelines/{name}/{counter}"
        try:
            with self._client() as client:
                resp = client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise GoServerError(f"GET {url} failed: {exc}") from exc

        if resp.status_code == 404:
            raise DetailsNotFoundError(f"No pipeline run {name}/{counter} on {self._host}")
        if resp.status_code >= 300:
            raise GoServerError(f"GET {url} returned {resp.status_code}: {resp.text[:200]}")

        try:
            return PipelineDetails.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            raise MalformedPayloadError(f"Unexpected payload from {url}: {exc}") from exc

    # ------------------------------------------------------------------
    # Fetcher protocols
    # ------------------------------------------------------------------

    def fetch_details(self, event: PipelineEvent) -> PipelineDetails:
        return self.get_pipeline_instance(event.pipeline_name, event.pipeline_counter)

    def fetch_changes(self, event: PipelineEvent) -> list[MaterialRevision]:
        """Return the root source-control changes behind the event's run.

        Dependency materials are followed upstream until real source
        materials are reached.  Each upstream run is visited once.
        """
        details = self.fetch_details(event)
        seen = {(details.name, details.counter)}
        return self._root_changes(details, seen)

    def _root_changes(
        self,
        details: PipelineDetails,
        seen: set[tuple[str, int]],
    ) -> list[MaterialRevision]:
        changes: list[MaterialRevision] = []
        for revision in details.material_revisions:
            if not revision.changed:
                continue
            if not revision.material.is_pipeline:
                changes.append(revision)
                continue
            for modification in revision.modifications:
                upstream = parse_pipeline_revision(modification.revision)
                if upstream is None or upstream in seen:
                    continue
                seen.add(upstream)
                logger.debug("Following upstream run %s/%d", *upstream)
                changes.extend(self._root_changes(self.get_pipeline_instance(*upstream), seen))
        return changes
