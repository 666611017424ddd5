"""Console-log links for the jobs of a stage."""

from __future__ import annotations

from urllib.parse import quote

import httpx

from buildherald.models.events import PipelineStatus
from buildherald.models.pipeline import PipelineDetails, Stage


class LinkConstructionError(ValueError):
    """The server host or a path segment does not make a valid URL."""


def _segment(value: object) -> str:
    return quote(str(value), safe="")


def console_url(
    host: str,
    pipeline: PipelineDetails,
    stage: Stage,
    job: str,
    status: PipelineStatus,
) -> str:
    """Return the console URL for one job.

    While building, this is the live console tab; for every other status
    it is the archived ``console.log`` artifact.
    """
    base = host.rstrip("/")
    path = "/".join(
        _segment(part)
        for part in (pipeline.name, pipeline.counter, stage.name, stage.counter, job)
    )
    if status == PipelineStatus.BUILDING:
        raw = f"{base}/go/tab/build/detail/{path}#tab-console"
    else:
        raw = f"{base}/go/files/{path}/cruise-output/console.log"

    try:
        url = httpx.URL(raw)
    except (httpx.InvalidURL, TypeError) as exc:
        raise LinkConstructionError(f"Invalid console URL {raw!r}: {exc}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise LinkConstructionError(f"Invalid server host {host!r}")
    return str(url)


def build_console_links(
    host: str,
    pipeline: PipelineDetails,
    stage: Stage,
    status: PipelineStatus,
) -> list[str]:
    """Return one ``<url|View job logs>`` link per job, in declaration order."""
    return [
        f"<{console_url(host, pipeline, stage, job, status)}|View {job} logs>"
        for job in stage.job_names
    ]
