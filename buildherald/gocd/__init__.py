"""Go server collaborators — fetch pipeline details and material changes.

The composer depends only on the two protocols below.  ``GoServerClient``
implements both over the Go server REST API; tests substitute stubs.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from buildherald.models.events import PipelineEvent
from buildherald.models.pipeline import MaterialRevision, PipelineDetails


@runtime_checkable
class DetailsFetcher(Protocol):
    def fetch_details(self, event: PipelineEvent) -> PipelineDetails:
        """Return the details of the event's pipeline run.

        Raises ``DetailsNotFoundError`` or ``GoServerError``.
        """
        ...


@runtime_checkable
class ChangesFetcher(Protocol):
    def fetch_changes(self, event: PipelineEvent) -> list[MaterialRevision]:
        """Return the material revisions that produced the event's build.

        Raises ``GoServerError`` (including ``MalformedPayloadError``).
        """
        ...
