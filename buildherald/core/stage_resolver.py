"""Locate the stage an event refers to inside the fetched pipeline details."""

from __future__ import annotations

from collections.abc import Iterable

from buildherald.models.pipeline import Stage


class StageNotFoundError(RuntimeError):
    """The pipeline details have no stage named like the event's stage.

    This means the event and the details disagree upstream.  It is not
    retried.
    """

    def __init__(self, pipeline_name: str, stage_name: str) -> None:
        self.pipeline_name = pipeline_name
        self.stage_name = stage_name
        super().__init__(
            f"The list of stages from the pipeline ({pipeline_name}) doesn't have "
            f"the active stage ({stage_name}) for which we got the notification."
        )


def resolve_stage(stages: Iterable[Stage], stage_name: str, pipeline_name: str = "") -> Stage:
    """Return the first stage called *stage_name*."""
    for stage in stages:
        if stage.name == stage_name:
            return stage
    raise StageNotFoundError(pipeline_name, stage_name)
