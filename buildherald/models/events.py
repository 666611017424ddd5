"""Pipeline lifecycle events — the inbound side of the notifier.

A ``PipelineEvent`` is created once per stage-status notification from the
Go server and consumed once by the dispatcher.  Its ``status`` is already
classified; ``classify_status`` is the helper that does the classifying
when the payload only carries the raw stage state and result.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class PipelineStatus(str, Enum):
    """The six terminal classifications a stage notification can carry."""

    BUILDING = "building"
    PASSED = "passed"
    FAILED = "failed"
    BROKEN = "broken"
    FIXED = "fixed"
    CANCELLED = "cancelled"

    @classmethod
    def _missing_(cls, value: object) -> PipelineStatus | None:
        # Go server payloads and rules files use "Passed", "FAILED", ...
        if isinstance(value, str):
            for member in cls:
                if member.value == value.lower():
                    return member
        return None

    @property
    def label(self) -> str:
        return self.value.title()


def classify_status(
    state: str,
    result: str | None = None,
    previous_result: str | None = None,
) -> PipelineStatus:
    """Derive a ``PipelineStatus`` from a raw stage state/result pair.

    ``previous_result`` is the result of the same stage in the previous
    pipeline run.  A pass that follows a failure is ``FIXED`` and a
    failure that follows a pass is ``BROKEN``.
    """
    state_l = (state or "").lower()
    result_l = (result or state or "").lower()
    previous_l = (previous_result or "").lower()

    if state_l == "building" or result_l in ("building", "unknown"):
        return PipelineStatus.BUILDING
    if result_l == "cancelled" or state_l == "cancelled":
        return PipelineStatus.CANCELLED
    if result_l == "passed":
        return PipelineStatus.FIXED if previous_l == "failed" else PipelineStatus.PASSED
    if result_l == "failed":
        return PipelineStatus.BROKEN if previous_l == "passed" else PipelineStatus.FAILED
    raise ValueError(f"Unrecognised stage state/result: {state!r}/{result!r}")


class PipelineEvent(BaseModel):
    """One stage lifecycle notification for a pipeline run."""

    model_config = ConfigDict(frozen=True)

    pipeline_name: str
    pipeline_counter: int
    stage_name: str
    status: PipelineStatus
    stage_counter: int = 1
    pipeline_group: str | None = None
    approved_by: str | None = None
    metadata: dict[str, str] = {}

    @property
    def pipeline_path(self) -> str:
        """``name/counter/stage/stage_counter`` — the Go server locator."""
        return (
            f"{self.pipeline_name}/{self.pipeline_counter}/"
            f"{self.stage_name}/{self.stage_counter}"
        )

    def with_status(self, status: PipelineStatus) -> PipelineEvent:
        return self.model_copy(update={"status": status})

    @classmethod
    def from_notification(
        cls,
        payload: dict[str, Any],
        previous_result: str | None = None,
    ) -> PipelineEvent:
        """Build an event from a stage-status notification payload.

        Accepts the Go server notification shape (``{"pipeline": {...,
        "stage": {...}}}``).  An explicit top-level ``status`` wins over
        classification from the stage state/result.
        """
        if not isinstance(payload, dict):
            raise ValueError("Notification payload must be a JSON object")
        pipeline = payload.get("pipeline") or {}
        if not isinstance(pipeline, dict):
            raise ValueError("Notification 'pipeline' must be a JSON object")
        stage = pipeline.get("stage") or {}
        if not isinstance(stage, dict):
            raise ValueError("Notification 'pipeline.stage' must be a JSON object")
        if not pipeline.get("name") or not stage.get("name"):
            raise ValueError("Notification payload is missing pipeline or stage name")

        raw_status = payload.get("status")
        if raw_status:
            status = PipelineStatus(str(raw_status).lower())
        else:
            status = classify_status(
                stage.get("state", ""), stage.get("result"), previous_result
            )

        metadata = {
            key: str(stage[key])
            for key in ("create-time", "last-transition-time", "state", "result")
            if stage.get(key) is not None
        }
        return cls(
            pipeline_name=pipeline["name"],
            pipeline_counter=int(pipeline.get("counter", 0)),
            pipeline_group=pipeline.get("group"),
            stage_name=stage["name"],
            stage_counter=int(stage.get("counter", 1)),
            status=status,
            approved_by=stage.get("approved-by"),
            metadata=metadata,
        )
