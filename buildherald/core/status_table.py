"""Status table — what each pipeline status means for a notification.

Every ``PipelineStatus`` maps to a color tag and a handler name.  The
table must be exhaustive; a missing status fails at import time rather
than being silently ignored at dispatch time.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from buildherald.models.events import PipelineStatus
from buildherald.models.rules import ConsoleLinkPolicy


class StatusProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: PipelineStatus
    color: str | None
    handler: str


STATUS_PROFILES: dict[PipelineStatus, StatusProfile] = {
    PipelineStatus.BUILDING: StatusProfile(
        status=PipelineStatus.BUILDING, color=None, handler="on_building"
    ),
    PipelineStatus.PASSED: StatusProfile(
        status=PipelineStatus.PASSED, color="good", handler="on_passed"
    ),
    PipelineStatus.FAILED: StatusProfile(
        status=PipelineStatus.FAILED, color="danger", handler="on_failed"
    ),
    PipelineStatus.BROKEN: StatusProfile(
        status=PipelineStatus.BROKEN, color="danger", handler="on_broken"
    ),
    PipelineStatus.FIXED: StatusProfile(
        status=PipelineStatus.FIXED, color="good", handler="on_fixed"
    ),
    PipelineStatus.CANCELLED: StatusProfile(
        status=PipelineStatus.CANCELLED, color="warning", handler="on_cancelled"
    ),
}

_unmapped = set(PipelineStatus) - set(STATUS_PROFILES)
if _unmapped:
    raise RuntimeError(
        f"Status table is missing {sorted(s.value for s in _unmapped)}"
    )


def profile_for(status: PipelineStatus) -> StatusProfile:
    return STATUS_PROFILES[status]


def color_for(status: PipelineStatus) -> str | None:
    return STATUS_PROFILES[status].color


def console_links_allowed(
    status: PipelineStatus,
    enabled: bool,
    policy: ConsoleLinkPolicy = ConsoleLinkPolicy.FAILURES_ONLY,
) -> bool:
    """Console-log links go out only when enabled and the status isn't excluded."""
    return enabled and status not in policy.excluded
