"""Pipeline details as reported by the Go server API.

These models mirror the pipeline-instance JSON closely enough to be built
with ``model_validate`` straight from the API response.  Unknown keys are
ignored so that newer server versions do not break parsing.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field

_GITHUB_REPO = re.compile(
    r"^(?:https?://|git@)github\.com[/:](?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?/?$"
)


class Job(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    result: str | None = None


class Stage(BaseModel):
    """A single stage run inside a pipeline instance."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    counter: int = 1
    approved_by: str | None = None
    result: str | None = None
    jobs: list[Job] = []

    @property
    def job_names(self) -> list[str]:
        return [job.name for job in self.jobs]


class Material(BaseModel):
    """A source-control (or upstream pipeline) input to a pipeline."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str | None = None
    description: str = ""
    type: str = ""
    url: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.description

    @property
    def is_pipeline(self) -> bool:
        return self.type.lower() in ("pipeline", "dependency")


class Modification(BaseModel):
    """One discrete change inside a material's history."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    revision: str | None = None
    user_name: str | None = None
    comment: str | None = None
    url: str | None = None

    def summarize_comment(self) -> str | None:
        """Return the first non-blank line of the comment."""
        if self.comment is None:
            return None
        for line in self.comment.splitlines():
            if line.strip():
                return line.strip()
        return ""


class MaterialRevision(BaseModel):
    """A material plus the modifications that made it into a build."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    material: Material
    modifications: list[Modification] = []
    changed: bool = True

    def modification_url(self, modification: Modification) -> str | None:
        """Direct link to a modification, if the material exposes one."""
        if modification.url:
            return modification.url
        if self.material.type.lower() != "git" or not modification.revision:
            return None
        match = _GITHUB_REPO.match(self.material.url or self.material.description)
        if match is None:
            return None
        return (
            f"https://github.com/{match['owner']}/{match['repo']}"
            f"/commit/{modification.revision}"
        )


class BuildCause(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    approver: str | None = None
    trigger_message: str | None = None
    material_revisions: list[MaterialRevision] = []


class PipelineDetails(BaseModel):
    """Full metadata for one pipeline run, fetched on demand."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    counter: int
    label: str | None = None
    stages: list[Stage] = []
    build_cause: BuildCause = Field(default_factory=BuildCause)

    @property
    def material_revisions(self) -> list[MaterialRevision]:
        return list(self.build_cause.material_revisions)
