"""Rule configuration models — which pipelines notify where, and how.

A ``RuleSet`` is loaded once from the rules file and stays read-only for
the lifetime of the process.  It holds the global notifier defaults, the
ordered pipeline rules, the change-summary policy, the standard phrase
pools and the pipeline-variant table.
"""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from buildherald.models.events import PipelineStatus

ALL_STATUSES: frozenset[PipelineStatus] = frozenset(PipelineStatus)


class TriggeredByPolicy(str, Enum):
    """Whose approval the "Triggered by" field reports."""

    FIRST_STAGE = "first_stage"  # who originally triggered the run
    CURRENT_STAGE = "current_stage"  # who approved the stage being reported


class ConsoleLinkPolicy(str, Enum):
    """Statuses for which console-log links are never attached."""

    FAILURES_ONLY = "failures_only"
    SKIP_SUCCESS = "skip_success"
    SKIP_PASSED_AND_BUILDING = "skip_passed_and_building"

    @property
    def excluded(self) -> frozenset[PipelineStatus]:
        return _LINK_EXCLUSIONS[self]


_LINK_EXCLUSIONS: dict[ConsoleLinkPolicy, frozenset[PipelineStatus]] = {
    ConsoleLinkPolicy.FAILURES_ONLY: frozenset(
        {PipelineStatus.PASSED, PipelineStatus.FIXED, PipelineStatus.BUILDING}
    ),
    ConsoleLinkPolicy.SKIP_SUCCESS: frozenset(
        {PipelineStatus.PASSED, PipelineStatus.FIXED}
    ),
    ConsoleLinkPolicy.SKIP_PASSED_AND_BUILDING: frozenset(
        {PipelineStatus.PASSED, PipelineStatus.BUILDING}
    ),
}


DEFAULT_PHRASES: dict[PipelineStatus, list[str]] = {
    PipelineStatus.BUILDING: ["Build started.", "Here we go again."],
    PipelineStatus.PASSED: ["Build passed.", "All green. Thanks, everyone."],
    PipelineStatus.FAILED: ["Build failed.", "No miracle this time.", "Everything is lost."],
    PipelineStatus.BROKEN: ["The build is broken."],
    PipelineStatus.FIXED: ["Build fixed.", "Back to green."],
    PipelineStatus.CANCELLED: ["Build cancelled."],
}


def _check_pools(
    pools: dict[PipelineStatus, list[str]],
) -> dict[PipelineStatus, list[str]]:
    for status, phrases in pools.items():
        if not [p for p in phrases if p]:
            raise ValueError(f"phrase pool for {status.value!r} is empty")
    return pools


class PipelineRule(BaseModel):
    """Binds pipelines (by regex) to a channel, webhook and feature flags.

    ``name``, ``stage`` and ``group`` are full-match regular expressions.
    ``show_console_log_links`` / ``show_material_changes`` left unset
    inherit the global notifier flags.
    """

    model_config = ConfigDict(frozen=True)

    name: str = ".*"
    stage: str = ".*"
    group: str = ".*"
    statuses: frozenset[PipelineStatus] = ALL_STATUSES
    channel: str = ""
    webhook_url: str = ""
    show_console_log_links: bool | None = None
    show_material_changes: bool | None = None

    @field_validator("name", "stage", "group")
    @classmethod
    def _compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as exc:
            raise ValueError(f"invalid pattern {value!r}: {exc}") from exc
        return value


class PipelineVariant(BaseModel):
    """A named group of pipelines with their own phrases and footer.

    Pipelines are matched by exact name.  Statuses missing from
    ``phrases`` fall back to the standard pools.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    pipelines: list[str]
    phrases: dict[PipelineStatus, list[str]] = {}
    footer: str | None = None
    footer_icon: str | None = None
    footer_statuses: frozenset[PipelineStatus] = frozenset(
        {PipelineStatus.PASSED, PipelineStatus.FIXED}
    )

    @field_validator("phrases")
    @classmethod
    def _pools_not_empty(
        cls, value: dict[PipelineStatus, list[str]]
    ) -> dict[PipelineStatus, list[str]]:
        return _check_pools(value)

    def footer_for(self, status: PipelineStatus) -> tuple[str, str | None] | None:
        if self.footer and status in self.footer_statuses:
            return self.footer, self.footer_icon
        return None


class ChangePolicy(BaseModel):
    """How source-control changes are summarised into message fields."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    excluded_materials: frozenset[str] = frozenset()
    verbatim_authors: frozenset[str] = frozenset()
    verbatim_comment_key: str = "COMMENT"
    revision_length: int = Field(default=6, ge=1)


class NotifierSettings(BaseModel):
    """Global notifier defaults from the ``[notifier]`` section."""

    model_config = ConfigDict(frozen=True)

    server_host: str = "http://localhost:8153"
    webhook_url: str = ""
    channel: str = ""
    display_name: str = "gocd-slack-bot"
    icon_url: str = ""
    display_console_log_links: bool = True
    display_material_changes: bool = True
    triggered_by: TriggeredByPolicy = TriggeredByPolicy.FIRST_STAGE
    console_links: ConsoleLinkPolicy = ConsoleLinkPolicy.FAILURES_ONLY
    notify_unmatched: bool = True


class RuleSet(BaseModel):
    """Everything the rules file configures, validated and frozen."""

    model_config = ConfigDict(frozen=True)

    notifier: NotifierSettings = NotifierSettings()
    changes: ChangePolicy = ChangePolicy()
    phrases: dict[PipelineStatus, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_PHRASES.items()}
    )
    pipelines: list[PipelineRule] = []
    variants: list[PipelineVariant] = []

    @field_validator("phrases")
    @classmethod
    def _merge_default_phrases(
        cls, value: dict[PipelineStatus, list[str]]
    ) -> dict[PipelineStatus, list[str]]:
        merged = {status: list(pool) for status, pool in DEFAULT_PHRASES.items()}
        merged.update(_check_pools(value))
        return merged

    @field_validator("variants")
    @classmethod
    def _unique_variant_pipelines(
        cls, value: list[PipelineVariant]
    ) -> list[PipelineVariant]:
        seen: dict[str, str] = {}
        for variant in value:
            for pipeline in variant.pipelines:
                if pipeline in seen:
                    raise ValueError(
                        f"pipeline {pipeline!r} is in variants "
                        f"{seen[pipeline]!r} and {variant.name!r}"
                    )
                seen[pipeline] = variant.name
        return value

    def default_rule(self) -> PipelineRule:
        """The rule used when no configured rule matches an event."""
        return PipelineRule(
            channel=self.notifier.channel,
            webhook_url=self.notifier.webhook_url,
        )

    def show_console_log_links(self, rule: PipelineRule) -> bool:
        if rule.show_console_log_links is not None:
            return rule.show_console_log_links
        return self.notifier.display_console_log_links

    def show_material_changes(self, rule: PipelineRule) -> bool:
        if rule.show_material_changes is not None:
            return rule.show_material_changes and self.changes.enabled
        return self.notifier.display_material_changes and self.changes.enabled
