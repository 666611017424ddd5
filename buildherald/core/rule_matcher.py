"""Rule matching — find the one rule that applies to a pipeline event.

Rules are tried in declared order and the first whose patterns and status
set accept the event wins.  Matching has no side effects.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from buildherald.models.events import PipelineEvent, PipelineStatus
from buildherald.models.rules import PipelineRule


def _where(pipeline_name: str, stage_name: str | None) -> str:
    return pipeline_name if stage_name is None else f"{pipeline_name}/{stage_name}"


class RuleNotFoundError(LookupError):
    """Raised when no configured rule accepts an event.

    Not fatal: callers fall back to ``RuleSet.default_rule()``.
    """

    def __init__(
        self,
        pipeline_name: str,
        stage_name: str | None = None,
        message: str | None = None,
    ) -> None:
        self.pipeline_name = pipeline_name
        self.stage_name = stage_name
        super().__init__(message or f"No rule matches {_where(pipeline_name, stage_name)}")


class StatusFilteredError(RuleNotFoundError):
    """Raised when rules match the event's pipeline but none takes its status.

    The event is deliberately silenced: callers skip it rather than fall
    back to the default rule.
    """

    def __init__(
        self,
        pipeline_name: str,
        stage_name: str | None,
        status: PipelineStatus,
    ) -> None:
        self.status = status
        super().__init__(
            pipeline_name,
            stage_name,
            f"Rules for {_where(pipeline_name, stage_name)} exclude status {status.value}",
        )



def _full_match(pattern: str, value: str | None) -> bool:
    if value is None:
        # Events without a group (or stage) only miss when the rule narrows it.
        return pattern == ".*"
    return re.fullmatch(pattern, value) is not None


def rule_accepts(
    rule: PipelineRule,
    pipeline_name: str,
    stage_name: str | None = None,
    group: str | None = None,
    status: PipelineStatus | None = None,
) -> bool:
    """Return whether *rule* applies to the given identity."""
    if not _full_match(rule.name, pipeline_name):
        return False
    if stage_name is not None and not _full_match(rule.stage, stage_name):
        return False
    if not _full_match(rule.group, group):
        return False
    return status is None or status in rule.statuses


def match_rule(
    pipeline_name: str,
    rules: Iterable[PipelineRule],
    stage_name: str | None = None,
    group: str | None = None,
    status: PipelineStatus | None = None,
) -> PipelineRule:
    """Return the first rule in *rules* that accepts the identity.

    Raises
    ------
    StatusFilteredError
        If some rule matches the pipeline, stage and group but every such
        rule excludes *status*.
    RuleNotFoundError
        If no rule matches the pipeline, stage and group at all.
    """
    identity_matched = False
    for rule in rules:
        if not rule_accepts(rule, pipeline_name, stage_name, group):
            continue
        if status is None or status in rule.statuses:
            return rule
        identity_matched = True
    if identity_matched and status is not None:
        raise StatusFilteredError(pipeline_name, stage_name, status)
    raise RuleNotFoundError(pipeline_name, stage_name)



def match_event(event: PipelineEvent, rules: Iterable[PipelineRule]) -> PipelineRule:
    return match_rule(
        event.pipeline_name,
        rules,
        stage_name=event.stage_name,
        group=event.pipeline_group,
        status=event.status,
    )
