"""MessageComposer — turns one pipeline event into one ``ComposedMessage``.

Composition runs in phases, each recovering locally:

1. Title from the phrase bank (never fails).
2. Pipeline details: on failure the message carries a single placeholder
   field and the remaining phases are skipped.
3. Stage resolution: a missing stage raises ``StageNotFoundError``; the
   event and the details disagree and there is nothing sane to send.
4. Pipeline / Triggered-by fields.
5. Material changes: on failure a placeholder field replaces them.
6. Console-log links: on failure the field is left out.
7. Variant footer, unless the details phase failed.

Failed phases are recorded in ``ComposedMessage.degraded_phases``.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict

from buildherald.core.change_summarizer import (
    CHANGES_PLACEHOLDER,
    ChangeSummaryError,
    summarize_changes,
)
from buildherald.core.link_builder import LinkConstructionError, build_console_links
from buildherald.core.phrase_bank import PhraseBank
from buildherald.core.stage_resolver import resolve_stage
from buildherald.core.status_table import color_for, console_links_allowed
from buildherald.gocd import ChangesFetcher, DetailsFetcher
from buildherald.gocd.errors import DetailsNotFoundError, GoServerError
from buildherald.models.events import PipelineEvent, PipelineStatus
from buildherald.models.message import ComposedMessage, MessageField
from buildherald.models.pipeline import PipelineDetails, Stage
from buildherald.models.rules import PipelineRule, RuleSet, TriggeredByPolicy

logger = logging.getLogger(__name__)

DETAILS_PLACEHOLDER = MessageField(
    name="Details", value="(Couldn't fetch build details; see log.)", short=True
)


class PhaseResult(BaseModel):
    """Outcome of one composition phase."""

    model_config = ConfigDict(frozen=True)

    phase: str
    fields: list[MessageField] = []
    error: str | None = None

    @property
    def degraded(self) -> bool:
        return self.error is not None


class MessageComposer:
    """Builds notifications from events, rules and fetched pipeline data.

    Parameters
    ----------
    rule_set:
        Loaded rule configuration (flags, policies, server host).
    details_fetcher:
        Fetches ``PipelineDetails`` for an event.
    changes_fetcher:
        Fetches the material revisions behind an event's build.
    phrase_bank:
        Defaults to a bank built from the rule set's phrases and variants.
    """

    def __init__(
        self,
        rule_set: RuleSet,
        details_fetcher: DetailsFetcher,
        changes_fetcher: ChangesFetcher,
        phrase_bank: PhraseBank | None = None,
    ) -> None:
        self._rules = rule_set
        self._details = details_fetcher
        self._changes = changes_fetcher
        self._phrases = phrase_bank or PhraseBank(rule_set.phrases, rule_set.variants)

    @property
    def phrase_bank(self) -> PhraseBank:
        return self._phrases

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def compose(
        self,
        rule: PipelineRule,
        event: PipelineEvent,
        status: PipelineStatus | None = None,
    ) -> ComposedMessage:
        """Compose the notification for *event* under *rule*.

        *status* overrides ``event.status`` (used by the per-status
        entry points of the dispatcher).

        Raises
        ------
        StageNotFoundError
            If the fetched details do not contain the event's stage.
        """
        status = status or event.status
        variant = self._phrases.variant_for(event.pipeline_name)
        title = self._phrases.phrase_for(status, variant)

        phases = self._describe(rule, event, status)
        fields = [field for phase in phases for field in phase.fields]
        degraded = [phase.phase for phase in phases if phase.degraded]

        # The variant footer goes only on messages built from fetched details.
        footer = None if "details" in degraded else self._phrases.footer_for(status, variant)

        return ComposedMessage(
            title=title,
            color=color_for(status),
            fields=fields,
            footer=footer[0] if footer else None,
            footer_icon=footer[1] if footer else None,
            degraded_phases=degraded,
        )

    def _describe(
        self,
        rule: PipelineRule,
        event: PipelineEvent,
        status: PipelineStatus,
    ) -> list[PhaseResult]:
        details_result, details = self._fetch_details(event)
        if details is None:
            return [details_result]

        stage = resolve_stage(details.stages, event.stage_name, event.pipeline_name)
        phases = [self._build_fields(details, stage)]

        if self._rules.show_material_changes(rule):
            phases.append(self._change_fields(event))

        enabled = self._rules.show_console_log_links(rule)
        if console_links_allowed(status, enabled, self._rules.notifier.console_links):
            phases.append(self._link_fields(details, stage, status))
        return phases

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def _fetch_details(
        self, event: PipelineEvent
    ) -> tuple[PhaseResult, PipelineDetails | None]:
        try:
            details = self._details.fetch_details(event)
        except DetailsNotFoundError as exc:
            logger.warning("Couldn't fetch build details for %s: %s", event.pipeline_path, exc)
            return PhaseResult(phase="details", fields=[DETAILS_PLACEHOLDER], error=str(exc)), None
        except (GoServerError, OSError) as exc:
            logger.warning("Build details request failed for %s: %s", event.pipeline_path, exc)
            return PhaseResult(phase="details", fields=[DETAILS_PLACEHOLDER], error=str(exc)), None
        return PhaseResult(phase="details"), details

    def _build_fields(self, details: PipelineDetails, stage: Stage) -> PhaseResult:
        if self._rules.notifier.triggered_by == TriggeredByPolicy.FIRST_STAGE and details.stages:
            approver = details.stages[0].approved_by
        else:
            approver = stage.approved_by
        return PhaseResult(
            phase="build",
            fields=[
                MessageField(name="Pipeline", value=details.name, short=True),
                MessageField(name="Triggered by", value=approver or "unknown", short=True),
            ],
        )

    def _change_fields(self, event: PipelineEvent) -> PhaseResult:
        try:
            revisions = self._changes.fetch_changes(event)
            fields = summarize_changes(revisions, self._rules.changes)
        except (GoServerError, OSError, ChangeSummaryError) as exc:
            logger.warning("Couldn't fetch changes for %s: %s", event.pipeline_path, exc)
            return PhaseResult(phase="changes", fields=[CHANGES_PLACEHOLDER], error=str(exc))
        return PhaseResult(phase="changes", fields=fields)

    def _link_fields(
        self, details: PipelineDetails, stage: Stage, status: PipelineStatus
    ) -> PhaseResult:
        try:
            links = build_console_links(self._rules.notifier.server_host, details, stage, status)
        except LinkConstructionError as exc:
            logger.warning("Skipping console links for %s: %s", details.name, exc)
            return PhaseResult(phase="links", error=str(exc))
        if not links:
            return PhaseResult(phase="links")
        return PhaseResult(
            phase="links",
            fields=[MessageField(name="Console Logs", value="\n".join(links), short=True)],
        )
