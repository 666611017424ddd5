"""NotificationDispatcher — event in, delivered notification out.

Each event is handled synchronously end to end:

1. Resolve the rule (first match; skipped when the matching rules exclude
   the status; the default rule when no rule matches and
   ``notify_unmatched`` is on).
2. Resolve the delivery target from the rule's channel/webhook overrides.
3. Compose the message.
4. Hand it to the transport.

The dispatcher keeps no per-event state, so concurrent dispatches need
no coordination.
"""

from __future__ import annotations

import logging

from buildherald.core.composer import MessageComposer
from buildherald.core.rule_matcher import RuleNotFoundError, StatusFilteredError, match_event
from buildherald.core.stage_resolver import StageNotFoundError
from buildherald.core.status_table import profile_for
from buildherald.models.events import PipelineEvent, PipelineStatus
from buildherald.models.message import ComposedMessage
from buildherald.models.rules import PipelineRule, RuleSet
from buildherald.routing.transports import DeliveryTarget, Transport, resolve_target

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Routes pipeline events to the transport via the composer.

    Usage
    -----
    >>> dispatcher = NotificationDispatcher(rule_set, composer, transport)
    >>> dispatcher.dispatch(event)
    """

    def __init__(
        self,
        rule_set: RuleSet,
        composer: MessageComposer,
        transport: Transport,
    ) -> None:
        self._rules = rule_set
        self._composer = composer
        self._transport = transport
        self._base_target = resolve_target(
            DeliveryTarget(webhook_url=rule_set.notifier.webhook_url),
            rule_set.notifier.channel,
        )

    @property
    def base_target(self) -> DeliveryTarget:
        return self._base_target

    # ------------------------------------------------------------------
    # Rule resolution
    # ------------------------------------------------------------------

    def rule_for(self, event: PipelineEvent) -> PipelineRule | None:
        """Return the rule for *event*, or ``None`` when it should be skipped.

        Events whose pipeline has rules that all exclude the event's status
        are skipped. Events no rule mentions at all go to the default rule
        when ``notify_unmatched`` is on.
        """
        try:
            return match_event(event, self._rules.pipelines)
        except StatusFilteredError as exc:
            logger.info("%s; skipping notification", exc)
            return None
        except RuleNotFoundError as exc:
            if not self._rules.notifier.notify_unmatched:
                logger.info("%s; skipping notification", exc)
                return None
            logger.debug("%s; using the default rule", exc)
            return self._rules.default_rule()

    def target_for(self, rule: PipelineRule) -> DeliveryTarget:
        return resolve_target(self._base_target, rule.channel, rule.webhook_url)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(self, event: PipelineEvent) -> ComposedMessage | None:
        """Notify about *event* through the entry point for its status.

        Returns the delivered message, or ``None`` if no rule applied.
        """
        rule = self.rule_for(event)
        if rule is None:
            return None
        handler = getattr(self, profile_for(event.status).handler)
        return handler(rule, event)

    def on_building(self, rule: PipelineRule, event: PipelineEvent) -> ComposedMessage:
        return self._notify(rule, event, PipelineStatus.BUILDING)

    def on_passed(self, rule: PipelineRule, event: PipelineEvent) -> ComposedMessage:
        return self._notify(rule, event, PipelineStatus.PASSED)

    def on_failed(self, rule: PipelineRule, event: PipelineEvent) -> ComposedMessage:
        return self._notify(rule, event, PipelineStatus.FAILED)

    def on_broken(self, rule: PipelineRule, event: PipelineEvent) -> ComposedMessage:
        return self._notify(rule, event, PipelineStatus.BROKEN)

    def on_fixed(self, rule: PipelineRule, event: PipelineEvent) -> ComposedMessage:
        return self._notify(rule, event, PipelineStatus.FIXED)

    def on_cancelled(self, rule: PipelineRule, event: PipelineEvent) -> ComposedMessage:
        return self._notify(rule, event, PipelineStatus.CANCELLED)

    def _notify(
        self,
        rule: PipelineRule,
        event: PipelineEvent,
        status: PipelineStatus,
    ) -> ComposedMessage:
        target = self.target_for(rule)
        logger.info(
            "Updating target to channel=%s user=%s for %s",
            target.channel,
            target.user,
            event.pipeline_path,
        )
        try:
            message = self._composer.compose(rule, event, status)
        except StageNotFoundError:
            logger.error(
                "Dropping %s notification for %s: stage missing from pipeline details",
                status.value,
                event.pipeline_path,
                exc_info=True,
            )
            raise

        if message.degraded_phases:
            logger.warning(
                "Sending degraded notification for %s (failed: %s)",
                event.pipeline_path,
                ", ".join(message.degraded_phases),
            )
        self._transport.deliver(message, target)
        logger.info(
            "Pushed %r notification for %s via %s",
            message.title,
            event.pipeline_path,
            self._transport.transport_name,
        )
        return message
