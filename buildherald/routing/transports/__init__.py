"""Transport protocol and delivery targets.

A transport takes a ``ComposedMessage`` plus a ``DeliveryTarget`` and
delivers it.  Retries, backoff and timeouts are the transport's business;
the dispatcher calls ``deliver`` once.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from buildherald.models.message import ComposedMessage

logger = logging.getLogger(__name__)


class DeliveryError(RuntimeError):
    """Raised when a transport fails to deliver a message."""


class DeliveryTarget(BaseModel):
    """Where one message goes: a webhook plus an optional channel or user.

    With neither ``channel`` nor ``user`` set the webhook's own default
    destination is used.
    """

    model_config = ConfigDict(frozen=True)

    webhook_url: str = ""
    channel: str | None = None
    user: str | None = None


def resolve_target(
    base: DeliveryTarget,
    channel_spec: str | None = None,
    webhook_override: str | None = None,
) -> DeliveryTarget:
    """Apply a rule's channel and webhook overrides to *base*.

    ``"#ops"`` targets channel ``ops``, ``"@alice"`` targets user
    ``alice``; anything else leaves the destination unchanged.  A
    non-empty *webhook_override* replaces the webhook URL.
    """
    update: dict[str, str | None] = {}
    if channel_spec and channel_spec.startswith("#"):
        update = {"channel": channel_spec[1:], "user": None}
    elif channel_spec and channel_spec.startswith("@"):
        update = {"channel": None, "user": channel_spec[1:]}
    if webhook_override:
        update["webhook_url"] = webhook_override
    if update:
        logger.debug("Resolved delivery target overrides: %s", sorted(update))
    return base.model_copy(update=update)


@runtime_checkable
class Transport(Protocol):
    """Anything that can deliver a composed message."""

    @property
    def transport_name(self) -> str:
        ...

    def deliver(self, message: ComposedMessage, target: DeliveryTarget) -> None:
        """Deliver *message* to *target*; raise ``DeliveryError`` on failure."""
        ...
