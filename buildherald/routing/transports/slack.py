"""Slack incoming-webhook transport.

Renders a ``ComposedMessage`` as a single legacy attachment and POSTs it
to the target webhook.  Channel and user targets become the ``channel``
override (``#name`` / ``@name``) that incoming webhooks accept.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from buildherald.models.message import ComposedMessage
from buildherald.routing.transports import DeliveryError, DeliveryTarget

logger = logging.getLogger(__name__)

HTTP_TIMEOUT_SECONDS = 15

JSONDict = dict[str, Any]


def build_payload(
    message: ComposedMessage,
    target: DeliveryTarget,
    display_name: str = "",
    icon_url: str = "",
) -> JSONDict:
    """Return the incoming-webhook JSON body for *message*."""
    attachment: JSONDict = {
        "fallback": message.fallback,
        "title": message.title,
        "text": message.text,
        "fields": [
            {"title": field.name, "value": field.value, "short": field.short}
            for field in message.fields
        ],
        "mrkdwn_in": ["text", "fields"],
    }
    if message.color:
        attachment["color"] = message.color
    if message.footer:
        attachment["footer"] = message.footer
    if message.footer_icon:
        attachment["footer_icon"] = message.footer_icon

    payload: JSONDict = {"attachments": [attachment]}
    if display_name:
        payload["username"] = display_name
    if icon_url:
        payload["icon_url"] = icon_url
    if target.channel:
        payload["channel"] = f"#{target.channel}"
    elif target.user:
        payload["channel"] = f"@{target.user}"
    return payload


class SlackWebhookTransport:
    """Posts composed messages to Slack incoming webhooks.

    Parameters
    ----------
    display_name, icon_url:
        Bot identity shown with each message.
    timeout:
        Request timeout in seconds.
    proxy:
        Optional HTTP proxy URL.
    transport:
        Optional ``httpx`` transport, used by tests.
    """

    def __init__(
        self,
        display_name: str = "",
        icon_url: str = "",
        timeout: float = HTTP_TIMEOUT_SECONDS,
        proxy: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._display_name = display_name
        self._icon_url = icon_url
        self._timeout = timeout
        self._proxy = proxy or None
        self._transport = transport

    @property
    def transport_name(self) -> str:
        return "slack"

    def _client(self) -> httpx.Client:
        if self._transport is not None:
            return httpx.Client(timeout=self._timeout, transport=self._transport)
        return httpx.Client(timeout=self._timeout, proxy=self._proxy)

    def deliver(self, message: ComposedMessage, target: DeliveryTarget) -> None:
        if not target.webhook_url:
            raise DeliveryError("No webhook URL configured for this notification")

        payload = build_payload(message, target, self._display_name, self._icon_url)
        try:
            with self._client() as client:
                resp = client.post(target.webhook_url, json=payload)
        except httpx.HTTPError as exc:
            raise DeliveryError(f"Slack webhook request failed: {exc}") from exc

        if resp.status_code >= 300:
            raise DeliveryError(f"Slack error: {resp.status_code} {resp.text}")
        logger.debug("Slack accepted %r (%d)", message.title, resp.status_code)
