"""Tests for the Slack webhook and buffer transports."""

from __future__ import annotations

import json

import httpx
import pytest

from buildherald.models.message import ComposedMessage, MessageField
from buildherald.routing.transports import DeliveryError, DeliveryTarget, Transport
from buildherald.routing.transports.buffer import BufferTransport
from buildherald.routing.transports.slack import SlackWebhookTransport, build_payload

WEBHOOK = "https://hooks.example.com/services/T000/B000/XXXX"


@pytest.fixture
def message() -> ComposedMessage:
    return ComposedMessage(
        title="Deploy is done.",
        color="good",
        fields=[
            MessageField(name="Pipeline", value="deploy", short=True),
            MessageField(name="Changes for app", value="abc123: Fix - alice"),
        ],
    )


def _recording_transport(status_code: int = 200) -> tuple[httpx.MockTransport, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status_code, text="ok" if status_code < 300 else "invalid_payload")

    return httpx.MockTransport(handler), seen


class TestBuildPayload:
    def test_attachment_shape(self, message):
        payload = build_payload(message, DeliveryTarget(webhook_url=WEBHOOK))
        [attachment] = payload["attachments"]

        assert attachment["title"] == "Deploy is done."
        assert attachment["color"] == "good"
        assert attachment["fields"][0] == {"title": "Pipeline", "value": "deploy", "short": True}
        assert attachment["fields"][1]["short"] is False
        assert "channel" not in payload
        assert "username" not in payload

    def test_channel_and_user_targets(self, message):
        by_channel = build_payload(message, DeliveryTarget(webhook_url=WEBHOOK, channel="ops"))
        by_user = build_payload(message, DeliveryTarget(webhook_url=WEBHOOK, user="alice"))
        assert by_channel["channel"] == "#ops"
        assert by_user["channel"] == "@alice"

    def test_identity_and_footer(self, message):
        message = message.model_copy(update={"footer": "Re-attach devices.", "color": None})
        payload = build_payload(
            message,
            DeliveryTarget(webhook_url=WEBHOOK),
            display_name="gocd-slack-bot",
            icon_url="https://example.com/bot.png",
        )
        attachment = payload["attachments"][0]
        assert payload["username"] == "gocd-slack-bot"
        assert payload["icon_url"] == "https://example.com/bot.png"
        assert attachment["footer"] == "Re-attach devices."
        assert "color" not in attachment


class TestSlackWebhookTransport:
    def test_is_a_transport(self):
        assert isinstance(SlackWebhookTransport(), Transport)
        assert SlackWebhookTransport().transport_name == "slack"

    def test_posts_json(self, message):
        mock, seen = _recording_transport()
        transport = SlackWebhookTransport(display_name="bot", transport=mock)
        transport.deliver(message, DeliveryTarget(webhook_url=WEBHOOK, channel="ci"))

        [request] = seen
        assert request.method == "POST"
        assert str(request.url) == WEBHOOK
        body = json.loads(request.content)
        assert body["channel"] == "#ci"
        assert body["username"] == "bot"
        assert body["attachments"][0]["title"] == "Deploy is done."

    def test_error_status_raises(self, message):
        mock, _ = _recording_transport(status_code=500)
        transport = SlackWebhookTransport(transport=mock)
        with pytest.raises(DeliveryError, match="500"):
            transport.deliver(message, DeliveryTarget(webhook_url=WEBHOOK))

    def test_connection_error_raises(self, message):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        transport = SlackWebhookTransport(transport=httpx.MockTransport(handler))
        with pytest.raises(DeliveryError):
            transport.deliver(message, DeliveryTarget(webhook_url=WEBHOOK))

    def test_missing_webhook_raises_without_request(self, message):
        mock, seen = _recording_transport()
        with pytest.raises(DeliveryError, match="No webhook"):
            SlackWebhookTransport(transport=mock).deliver(message, DeliveryTarget())
        assert seen == []


class TestBufferTransport:
    def test_is_a_transport(self):
        assert isinstance(BufferTransport(), Transport)

    def test_flush_returns_and_clears(self, message, buffer_transport):
        target = DeliveryTarget(webhook_url=WEBHOOK)
        buffer_transport.deliver(message, target)
        buffer_transport.deliver(message, target)
        assert buffer_transport.pending_count == 2

        deliveries = buffer_transport.flush()
        assert deliveries == [(message, target), (message, target)]
        assert buffer_transport.pending_count == 0
        assert buffer_transport.flush() == []
