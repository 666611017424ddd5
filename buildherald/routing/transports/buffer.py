"""In-memory transport — keeps deliveries for dry runs and tests."""

from __future__ import annotations

from buildherald.models.message import ComposedMessage
from buildherald.routing.transports import DeliveryTarget


class BufferTransport:
    """Stores every delivery instead of sending it.

    Call ``flush()`` to retrieve and clear the pending deliveries.
    """

    def __init__(self) -> None:
        self._pending: list[tuple[ComposedMessage, DeliveryTarget]] = []

    @property
    def transport_name(self) -> str:
        return "buffer"

    def deliver(self, message: ComposedMessage, target: DeliveryTarget) -> None:
        self._pending.append((message, target))

    def flush(self) -> list[tuple[ComposedMessage, DeliveryTarget]]:
        """Return and clear all pending deliveries."""
        deliveries = list(self._pending)
        self._pending.clear()
        return deliveries

    @property
    def pending_count(self) -> int:
        return len(self._pending)
