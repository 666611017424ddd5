"""The composed, transport-agnostic notification."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class MessageField(BaseModel):
    """A named block of text inside a notification."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: str
    short: bool = False


class ComposedMessage(BaseModel):
    """One outbound notification: title, color, fields and optional footer.

    Built per dispatch, handed to a transport and then discarded.
    ``degraded_phases`` names the composition phases (``details``,
    ``changes``, ``links``) that fell back to placeholders; it is
    diagnostic only and never rendered.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    color: str | None = None
    text: str = ""
    fields: list[MessageField] = []
    footer: str | None = None
    footer_icon: str | None = None
    degraded_phases: list[str] = []

    @property
    def fallback(self) -> str:
        return self.title

    def field(self, name: str) -> MessageField | None:
        """Return the first field called *name*, if any."""
        for field in self.fields:
            if field.name == name:
                return field
        return None
