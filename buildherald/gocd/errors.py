"""Errors raised by Go server fetchers."""

from __future__ import annotations


class GoServerError(RuntimeError):
    """A request to the Go server failed (transport or HTTP status)."""


class DetailsNotFoundError(GoServerError):
    """The server has no record of the requested pipeline run."""


class MalformedPayloadError(GoServerError):
    """The server answered with something that isn't the expected JSON."""
