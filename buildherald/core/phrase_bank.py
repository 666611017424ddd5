"""Phrase bank — status-appropriate titles with a little variety.

Each status maps to a pool of candidate phrases; one is picked uniformly
at random per notification.  Pipelines listed in a ``PipelineVariant``
draw from that variant's pools (falling back to the standard pools for
statuses the variant leaves out).  Variants are data: adding one never
touches dispatch code.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Protocol, TypeVar

from buildherald.models.events import PipelineStatus
from buildherald.models.rules import DEFAULT_PHRASES, PipelineVariant

T = TypeVar("T")

STANDARD_VARIANT = "standard"


class RandomSource(Protocol):
    """Anything with ``choice`` — the ``random`` module or a ``random.Random``."""

    def choice(self, seq: Sequence[T]) -> T:
        ...


class PhraseBank:
    """Selects a phrase for a (status, variant) pair.

    Parameters
    ----------
    standard:
        Phrase pools for pipelines that belong to no variant.
    variants:
        The pipeline-variant table.
    random_source:
        Defaults to the process-wide ``random`` module.  Tests pass a
        seeded ``random.Random``.
    """

    def __init__(
        self,
        standard: dict[PipelineStatus, list[str]] | None = None,
        variants: Sequence[PipelineVariant] = (),
        random_source: RandomSource | None = None,
    ) -> None:
        self._standard = dict(standard if standard is not None else DEFAULT_PHRASES)
        self._variants = {variant.name: variant for variant in variants}
        self._by_pipeline = {
            pipeline: variant for variant in variants for pipeline in variant.pipelines
        }
        self._random = random_source if random_source is not None else random

    def variant_for(self, pipeline_name: str) -> str:
        """Return the variant name for *pipeline_name* (exact match)."""
        variant = self._by_pipeline.get(pipeline_name)
        return variant.name if variant is not None else STANDARD_VARIANT

    def pool(self, status: PipelineStatus, variant: str = STANDARD_VARIANT) -> list[str]:
        entry = self._variants.get(variant)
        if entry is not None and entry.phrases.get(status):
            return list(entry.phrases[status])
        return list(self._standard.get(status, []))

    def phrase_for(self, status: PipelineStatus, variant: str = STANDARD_VARIANT) -> str:
        candidates = [phrase for phrase in self.pool(status, variant) if phrase]
        if not candidates:
            return ""
        if len(candidates) == 1:
            return candidates[0]
        return self._random.choice(candidates)

    def footer_for(
        self, status: PipelineStatus, variant: str = STANDARD_VARIANT
    ) -> tuple[str, str | None] | None:
        entry = self._variants.get(variant)
        if entry is None:
            return None
        return entry.footer_for(status)
