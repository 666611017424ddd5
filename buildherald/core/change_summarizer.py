"""Summarise the source-control changes behind a build.

One field per material revision, one line per modification::

    <url|abc123>: Fix flaky login test - alice

Revisions are cut to ``revision_length`` characters unless the
modification comes from a *verbatim* author (e.g. an S3 poller whose
"revision" is a file name), in which case the revision is kept whole,
the comment is a JSON document whose ``verbatim_comment_key`` holds the
text, and the author suffix is dropped.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable

from buildherald.models.message import MessageField
from buildherald.models.pipeline import MaterialRevision, Modification
from buildherald.models.rules import ChangePolicy

logger = logging.getLogger(__name__)

CHANGES_PLACEHOLDER = MessageField(
    name="Changes", value="(Couldn't fetch changes; see log.)", short=True
)


class ChangeSummaryError(ValueError):
    """A modification payload could not be turned into a change line."""


def _is_verbatim(modification: Modification, policy: ChangePolicy) -> bool:
    return modification.user_name is not None and modification.user_name in policy.verbatim_authors


def _verbatim_comment(modification: Modification, policy: ChangePolicy) -> str | None:
    if modification.comment is None:
        return None
    try:
        payload = json.loads(modification.comment)
        return str(payload[policy.verbatim_comment_key])
    except (ValueError, TypeError, KeyError) as exc:
        raise ChangeSummaryError(
            f"Malformed comment payload for revision {modification.revision!r}: {exc}"
        ) from exc


def format_modification(
    revision: MaterialRevision,
    modification: Modification,
    policy: ChangePolicy,
) -> str:
    """Render one modification as a single change line (no newline)."""
    verbatim = _is_verbatim(modification, policy)
    parts: list[str] = []

    if modification.revision is not None:
        shown = (
            modification.revision
            if verbatim
            else modification.revision[: policy.revision_length]
        )
        url = revision.modification_url(modification)
        parts.append(f"<{url}|{shown}>: " if url else f"{shown}: ")

    comment = (
        _verbatim_comment(modification, policy)
        if verbatim
        else modification.summarize_comment()
    )
    if comment is not None:
        parts.append(comment)

    if modification.user_name is not None and not verbatim:
        parts.append(f" - {modification.user_name}")
    return "".join(parts)


def summarize_changes(
    revisions: Iterable[MaterialRevision],
    policy: ChangePolicy,
) -> list[MessageField]:
    """Return one ``Changes for <material>`` field per surfaced material.

    Materials whose display name (name, else description) is in
    ``policy.excluded_materials`` are skipped.  When the policy is
    disabled no fields are produced.

    Raises
    ------
    ChangeSummaryError
        If a verbatim modification carries an unparseable comment.
    """
    if not policy.enabled:
        return []

    fields: list[MessageField] = []
    for revision in revisions:
        material = revision.material
        if material.display_name in policy.excluded_materials:
            logger.debug("Skipping changes for excluded material %s", material.display_name)
            continue
        lines = [format_modification(revision, mod, policy) for mod in revision.modifications]
        fields.append(
            MessageField(
                name=f"Changes for {material.display_name}",
                value="\n".join(lines),
                short=False,
            )
        )
    return fields
