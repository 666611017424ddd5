"""Load the rules file (TOML) into a validated ``RuleSet``.

Example ``buildherald.toml``::

    [notifier]
    channel = "#ci"
    console_links = "failures_only"
    triggered_by = "first_stage"

    [changes]
    excluded_materials = ["ansible"]
    verbatim_authors = ["S3"]

    [[pipelines]]
    name = "deploy.*"
    statuses = ["failed", "broken", "fixed"]
    channel = "#ops"

    [[variants]]
    name = "testpit"
    pipelines = ["deployTestpit"]
    footer = "Re-attach busy devices to their containers."
    [variants.phrases]
    passed = ["Testpit deploy finished."]
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from buildherald.config import HeraldSettings
from buildherald.models.rules import RuleSet

logger = logging.getLogger(__name__)


class RuleConfigError(ValueError):
    """The rules file is missing, unreadable or invalid."""


def build_rule_set(
    raw: dict[str, Any],
    settings: HeraldSettings | None = None,
) -> RuleSet:
    """Validate a raw rules mapping, seeding ``[notifier]`` from *settings*."""
    data = dict(raw)
    if settings is not None:
        data["notifier"] = {**settings.notifier_defaults(), **data.get("notifier", {})}
    return RuleSet.model_validate(data)


def load_rule_set(
    path: Path,
    settings: HeraldSettings | None = None,
    missing_ok: bool = False,
) -> RuleSet:
    """Load and validate the rules file at *path*.

    With *missing_ok* a missing file yields a rule set built from the
    settings alone (every pipeline goes to the default channel).
    """
    path = Path(path)
    if not path.exists():
        if not missing_ok:
            raise RuleConfigError(f"Rules file not found: {path}")
        logger.info("Rules file %s not found; using defaults", path)
        return build_rule_set({}, settings)

    try:
        with path.open("rb") as handle:
            raw = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise RuleConfigError(f"Cannot read rules file {path}: {exc}") from exc

    try:
        rule_set = build_rule_set(raw, settings)
    except ValidationError as exc:
        raise RuleConfigError(f"Invalid rules file {path}:\n{exc}") from exc

    logger.info(
        "Loaded %d rule(s) and %d variant(s) from %s",
        len(rule_set.pipelines),
        len(rule_set.variants),
        path,
    )
    return rule_set
