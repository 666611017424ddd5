"""Shared test fixtures for buildherald."""

from __future__ import annotations

import random
from collections.abc import Callable
from typing import Any

import pytest

from buildherald.models.events import PipelineEvent, PipelineStatus
from buildherald.models.pipeline import (
    Job,
    Material,
    MaterialRevision,
    Modification,
    PipelineDetails,
    Stage,
)
from buildherald.models.rules import ChangePolicy, NotifierSettings, RuleSet
from buildherald.routing.transports.buffer import BufferTransport
from tests.stubs import SERVER_HOST

# ---------------------------------------------------------------------------
# Model factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_event() -> Callable[..., PipelineEvent]:
    """Factory fixture: build a PipelineEvent with sensible defaults."""

    def _factory(
        pipeline_name: str = "deploy",
        stage_name: str = "build",
        status: PipelineStatus = PipelineStatus.PASSED,
        **overrides: Any,
    ) -> PipelineEvent:
        defaults: dict[str, Any] = {
            "pipeline_name": pipeline_name,
            "pipeline_counter": 42,
            "stage_name": stage_name,
            "stage_counter": 1,
            "status": status,
        }
        defaults.update(overrides)
        return PipelineEvent(**defaults)

    return _factory


@pytest.fixture
def make_details() -> Callable[..., PipelineDetails]:
    """Factory fixture: a two-stage pipeline run (checkout, build)."""

    def _factory(name: str = "deploy", **overrides: Any) -> PipelineDetails:
        defaults: dict[str, Any] = {
            "name": name,
            "counter": 42,
            "stages": [
                Stage(name="checkout", approved_by="alice", jobs=[Job(name="fetch")]),
                Stage(
                    name="build",
                    approved_by="bob",
                    jobs=[Job(name="compile"), Job(name="unit-tests")],
                ),
            ],
        }
        defaults.update(overrides)
        return PipelineDetails(**defaults)

    return _factory


@pytest.fixture
def app_revision() -> MaterialRevision:
    """A GitHub-hosted git material with two modifications."""
    return MaterialRevision(
        material=Material(name="app", type="git", url="https://github.com/acme/app.git"),
        modifications=[
            Modification(
                revision="0123456789abcdef",
                user_name="alice",
                comment="Fix login redirect\n\nLonger explanation.",
            ),
            Modification(revision="fedcba9876543210", user_name="bob", comment="Bump deps"),
        ],
    )


@pytest.fixture
def excluded_revision() -> MaterialRevision:
    """A material whose name is on the default test denylist."""
    return MaterialRevision(
        material=Material(name="ansible", type="git", description="ops/ansible"),
        modifications=[Modification(revision="aaaaaaaaaa", user_name="carol", comment="Tune")],
    )


@pytest.fixture
def rule_set() -> RuleSet:
    """Rule set with links and changes on and ``ansible`` denylisted."""
    return RuleSet(
        notifier=NotifierSettings(
            server_host=SERVER_HOST,
            webhook_url="https://hooks.example.com/default",
            channel="#ci",
        ),
        changes=ChangePolicy(
            excluded_materials=frozenset({"ansible"}),
            verbatim_authors=frozenset({"S3"}),
        ),
    )


@pytest.fixture
def seeded_random() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def buffer_transport() -> BufferTransport:
    return BufferTransport()
