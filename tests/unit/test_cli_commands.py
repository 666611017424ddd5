"""Unit tests for the CLI — command registration, rules table and dry-run notify."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from buildherald.cli.app import app
from buildherald.gocd.errors import DetailsNotFoundError
from tests.stubs import StubFetcher

runner = CliRunner()

RULES = """
[notifier]
server_host = "https://go.example.com"
webhook_url = "https://hooks.example.com/default"
channel = "#ci"

[[pipelines]]
name = "deploy.*"
statuses = ["failed", "passed"]
channel = "#ops"

[[pipelines]]
name = "nightly"
channel = "@alice"
webhook_url = "https://hooks.example.com/nightly"

[[variants]]
name = "testpit"
pipelines = ["deployTestpit"]
footer = "Re-attach busy devices."
"""


def _event(pipeline: str = "deploy", stage: str = "build", result: str = "Passed") -> dict:
    return {
        "pipeline": {
            "name": pipeline,
            "counter": "42",
            "group": "apps",
            "stage": {
                "name": stage,
                "counter": "1",
                "approved-by": "alice",
                "state": result,
                "result": result,
            },
        }
    }


@pytest.fixture
def rules_file(tmp_path) -> Path:
    path = tmp_path / "rules.toml"
    path.write_text(RULES, encoding="utf-8")
    return path


@pytest.fixture
def event_file(tmp_path):
    def _write(**kwargs) -> Path:
        path = tmp_path / "event.json"
        path.write_text(json.dumps(_event(**kwargs)), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def stub_client(monkeypatch, make_details, app_revision) -> StubFetcher:
    fetcher = StubFetcher(details=make_details(), changes=[app_revision])
    monkeypatch.setattr(
        "buildherald.cli.commands.notify.GoServerClient", lambda *args, **kwargs: fetcher
    )
    return fetcher


# ---------------------------------------------------------------------------
# Test: CLI help and registration
# ---------------------------------------------------------------------------


class TestCliApp:
    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "notify" in result.output
        assert "rules" in result.output

    @pytest.mark.parametrize("command", ["notify", "rules"])
    def test_command_help(self, command):
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0


# ---------------------------------------------------------------------------
# Test: rules
# ---------------------------------------------------------------------------


class TestRulesCommand:
    def test_lists_rules_and_variants(self, rules_file):
        result = runner.invoke(app, ["rules", "--rules", str(rules_file)])
        assert result.exit_code == 0
        assert "deploy.*" in result.output
        assert "nightly" in result.output
        assert "testpit" in result.output

    def test_invalid_rules_file(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text('[[pipelines]]\nstatuses = ["exploded"]\n', encoding="utf-8")
        result = runner.invoke(app, ["rules", "--rules", str(path)])
        assert result.exit_code == 2
        assert "Rules error" in result.output


# ---------------------------------------------------------------------------
# Test: notify
# ---------------------------------------------------------------------------


class TestNotifyCommand:
    def test_dry_run_prints_payload(self, rules_file, event_file, stub_client):
        result = runner.invoke(
            app, ["notify", str(event_file()), "--rules", str(rules_file), "--dry-run"]
        )
        assert result.exit_code == 0, result.output
        assert '"#ops"' in result.output
        assert '"good"' in result.output
        assert '"Pipeline"' in result.output
        assert '"Changes for app"' in result.output
        assert stub_client.details_calls == 1

    def test_unmatched_pipeline_uses_default_channel(self, rules_file, event_file, stub_client):
        result = runner.invoke(
            app,
            [
                "notify",
                str(event_file(pipeline="docs", result="Cancelled")),
                "--rules",
                str(rules_file),
                "--dry-run",
            ],
        )
        assert result.exit_code == 0, result.output
        assert '"#ci"' in result.output
        assert '"warning"' in result.output

    def test_excluded_status_sends_nothing(self, rules_file, event_file, stub_client):
        result = runner.invoke(
            app,
            ["notify", str(event_file(result="Cancelled")), "--rules", str(rules_file), "--dry-run"],
        )
        assert result.exit_code == 0, result.output
        assert "nothing sent" in result.output
        assert '"attachments"' not in result.output
        assert stub_client.details_calls == 0

    @pytest.mark.parametrize("body", ["[1, 2]", '"deploy"', '{"pipeline": "deploy"}'])
    def test_event_file_not_an_object_exits_2(self, rules_file, tmp_path, stub_client, body):
        path = tmp_path / "event.json"
        path.write_text(body, encoding="utf-8")
        result = runner.invoke(app, ["notify", str(path), "--rules", str(rules_file)])
        assert result.exit_code == 2
        assert "Invalid event file" in result.output

    def test_details_failure_still_notifies(self, rules_file, event_file, monkeypatch):
        fetcher = StubFetcher(details_error=DetailsNotFoundError("gone"))
        monkeypatch.setattr(
            "buildherald.cli.commands.notify.GoServerClient", lambda *args, **kwargs: fetcher
        )
        result = runner.invoke(
            app, ["notify", str(event_file()), "--rules", str(rules_file), "--dry-run"]
        )
        assert result.exit_code == 0, result.output
        assert '"Details"' in result.output

    def test_missing_stage_exits_1(self, rules_file, event_file, stub_client):
        result = runner.invoke(
            app,
            ["notify", str(event_file(stage="release")), "--rules", str(rules_file), "--dry-run"],
        )
        assert result.exit_code == 1
        assert "Inconsistent event" in result.output

    def test_invalid_event_exits_2(self, rules_file, tmp_path, stub_client):
        path = tmp_path / "event.json"
        path.write_text('{"pipeline": {"name": "deploy"}}', encoding="utf-8")
        result = runner.invoke(app, ["notify", str(path), "--rules", str(rules_file)])
        assert result.exit_code == 2
        assert "Invalid event file" in result.output

    def test_missing_rules_file_exits_2(self, tmp_path, event_file, stub_client):
        result = runner.invoke(
            app, ["notify", str(event_file()), "--rules", str(tmp_path / "nope.toml")]
        )
        assert result.exit_code == 2
