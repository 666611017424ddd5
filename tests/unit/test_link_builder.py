"""Tests for console-log link construction."""

from __future__ import annotations

import pytest

from buildherald.core.link_builder import LinkConstructionError, build_console_links, console_url
from buildherald.models.events import PipelineStatus
from buildherald.models.pipeline import Job, Stage

HOST = "https://go.example.com"


class TestConsoleUrl:
    def test_artifact_url_when_finished(self, make_details):
        details = make_details()
        stage = details.stages[1]
        assert console_url(HOST, details, stage, "compile", PipelineStatus.FAILED) == (
            "https://go.example.com/go/files/deploy/42/build/1/compile/cruise-output/console.log"
        )

    def test_console_tab_when_building(self, make_details):
        details = make_details()
        stage = details.stages[1]
        assert console_url(HOST, details, stage, "compile", PipelineStatus.BUILDING) == (
            "https://go.example.com/go/tab/build/detail/deploy/42/build/1/compile#tab-console"
        )

    def test_trailing_slash_on_host(self, make_details):
        details = make_details()
        url = console_url(HOST + "/", details, details.stages[1], "compile", PipelineStatus.FAILED)
        assert "/go/files/deploy/" in url
        assert "//go/" not in url

    @pytest.mark.parametrize("host", ["", "not a host", "ftp://go.example.com"])
    def test_bad_host(self, make_details, host):
        details = make_details()
        with pytest.raises(LinkConstructionError):
            console_url(host, details, details.stages[1], "compile", PipelineStatus.FAILED)


class TestBuildConsoleLinks:
    @pytest.mark.parametrize(
        "status",
        [s for s in PipelineStatus if s != PipelineStatus.BUILDING],
    )
    def test_finished_statuses_link_artifacts(self, make_details, status):
        details = make_details()
        links = build_console_links(HOST, details, details.stages[1], status)
        assert all("/cruise-output/console.log|" in link for link in links)

    def test_building_links_console_tab(self, make_details):
        details = make_details()
        links = build_console_links(HOST, details, details.stages[1], PipelineStatus.BUILDING)
        assert all("#tab-console|" in link for link in links)

    def test_links_follow_job_order(self, make_details):
        details = make_details()
        links = build_console_links(HOST, details, details.stages[1], PipelineStatus.FAILED)
        assert links == [
            "<https://go.example.com/go/files/deploy/42/build/1/compile/cruise-output/console.log"
            "|View compile logs>",
            "<https://go.example.com/go/files/deploy/42/build/1/unit-tests/cruise-output/console.log"
            "|View unit-tests logs>",
        ]

    def test_stage_without_jobs(self, make_details):
        details = make_details()
        assert build_console_links(HOST, details, Stage(name="empty"), PipelineStatus.FAILED) == []

    def test_job_names_are_escaped(self, make_details):
        details = make_details()
        stage = Stage(name="build", jobs=[Job(name="lint and test")])
        (link,) = build_console_links(HOST, details, stage, PipelineStatus.FAILED)
        assert "/lint%20and%20test/" in link
        assert link.endswith("|View lint and test logs>")
