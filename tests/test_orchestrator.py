from __future__ import annotations

import asyncio
import io
from typing import Any

import httpx
import pytest

from project_usage.crawlers.github_client import GitHubGraphQLClient
from project_usage.crawlers.importers import DiscoveryResult
from project_usage.errors import NoResultsError, TransportError
from project_usage.models.project import ProjectRecord
from project_usage.orchestrator import UsageOrchestrator
from project_usage.services.report import render_table


class FakeImporters:
    def __init__(self, identifiers: list[str], *, truncated: bool = False) -> None:
        self.identifiers = identifiers
        self.truncated = truncated
        self.calls: list[str] = []

    def listing_url(self, package_path: str) -> str:
        return f"https://pkg.example.test/{package_path}?tab=importedby"

    async def fetch_importers(self, package_path: str) -> DiscoveryResult:
        self.calls.append(package_path)
        return DiscoveryResult(package_path=package_path, identifiers=self.identifiers, truncated=self.truncated)


class FakeGitHubClient:
    def __init__(self, projects: list[ProjectRecord] | None = None) -> None:
        self.projects = projects or []
        self.batches: list[list[str]] = []
        self.closed = False

    async def __aenter__(self) -> "FakeGitHubClient":
        return self

    async def __aexit__(self, *_: Any) -> None:
        self.closed = True

    async def fetch_projects(self, repo_refs: list[str]) -> list[ProjectRecord]:
        self.batches.append(list(repo_refs))
        return list(self.projects)


def test_end_to_end_report_from_discovery_to_table() -> None:
    graphql_requests: list[httpx.Request] = []

    def graphql(request: httpx.Request) -> httpx.Response:
        graphql_requests.append(request)
        return httpx.Response(
            200,
            json={"data": {"_0": {"nameWithOwner": "a/b", "url": "https://x/a/b", "StargazerCount": 5}}},
        )

    importers = FakeImporters(["github.com/a/b", "github.com/a/B", "other.com/a/b"])
    orchestrator = UsageOrchestrator(
        importers_crawler=importers,
        github_client_factory=lambda: GitHubGraphQLClient(
            token="t",
            graphql_url="https://api.example.test/graphql",
            transport=httpx.MockTransport(graphql),
        ),
    )

    report = asyncio.run(orchestrator.run("github.com/a/b"))
    stream = io.StringIO()
    render_table(report.projects, stream)

    assert len(graphql_requests) == 1
    assert b"_0: repository" in graphql_requests[0].content
    assert b"_1:" not in graphql_requests[0].content
    assert report.discovered == 3
    assert report.queried == 1
    assert stream.getvalue().splitlines() == ["STARS FORKS PROJECT", "5     0     https://x/a/b"]


def test_run_sorts_projects_by_requested_metric() -> None:
    client = FakeGitHubClient(
        [
            ProjectRecord(name="a/a", url="https://github.com/a/a", stargazer_count=50, fork_count=1),
            ProjectRecord(name="b/b", url="https://github.com/b/b", stargazer_count=10, fork_count=9),
        ]
    )
    orchestrator = UsageOrchestrator(
        importers_crawler=FakeImporters(["github.com/a/a", "github.com/b/b"]),
        github_client_factory=lambda: client,
    )

    by_stars = asyncio.run(orchestrator.run("example.com/pkg"))
    by_forks = asyncio.run(orchestrator.run("example.com/pkg", metric="forks"))

    assert [p.name for p in by_stars.projects] == ["b/b", "a/a"]
    assert [p.name for p in by_forks.projects] == ["a/a", "b/b"]
    assert client.batches[0] == ["a/a", "b/b"]
    assert client.closed is True


def test_run_without_github_importers_raises_no_results() -> None:
    client = FakeGitHubClient()
    orchestrator = UsageOrchestrator(
        importers_crawler=FakeImporters(["gitlab.com/a/b", "golang.org/x/tools"]),
        github_client_factory=lambda: client,
    )

    with pytest.raises(NoResultsError, match=r"pkg.example.test/example.com/pkg\?tab=importedby"):
        asyncio.run(orchestrator.run("example.com/pkg"))

    assert client.batches == []


def test_run_passes_truncation_flag_through() -> None:
    orchestrator = UsageOrchestrator(
        importers_crawler=FakeImporters(["github.com/a/a"], truncated=True),
        github_client_factory=FakeGitHubClient,
    )

    report = asyncio.run(orchestrator.run("example.com/pkg"))

    assert report.truncated is True
    assert report.projects == []


def test_run_rejects_unknown_metric_before_discovery() -> None:
    importers = FakeImporters(["github.com/a/a"])
    orchestrator = UsageOrchestrator(importers_crawler=importers, github_client_factory=FakeGitHubClient)

    with pytest.raises(ValueError):
        asyncio.run(orchestrator.run("example.com/pkg", metric="watchers"))

    assert importers.calls == []


def test_run_deadline_aborts_with_transport_error() -> None:
    class SlowImporters(FakeImporters):
        async def fetch_importers(self, package_path: str) -> DiscoveryResult:
            await asyncio.sleep(5)
            return await super().fetch_importers(package_path)

    orchestrator = UsageOrchestrator(
        run_timeout_seconds=0.01,
        importers_crawler=SlowImporters(["github.com/a/a"]),
        github_client_factory=FakeGitHubClient,
    )

    with pytest.raises(TransportError, match="deadline exceeded"):
        asyncio.run(orchestrator.run("example.com/pkg"))
