from __future__ import annotations

from datetime import UTC, datetime
import io
from typing import Any

import pytest

from project_usage import cli
from project_usage.errors import ConfigurationError, QueryFailed
from project_usage.models.project import ProjectRecord, RateLimitStatus, UsageReport


class FakeOrchestrator:
    def __init__(self, report: UsageReport | None = None, error: Exception | None = None) -> None:
        self.report = report
        self.error = error
        self.runs: list[tuple[str, str]] = []

    async def run(self, package_path: str, *, metric: str = "stars") -> UsageReport:
        self.runs.append((package_path, metric))
        if self.error:
            raise self.error
        return self.report

    async def rate_limit(self) -> RateLimitStatus:
        return RateLimitStatus(limit=5000, remaining=4999, reset_time=datetime(2026, 1, 1, tzinfo=UTC))


def _run(argv: list[str], orchestrator: Any) -> tuple[str, str]:
    parser = cli.build_parser()
    arguments = parser.parse_args(argv)
    stdout, stderr = io.StringIO(), io.StringIO()
    cli.run(arguments, parser, orchestrator=orchestrator, stdout=stdout, stderr=stderr)
    return stdout.getvalue(), stderr.getvalue()


def test_report_is_printed_as_table() -> None:
    report = UsageReport(
        package_path="github.com/nats-io/nats.go",
        projects=[ProjectRecord(name="a/b", url="https://github.com/a/b", stargazer_count=3, fork_count=1)],
    )
    orchestrator = FakeOrchestrator(report)

    stdout, stderr = _run(["--token", "t", "--sort", "forks", "github.com/nats-io/nats.go"], orchestrator)

    assert orchestrator.runs == [("github.com/nats-io/nats.go", "forks")]
    assert stdout == "STARS FORKS PROJECT\n3     1     https://github.com/a/b\n"
    assert stderr == ""


def test_truncated_listing_prints_warning_on_stderr() -> None:
    report = UsageReport(package_path="p", truncated=True, discovered=20000)

    stdout, stderr = _run(["--token", "t", "p"], FakeOrchestrator(report))

    assert "more than 20000 packages" in stderr
    assert stdout.startswith("STARS")


def test_limit_flag_prints_rate_limit_stats() -> None:
    stdout, _ = _run(["--token", "t", "--limit"], FakeOrchestrator())

    assert stdout.splitlines() == [
        "limit: 5000",
        "remaining: 4999",
        "reset time: 2026-01-01T00:00:00+00:00",
    ]


def test_missing_package_prints_usage_and_fails() -> None:
    parser = cli.build_parser()
    stderr = io.StringIO()

    with pytest.raises(ConfigurationError, match="expect one package"):
        cli.run(parser.parse_args(["--token", "t"]), parser, orchestrator=FakeOrchestrator(), stderr=stderr)

    assert stderr.getvalue().startswith("usage: project-usage")


def test_missing_token_fails(monkeypatch) -> None:
    monkeypatch.setattr(cli.settings, "GITHUB_TOKEN", None)

    with pytest.raises(ConfigurationError, match="GITHUB_TOKEN"):
        _run(["github.com/a/b"], FakeOrchestrator())


def test_token_falls_back_to_settings(monkeypatch) -> None:
    monkeypatch.setattr(cli.settings, "GITHUB_TOKEN", "from-env")
    report = UsageReport(package_path="github.com/a/b")

    stdout, _ = _run(["github.com/a/b"], FakeOrchestrator(report))

    assert stdout == "STARS FORKS PROJECT\n"


def test_main_maps_errors_to_exit_code_one(monkeypatch, capsys) -> None:
    failing = FakeOrchestrator(error=QueryFailed(2, "boom"))
    monkeypatch.setattr(cli, "UsageOrchestrator", lambda **_: failing)

    exit_code = cli.main(["--token", "t", "github.com/a/b"])

    captured = capsys.readouterr()
    assert exit_code == cli.EXIT_FAILURE
    assert "query failed. errors: 2. first error: boom" in captured.err
    assert captured.out == ""


def test_main_returns_zero_on_success(monkeypatch, capsys) -> None:
    report = UsageReport(package_path="github.com/a/b")
    monkeypatch.setattr(cli, "UsageOrchestrator", lambda **_: FakeOrchestrator(report))

    assert cli.main(["--token", "t", "github.com/a/b"]) == cli.EXIT_SUCCESS
    assert capsys.readouterr().out == "STARS FORKS PROJECT\n"
