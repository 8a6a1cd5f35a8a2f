"""Report pipeline: discovery, extraction, one GraphQL batch, reconciliation, ordering."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

from project_usage.config.settings import settings
from project_usage.crawlers.github_client import GitHubGraphQLClient
from project_usage.crawlers.importers import ImportersCrawler
from project_usage.crawlers.logging_utils import sanitize_log_extra
from project_usage.errors import NoResultsError, TransportError
from project_usage.models.project import RateLimitStatus, UsageReport
from project_usage.services.extractor import extract_repo_refs
from project_usage.services.report import SORT_METRICS, sort_projects

logger = logging.getLogger(__name__)


class UsageOrchestrator:
    """Runs a report for one package; every step is awaited in sequence."""

    def __init__(
        self,
        *,
        token: Optional[str] = None,
        host: Optional[str] = None,
        run_timeout_seconds: Optional[float] = None,
        importers_crawler: Optional[Any] = None,
        github_client_factory: Optional[Callable[[], Any]] = None,
    ) -> None:
        self._token = token
        self._host = host or settings.GITHUB_HOST
        self._run_timeout_seconds = run_timeout_seconds or settings.RUN_TIMEOUT_SECONDS
        self._importers_crawler = importers_crawler or ImportersCrawler()
        self._github_client_factory = github_client_factory or (lambda: GitHubGraphQLClient(token=self._token))

    async def run(self, package_path: str, *, metric: str = "stars") -> UsageReport:
        """Build the usage report; any failure, including the run deadline, raises `ProjectUsageError`."""
        return await self._with_deadline(self._run(package_path, metric=metric))

    async def rate_limit(self) -> RateLimitStatus:
        return await self._with_deadline(self._rate_limit())

    async def _run(self, package_path: str, *, metric: str) -> UsageReport:
        if metric not in SORT_METRICS:
            raise ValueError(f"unknown sort metric: {metric!r}")
        logger.info("Usage report started", extra=sanitize_log_extra(package=package_path, metric=metric))

        discovery = await self._importers_crawler.fetch_importers(package_path)
        repo_refs = extract_repo_refs(discovery.identifiers, host=self._host)
        if not repo_refs:
            raise NoResultsError(package_path, self._importers_crawler.listing_url(package_path))

        async with self._github_client_factory() as client:
            projects = await client.fetch_projects(repo_refs)

        report = UsageReport(
            package_path=package_path,
            projects=sort_projects(projects, metric),
            truncated=discovery.truncated,
            discovered=len(discovery.identifiers),
            queried=len(repo_refs),
        )
        logger.info(
            "Usage report finished",
            extra=sanitize_log_extra(
                package=package_path,
                discovered=report.discovered,
                queried=report.queried,
                projects=len(report.projects),
            ),
        )
        return report

    async def _rate_limit(self) -> RateLimitStatus:
        async with self._github_client_factory() as client:
            return await client.get_rate_limit_stats()

    async def _with_deadline(self, coro):
        try:
            return await asyncio.wait_for(coro, timeout=self._run_timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise TransportError(f"run deadline exceeded after {self._run_timeout_seconds:g}s") from exc
