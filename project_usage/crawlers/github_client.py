"""Async GitHub GraphQL client for batched repository metadata lookups."""

from __future__ import annotations

from datetime import UTC, datetime
import logging
from typing import Any, Optional, Sequence

import httpx

from project_usage.config.settings import settings
from project_usage.crawlers.logging_utils import sanitize_log_extra
from project_usage.errors import ConfigurationError, ParseError, TransportError
from project_usage.models.project import ProjectRecord, RateLimitStatus, RepoRef
from project_usage.services.query_builder import build_query
from project_usage.services.reconciler import parse_response, reconcile

logger = logging.getLogger(__name__)

RATE_LIMIT_HEADERS = ("X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset")


class GitHubGraphQLClient:
    """Sends one aliased `repository` query per batch of repository references."""

    def __init__(
        self,
        *,
        token: Optional[str] = None,
        graphql_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[Any] = None,
    ) -> None:
        self._token = token or settings.GITHUB_TOKEN
        self._graphql_url = graphql_url or settings.GITHUB_GRAPHQL_URL
        self._timeout_seconds = timeout_seconds or settings.HTTP_TIMEOUT_SECONDS
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "GitHubGraphQLClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch_projects(self, repo_refs: Sequence[str | RepoRef]) -> list[ProjectRecord]:
        """Return unique project records for all repo refs in the form OWNER/REPO.

        Repositories GitHub cannot resolve are left out of the result. Any
        other GraphQL error fails the whole batch with `QueryFailed`.
        """

        built = build_query(repo_refs)
        logger.info("Querying GitHub for %d repositories", len(built.aliases))
        payload = await self.execute(built.document)
        response = parse_response(payload)
        projects = reconcile(response, built.aliases)
        logger.info(
            "GitHub query finished",
            extra=sanitize_log_extra(requested=len(built.aliases), resolved=len(projects)),
        )
        return projects

    async def execute(self, document: str) -> Any:
        """POST a GraphQL document and return the decoded JSON body."""

        client = await self._ensure_client()
        try:
            response = await client.post(self._graphql_url, json={"query": document})
        except httpx.HTTPError as exc:
            logger.warning(
                "GitHub GraphQL request failed",
                extra=sanitize_log_extra(url=self._graphql_url, error=str(exc)),
            )
            raise TransportError(f"GitHub request error: {type(exc).__name__} {exc}") from exc

        if response.status_code > 399:
            logger.warning(
                "GitHub GraphQL request rejected",
                extra=sanitize_log_extra(status_code=response.status_code, body=response.text),
            )
            raise TransportError.from_status(response.status_code, response.text)

        try:
            return response.json()
        except ValueError as exc:
            raise ParseError(f"failed to decode GraphQL response: {exc}") from exc

    async def get_rate_limit_stats(self) -> RateLimitStatus:
        """Read the current quota from the rate-limit headers of a HEAD request."""

        client = await self._ensure_client()
        try:
            response = await client.head(self._graphql_url)
        except httpx.HTTPError as exc:
            raise TransportError(f"GitHub request error: {type(exc).__name__} {exc}") from exc

        if response.status_code > 399:
            raise TransportError.from_status(response.status_code, response.text)

        limit, remaining, reset_epoch = (
            _parse_int_header(response.headers, header) for header in RATE_LIMIT_HEADERS
        )
        try:
            reset_time = datetime.fromtimestamp(reset_epoch, tz=UTC)
        except (OverflowError, OSError, ValueError) as exc:
            raise ParseError(f"invalid value for header X-RateLimit-Reset: {reset_epoch}") from exc
        return RateLimitStatus(limit=limit, remaining=remaining, reset_time=reset_time)

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client:
            return self._client

        if not self._token:
            raise ConfigurationError(
                "Github token not configured. Either set environment variable GITHUB_TOKEN or use flag --token"
            )

        headers = {
            "Authorization": f"Bearer {self._token}",
            "User-Agent": settings.USER_AGENT,
        }
        self._client = httpx.AsyncClient(
            headers=headers,
            timeout=self._timeout_seconds,
            transport=self._transport,
        )
        return self._client


def _parse_int_header(headers: httpx.Headers, header: str) -> int:
    raw = headers.get(header)
    if raw is None:
        raise ParseError(f"missing response header {header}")
    value = raw.strip()
    if not value.isascii() or not value.isdigit():
        raise ParseError(f"invalid value for header {header}: {raw!r}")
    return int(value)
