"""Importers crawler scraping the pkg.go.dev "Imported By" tab with BeautifulSoup"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, List, Optional

import httpx
from bs4 import BeautifulSoup

from project_usage.config.settings import settings
from project_usage.crawlers.logging_utils import sanitize_log_extra
from project_usage.errors import TransportError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DiscoveryResult:
    """Package paths importing `package_path`, in listing order."""

    package_path: str
    identifiers: List[str] = field(default_factory=list)
    truncated: bool = False


class ImportersCrawler:
    """Fetches the packages that import a Go package from pkg.go.dev"""

    def __init__(
        self,
        *,
        site_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        truncation_limit: Optional[int] = None,
        transport: Optional[Any] = None,
    ) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)
        self.site_url = (site_url or settings.PKG_SITE_URL).rstrip("/")
        self.timeout_seconds = timeout_seconds or settings.HTTP_TIMEOUT_SECONDS
        self.truncation_limit = truncation_limit or settings.IMPORTERS_TRUNCATION_LIMIT
        self.transport = transport

    def listing_url(self, package_path: str) -> str:
        return f"{self.site_url}/{package_path.strip('/')}?tab=importedby"

    async def fetch_importers(self, package_path: str) -> DiscoveryResult:
        """
        Fetch the importers listing of a package

        Args:
            package_path: Go import path, e.g. github.com/nats-io/nats.go

        Returns:
            DiscoveryResult with the importing package paths

        Raises:
            TransportError: network failure or non-200 status
        """
        url = self.listing_url(package_path)
        headers = {
            "User-Agent": settings.USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        }

        self.logger.info(f"Fetching {url}")
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                response = await client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            self.logger.warning("Importers request failed", extra=sanitize_log_extra(url=url, error=str(exc)))
            raise TransportError(f"importers request error: {type(exc).__name__} {exc}") from exc

        if response.status_code != 200:
            raise TransportError(
                f"status code error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                body=response.text,
            )

        identifiers = self.parse_importers(response.text)
        truncated = len(identifiers) >= self.truncation_limit
        if truncated:
            self.logger.warning(
                "Importers listing truncated",
                extra=sanitize_log_extra(package=package_path, shown=len(identifiers)),
            )
        self.logger.info(f"Found {len(identifiers)} importers of {package_path}")
        return DiscoveryResult(package_path=package_path, identifiers=identifiers, truncated=truncated)

    @staticmethod
    def parse_importers(html: str) -> List[str]:
        """Extract importer paths from the links of the "Imported By" list."""
        soup = BeautifulSoup(html, "lxml")

        container = soup.find(class_="ImportedBy") or soup
        identifiers: List[str] = []
        for link in container.select(".ImportedBy-list a[href], .ImportedBy-details a[href]"):
            path = link.get("href", "").split("?")[0].strip("/")
            text = link.get_text(strip=True)
            # Links to other tabs or sites carry text that differs from their target path
            if not path or text != path:
                continue
            identifiers.append(path)
        return identifiers
