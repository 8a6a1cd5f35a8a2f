"""Error taxonomy shared by the report pipeline and its adapters."""

from __future__ import annotations

from typing import Optional


class ProjectUsageError(Exception):
    """Base class for every failure that aborts a report run."""


class ConfigurationError(ProjectUsageError):
    """Required configuration (e.g. the GitHub token) is missing."""


class FormatError(ProjectUsageError):
    """A repository reference is not in OWNER/REPONAME form."""


class TransportError(ProjectUsageError):
    """Network failure or non-2xx HTTP status."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, body: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @classmethod
    def from_status(cls, status_code: int, body: str) -> "TransportError":
        return cls(
            f"http request failed with status: {status_code}. body: {body}",
            status_code=status_code,
            body=body,
        )


class QueryFailed(ProjectUsageError):
    """The GraphQL service reported at least one error other than NOT_FOUND."""

    def __init__(self, count: int, first_message: str) -> None:
        super().__init__(f"query failed. errors: {count}. first error: {first_message}")
        self.count = count
        self.first_message = first_message


class ParseError(ProjectUsageError):
    """A response body or header does not have the expected shape."""


class NoResultsError(ProjectUsageError):
    """Discovery produced no identifiers hosted on GitHub."""

    def __init__(self, package_path: str, listing_url: str) -> None:
        super().__init__(f"no projects found under {listing_url}")
        self.package_path = package_path
        self.listing_url = listing_url
