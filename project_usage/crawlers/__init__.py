"""HTTP collaborators: pkg.go.dev importers listing and the GitHub GraphQL API."""

from project_usage.crawlers.github_client import GitHubGraphQLClient
from project_usage.crawlers.importers import DiscoveryResult, ImportersCrawler

__all__ = [
    "DiscoveryResult",
    "GitHubGraphQLClient",
    "ImportersCrawler",
]
