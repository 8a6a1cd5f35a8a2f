"""Report data models"""

from project_usage.models.project import (
    NOT_FOUND,
    GraphQLResponse,
    ProjectRecord,
    QueryError,
    RateLimitStatus,
    RepoRef,
    UsageReport,
)

__all__ = [
    "NOT_FOUND",
    "GraphQLResponse",
    "ProjectRecord",
    "QueryError",
    "RateLimitStatus",
    "RepoRef",
    "UsageReport",
]
