"""Repository references and the GitHub metadata records fetched for them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from project_usage.errors import FormatError

NOT_FOUND = "NOT_FOUND"


@dataclass(frozen=True, slots=True)
class RepoRef:
    """Case-folded OWNER/REPONAME pair naming one queryable repository."""

    owner: str
    name: str

    def __post_init__(self) -> None:
        for part in (self.owner, self.name):
            if not isinstance(part, str) or not part or "/" in part:
                raise FormatError(
                    f"projectID format error. got '{self.owner}/{self.name}' expects 'OWNER/REPONAME'"
                )
        object.__setattr__(self, "owner", self.owner.lower())
        object.__setattr__(self, "name", self.name.lower())

    @classmethod
    def parse(cls, text: str) -> "RepoRef":
        parts = text.split("/")
        if len(parts) != 2:
            raise FormatError(f"projectID format error. got '{text}' expects 'OWNER/REPONAME'")
        return cls(owner=parts[0], name=parts[1])

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"


class ProjectRecord(BaseModel):
    """Metadata of one repository as returned by the `repository` GraphQL field."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(default="", alias="nameWithOwner")
    url: str = ""
    fork_count: int = Field(default=0, alias="forkCount")
    is_fork: bool = Field(default=False, alias="isFork")
    is_archived: bool = Field(default=False, alias="isArchived")
    is_in_organization: bool = Field(default=False, alias="isInOrganization")
    stargazer_count: int = Field(
        default=0,
        validation_alias=AliasChoices("stargazerCount", "StargazerCount", "stargazer_count"),
        serialization_alias="stargazerCount",
    )

    @property
    def is_found(self) -> bool:
        """False for the empty placeholder GitHub returns for unresolved aliases."""
        return bool(self.name)


class QueryError(BaseModel):
    message: str = ""
    type: Optional[str] = None

    @property
    def is_not_found(self) -> bool:
        return self.type == NOT_FOUND


class GraphQLResponse(BaseModel):
    """Decoded body of an aliased `repository` batch query."""

    data: dict[str, Optional[ProjectRecord]] = Field(default_factory=dict)
    errors: list[QueryError] = Field(default_factory=list)

    @field_validator("data", "errors", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any, info: Any) -> Any:
        if value is None:
            return {} if info.field_name == "data" else []
        return value


@dataclass(frozen=True, slots=True)
class RateLimitStatus:
    """Point-in-time snapshot of the GitHub API quota."""

    limit: int
    remaining: int
    reset_time: datetime


@dataclass(slots=True)
class UsageReport:
    """Outcome of one report run for a package."""

    package_path: str
    projects: list[ProjectRecord] = field(default_factory=list)
    truncated: bool = False
    discovered: int = 0
    queried: int = 0
