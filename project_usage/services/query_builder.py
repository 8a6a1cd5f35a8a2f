"""Build a single aliased GraphQL document for a batch of repositories."""

from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Sequence

from project_usage.models.project import RepoRef

REPOSITORY_FIELDS = (
    "nameWithOwner",
    "url",
    "forkCount",
    "isFork",
    "isArchived",
    "isInOrganization",
    "stargazerCount",
)


@dataclass(frozen=True, slots=True)
class BuiltQuery:
    """A query document plus the alias -> repository binding used to read its response."""

    document: str
    aliases: dict[str, RepoRef]


def alias_for(index: int) -> str:
    return f"_{index}"


def build_query(repo_refs: Sequence[str | RepoRef]) -> BuiltQuery:
    """Bind every repository to alias `_<index>` in one `repository` query document.

    Raises `FormatError` if an entry is not in OWNER/REPONAME form. An empty
    batch yields `{\\n}`, a document without selections.
    """

    aliases: dict[str, RepoRef] = {}
    for index, ref in enumerate(repo_refs):
        aliases[alias_for(index)] = ref if isinstance(ref, RepoRef) else RepoRef.parse(ref)

    fields = " ".join(REPOSITORY_FIELDS)
    lines = ["{"]
    for alias, ref in aliases.items():
        lines.append(
            f"{alias}: repository(name: {_string_literal(ref.name)}, owner: {_string_literal(ref.owner)}) {{{fields}}}"
        )
    lines.append("}")
    return BuiltQuery(document="\n".join(lines), aliases=aliases)


def _string_literal(value: str) -> str:
    # JSON string escaping is valid GraphQL string escaping.
    return json.dumps(value)
