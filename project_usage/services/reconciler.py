"""Turn a batched GraphQL response into a list of unique project records."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, Mapping, Optional

from pydantic import ValidationError

from project_usage.errors import ParseError, QueryFailed
from project_usage.models.project import GraphQLResponse, ProjectRecord, QueryError, RepoRef

logger = logging.getLogger(__name__)


def parse_response(payload: Any) -> GraphQLResponse:
    """Validate a decoded GraphQL body; raises `ParseError` on unexpected shapes."""

    if not isinstance(payload, dict):
        raise ParseError(f"unexpected GraphQL response type: {type(payload).__name__}")
    try:
        return GraphQLResponse.model_validate(payload)
    except ValidationError as exc:
        raise ParseError(f"unexpected GraphQL response: {exc}") from exc


def ignore_not_found_errors(errors: Iterable[QueryError]) -> None:
    """Raise `QueryFailed` unless every error is a NOT_FOUND error."""

    real_errors = [error for error in errors if not error.is_not_found]
    if real_errors:
        raise QueryFailed(len(real_errors), real_errors[0].message)


def reconcile(
    response: GraphQLResponse,
    aliases: Optional[Mapping[str, RepoRef]] = None,
) -> list[ProjectRecord]:
    """Collect the found projects of a response, one record per canonical name.

    Unresolved repositories show up either as a NOT_FOUND error or as an
    empty/null alias entry; both are dropped silently. Different OWNER/REPO
    pairs can resolve to the same project after a rename (e.g.
    peterbourgon/gokit -> go-kit/kit), so records are keyed by the name
    GitHub reports.
    """

    ignore_not_found_errors(response.errors)

    projects: list[ProjectRecord] = []
    seen_names: set[str] = set()
    for alias, record in _entries(response, aliases):
        if record is None or not record.is_found:
            logger.debug("Repository not found", extra={"alias": alias})
            continue
        if record.name in seen_names:
            logger.debug(
                "Skipping duplicate project",
                extra={"alias": alias, "project": record.name},
            )
            continue
        seen_names.add(record.name)
        projects.append(record)
    return projects


def _entries(
    response: GraphQLResponse,
    aliases: Optional[Mapping[str, RepoRef]],
) -> Iterator[tuple[str, Optional[ProjectRecord]]]:
    if aliases is None:
        yield from response.data.items()
        return

    for alias in aliases:
        yield alias, response.data.get(alias)
    for alias in response.data.keys() - aliases.keys():
        logger.debug("Ignoring unknown alias in response", extra={"alias": alias})
