"""Reduce importer package paths to unique GitHub repositories."""

from __future__ import annotations

from typing import Iterable


def extract_repo_refs(identifiers: Iterable[str], host: str = "github.com") -> list[str]:
    """Return the distinct `owner/name` repositories hosted on `host`.

    Identifiers look like `github.com/owner/name/sub/pkg`. Only those whose
    first segment is exactly `host` and which carry both an owner and a name
    are kept. Owner and name are lower-cased; the first occurrence of each
    repository decides its position in the result.
    """

    repos: list[str] = []
    seen: set[str] = set()
    for identifier in identifiers:
        parts = identifier.split("/")
        if parts[0] != host:
            continue
        if len(parts) < 3:
            continue

        repo = f"{parts[1]}/{parts[2]}".lower()
        if repo in seen:
            continue
        seen.add(repo)
        repos.append(repo)
    return repos
