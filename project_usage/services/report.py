"""Ordering and tab-aligned rendering of project records."""

from __future__ import annotations

from typing import Iterable, Sequence, TextIO

from project_usage.models.project import ProjectRecord

SORT_METRICS = {
    "stars": lambda project: project.stargazer_count,
    "forks": lambda project: project.fork_count,
}

HEADER = ("STARS", "FORKS", "PROJECT")


def sort_projects(projects: Iterable[ProjectRecord], metric: str = "stars") -> list[ProjectRecord]:
    """Stable ascending sort by star or fork count."""
    try:
        key = SORT_METRICS[metric]
    except KeyError:
        raise ValueError(f"unknown sort metric: {metric!r}, expected one of {sorted(SORT_METRICS)}") from None
    return sorted(projects, key=key)


def format_table(rows: Sequence[Sequence[str]], padding: int = 1) -> list[str]:
    """Align cells into columns; every column except the last is padded to its widest cell."""

    if not rows:
        return []
    widths: dict[int, int] = {}
    for row in rows:
        for index, cell in enumerate(row[:-1]):
            widths[index] = max(widths.get(index, 0), len(cell))

    lines = []
    for row in rows:
        cells = [cell.ljust(widths[index] + padding) for index, cell in enumerate(row[:-1])]
        if row:
            cells.append(row[-1])
        lines.append("".join(cells))
    return lines


def render_table(projects: Iterable[ProjectRecord], stream: TextIO) -> None:
    rows = [HEADER] + [
        (str(project.stargazer_count), str(project.fork_count), project.url) for project in projects
    ]
    for line in format_table(rows):
        stream.write(line + "\n")
    stream.flush()
