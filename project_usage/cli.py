"""Command line entry point: `project-usage <package>`."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence, TextIO

from project_usage.config.settings import settings
from project_usage.errors import ConfigurationError, ProjectUsageError
from project_usage.models.project import RateLimitStatus
from project_usage.orchestrator import UsageOrchestrator
from project_usage.services.report import SORT_METRICS, render_table

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

EXAMPLES = """examples:
\tproject-usage github.com/nats-io/nats.go
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="project-usage",
        description="Show the GitHub projects importing a Go package, ordered by stars.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "package",
        nargs="?",
        help="Go package path, e.g. github.com/nats-io/nats.go",
    )
    parser.add_argument(
        "--token",
        default="",
        help="Personal Access Token for Github. If not set environment variable GITHUB_TOKEN is used",
    )
    parser.add_argument(
        "--limit",
        action="store_true",
        help="Show Github rate limit stats and exit. Fetching the stats also costs one point.",
    )
    parser.add_argument(
        "--sort",
        choices=sorted(SORT_METRICS),
        default="stars",
        help="Metric the report is ordered by (ascending)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging on stderr",
    )
    return parser


def set_up_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.LOG_LEVEL.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )


def print_rate_limit(stats: RateLimitStatus, stream: TextIO) -> None:
    stream.write(f"limit: {stats.limit}\n")
    stream.write(f"remaining: {stats.remaining}\n")
    stream.write(f"reset time: {stats.reset_time.isoformat()}\n")


def run(
    arguments: argparse.Namespace,
    parser: argparse.ArgumentParser,
    *,
    orchestrator: Optional[UsageOrchestrator] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
) -> None:
    """Execute the parsed command; failures surface as `ProjectUsageError`."""

    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr
    token = arguments.token or settings.GITHUB_TOKEN
    if not token:
        raise ConfigurationError(
            "Github token not configured. Either set environment variable GITHUB_TOKEN or use flag --token"
        )

    orchestrator = orchestrator or UsageOrchestrator(token=token)

    if arguments.limit:
        stats = asyncio.run(orchestrator.rate_limit())
        print_rate_limit(stats, stdout)
        return

    if not arguments.package:
        parser.print_usage(stderr)
        stderr.write("\n")
        raise ConfigurationError("expect one package as argument")

    report = asyncio.run(orchestrator.run(arguments.package, metric=arguments.sort))
    if report.truncated:
        stderr.write(
            f"project is imported by more than {report.discovered} packages. "
            f"we only show results for the first {report.discovered}.\n"
        )
    render_table(report.projects, stdout)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    arguments = parser.parse_args(argv)
    set_up_logging(arguments.verbose)

    try:
        run(arguments, parser)
    except ProjectUsageError as error:
        logger.debug("Run failed", exc_info=True)
        sys.stderr.write(f"{error}\n")
        return EXIT_FAILURE
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
