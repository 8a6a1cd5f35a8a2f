"""Report pipeline services."""

from project_usage.services.extractor import extract_repo_refs
from project_usage.services.query_builder import BuiltQuery, build_query
from project_usage.services.reconciler import ignore_not_found_errors, parse_response, reconcile
from project_usage.services.report import render_table, sort_projects

__all__ = [
    "BuiltQuery",
    "build_query",
    "extract_repo_refs",
    "ignore_not_found_errors",
    "parse_response",
    "reconcile",
    "render_table",
    "sort_projects",
]
