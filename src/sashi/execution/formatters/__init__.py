"""Shared text formatters used by the CLI."""

from sashi.execution.formatters.function_formatter import (
    format_function_details,
    format_function_list,
    format_search_results,
)
from sashi.execution.formatters.report_formatter import format_report, format_validation_issues

__all__ = [
    "format_function_details",
    "format_function_list",
    "format_report",
    "format_search_results",
    "format_validation_issues",
]
