"""Text formatting for execution reports and validation results.

Usage:
    >>> from sashi.execution.formatters.report_formatter import format_report
    >>> print(format_report(report))
    ✓ sum: 3

    Workflow succeeded (1 action)
"""

import json
from typing import Any

from sashi.core.exceptions import ValidationIssue
from sashi.execution.report import ExecutionReport

_MAX_VALUE_LENGTH = 200
_MAX_ISSUES_SHOWN = 10


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        text = value
    else:
        try:
            text = json.dumps(value, default=str)
        except (TypeError, ValueError):
            text = repr(value)
    if len(text) > _MAX_VALUE_LENGTH:
        text = text[: _MAX_VALUE_LENGTH - 3] + "..."
    return text


def format_report(report: ExecutionReport) -> str:
    """Format a report as one line per action plus a summary.

    Successes and failures are listed separately, each in execution order.

    Example:
        >>> from sashi.execution.report import ActionResult
        >>> format_report(ExecutionReport(success=True, results=[ActionResult(action_id="sum", result=3)]))
        '✓ sum: 3\\n\\nWorkflow succeeded (1 action)'
    """
    lines = [f"✓ {entry.action_id}: {_format_value(entry.result)}" for entry in report.results]
    lines.extend(f"✗ {entry.action_id}: {entry.error}" for entry in report.errors)

    total = len(report.results) + len(report.errors)
    noun = "action" if total == 1 else "actions"
    if report.success:
        summary = f"Workflow succeeded ({total} {noun})"
    else:
        summary = f"Workflow finished with errors ({len(report.errors)} of {total} {noun} failed)"
    lines.extend(["", summary])
    return "\n".join(lines)


def format_validation_issues(errors: list[ValidationIssue], warnings: list[ValidationIssue]) -> str:
    """Format pre-flight findings, truncating long error lists."""
    if not errors:
        lines = ["✓ Workflow is valid"]
    else:
        lines = ["✗ Workflow validation failed:"]
        for issue in errors[:_MAX_ISSUES_SHOWN]:
            where = f" ({issue.path})" if issue.path else ""
            lines.append(f"  • {issue.kind}: {issue.message}{where}")
        if len(errors) > _MAX_ISSUES_SHOWN:
            lines.append(f"  ... and {len(errors) - _MAX_ISSUES_SHOWN} more errors")

    if warnings:
        lines.append("")
        lines.append("Warnings:")
        lines.extend(f"  • {issue.message}" for issue in warnings)
    return "\n".join(lines)
