"""Execution reports and their presentation."""

from sashi.execution.report import ActionError, ActionResult, ExecutionReport, ReportBuilder

__all__ = ["ActionError", "ActionResult", "ExecutionReport", "ReportBuilder"]
