"""Command-line interface for sashi."""

from sashi.cli.main import main

__all__ = ["main"]
