"""Logging configuration for the sashi CLI."""

import logging
import os


def configure_logging(verbose: bool) -> None:
    """Configure logging levels based on the verbose flag.

    Call once at CLI startup. Shows INFO+ with ``verbose``, otherwise WARNING+.
    """
    # Tests manage their own logging
    if os.getenv("PYTEST_CURRENT_TEST"):
        return

    level = logging.INFO if verbose else logging.WARNING
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    else:
        logging.getLogger().setLevel(level)

    # Third-party libraries stay quiet even in verbose mode
    for logger_name in ["httpx", "httpcore", "urllib3", "llm", "uvicorn.access"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    if not verbose:
        logging.getLogger("sashi").setLevel(logging.WARNING)
