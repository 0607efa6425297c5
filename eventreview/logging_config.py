"""Logging configuration for the console."""

import logging
import sys


def setup_logging(verbose: bool = False) -> None:
    """Configure the root logger: one stderr handler, WARNING by default, DEBUG when verbose."""
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    # avoid duplicate lines when main() runs more than once in one process (tests)
    for existing in list(root_logger.handlers):
        if getattr(existing, "_eventreview", False):
            root_logger.removeHandler(existing)
    handler._eventreview = True  # type: ignore[attr-defined]
    root_logger.addHandler(handler)

    # Set higher log levels for noisy components
    logging.getLogger("urllib3").setLevel(logging.WARNING)
