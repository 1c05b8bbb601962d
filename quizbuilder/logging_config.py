"""Logging configuration helpers for the quiz builder."""

import logging


def configure_logging(level="INFO"):
    """Configure basic logging for the application and return the package logger."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    return logging.getLogger("quizbuilder")
