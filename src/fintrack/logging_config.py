"""Logging setup for the command-line entry point."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str | int = "WARNING") -> None:
    """Configure the root logger to write to stderr.

    Raises:
        ValueError: If ``level`` is not a logging level name
    """
    if isinstance(level, str):
        name = level.upper()
        level = logging.getLevelName(name)
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level '{name}'")
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
