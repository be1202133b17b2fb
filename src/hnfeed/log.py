"""Logging configuration.

The interactive browser owns the whole terminal, so it only ever logs to a
file. Plain mode logs to stderr through rich.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

from hnfeed.config import LOG_FILE, ensure_config_dir


_logging_configured = False


def setup_logging(debug: bool = False, interactive: bool = False) -> None:
    """Configure the ``hnfeed`` logger once per process."""
    global _logging_configured
    if _logging_configured:
        return

    logger = logging.getLogger("hnfeed")
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    logger.propagate = False

    if interactive:
        if debug:
            ensure_config_dir()
            handler: logging.Handler = logging.FileHandler(LOG_FILE)
            handler.setFormatter(logging.Formatter(
                "[%(asctime)s] %(levelname)s - %(name)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            ))
        else:
            handler = logging.NullHandler()
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False)

    logger.addHandler(handler)
    _logging_configured = True
