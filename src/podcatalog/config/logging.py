"""Logging setup for the podcatalog CLI."""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT_FILE = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(
    verbose: bool = False,
    log_file: Path | None = None,
    level: str = "WARNING",
) -> logging.Logger:
    """Configure the ``podcatalog`` logger.

    Console output goes to stderr through Rich so it never mixes with tables
    printed on stdout. Calling this twice replaces the handlers instead of
    stacking them.

    Args:
        verbose: Force DEBUG level
        log_file: Optional file that receives every record at DEBUG level
        level: Console level when not verbose (e.g. from config.log_level)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger("podcatalog")
    console_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.WARNING)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=verbose,
        markup=False,
    )
    console_handler.setLevel(console_level)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT_FILE))
        logger.addHandler(file_handler)

    logger.setLevel(logging.DEBUG if (verbose or log_file) else console_level)
    return logger
