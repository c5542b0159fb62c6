"""Logging for homeport.

Every module logs through a child of the ``homeport`` logger. Console
output goes to stderr via rich so stdout carries only command results;
``configure_logging`` adjusts verbosity and optionally adds a log file,
by default ``{root}/logs/homeport.log``.
"""
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "homeport"
LOG_FILE_NAME = "homeport.log"

console = Console(stderr=True)


def _package_logger() -> logging.Logger:
    logger = logging.getLogger(PACKAGE_LOGGER)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=console, show_path=False, show_time=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` (typically __name__).

    Handlers live on the ``homeport`` logger only, so module loggers
    share one console handler and pick up file logging once enabled.
    """
    _package_logger()
    return logging.getLogger(name)


def default_log_file(root: Path) -> Path:
    return Path(root) / "logs" / LOG_FILE_NAME


def configure_logging(
    verbose: bool = False,
    log_file: Optional[Path] = None,
) -> Optional[Path]:
    """Set verbosity and (re)point file logging at ``log_file``.

    Args:
        verbose: Log at DEBUG instead of INFO
        log_file: File to append to; None leaves file logging off

    Returns:
        The log file in use, or None if it could not be opened
    """
    logger = _package_logger()
    level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(level)

    for handler in [h for h in logger.handlers if isinstance(h, logging.FileHandler)]:
        logger.removeHandler(handler)
        handler.close()

    if log_file is None:
        return None

    target = Path(log_file)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(target)
    except OSError as e:
        logger.warning(f"File logging disabled, cannot open {target}: {e}")
        return None

    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(file_handler)
    logger.debug(f"Logging to {target}")
    return target
