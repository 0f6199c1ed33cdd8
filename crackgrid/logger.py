"""
Logger setup for CrackGrid.

Configures loguru once for the whole application and provides the
`[crackgrid]`-prefixed helpers every module logs through.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from crackgrid import config

CONTEXT_PREFIX = "[crackgrid]"


def setup_logger(level: str = None, log_dir: Optional[str] = None) -> Optional[Path]:
    """
    Configure loguru sinks.

    Console output always; a file sink under `log_dir` when one is given
    (defaults to LOG_DIR from the environment).

    Returns:
        Path to the log file, or None when only the console is used
    """
    level = level or config.LOG_LEVEL
    log_dir = log_dir if log_dir is not None else config.LOG_DIR

    logger.remove()
    logger.add(
        sys.stdout,
        format="{time:YYYY-MM-DD HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>",
        level=level,
        colorize=True,
    )

    if not log_dir:
        return None

    path = Path(log_dir)
    path.mkdir(exist_ok=True, parents=True)
    log_file = path / "crackgrid.log"
    logger.add(
        log_file, format="{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}", level="DEBUG"
    )
    return log_file


def _log_info(message: str) -> None:
    """Log info message with [crackgrid] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [crackgrid] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [crackgrid] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [crackgrid] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")
