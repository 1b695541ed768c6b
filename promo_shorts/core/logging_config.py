"""Loguru setup for the engine: one console sink, an optional rotating file sink, job-correlated lines."""

import sys
from pathlib import Path
from typing import Any, Optional

from loguru import logger

# Lines logged outside a job show "-" in the job column
NO_JOB = "-"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[job_id]: <13}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | <level>{message}</level>"
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[job_id]} | {name}:{function}:{line} | {message}"


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """
    Route engine logs to stderr and, when configured, to a rotating file.

    Every line carries the job id bound by the orchestrator, so the lines of
    concurrent jobs (worker threads included) can be told apart.

    Args:
        log_level: Minimum level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path of the file sink (settings.log_file)
        rotation: Size at which the file sink rotates
        retention: How long rotated files are kept
    """
    logger.remove()
    logger.configure(extra={"job_id": NO_JOB})

    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=log_level, colorize=True)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format=FILE_FORMAT,
            level=log_level,
            rotation=rotation,
            retention=retention,
            compression="zip",
            enqueue=True,
        )


def get_logger(name: str, **context: Any) -> Any:
    """
    Get a logger for a module, optionally bound to a job.

    Args:
        name: Module name (typically __name__)
        **context: Extra fields, e.g. job_id=job.job_id

    Returns:
        Bound loguru logger
    """
    return logger.bind(name=name, **context)


setup_logging()
