"""
Logging setup.
Installs loguru sinks for the evaluation workflow.
"""
import sys
from pathlib import Path

from loguru import logger

from cvflow.config import LOG_LEVEL

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"

# configure_logging() only installs sinks once per process
_LOGGER_CONFIGURED = False


def configure_logging(
    level: str = LOG_LEVEL,
    log_dir: str | Path | None = None,
    rotation: str = "1 day",
    retention: str = "30 days",
    force: bool = False,
) -> None:
    """
    Configure the global loguru logger.

    - stderr sink at `level`
    - optional dated file sink under `log_dir` with rotation/retention
    """
    global _LOGGER_CONFIGURED
    if _LOGGER_CONFIGURED and not force:
        return

    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            sink=str(log_dir / "{time:YYYY-MM-DD}.log"),
            rotation=rotation,
            retention=retention,
            level=level,
            format=LOG_FORMAT,
            enqueue=True,
            backtrace=True,
            diagnose=False,
        )

    _LOGGER_CONFIGURED = True
    logger.debug("Logger initialized: level={} log_dir={}", level, log_dir)
