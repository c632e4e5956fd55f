"""
Rich console logging shared by every module, plus the ops incident channel
"""
import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install as install_traceback

from funding_intake.core.config import settings

# Locals stay hidden: frames in the intake pipeline hold SSNs and bank statements
install_traceback(show_locals=False)

_console = Console()
_TIME_FORMAT = "[%Y-%m-%d %H:%M:%S]"

APP_LOGGER_NAME = "funding_intake"
OPS_LOGGER_NAME = "funding_intake.ops"


def _rich_handler(show_path: bool) -> RichHandler:
    handler = RichHandler(
        console=_console,
        show_time=True,
        show_path=show_path,
        show_level=True,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
        markup=True,
        log_time_format=_TIME_FORMAT,
    )
    handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt=_TIME_FORMAT))
    return handler


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Logger writing Rich markup to the shared console.

    Args:
        name: Logger name (typically __name__)
        level: Optional override of settings.log_level

    Returns:
        Logger with a single RichHandler attached
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, (level or settings.log_level).upper()))

    if not logger.handlers:
        # Ops records omit the source path
        logger.addHandler(_rich_handler(show_path=name != OPS_LOGGER_NAME))

    # No propagation to root: each logger owns its handler
    logger.propagate = False
    return logger


def get_shared_logger() -> logging.Logger:
    """Application-wide logger for startup, shutdown and other cross-module events"""
    return get_logger(APP_LOGGER_NAME)


app_logger = get_shared_logger()
ops_logger = get_logger(OPS_LOGGER_NAME)
