"""
Centralized logging configuration for the application.
"""

import logging
import sys
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .config import Config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(config: Optional["Config"] = None) -> None:
    """
    Setup centralized logging configuration.

    Logs go to stderr so stdout stays free for tool output.

    Args:
        config: Config instance, loaded from the environment if None
    """
    if config is None:
        from .config import Config
        config = Config.from_env()

    logging.basicConfig(level=getattr(logging, config.log_level.upper(), logging.INFO),
                        format=LOG_FORMAT,
                        handlers=[logging.StreamHandler(sys.stderr)],
                        force=True)


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
