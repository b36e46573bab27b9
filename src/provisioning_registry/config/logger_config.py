"""Logger configuration for the registry client."""

import sys
from typing import List, Optional

from loguru import logger

from .settings import LoggingConfig

CONSOLE_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logging(config: Optional[LoggingConfig] = None, replace_existing: bool = True) -> List[int]:
    """Configure loguru sinks for the registry client.

    loguru has a single global logger, so an application that already owns
    its sinks should pass ``replace_existing=False`` and keep the returned
    handler ids to remove the registry sinks later.

    Args:
        config: Logging settings; defaults to ``LoggingConfig()``
        replace_existing: Remove every sink already installed (including loguru's default)

    Returns:
        Ids of the handlers added
    """
    config = config or LoggingConfig()

    if replace_existing:
        logger.remove()

    handler_ids = []
    if config.log_to_console:
        handler_ids.append(logger.add(sink=sys.stderr, format=CONSOLE_FORMAT, level=config.level, colorize=True))

    if config.log_to_file:
        handler_ids.append(
            logger.add(
                sink=str(config.log_file_path),
                format=FILE_FORMAT,
                level=config.level,
                rotation=config.rotation,
                retention=config.retention,
                compression="gz",
                enqueue=True,
            )
        )
        logger.debug(f"Registry log file {config.log_file_path} (level={config.level}, rotation={config.rotation}, retention={config.retention})")

    return handler_ids
