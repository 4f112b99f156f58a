# logger.py
import logging
from pathlib import Path
from typing import Literal, Optional

from config import CONFIG_MODEL, SimulationConfig

# Logger level types
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

LOGGER_NAME = "market_sim"


def setup_logger(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
    file_mode: Literal["w", "a"] = "w",
    config: Optional[SimulationConfig] = None,
) -> logging.Logger:
    """
    Configure and return the simulation logger.

    Args:
        level: Logging level (defaults to the config's logging_level)
        log_file: Log file path (defaults to the config's log_file)
        log_format: Log message format (defaults to the config's log_format)
        file_mode: File writing mode - 'w' for overwrite, 'a' for append
        config: Configuration to read defaults from (defaults to CONFIG_MODEL)

    Returns:
        Configured logging.Logger instance
    """
    cfg = config or CONFIG_MODEL
    config_level = level or cfg.logging_level
    config_file = log_file or cfg.log_file
    config_format = log_format or cfg.log_format

    # Convert string level to logging constant
    level_map: dict[str, int] = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    numeric_level = level_map.get(config_level.upper(), logging.INFO)

    Path(config_file).parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handler = logging.FileHandler(config_file, mode=file_mode, encoding="utf-8")
    handler.setFormatter(logging.Formatter(config_format))
    logger.addHandler(handler)
    logger.setLevel(numeric_level)
    return logger


def log(message: str, level: LogLevel = "DEBUG") -> None:
    """
    Log a message at the specified level.

    Args:
        message: The message to log
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logger = logging.getLogger(LOGGER_NAME)
    match level.upper():
        case "INFO":
            logger.info(message)
        case "WARNING":
            logger.warning(message)
        case "ERROR":
            logger.error(message)
        case "CRITICAL":
            logger.critical(message)
        case _:
            logger.debug(message)
