"""
Logging configuration for the crawler.

Logs go to stderr; stdout carries only JSON Lines output.
"""

import logging
import sys
from typing import Optional, Union

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    log_level: Union[int, str] = logging.INFO,
    log_format: str = DEFAULT_LOG_FORMAT,
    log_file: Optional[str] = None,
) -> None:
    """
    Configure the root logger.

    Args:
        log_level: Minimum level, as a number or a name like "DEBUG"
        log_format: Format string for log records
        log_file: Optional path to also write logs to
    """
    if isinstance(log_level, str):
        level_name = log_level.upper()
        log_level = logging.getLevelName(level_name)
        if not isinstance(log_level, int):
            raise ValueError(f"Unknown log level: {level_name}")

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Per-request connection chatter from urllib3 is noise at INFO.
    logging.getLogger("urllib3").setLevel(max(log_level, logging.WARNING))
