"""Logging setup driven by Settings.log_level / Settings.log_file."""

import logging
import sys
from typing import Optional

from config.settings import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(settings: Settings, level: Optional[str] = None) -> None:
    """
    Configure the root logger for a CLI run.

    Args:
        settings: Application settings
        level: Optional level name overriding settings.log_level
    """
    handlers = [logging.StreamHandler(sys.stderr)]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file, encoding="utf-8"))

    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
