"""Utility functions for the decline predictor."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

def setup_logging(log_level: int = logging.INFO, log_file: Optional[Path] = None) -> None:
    """Set up logging configuration.

    Args:
        log_level: Logging level to use (default: INFO)
        log_file: Optional path to a rotating log file
    """
    handlers = [RichHandler(rich_tracebacks=True)]

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5
        )
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )
