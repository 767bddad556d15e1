"""Logging setup shared by the API and scripts."""
from __future__ import annotations

import logging
import os
from pathlib import Path


def setup_logging() -> None:
    """Configure console logging, plus a log file when ``NOTESCOPE_LOG_FILE`` is set."""
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return

    level_name = os.getenv("NOTESCOPE_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    log_file = os.getenv("NOTESCOPE_LOG_FILE")

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.setLevel(level)
