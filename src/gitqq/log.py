#!/usr/bin/env python3
"""
log - File logging for gitqq operations.

Console output is for the user; the log files keep the history of git
commands, store mutations and fallbacks.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def get_log_dir() -> Path:
    """~/.gitqq/logs, or GITQQ_LOG_DIR; falls back to the temp dir when unwritable."""
    override = os.environ.get("GITQQ_LOG_DIR")
    log_dir = Path(override).expanduser() if override else Path.home() / ".gitqq" / "logs"
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        log_dir = Path(tempfile.gettempdir())
    if not os.access(log_dir, os.W_OK):
        log_dir = Path(tempfile.gettempdir())
    return log_dir


def setup_logging(log_dir: Optional[Path] = None, level: int = logging.INFO) -> logging.Logger:
    """Attach the gitqq.log / gitqq_errors.log handlers to the package logger."""
    logger = logging.getLogger("gitqq")
    logger.setLevel(level)
    logger.propagate = False

    # Called again (tests, repeated main()) - don't stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    log_dir = Path(log_dir) if log_dir else get_log_dir()

    fh = logging.FileHandler(log_dir / "gitqq.log", encoding='utf-8')
    fh.setLevel(level)

    eh = logging.FileHandler(log_dir / "gitqq_errors.log", encoding='utf-8')
    eh.setLevel(logging.ERROR)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    fh.setFormatter(formatter)
    eh.setFormatter(formatter)

    logger.addHandler(fh)
    logger.addHandler(eh)
    return logger
