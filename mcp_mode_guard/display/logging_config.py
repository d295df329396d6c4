"""Logging configuration setup."""

import copy
import logging
import logging.config
import os
import sys
from datetime import datetime
from typing import Optional, Tuple  # noqa: UP035

from mcp_mode_guard.constants import DEFAULT_LOG_LEVEL, LOG_DIR

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

BASE_LOG_CFG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple_file": {
            "format": ("%(asctime)s - %(name)30s:%(lineno)-4d - " "%(levelname)-7s - %(message)s"),
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "file_handler": {
            "class": "logging.FileHandler",
            "level": "DEBUG",
            "formatter": "simple_file",
            "filename": "temp_log_name.log",
            "encoding": "utf-8",
        },
    },
    "loggers": {
        "mcp_mode_guard": {
            "handlers": ["file_handler"],
            "propagate": False,
            "level": DEFAULT_LOG_LEVEL,
        },
    },
    "root": {
        "handlers": ["file_handler"],
        "level": "WARNING",
    },
}


def setup_logging(
    log_lvl_str: str,
    *,
    quiet: bool = False,
    log_dir: Optional[str] = None,
) -> Tuple[str, str]:
    """
    Set up file logging for the ``mcp_mode_guard`` package.

    Args:
        log_lvl_str: Desired log level name (e.g. ``'debug'``).
        quiet: If *True*, print nothing to the console.
        log_dir: Directory for the log file (defaults to ``logs/``).

    Returns:
        A tuple of (log_file_path, validated_log_level).
    """
    log_lvl_valid = log_lvl_str.upper()
    if log_lvl_valid not in VALID_LEVELS:
        if not quiet:
            print(f"Warning: invalid log level '{log_lvl_str}'. Using '{DEFAULT_LOG_LEVEL}'.")
        log_lvl_valid = DEFAULT_LOG_LEVEL

    target_dir = log_dir or LOG_DIR
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    os.makedirs(target_dir, exist_ok=True)
    log_fpath = os.path.join(target_dir, f"mode_guard_{ts}_{log_lvl_valid}.log")

    log_cfg: dict = copy.deepcopy(BASE_LOG_CFG)
    log_cfg["handlers"]["file_handler"]["filename"] = log_fpath
    log_cfg["loggers"]["mcp_mode_guard"]["level"] = log_lvl_valid
    log_cfg["root"]["level"] = log_lvl_valid if log_lvl_valid == "DEBUG" else "WARNING"

    try:
        logging.config.dictConfig(log_cfg)
    except (ValueError, TypeError, AttributeError, ImportError) as e_log_cfg:
        if not quiet:
            print(f"Error applying logging configuration: {e_log_cfg}", file=sys.stderr)

    return log_fpath, log_lvl_valid
