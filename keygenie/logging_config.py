"""
logging_config.py — Centralised logging configuration.

Usage at an entry point:
    from keygenie.logging_config import configure_logging, get_logger
    configure_logging()          # call once
    log = get_logger("keygenie.cli")

Library modules only call get_logger(); they never configure handlers.
"""
import logging
import logging.config
import os
from typing import Optional

from . import config

# ---------------------------------------------------------------------------
# Named loggers used across the project
# "keygenie.engine"      : qubit generation, channel, sifting, session
# "keygenie.api"         : FastAPI surface and session store
# "keygenie.controller"  : Qt step-pacing adapter
# "keygenie.cli"         : command-line runner
# ---------------------------------------------------------------------------

LOGGER_NAMES = (
    "keygenie.engine",
    "keygenie.api",
    "keygenie.controller",
    "keygenie.cli",
)


def _build_config(log_dir: str, console_level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "brief": {
                "format": "[%(levelname)s] %(name)s: %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "brief",
                "level": console_level,
                "stream": "ext://sys.stderr",
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "standard",
                "level": "DEBUG",
                "filename": os.path.join(log_dir, "keygenie.log"),
                "maxBytes": 5_242_880,   # 5 MB before rotating
                "backupCount": 3,
                "mode": "a",
                "encoding": "utf-8",
            },
        },
        "loggers": {
            name: {
                "handlers": ["console", "file"],
                "level": "DEBUG",
                "propagate": False,
            }
            for name in LOGGER_NAMES
        },
        "root": {
            "level": "WARNING",
            "handlers": ["console"],
        },
    }


def configure_logging(log_dir: Optional[str] = None, console_level: Optional[str] = None) -> None:
    """
    Initialise logging from the built-in config dict.
    Call this exactly ONCE at the entry point (CLI, API server, Qt launcher).
    """
    log_dir = log_dir or config.LOG_DIR
    os.makedirs(log_dir, exist_ok=True)
    logging.config.dictConfig(_build_config(log_dir, console_level or config.LOG_LEVEL))


def get_logger(name: str) -> logging.Logger:
    """Convenience wrapper, returns a named logger."""
    return logging.getLogger(name)
