"""
Logging setup for dexwatch.

config/logging.yaml is applied with dictConfig when present. Without it,
a console handler is installed and the chatty library loggers (web3 RPC
traffic, urllib3 connection pool, APScheduler job runs) are held at
WARNING so per-tick output stays readable.
"""

import logging
import logging.config
import os
import sys
from pathlib import Path
from typing import Optional

import yaml

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

QUIET_LOGGERS = ("web3", "urllib3", "apscheduler")


def default_logging_config() -> Optional[Path]:
    """config/logging.yaml next to the project's pyproject.toml, if any."""
    for parent in Path(__file__).resolve().parents:
        if (parent / "pyproject.toml").exists():
            return parent / "config" / "logging.yaml"
    return None


def setup_logging(
    config_path: Optional[str] = None,
    log_level: Optional[str] = None,
) -> None:
    """
    Configure logging for the process.

    Args:
        config_path: logging.yaml to apply. Defaults to the bundled one.
        log_level: Level for the dexwatch loggers. Defaults to LOG_LEVEL, then INFO.
    """
    level = getattr(logging, (log_level or os.getenv("LOG_LEVEL", "INFO")).upper())
    path = Path(config_path) if config_path else default_logging_config()

    if path is not None and path.exists():
        with open(path, "r", encoding="utf-8") as f:
            logging.config.dictConfig(yaml.safe_load(f))
    else:
        logging.basicConfig(
            level=level,
            format=LOG_FORMAT,
            datefmt=DATE_FORMAT,
            handlers=[logging.StreamHandler(sys.stdout)],
        )
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logging.getLogger("dexwatch").setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Logger under the dexwatch namespace ('persistence' -> 'dexwatch.persistence')."""
    if not name.startswith("dexwatch"):
        name = f"dexwatch.{name}"
    return logging.getLogger(name)


class LoggerMixin:
    """Gives a class `self.logger`, named after the class."""

    @property
    def logger(self) -> logging.Logger:
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger
