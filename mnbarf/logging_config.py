"""Logging setup for applications embedding mnbarf.

The library only logs to the "mnbarf" logger hierarchy
("mnbarf.service" for facade operations, "mnbarf.soap" for
attempts) and installs no handlers on import. Call configure_logging()
once at startup, or pass configure_logs=True to build_services(), to get
a rotating log file plus stderr output.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .infra.settings import SettingsLoader

LOGGER_NAME = "mnbarf"
LOG_FORMAT = "%(levelname)s %(asctime)s %(name)s %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _file_handler(settings: SettingsLoader) -> RotatingFileHandler:
    log_file = Path(settings.get("log_file"))
    log_file.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        log_file,
        maxBytes=int(settings.get("log_rotation_bytes", 1_048_576)),
        backupCount=int(settings.get("log_backup_count", 5)),
        encoding="utf-8",
    )


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach file and stderr handlers to the "mnbarf" logger.

    Path, level and rotation come from SettingsLoader; `level` overrides
    the configured level. Repeated calls only update the level.
    """
    settings = SettingsLoader()
    level_name = str(level or settings.get("log_level", "INFO")).upper()
    lvl = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(lvl)
    if logger.handlers:
        return logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    # stderr keeps stdout free for whatever the caller prints
    for handler in (_file_handler(settings), logging.StreamHandler()):
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
