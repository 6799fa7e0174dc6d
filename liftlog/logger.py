from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from liftlog.config import Settings, settings as default_settings

_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} - {message}"


def setup_logger(cfg: Settings | None = None) -> None:
    """Send loguru output to stderr and, when LOG_FILE is set, to a rotating file."""
    cfg = cfg or default_settings
    logger.remove()
    logger.add(sys.stderr, format=_FORMAT, level=cfg.log_level)

    if cfg.log_file:
        path = Path(cfg.log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            path,
            format=_FORMAT,
            level=cfg.log_level,
            rotation=cfg.log_rotation,
            retention=cfg.log_retention,
        )

    logger.debug(f"Logging at {cfg.log_level}, file={cfg.log_file or '-'}")
