from __future__ import annotations

import sys

from loguru import logger

from liftlog.config import Settings
from liftlog.logger import setup_logger


def test_file_sink_uses_settings(tmp_path) -> None:
    log_file = tmp_path / "logs" / "liftlog.log"
    cfg = Settings(LOG_FILE=str(log_file), LOG_LEVEL="INFO", LOG_ROTATION="1 MB", LOG_RETENTION="1 day")
    try:
        setup_logger(cfg)
        logger.debug("not written")
        logger.info("week 7 locked")
    finally:
        logger.remove()
        logger.add(sys.stderr)

    text = log_file.read_text(encoding="utf-8")
    assert "week 7 locked" in text
    assert "not written" not in text
