"""Tests for loguru setup."""
from __future__ import annotations

from loguru import logger

from missionforge.logger_manager import setup_logger


def test_setup_logger_writes_to_file(tmp_path) -> None:
    log_dir = tmp_path / "logs"
    setup_logger(level="DEBUG", log_dir=str(log_dir))

    logger.info("hello from the test")
    logger.remove()

    text = (log_dir / "missionforge.log").read_text(encoding="utf-8")
    assert "hello from the test" in text
