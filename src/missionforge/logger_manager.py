import os
import sys

from loguru import logger

from missionforge.settings import settings


def setup_logger(level: str = settings.log_level, log_dir: str = settings.log_dir):
    """
    Configure the global loguru logger.
    - file sink under log_dir, rotated daily and kept 7 days
    - console sink on stderr so JSON printed on stdout stays clean
    """
    os.makedirs(log_dir, exist_ok=True)

    # drop the default handler to avoid duplicated lines
    logger.remove()

    logger.add(
        os.path.join(log_dir, "missionforge.log"),
        rotation="1 day",
        retention="7 days",
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function} | {message}",
    )

    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | <level>{message}</level>",
    )

    logger.debug("Logger initialized (level={}, dir={})", level, log_dir)
    return logger
