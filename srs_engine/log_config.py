import sys

from loguru import logger

from srs_engine.config import settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str = None) -> None:
    """Replace loguru's default sink with a stderr sink at the configured level"""
    logger.remove()
    logger.add(sys.stderr, level=(level or settings.log_level).upper(), format=LOG_FORMAT)
