import logging

from wellcontrol.core.config import settings


def configure_logging(level: str = None) -> None:
    """
    Configure root logging for the engine and its callers.

    Args:
        level: Optional level name overriding settings.LOG_LEVEL
    """
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
