import logging
from typing import Optional

import uvicorn

from price_engine.configs import settings

FORMAT = "%(levelprefix)s %(asctime)s [%(threadName)s] [%(name)s] %(message)s"


def get_logger(name: str = "price_engine", level: Optional[str] = None) -> logging.Logger:
    """Logger with a single console handler.

    Component loggers (``price_engine.static``, ``price_engine.batch``...)
    are children of the engine logger and propagate to its handler.
    """
    level = level or settings.LOG_LEVEL
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        formatter = uvicorn.logging.DefaultFormatter(
            FORMAT, datefmt="%Y-%m-%d %H:%M:%S"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
