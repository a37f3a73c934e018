import logging
import sys

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s]: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_level = logging.INFO


def configure_logging(level: str = "INFO"):
    """
    Set the level used by every logger handed out by get_logger().
    Loggers created before this call are updated in place.
    """
    global _level
    _level = logging.getLevelName(level.upper())
    if not isinstance(_level, int):
        _level = logging.INFO

    for name in list(logging.Logger.manager.loggerDict):
        if name.startswith("app."):
            logging.getLogger(name).setLevel(_level)


def get_logger(name: str):
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(_level)
    return logger
