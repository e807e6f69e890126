import logging
import sys
from pythonjsonlogger import jsonlogger

def setup_logger(name: str = "wonderlens", level: int = logging.INFO) -> logging.Logger:
    """
    Configure structured JSON logging for the application.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)

    formatter = jsonlogger.JsonFormatter(
        fmt="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger

logger = setup_logger()
