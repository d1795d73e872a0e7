"""Logging setup for the recipe book service.

Everything goes to the console; uvicorn's own loggers propagate to root.
"""
import logging


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger with a single console handler.

    Safe to call more than once: the handler is only added the first time,
    later calls just adjust the level.
    """
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s")

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    if not any(isinstance(h, logging.StreamHandler) for h in root_logger.handlers):
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        root_logger.addHandler(console)
