import logging
import os
import sys


def _debug_enabled() -> bool:
    return os.environ.get("LEDGER_DEBUG", "false").strip().lower() in ("1", "true", "yes", "on")


def setup_logger(name: str) -> logging.Logger:
    """Setup a logger with consistent formatting"""

    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    log_level = logging.DEBUG if _debug_enabled() else logging.INFO
    logger.setLevel(log_level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


def set_debug(enabled: bool) -> None:
    """Re-level loggers created before the config (and .env) was read."""
    level = logging.DEBUG if enabled else logging.INFO
    for name, logger in logging.Logger.manager.loggerDict.items():
        if not name.startswith("scoreledger") or not isinstance(logger, logging.Logger):
            continue
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
