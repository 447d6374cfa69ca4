import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from . import settings

# Connection-pool chatter from requests drowns out per-product forecast messages.
NOISY_LOGGERS = ("urllib3",)


def setup_logger(
    name: str = None, log_level: int | str = None, log_file: Path = None
) -> logging.Logger:
    """
    Sets up console output plus a rotating dashboard log file.
    Level and file location default to settings.LOG_LEVEL and settings.LOG_DIR / settings.LOG_FILENAME.
    """
    log_level = log_level or settings.LOG_LEVEL
    log_file = Path(log_file) if log_file else settings.LOG_DIR / settings.LOG_FILENAME

    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Already configured by an earlier run in this process
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(file_handler)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logger
