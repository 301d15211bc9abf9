import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from . import config

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_FILE = "docu.log"

# SDK and HTTP client loggers, held at WARNING
QUIET_LOGGERS = ("anthropic", "httpx", "httpcore")


def setup_logging(log_dir: Path | None = None, console_level: str | int | None = None) -> logging.Logger:
    """Configure the "docu" logger tree once; later calls return it unchanged.

    Every docu.* record goes to a rotating file in ``log_dir`` (the workspace
    by default). The console only shows ``console_level`` and up, which
    defaults to DOCU_LOG_LEVEL.
    """
    logger = logging.getLogger("docu")
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter(LOG_FORMAT)

    log_dir = log_dir or config.WORKSPACE_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=config.LOG_MAX_BYTES,
        backupCount=config.LOG_BACKUP_COUNT,
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level or config.LOG_LEVEL)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Logging to %s (console level %s)", log_file,
                 logging.getLevelName(console_handler.level))
    return logger
