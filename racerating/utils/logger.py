"""
Global logging configuration
Shared handlers and formatting for every racerating module.
"""
import logging
import os
import sys
import time
from pathlib import Path
from typing import Optional


PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DEFAULT_LOGS_DIR = PROJECT_ROOT / "logs"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

LOG_LEVELS = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
}

_HANDLER_MARK = '_racerating_handler'


def get_logs_dir() -> Path:
    """Log directory, overridable with RACERATING_LOG_DIR"""
    return Path(os.getenv('RACERATING_LOG_DIR', str(DEFAULT_LOGS_DIR)))


def setup_logger(
    name: Optional[str] = None,
    level: str = 'INFO',
    log_to_file: bool = True,
    log_to_console: bool = True,
    log_file_name: Optional[str] = None,
    encoding: str = 'utf-8'
) -> logging.Logger:
    """
    Attach console and file handlers to a logger and set its level.
    Handlers added by an earlier call are replaced, other handlers are kept.
    """
    logger = logging.getLogger(name) if name else logging.getLogger()

    for handler in [h for h in logger.handlers if getattr(h, _HANDLER_MARK, False)]:
        logger.removeHandler(handler)
        handler.close()

    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)
    logger.setLevel(log_level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    handlers = []
    if log_to_console:
        handlers.append(logging.StreamHandler(sys.stdout))

    if log_to_file:
        if log_file_name is None:
            today = time.strftime('%Y_%m_%d', time.localtime())
            log_file_name = f"{today}.log"

        logs_dir = get_logs_dir()
        logs_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(logs_dir / log_file_name, encoding=encoding, mode='a'))

    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_MARK, True)
        logger.addHandler(handler)

    # a named logger with its own handlers must not print twice via the root
    if name:
        logger.propagate = False

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Module logger. It carries no handlers of its own: records propagate to
    the root logger configured by configure_root_logger.
    """
    return logging.getLogger(name) if name else logging.getLogger()


def configure_root_logger(
    level: str = 'INFO',
    log_to_file: bool = True,
    log_to_console: bool = True,
    log_file_name: Optional[str] = None
) -> None:
    """Configure the root logger at program start; calling again replaces its handlers"""
    setup_logger(
        name=None,
        level=level,
        log_to_file=log_to_file,
        log_to_console=log_to_console,
        log_file_name=log_file_name
    )
