import logging
import os
from pathlib import Path
from typing import Optional

LOG_DIR = Path(__file__).parent.parent / "logs"
LOG_FILE = LOG_DIR / "app.log"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Cache for log mode to avoid repeated environment reads
_log_mode_cache: Optional[str] = None


def _get_log_mode() -> str:
    """Get log mode (off / info / debug) from the environment."""
    global _log_mode_cache
    if _log_mode_cache is not None:
        return _log_mode_cache

    log_mode = os.environ.get('WISENEST_LOG_MODE', 'info').strip().lower()
    if log_mode not in ('off', 'info', 'debug'):
        log_mode = 'info'
    _log_mode_cache = log_mode
    return log_mode


def _file_logging_enabled() -> bool:
    return os.environ.get('WISENEST_LOG_TO_FILE', '').strip().lower() in ('1', 'true', 'yes')


def _levels_for(log_mode: str):
    if log_mode == 'debug':
        return logging.DEBUG, logging.DEBUG
    if log_mode == 'off':
        # Higher than CRITICAL disables everything
        return logging.CRITICAL + 1, logging.CRITICAL + 1
    return logging.INFO, logging.INFO


def _make_file_handler(formatter: logging.Formatter) -> logging.FileHandler:
    LOG_DIR.mkdir(exist_ok=True)
    f_handler = logging.FileHandler(LOG_FILE, encoding='utf-8')
    f_handler.setLevel(logging.DEBUG)
    f_handler.setFormatter(formatter)
    return f_handler


def _apply_mode(logger: logging.Logger, log_mode: str) -> None:
    """Align an already configured logger with the given log mode."""
    logger_level, console_level = _levels_for(log_mode)
    logger.setLevel(logger_level)

    want_file = log_mode != 'off' and _file_logging_enabled()
    file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]

    if want_file and not file_handlers:
        logger.addHandler(_make_file_handler(logging.Formatter(LOG_FORMAT)))
    elif not want_file and file_handlers:
        for handler in file_handlers:
            handler.close()
            logger.removeHandler(handler)

    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
            handler.setLevel(console_level)


def set_log_mode(log_mode: Optional[str] = None) -> None:
    """
    Change the log mode and update all loggers created by get_logger.

    Passing None re-reads WISENEST_LOG_MODE from the environment.
    """
    global _log_mode_cache
    _log_mode_cache = None
    if log_mode is not None:
        os.environ['WISENEST_LOG_MODE'] = log_mode
    mode = _get_log_mode()

    for logger_name in list(logging.Logger.manager.loggerDict.keys()):
        if not logger_name.startswith('wisenest_i18n'):
            continue
        logger = logging.getLogger(logger_name)
        if logger.handlers:
            _apply_mode(logger, mode)


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    log_mode = _get_log_mode()

    # Prevent duplicate handlers if logger already configured
    if logger.handlers:
        _apply_mode(logger, log_mode)
        return logger

    logger_level, console_level = _levels_for(log_mode)
    logger.setLevel(logger_level)
    formatter = logging.Formatter(LOG_FORMAT)

    if log_mode != 'off' and _file_logging_enabled():
        logger.addHandler(_make_file_handler(formatter))

    c_handler = logging.StreamHandler()
    c_handler.setLevel(console_level)
    c_handler.setFormatter(formatter)
    logger.addHandler(c_handler)

    return logger
