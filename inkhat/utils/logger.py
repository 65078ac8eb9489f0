import logging
import os
import sys
from datetime import datetime

# Define a singleton pattern to ensure the logger is only set up once
_logger_instance = None

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _level_from_env(default):
    name = os.environ.get('LOGLEVEL')
    if not name:
        return default
    return getattr(logging, name.upper(), default)


def setup_logger(name='inkhat', level=logging.DEBUG, console_level=None,
                 log_dir=None, log_file=None):
    """
    Set up and configure a logger.

    Args:
        name (str): Logger name
        level (int): Overall logging level
        console_level (int): Console logging level, defaults to $LOGLEVEL or INFO
        log_dir (str): Directory for log files, defaults to $EINK_LOG_DIR.
            No file handler is attached when neither is set.
        log_file (str): Specific log file to use, defaults to timestamped file

    Returns:
        logging.Logger: Configured logger
    """
    global _logger_instance

    # Return existing logger if already set up
    if _logger_instance is not None:
        return _logger_instance

    if console_level is None:
        console_level = _level_from_env(logging.INFO)

    if log_dir is None:
        log_dir = os.environ.get('EINK_LOG_DIR')

    logger = logging.getLogger(name)

    # Clear any existing handlers
    if logger.handlers:
        logger.handlers.clear()

    logger.setLevel(level)
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT)

    # Console handler for logging to console
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler only when a destination was asked for
    if log_dir is not None or log_file is not None:
        if log_file is None:
            os.makedirs(log_dir, exist_ok=True)
            log_file = os.path.join(log_dir, f'inkhat_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log')
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    _logger_instance = logger
    return logger


def get_logger():
    """
    Get the configured logger instance.
    If logger hasn't been set up, it will be initialized with default settings.

    Returns:
        logging.Logger: Logger instance
    """
    global _logger_instance

    if _logger_instance is None:
        _logger_instance = setup_logger()

    return _logger_instance


# Allows 'from inkhat.utils.logger import logger' throughout the package
logger = get_logger()
