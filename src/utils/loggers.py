import logging
import os
from logging.handlers import RotatingFileHandler

from termcolor import colored

from src.config import LOG_DIR, LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(name: str, filename: str, max_bytes: int, backup_count: int) -> logging.Logger:
    """
    Console and rotating file output for the named logger.
    Handlers are attached once, so repeated calls (app factory in tests, several stores) reuse them.
    """
    _logger = logging.getLogger(name)
    _logger.setLevel(LOG_LEVEL)
    if _logger.handlers:
        return _logger

    if not os.path.exists(LOG_DIR):
        os.makedirs(LOG_DIR)

    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    _logger.addHandler(handler)

    handler = RotatingFileHandler(filename=os.path.join(LOG_DIR, filename), maxBytes=max_bytes, backupCount=backup_count)
    handler.setFormatter(formatter)
    _logger.addHandler(handler)

    return _logger


class ColoredLogger:

    def __init__(self, logfile_name: str, logger_name: str):
        self.logger = setup_logger(logger_name, logfile_name, max_bytes=1048576, backup_count=3)

    def info(self, message: str) -> None:
        self.logger.info(message)

    def warning(self, message: str) -> None:
        self.logger.warning(colored(message, 'light_yellow'))

    def error(self, message: str) -> None:
        self.logger.error(colored(message, 'light_red'))


logger = ColoredLogger(logfile_name='api.log', logger_name='REVENUE-API')


# Client side loggers write plain text to their own file
def get_logger(name: str, filename: str = "client.log") -> logging.Logger:
    return setup_logger(name, filename, max_bytes=10485760, backup_count=5)
