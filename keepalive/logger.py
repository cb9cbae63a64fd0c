import logging
import sys
import os
from logging.handlers import RotatingFileHandler
from datetime import datetime

LOGGER_NAME = 'keepalive'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

class Logger:
    """Process-wide logger for keepalive: daily rotating file plus stdout."""

    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(Logger, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        if Logger._initialized:
            return

        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(logging.DEBUG)

        if not self.logger.handlers:
            self.logger.addHandler(self._file_handler(os.getenv('KEEPALIVE_LOG_DIR', 'logs')))
            self.logger.addHandler(self._console_handler())

        Logger._initialized = True

    @staticmethod
    def _file_handler(log_dir: str) -> logging.Handler:
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, f"{LOGGER_NAME}_{datetime.now():%Y%m%d}.log")
        handler = RotatingFileHandler(log_file, maxBytes=10*1024*1024, backupCount=5)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        return handler

    @staticmethod
    def _console_handler() -> logging.Handler:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.INFO)
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))
        return handler

    def _set_console_level(self, level: int):
        for handler in self.logger.handlers:
            if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
                handler.setLevel(level)

    def set_level(self, level_name: str):
        """Set console level from a name such as 'DEBUG' or 'WARNING'."""
        level = logging.getLevelName(str(level_name).upper())
        if not isinstance(level, int):
            self.logger.warning(f"Unknown log level {level_name!r}, keeping INFO")
            return
        self._set_console_level(level)

    def set_verbose(self, verbose=True):
        self._set_console_level(logging.DEBUG if verbose else logging.INFO)

    def set_quiet(self, quiet=True):
        self._set_console_level(logging.WARNING if quiet else logging.INFO)

    def debug(self, message):
        self.logger.debug(message)

    def info(self, message):
        self.logger.info(message)

    def warning(self, message):
        self.logger.warning(message)

    def error(self, message):
        self.logger.error(message)

_logger = None

def get_logger():
    """Get the global logger instance."""
    global _logger
    if _logger is None:
        _logger = Logger()
    return _logger
