"""
Logging setup for Stack Combiner.
"""

import os
import sys
import time
import logging
import logging.handlers
from pathlib import Path
from datetime import datetime


LOGGER_NAME = 'stack_combiner'

CONSOLE_FORMAT = '%(levelname)s: %(message)s'
FILE_FORMAT = '%(asctime)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'


def log_directory(log_dir=None):
    """Return the directory run logs are written to, creating it if needed."""
    if log_dir is None:
        if sys.platform == 'win32':
            base_dir = os.path.expandvars('%LOCALAPPDATA%')
        else:
            base_dir = os.path.expanduser('~')
        log_dir = Path(base_dir) / '.stack_combiner' / 'logs'

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def setup_logger(debug=False, log_to_file=True, log_dir=None):
    """Configure the application logger for one combiner run.

    Replaces any handlers left from an earlier run, logs to the console and,
    unless log_to_file is False, to a new ``combiner_<timestamp>.log`` file.
    Uncaught exceptions are routed to the same logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(level)

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    log_file = None
    if log_to_file:
        stamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        log_file = log_directory(log_dir) / f"combiner_{stamp}.log"
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=10*1024*1024, backupCount=5
        )
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    sys.excepthook = _excepthook(logger)

    logger.debug("Debug logging enabled")
    if log_file:
        logger.info(f"Log file: {log_file}")
    return logger


def _excepthook(logger):
    def handle(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logger.critical("Unhandled exception",
                        exc_info=(exc_type, exc_value, exc_traceback))
        print(f"An unexpected error occurred: {exc_value}", file=sys.stderr)
    return handle


class LogCapture(logging.Handler):
    """Times an operation and keeps the records logged while it runs.

    Used as a context manager around a single addition. Errors propagate.
    """

    def __init__(self, logger, operation_name):
        super().__init__()
        self.logger = logger
        self.operation_name = operation_name
        self.records = []
        self.elapsed = None
        self._start = None

    def emit(self, record):
        self.records.append(record)

    def __enter__(self):
        self.logger.info(f"Starting {self.operation_name}")
        self.logger.addHandler(self)
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed = time.perf_counter() - self._start
        self.logger.removeHandler(self)
        if exc_type:
            self.logger.error(
                f"{self.operation_name} failed after {self.elapsed:.3f} s: {exc_val}"
            )
        else:
            self.logger.info(
                f"Finished {self.operation_name} in {self.elapsed:.3f} s"
                f" ({len(self.warnings)} warnings)"
            )
        return False

    @property
    def warnings(self):
        """Captured records at WARNING level or above."""
        return [record for record in self.records if record.levelno >= logging.WARNING]

    def get_logs(self):
        """Return captured log messages."""
        return [record.getMessage() for record in self.records]
