import logging
import logging.handlers
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from inventory_intelligence.config import config

ROOT_LOGGER_NAME = 'inventory_intelligence'

@dataclass
class RunLog:
    """Bookkeeping for one logged run of a batch process."""
    process_name: str
    started_at: datetime
    info: Dict[str, Any] = field(default_factory=dict)

def _format_fields(fields: Dict[str, Any]) -> str:
    return ', '.join(f"{key}={value}" for key, value in fields.items())

class Logger:
    """Logging manager for the inventory intelligence engine.

    Loggers are namespaced under ``inventory_intelligence`` and share one
    formatter. Each logger writes to the console and to its own rotating
    file under the configured log directory.
    """

    _instance = None
    _loggers = {}

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Logger, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._settings = config.log_config
        self._log_dir = Path(self._settings['directory'])
        self._formatter = logging.Formatter(self._settings['format'])
        self._level = getattr(logging, self._settings['level'].upper(), logging.INFO)

        if self._settings['file_output']:
            self._log_dir.mkdir(parents=True, exist_ok=True)

        # Module loggers created with logging.getLogger(__name__) propagate here
        self.get_logger(ROOT_LOGGER_NAME)

        self._initialized = True

    def _handlers_for(self, short_name):
        handlers = []

        if self._settings['file_output']:
            handlers.append(logging.handlers.RotatingFileHandler(
                self._log_dir / f"{short_name}.log",
                maxBytes=self._settings['max_size_mb'] * 1024 * 1024,
                backupCount=self._settings['backup_count']
            ))

        if self._settings['console_output']:
            handlers.append(logging.StreamHandler())

        for handler in handlers:
            handler.setFormatter(self._formatter)
        return handlers

    def get_logger(self, name):
        """Get a configured logger.

        Args:
            name: Short name such as ``refresh_job``; the package name itself
                returns the package logger

        Returns:
            Logger instance
        """
        if name in self._loggers:
            return self._loggers[name]

        full_name = name if name == ROOT_LOGGER_NAME else f"{ROOT_LOGGER_NAME}.{name}"
        logger = logging.getLogger(full_name)
        logger.setLevel(self._level)

        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        for handler in self._handlers_for(name):
            logger.addHandler(handler)

        # Records stay on this logger's own handlers
        logger.propagate = False

        self._loggers[name] = logger
        return logger

    def set_level(self, level):
        """Change the level of every logger created so far and of later ones."""
        self._level = level
        for logger in self._loggers.values():
            logger.setLevel(level)

    def batch_start_log(self, process_name, additional_info=None) -> RunLog:
        """Log the start of a batch process.

        Args:
            process_name: Name of the batch process
            additional_info: Optional dictionary of run parameters

        Returns:
            RunLog to hand back to batch_end_log
        """
        run_log = RunLog(process_name, datetime.now(), dict(additional_info or {}))

        batch_logger = self.get_logger('batch')
        batch_logger.info(f"Starting batch process: {process_name}")
        if run_log.info:
            batch_logger.info(f"Process parameters: {_format_fields(run_log.info)}")

        return run_log

    def batch_end_log(self, run_log: RunLog, success=True, result_info: Optional[Dict[str, Any]] = None) -> float:
        """Log the end of a batch process.

        Args:
            run_log: RunLog returned by batch_start_log
            success: Whether the process succeeded
            result_info: Optional dictionary of results

        Returns:
            Duration of the run in seconds
        """
        batch_logger = self.get_logger('batch')
        duration = (datetime.now() - run_log.started_at).total_seconds()

        if success:
            batch_logger.info(f"Completed batch process: {run_log.process_name} in {duration:.2f}s")
        else:
            batch_logger.error(f"Failed batch process: {run_log.process_name} after {duration:.2f}s")

        if result_info:
            batch_logger.info(f"Process results: {_format_fields(result_info)}")

        return duration

    def log_exception(self, logger_name, exception, message=None):
        """Log an exception with its stack trace.

        Args:
            logger_name: Short logger name
            exception: Exception object
            message: Optional message to prefix
        """
        text = f"{message}: {exception}" if message else str(exception)
        self.get_logger(logger_name).error(text, exc_info=(type(exception), exception, exception.__traceback__))

# Global logger instance
logger = Logger()

def get_logger(name):
    """Get a logger with the specified name."""
    return logger.get_logger(name)
