"""
Logging Setup Module.

Builds the application logger used across the code base. Log records may carry
either plain strings or dictionaries; dictionaries are rendered as single JSON
lines so that structured fields (repository, error, counts) stay machine readable.

Features:
- Console output for every run
- Rotating log files in the configured log directory
- Human readable console format in development mode
"""

import json
import logging
import os
from logging.handlers import RotatingFileHandler


class StructuredFormatter(logging.Formatter):
    """Formatter that serializes dict messages as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        if isinstance(record.msg, dict):
            payload = {
                "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
                "level": record.levelname,
                "logger": record.name,
                **record.msg,
            }
            if record.exc_info:
                payload["exception"] = self.formatException(record.exc_info)
            return json.dumps(payload, default=str)
        return super().format(record)


class LogManager:
    """
    Creates and configures the application logger.

    Attributes:
        logger (logging.Logger): Configured logger instance
    """

    def __init__(
        self,
        app_name: str,
        log_dir: str = "logs",
        development: bool = False,
        level: int = logging.DEBUG,
        max_bytes: int = 5 * 1024 * 1024,
        backup_count: int = 3,
    ):
        """Initialize logging handlers.

        Args:
            app_name (str): Logger name, also used for the log file name
            log_dir (str): Directory for log files
            development (bool): Use a readable console format instead of JSON
            level (int): Logging level
            max_bytes (int): Size at which the log file is rotated
            backup_count (int): Number of rotated files to keep
        """
        self.logger = logging.getLogger(app_name)
        self.logger.setLevel(level)
        self.logger.propagate = False

        # Avoid duplicate handlers when settings are reloaded
        if self.logger.handlers:
            return

        console_handler = logging.StreamHandler()
        if development:
            console_handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
                )
            )
        else:
            console_handler.setFormatter(StructuredFormatter("%(message)s"))
        self.logger.addHandler(console_handler)

        try:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(
                os.path.join(log_dir, f"{app_name}.log"),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
        except OSError as e:
            self.logger.warning(
                {"message": "File logging disabled", "log_dir": log_dir, "error": str(e)}
            )
            return

        file_handler.setFormatter(StructuredFormatter("%(message)s"))
        self.logger.addHandler(file_handler)
