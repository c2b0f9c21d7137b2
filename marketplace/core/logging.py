import logging
import sys
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TYPE_CHECKING
from pathlib import Path
import traceback

if TYPE_CHECKING:
    from marketplace.core.environments.base import BaseConfig


TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Extra record attributes copied into JSON output when present
EXTRA_FIELDS = (
    "operation",
    "table",
    "success",
    "execution_time",
    "error_type",
    "error_code",
    "record_id",
    "row_count",
)


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for field_name in EXTRA_FIELDS:
            if hasattr(record, field_name):
                log_entry[field_name] = getattr(record, field_name)

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(log_entry, default=str)


class AppLogger:
    """Centralized logging configuration"""

    def __init__(self):
        self._loggers: Dict[str, logging.Logger] = {}
        self._configured = False

    def setup(
        self,
        level: str = "INFO",
        log_format: str = "json",
        log_file: Optional[str] = None,
    ) -> None:
        """Install handlers on the root logger, replacing existing ones"""
        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        if log_format == "json":
            formatter: logging.Formatter = JSONFormatter()
        else:
            formatter = logging.Formatter(TEXT_FORMAT)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler.setLevel(level)
        root_logger.addHandler(console_handler)

        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path)
            file_handler.setFormatter(formatter)
            file_handler.setLevel(logging.DEBUG)
            root_logger.addHandler(file_handler)

        self._configured = True

    @property
    def configured(self) -> bool:
        return self._configured

    def get_logger(self, name: str) -> logging.Logger:
        """Get or create a logger with the given name"""
        if name not in self._loggers:
            self._loggers[name] = logging.getLogger(name)
        return self._loggers[name]

    def log_error(self, logger: logging.Logger, error: Exception,
                  context: Optional[Dict[str, Any]] = None):
        """Log error with context"""
        extra = {"error_type": error.__class__.__name__}
        if context:
            extra.update(context)

        logger.error(
            f"Error occurred: {str(error)}",
            extra=extra,
            exc_info=True
        )

    def log_database_operation(self, logger: logging.Logger, operation: str,
                               table: str, success: bool, execution_time: float,
                               error: Optional[Exception] = None):
        """Log database operations"""
        level = logging.DEBUG if success else logging.WARNING
        extra: Dict[str, Any] = {
            "operation": operation,
            "table": table,
            "success": success,
            "execution_time": execution_time,
        }
        message = f"Database {operation} on {table}: {'SUCCESS' if success else 'FAILED'} ({execution_time:.3f}s)"
        if error is not None:
            extra["error_type"] = error.__class__.__name__
            extra["error_code"] = getattr(error, "code", None)
            message = f"{message}: {error}"

        logger.log(level, message, extra=extra)


# Global logger instance
app_logger = AppLogger()


def setup_logging(config: "BaseConfig") -> None:
    """Configure logging from loaded settings."""
    app_logger.setup(
        level=config.log_level,
        log_format=config.log_format,
        log_file=config.log_file,
    )


# Convenience function to get logger
def get_logger(name: str) -> logging.Logger:
    return app_logger.get_logger(name)
