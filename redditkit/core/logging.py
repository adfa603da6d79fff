import logging
import json
import time
from typing import Dict, Any, Optional
from contextvars import ContextVar
from redditkit.core.config import settings

correlation_context_var: ContextVar[Optional[Dict[str, Any]]] = ContextVar(
    "correlation_context", default=None
)

_RESERVED_ATTRS = set(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


def add_correlation_id(key: str, value: Any) -> None:
    """
    Add a key-value pair to the correlation context
    """
    ctx = dict(correlation_context_var.get() or {})
    ctx[key] = value
    correlation_context_var.set(ctx)


def get_correlation_context() -> Dict[str, Any]:
    """
    Get the current correlation context
    """
    return dict(correlation_context_var.get() or {})


def reset_correlation_context() -> None:
    """
    Reset the correlation context
    """
    correlation_context_var.set({})


class LogContext:
    """
    Helper class to manage logging context and create structured logs
    """

    def __init__(self, logger_name: str | None = None):
        self.logger = (
            logging.getLogger(logger_name) if logger_name else logging.getLogger()
        )

    def info(self, message: str, extra: Dict[str, Any] | None = None) -> None:
        self._log(logging.INFO, message, extra)

    def warning(self, message: str, extra: Dict[str, Any] | None = None) -> None:
        self._log(logging.WARNING, message, extra)

    def error(
        self, message: str, extra: Dict[str, Any] | None = None, exc_info: bool = False
    ) -> None:
        self._log(logging.ERROR, message, extra, exc_info)

    def debug(self, message: str, extra: Dict[str, Any] | None = None) -> None:
        self._log(logging.DEBUG, message, extra)

    def exception(self, message: str, extra: Dict[str, Any] | None = None) -> None:
        """
        Log an error message together with the active exception's traceback
        """
        self._log(logging.ERROR, message, extra, exc_info=True)

    def _log(
        self,
        level: int,
        message: str,
        extra: Dict[str, Any] | None = None,
        exc_info: bool = False,
    ) -> None:
        """
        Merge the correlation context into extra and emit the record
        """
        if not self.logger.isEnabledFor(level):
            return

        log_extra = {**get_correlation_context(), **(extra or {})}

        self.logger.log(level, message, extra=log_extra, exc_info=exc_info)


class CustomFormatter(logging.Formatter):
    """
    Formatter that renders every record as a single JSON object
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "path": f"{record.pathname}:{record.lineno}",
            "service": settings.PROJECT_NAME,
        }

        duration_ms = getattr(record, "duration_ms", None)
        if duration_ms is not None:
            log_entry["duration_ms"] = round(duration_ms, 2)

        for key, value in record.__dict__.items():
            if (
                key != "duration_ms"
                and not key.startswith("_")
                and key not in _RESERVED_ATTRS
            ):
                log_entry[key] = value

        if record.exc_info and isinstance(record.exc_info, tuple):
            exc_type, exc_value, *_ = record.exc_info
            if exc_type and exc_value:
                log_entry["error"] = {
                    "type": exc_type.__name__,
                    "message": str(exc_value),
                }

        return json.dumps(log_entry, default=str)


class PerformanceLogger:
    """
    Context manager timing an operation and logging its duration
    """

    def __init__(self, logger: LogContext, operation_name: str):
        self.logger = logger
        self.operation_name = operation_name
        self.start_time = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration_ms = (time.perf_counter() - self.start_time) * 1000
        extra = {"duration_ms": duration_ms, "operation": self.operation_name}

        if exc_type:
            self.logger.warning(
                f"Operation {self.operation_name} failed after {duration_ms:.2f}ms",
                extra={**extra, "error_type": exc_type.__name__},
            )
        else:
            self.logger.debug(
                f"Operation {self.operation_name} completed in {duration_ms:.2f}ms",
                extra=extra,
            )


def setup_logging() -> None:
    library_logger = logging.getLogger("redditkit")
    library_logger.setLevel(settings.LOG_LEVEL)
    library_logger.handlers = []

    formatter = CustomFormatter()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    library_logger.addHandler(console_handler)

    if settings.LOG_FILE:
        file_handler = logging.FileHandler(settings.LOG_FILE)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.DEBUG)
        library_logger.addHandler(file_handler)

    reset_correlation_context()
