import dataclasses
import enum
import json
import logging
import os
import traceback
from datetime import datetime, timezone
from logging.handlers import QueueHandler, QueueListener
import queue
import sys
from typing import Any, Dict, Optional, Tuple, List
from logging import Handler

from .config import Settings


_REDACT_KEYS: set[str] = set()

_logger: Optional[logging.Logger] = None
_log_listener: Optional[QueueListener] = None


def json_dumps_compact(obj: Any) -> str:
    """Compact JSON serialization with minimal separators."""
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"))


def is_json_serializable(obj: Any) -> bool:
    """Check if object is JSON serializable."""
    try:
        json.dumps(obj)
        return True
    except (TypeError, ValueError):
        return False


def _sanitize_for_json(obj: Any) -> Any:
    """Recursively sanitize an object for JSON serialization.

    Converts non-serializable types (bytes, dataclasses, etc.) into
    JSON-compatible structures while redacting sensitive fields. Keys listed in
    ``_REDACT_KEYS`` are replaced and null values are dropped.

    Args:
        obj (Any): Input object to sanitize.

    Returns:
        Any: JSON-serializable structure with sensitive data redacted.
    """
    if isinstance(obj, bytes):
        return obj.decode("utf-8", "replace")
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return _sanitize_for_json(dataclasses.asdict(obj))
    if isinstance(obj, dict):
        redacted = {}
        for k, v in obj.items():
            if isinstance(k, str) and k.lower() in _REDACT_KEYS:
                redacted[k] = "***REDACTED***"
            else:
                sanitized_value = _sanitize_for_json(v)
                if sanitized_value is not None:
                    redacted[k] = sanitized_value
        return redacted
    if isinstance(obj, (list, tuple, set)):
        return [_sanitize_for_json(x) for x in obj if x is not None]
    if is_json_serializable(obj):
        return obj
    return repr(obj)


class LogEvent(enum.Enum):
    """Enumeration of structured log events emitted throughout ccoptimizer.

    These constants are used in ``LogRecord.event`` so cache, routing, cost
    and batch activity can be filtered consistently downstream.
    """

    CACHE_HIT = "cache_hit"
    CACHE_MISS = "cache_miss"
    CACHE_EVENT = "cache_event"
    CACHE_EVICTION = "cache_eviction"
    SNAPSHOT_EXPORT = "snapshot_export"
    SNAPSHOT_IMPORT = "snapshot_import"
    MODEL_SELECTION = "model_selection"
    COST_TRACKING = "cost_tracking"
    PROMPT_CACHE = "prompt_cache"
    BATCH_EVENT = "batch_event"
    BENCHMARK_EVENT = "benchmark_event"


@dataclasses.dataclass
class LogError:
    """Structured representation of an exception attached to a log entry.

    Attributes:
        name: Exception class name.
        message: Human-readable description.
        stack_trace: Full traceback string (may be ``None`` when suppressed).
        args: JSON-safe serialization of ``Exception.args``.
    """

    name: str
    message: str
    stack_trace: Optional[str] = None
    args: Optional[Tuple[Any, ...]] = None


@dataclasses.dataclass
class LogRecord:
    """Primary payload transported via the logging system.

    Attributes:
        event: Identifier from :class:`LogEvent` or custom tag.
        message: Short human-readable summary.
        data: Arbitrary contextual dictionary (sanitized/truncated).
        error: Optional :class:`LogError` with exception details.
    """

    event: str
    message: str
    data: Optional[Dict[str, Any]] = None
    error: Optional[LogError] = None


class JSONFormatter(logging.Formatter):
    """Formatter that outputs log records as compact JSON lines.

    Used for file logging or machine-ingestible stdout. It injects timestamp,
    level and logger name, serializes attached :class:`LogRecord`, truncates
    oversized strings, and redacts configured sensitive fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        header: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }
        log_payload = getattr(record, "log_record", None)
        if isinstance(log_payload, LogRecord):
            detail = _sanitize_for_json(dataclasses.asdict(log_payload))
            if (
                isinstance(detail, dict)
                and detail.get("data")
                and isinstance(detail["data"], dict)
            ):
                for key, value in detail["data"].items():
                    if isinstance(value, str) and len(value) > 5000:
                        detail["data"][key] = value[:5000] + "...[truncated]"
            header["detail"] = detail
        else:
            header["message"] = record.getMessage()
            if record.exc_info:
                exc_type, exc_value, exc_tb = record.exc_info
                header["error"] = _sanitize_for_json(
                    {
                        "name": exc_type.__name__ if exc_type else "UnknownError",
                        "message": str(exc_value),
                        "stack_trace": "".join(
                            traceback.format_exception(exc_type, exc_value, exc_tb)
                        ),
                    }
                )
        return json_dumps_compact(_sanitize_for_json(header))


class ConsoleJSONFormatter(JSONFormatter):
    """Variant of :class:`JSONFormatter` tuned for interactive consoles.

    Drops stack traces and indents the JSON payload for readability.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = json.loads(super().format(record))
        detail = payload.get("detail")
        if isinstance(detail, dict) and isinstance(detail.get("error"), dict):
            detail["error"].pop("stack_trace", None)
        if isinstance(payload.get("error"), dict):
            payload["error"].pop("stack_trace", None)
        return json.dumps(payload, ensure_ascii=False, indent=2)


def init_logging(settings: Settings) -> logging.Logger:
    global _logger
    global _log_listener
    global _REDACT_KEYS
    shutdown_logging()

    log_queue: queue.Queue = queue.Queue(-1)
    queue_handler = QueueHandler(log_queue)

    # stderr keeps stdout free for CLI output
    console_handler = logging.StreamHandler(stream=sys.stderr)
    console_handler.setFormatter(
        ConsoleJSONFormatter() if settings.log_pretty_console else JSONFormatter()
    )

    handlers: List[Handler] = [console_handler]

    if settings.log_file_path:
        try:
            log_dir = os.path.dirname(settings.log_file_path)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.FileHandler(
                settings.log_file_path, mode="a", encoding="utf-8"
            )
            file_handler.setFormatter(JSONFormatter())
            handlers.append(file_handler)
        except OSError as e:
            logging.getLogger(settings.app_name).warning(
                "Failed to configure file logging: %s", e
            )

    if settings.error_log_file_path:
        try:
            err_dir = os.path.dirname(settings.error_log_file_path)
            if err_dir:
                os.makedirs(err_dir, exist_ok=True)
            err_handler = logging.FileHandler(
                settings.error_log_file_path, mode="a", encoding="utf-8"
            )
            err_handler.setLevel(logging.ERROR)
            err_handler.setFormatter(JSONFormatter())
            handlers.append(err_handler)
        except OSError as e:
            logging.getLogger(settings.app_name).warning(
                "Failed to configure error file logging: %s", e
            )

    _log_listener = QueueListener(log_queue, *handlers, respect_handler_level=True)
    _log_listener.start()

    logger = logging.getLogger(settings.app_name)
    logger.handlers = [queue_handler]
    logger.propagate = False
    logger.setLevel(settings.log_level.upper())

    _logger = logger
    _REDACT_KEYS = {k.lower() for k in settings.redact_log_fields}
    return _logger


def shutdown_logging() -> None:
    """Safely shutdown logging system, flushing all messages."""
    global _log_listener
    if _log_listener:
        _log_listener.stop()
        _log_listener = None


def _log(level: int, record: LogRecord, exc: Optional[Exception] = None) -> None:
    """Internal helper to log structured messages with exception handling.

    Processes the exception (if provided) into the LogRecord's error field
    and emits the log entry at the specified level.

    Args:
        level: The logging level (e.g., logging.DEBUG, logging.ERROR)
        record: The structured log record containing event details
        exc: Optional exception to include in error details
    """
    if exc:
        sanitized = _sanitize_for_json(exc.args)
        sanitized_args = (
            tuple(sanitized) if isinstance(sanitized, (list, tuple)) else (sanitized,)
        )
        record.error = LogError(
            name=type(exc).__name__,
            message=str(exc),
            stack_trace="".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            ),
            args=sanitized_args,
        )
        if not record.message:
            record.message = str(exc) or "An unspecified error occurred"

    if _logger:
        _logger.log(level=level, msg=record.message, extra={"log_record": record})


def debug(record: LogRecord) -> None:
    _log(logging.DEBUG, record)


def info(record: LogRecord) -> None:
    _log(logging.INFO, record)


def warning(record: LogRecord, exc: Optional[Exception] = None) -> None:
    _log(logging.WARNING, record, exc=exc)


def error(record: LogRecord, exc: Optional[Exception] = None) -> None:
    _log(logging.ERROR, record, exc=exc)
