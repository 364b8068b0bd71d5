"""Logging and observability utilities for the task card tools.

Everything logs under the ``taskcard`` logger hierarchy. Console output goes
to stderr, since stdout carries the MCP stdio transport, and an optional log
file receives one JSON object per record. Structured data travels on the
record as ``extra_fields``.
"""

from __future__ import annotations

import json
import time
import logging as std_logging
from contextlib import contextmanager
from datetime import datetime, timezone
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

LOGGER_NAME = "taskcard"

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s"
CONSOLE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _get_logger(suffix: str) -> std_logging.Logger:
    return std_logging.getLogger(f"{LOGGER_NAME}.{suffix}")


def _extra(**fields) -> Dict[str, Dict[str, Any]]:
    return {"extra_fields": fields}


def setup_logging(log_level: Union[str, int] = std_logging.INFO, log_file: Optional[Path] = None) -> std_logging.Logger:
    """Configure the ``taskcard`` logger; calling it again replaces the handlers."""
    level = log_level.upper() if isinstance(log_level, str) else log_level

    root = std_logging.getLogger(LOGGER_NAME)
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = std_logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(std_logging.Formatter(fmt=CONSOLE_FORMAT, datefmt=CONSOLE_DATE_FORMAT))
    root.addHandler(console)

    if log_file:
        json_file = std_logging.FileHandler(log_file, encoding="utf-8")
        json_file.setLevel(std_logging.DEBUG)
        json_file.setFormatter(JsonFormatter())
        root.addHandler(json_file)

    root.info("Task card logging initialized", extra=_extra(log_level=str(level), log_file=log_file))
    return root


class JsonFormatter(std_logging.Formatter):
    """Render a record as one JSON line, merging its ``extra_fields``."""

    def format(self, record: std_logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(getattr(record, "extra_fields", {}))

        # CJK descriptions stay readable in the log file
        return json.dumps(entry, ensure_ascii=False, default=str)


class PerformanceMonitor:
    """Timing samples per operation, e.g. ``classify_task_duration``."""

    def __init__(self):
        self.metrics: Dict[str, List[Dict[str, Any]]] = {}

    def record_metric(self, name: str, value: Any, tags: Optional[Dict[str, str]] = None) -> None:
        sample = {"timestamp": _utc_now(), "name": name, "value": value, "tags": tags or {}}
        self.metrics.setdefault(name, []).append(sample)
        _get_logger("performance").debug(f"Metric recorded: {name}={value}", extra=_extra(**sample))


performance_monitor = PerformanceMonitor()


@contextmanager
def _timed(logger: std_logging.Logger, operation_name: str, fields: Dict[str, Any]) -> Iterator[None]:
    """Log completion or failure of the wrapped block with its duration."""
    started = time.time()
    try:
        yield
    except Exception as e:
        duration = time.time() - started
        logger.error(
            f"Failed operation: {operation_name} after {duration:.3f}s - {e}",
            extra=_extra(
                operation=operation_name,
                status="failed",
                duration=duration,
                error_type=type(e).__name__,
                error_message=str(e),
                **fields,
            ),
            exc_info=True,
        )
        raise
    duration = time.time() - started
    logger.info(
        f"Completed operation: {operation_name} in {duration:.3f}s",
        extra=_extra(operation=operation_name, status="completed", duration=duration, **fields),
    )


def log_performance(operation_name: str):
    """Decorator recording ``<operation_name>_duration`` for every call."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            logger = _get_logger("performance")
            logger.debug(f"Starting operation: {operation_name}")
            started = time.time()
            tags = {"status": "success"}
            try:
                with _timed(logger, operation_name, {}):
                    return func(*args, **kwargs)
            except Exception as e:
                tags = {"status": "error", "error_type": type(e).__name__}
                raise
            finally:
                performance_monitor.record_metric(f"{operation_name}_duration", time.time() - started, tags)

        return wrapper
    return decorator


@contextmanager
def log_operation(operation_name: str, **extra_fields) -> Iterator[None]:
    """Log the start and outcome of a block under ``taskcard.operations``."""
    logger = _get_logger("operations")
    logger.info(
        f"Starting operation: {operation_name}",
        extra=_extra(operation=operation_name, status="started", **extra_fields),
    )
    with _timed(logger, operation_name, extra_fields):
        yield


class ObservabilityHooks:
    """Callbacks keyed by event type, fired when a task card event is logged."""

    def __init__(self):
        self.hooks: Dict[str, List[Callable[..., Any]]] = {}
        self.logger = _get_logger("observability")

    def register_hook(self, event_type: str, callback: Callable[..., Any]) -> None:
        self.hooks.setdefault(event_type, []).append(callback)
        self.logger.debug(f"Registered hook for event: {event_type}")

    def trigger_hooks(self, event_type: str, **data) -> None:
        """Call every hook for ``event_type``; a failing hook is logged and skipped."""
        callbacks = list(self.hooks.get(event_type, ()))
        if callbacks:
            self.logger.debug(f"Triggering {len(callbacks)} hooks for event: {event_type}")
        for hook in callbacks:
            try:
                hook(**data)
            except Exception as e:
                self.logger.error(f"Hook failed for event {event_type}: {e}")

    def log_event(self, event_type: str, task_id: Optional[str] = None, **data) -> None:
        payload = {"timestamp": _utc_now(), "task_id": task_id, **data}
        self.logger.info(f"Task card event: {event_type}", extra=_extra(event_type=event_type, **payload))
        self.trigger_hooks(event_type, **payload)


observability_hooks = ObservabilityHooks()


def log_error_with_context(error: Exception, context: Dict[str, Any], **extra_fields):
    """Log ``error`` under ``taskcard.errors`` with the operation context attached."""
    _get_logger("errors").error(
        f"Error in {context.get('operation', 'unknown operation')}: {error}",
        extra=_extra(
            timestamp=_utc_now(),
            error_type=type(error).__name__,
            error_message=str(error),
            context=context,
            **extra_fields,
        ),
        exc_info=True,
    )


def log_classification_event(level: int, confidence: float, tone: str, **extra_fields):
    observability_hooks.log_event("task_classified", level=level, confidence=confidence, tone=tone, **extra_fields)


def log_level_confirmation(suggested_level: int, confirmed_level: int, **extra_fields):
    """Log the level a user settled on after seeing the suggestion."""
    observability_hooks.log_event(
        "level_confirmed",
        suggested_level=suggested_level,
        confirmed_level=confirmed_level,
        overridden=suggested_level != confirmed_level,
        **extra_fields
    )


def log_task_card_event(event_type: str, task_id: str, **extra_fields):
    observability_hooks.log_event(f"task_card_{event_type.lower()}", task_id=task_id, **extra_fields)


def log_batch_preparation(total: int, prepared: int, failed: int, **extra_fields):
    """Log the outcome of a batch preparation run."""
    observability_hooks.log_event(
        "task_card_batch_prepared", total=total, prepared=prepared, failed=failed, **extra_fields
    )
