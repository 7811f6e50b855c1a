"""Structured logging helpers.

Library modules obtain a :class:`LoggerAdapter` through :func:`get_logger`; the
adapter injects ``operation`` and ``status`` fields into every record so the
JSON output of a run can be filtered per declaration or per file. Handlers are
configured only at the application boundary via :func:`setup_logging`.

Examples
--------
>>> from compatibility_gen._shared.logging import get_logger, with_fields
>>> logger = get_logger(__name__)
>>> logger.info("Package processed", extra={"operation": "process_package"})
>>> adapter = with_fields(logger, package="github.com/openshift/api/config/v1")
>>> adapter.info("Resolving package")
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from compatibility_gen._shared.problem_details import JsonValue

__all__ = [
    "JsonFormatter",
    "LogValue",
    "LoggerAdapter",
    "get_logger",
    "setup_logging",
    "with_fields",
]

# Type alias for log values (same as Any, but more explicit)
type LogValue = Any

_STANDARD_ATTRIBUTES = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
        "ts",
    }
)


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Formats log records as JSON with timestamp, level, name, message and the
    structured fields attached through ``extra`` or a :class:`LoggerAdapter`.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Parameters
        ----------
        record : logging.LogRecord
            Log record to format. May include extra fields in record.__dict__.

        Returns
        -------
        str
            JSON-encoded log entry.
        """
        data: dict[str, JsonValue] = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S") + "Z",
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if (
                key not in _STANDARD_ATTRIBUTES
                and key not in data
                and not key.startswith("_")
                and value is not None
                and isinstance(value, (str, int, float, bool, list, dict))
            ):
                data[key] = value
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


class LoggerAdapter(logging.LoggerAdapter):  # type: ignore[type-arg]
    """Logger adapter that injects structured context fields.

    Fields bound at construction time are merged into the ``extra`` mapping of
    every call without overriding values supplied by the caller. ``operation``
    and ``status`` are always present; ``status`` is inferred from the level
    when missing.

    Parameters
    ----------
    logger : logging.Logger
        Base logger instance to wrap.
    extra : Mapping[str, object] | None, optional
        Structured fields to inject into log entries. Defaults to None.
    """

    logger: logging.Logger

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:  # noqa: ANN401
        """Merge bound fields into the ``extra`` mapping of a logging call.

        Parameters
        ----------
        msg : Any
            Log message.
        kwargs : Any
            Keyword arguments from the logging call, including ``extra``.

        Returns
        -------
        tuple[Any, Any]
            Message and keyword arguments with the merged ``extra`` mapping.
        """
        extra = dict(kwargs.get("extra") or {})
        if isinstance(self.extra, Mapping):
            for key, value in self.extra.items():
                extra.setdefault(key, value)
        extra.setdefault("operation", "unknown")
        kwargs["extra"] = extra
        return msg, kwargs

    def log(self, level: int, msg: object, *args: object, **kwargs: Any) -> None:  # noqa: ANN401
        """Log ``msg`` at ``level``, inferring ``status`` from the level."""
        if not self.isEnabledFor(level):
            return
        extra = dict(kwargs.get("extra") or {})
        if "status" not in extra:
            if level >= logging.ERROR:
                extra["status"] = "error"
            elif level >= logging.WARNING:
                extra["status"] = "warning"
            else:
                extra["status"] = "success"
        kwargs["extra"] = extra
        super().log(level, msg, *args, **kwargs)

    def debug(self, msg: object, *args: object, **kwargs: Any) -> None:  # noqa: ANN401
        """Log a debug message with structured fields."""
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: object, *args: object, **kwargs: Any) -> None:  # noqa: ANN401
        """Log an info message with structured fields."""
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: object, *args: object, **kwargs: Any) -> None:  # noqa: ANN401
        """Log a warning message with structured fields."""
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: object, *args: object, **kwargs: Any) -> None:  # noqa: ANN401
        """Log an error message with structured fields."""
        self.log(logging.ERROR, msg, *args, **kwargs)

    def exception(
        self,
        msg: object,
        *args: object,
        exc_info: Any = True,  # noqa: ANN401
        **kwargs: Any,  # noqa: ANN401
    ) -> None:
        """Log an error message with exception info and structured fields."""
        self.log(logging.ERROR, msg, *args, exc_info=exc_info, **kwargs)

    def critical(self, msg: object, *args: object, **kwargs: Any) -> None:  # noqa: ANN401
        """Log a critical message with structured fields."""
        self.log(logging.CRITICAL, msg, *args, **kwargs)


def get_logger(name: str) -> LoggerAdapter:
    """Return a logger adapter with structured logging support.

    Module-level loggers receive a ``NullHandler`` so importing the library
    never configures output on its own.

    Parameters
    ----------
    name : str
        Logger name (typically __name__).

    Returns
    -------
    LoggerAdapter
        Logger adapter with structured context injection.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return LoggerAdapter(logger, {})


def with_fields(logger: logging.Logger | LoggerAdapter, **fields: LogValue) -> LoggerAdapter:
    """Return a structured adapter bound to ``fields``.

    Fields already bound on ``logger`` are kept; ``fields`` win on conflict.

    Parameters
    ----------
    logger : logging.Logger | LoggerAdapter
        Base logger to wrap (may already be an adapter).
    **fields : LogValue
        Structured fields to inject into all log entries.

    Returns
    -------
    LoggerAdapter
        Logger adapter with bound fields.
    """
    if isinstance(logger, LoggerAdapter):
        base_logger = logger.logger
        bound: dict[str, LogValue] = dict(logger.extra or {})
    else:
        base_logger = logger
        bound = {}
    bound.update(fields)
    return LoggerAdapter(base_logger, bound)


def setup_logging(level: int | str = logging.INFO, *, json_format: bool = True) -> None:
    """Configure the root logger for command line use.

    Parameters
    ----------
    level : int | str, optional
        Logging level threshold. Defaults to ``logging.INFO``.
    json_format : bool, optional
        Emit JSON lines when True, plain ``LEVEL: message`` text otherwise.
    """
    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logging.basicConfig(level=level, handlers=[handler], force=True)
