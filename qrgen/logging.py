"""Logging for qrgen: AUDIT-level result events and traced entry points.

Records carry an ``event`` tag and a ``ctx`` dict instead of a formatted
message. Two formatters render them: one JSON object per line for log
files, or a single coloured line for the terminal.
"""

import functools
import json
import logging
import sys
import time
import traceback
from datetime import datetime, timezone

# Between WARNING (30) and ERROR (40): visible under the CLI's default level
AUDIT = 35
logging.addLevelName(AUDIT, "AUDIT")

ROOT_LOGGER = "qrgen"

# Silent until the host application configures logging
logging.getLogger(ROOT_LOGGER).addHandler(logging.NullHandler())

# ANSI colours per level name
LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "AUDIT": "\033[35m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
}
_RESET = "\033[0m"


def _truncate(value: object, max_len: int = 80) -> str:
    s = str(value)
    return s if len(s) <= max_len else s[:max_len] + "..."


def _summarize(value: object) -> str:
    """Short description of an argument or return value."""
    if isinstance(value, (str, int, float, bool)) or value is None:
        return _truncate(repr(value))
    if isinstance(value, (bytes, bytearray, list, tuple)):
        return f"{type(value).__name__}[{len(value)}]"
    if isinstance(value, dict):
        return f"dict[{len(value)} keys]"
    s = repr(value)
    return f"<{type(value).__name__}>" if len(s) > 100 else _truncate(s)


def _timestamp(record: logging.LogRecord, fmt: str) -> str:
    """UTC time of ``record`` in ``fmt``, cut to milliseconds."""
    return datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(fmt)[:-3]


def _plain_message(record: logging.LogRecord) -> str | None:
    """The %-formatted message of an ordinary (non-event) record."""
    if hasattr(record, "event"):
        return None
    return record.getMessage() or None


class JsonFormatter(logging.Formatter):
    """One JSON object per record, for log files and machine consumers."""

    def format(self, record):
        entry = {
            "ts": _timestamp(record, "%Y-%m-%dT%H:%M:%S.%f") + "Z",
            "level": record.levelname,
            "src": record.name,
        }
        for key in ("event", "ctx"):
            if hasattr(record, key):
                entry[key] = getattr(record, key)
        if hasattr(record, "duration_ms"):
            entry["duration_ms"] = round(record.duration_ms, 2)
        msg = _plain_message(record)
        if msg:
            entry["msg"] = msg
        if record.exc_info and record.exc_info[1]:
            entry["traceback"] = traceback.format_exception(*record.exc_info)
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Single-line terminal output: time, level, logger, event and context.

    Args:
        color: Wrap the level name in ANSI colour codes.
    """

    def __init__(self, color: bool = True):
        super().__init__()
        self.color = color

    def _level(self, name: str) -> str:
        if not self.color or name not in LEVEL_COLORS:
            return f"{name:5s}"
        return f"{LEVEL_COLORS[name]}{name:5s}{_RESET}"

    def format(self, record):
        parts = [_timestamp(record, "%H:%M:%S.%f"), self._level(record.levelname), f"[{record.name}]"]
        if hasattr(record, "event"):
            parts.append(record.event)
        if hasattr(record, "duration_ms"):
            parts.append(f"({record.duration_ms:.1f}ms)")

        ctx = getattr(record, "ctx", None)
        if ctx:
            parts.extend(f"{k}={_truncate(v)}" for k, v in ctx.items())
        else:
            msg = _plain_message(record)
            if msg:
                parts.append(msg)

        line = " ".join(parts)
        if record.exc_info and record.exc_info[1]:
            line += "\n" + "".join(traceback.format_exception(*record.exc_info))
        return line


def _resolve_level(level: str) -> int:
    """Numeric level for a name such as "debug" or "AUDIT"; unknown names mean INFO."""
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: str = "INFO", log_file: str | None = None, json_format: bool = False):
    """Replace the handlers of the ``qrgen`` logger.

    Args:
        level: Level name (DEBUG, INFO, AUDIT, WARNING, ERROR).
        log_file: Also append JSON lines to this path.
        json_format: Use JSON on stderr too instead of the console format.
    """
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(_resolve_level(level))
    root.handlers.clear()

    console = logging.StreamHandler()
    if json_format:
        console.setFormatter(JsonFormatter())
    else:
        console.setFormatter(ConsoleFormatter(color=console.stream.isatty()))
    root.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JsonFormatter())
        root.addHandler(file_handler)


def get_logger(module_name: str) -> logging.Logger:
    """Logger named ``qrgen.<module_name>``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{module_name}")


def _emit(log: logging.Logger, level: int, event: str, ctx: dict,
          duration_ms: float | None = None, exc_info=None):
    """Hand an event record straight to ``log``'s handlers."""
    record = log.makeRecord(log.name, level, "", 0, "", (), exc_info)
    record.event = event
    record.ctx = ctx
    if duration_ms is not None:
        record.duration_ms = duration_ms
    log.handle(record)


def audit(event: str, logger: logging.Logger | None = None, **context):
    """Record a result worth keeping, such as "qr.encoded" or "mask.selected".

    Args:
        event: Dotted event tag.
        logger: Emitting logger; the ``qrgen`` root when omitted.
        **context: Event fields, written as ``ctx``.
    """
    log = logger or logging.getLogger(ROOT_LOGGER)
    if log.isEnabledFor(AUDIT):
        _emit(log, AUDIT, event, context)


def trace(func=None, *, logger_name: str | None = None):
    """Log calls to the decorated function.

    Emits ``<name>.enter`` at DEBUG with summarised arguments,
    ``<name>.done`` at INFO with the result and duration, or
    ``<name>.error`` at ERROR with the traceback before re-raising.
    Usable bare (``@trace``) or with a logger name (``@trace(logger_name=...)``).
    """
    def decorator(fn):
        log = get_logger(logger_name or fn.__module__.removeprefix(f"{ROOT_LOGGER}."))
        name = fn.__name__

        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            if log.isEnabledFor(logging.DEBUG):
                _emit(log, logging.DEBUG, f"{name}.enter", {
                    "args": [_summarize(a) for a in args],
                    "kwargs": {k: _summarize(v) for k, v in kwargs.items()},
                })

            start = time.perf_counter()
            try:
                result = fn(*args, **kwargs)
            except Exception:
                if log.isEnabledFor(logging.ERROR):
                    _emit(log, logging.ERROR, f"{name}.error", {"function": name},
                          duration_ms=_elapsed_ms(start), exc_info=sys.exc_info())
                raise

            if log.isEnabledFor(logging.INFO):
                _emit(log, logging.INFO, f"{name}.done", {"result": _summarize(result)},
                      duration_ms=_elapsed_ms(start))
            return result

        return wrapper

    return decorator if func is None else decorator(func)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000
