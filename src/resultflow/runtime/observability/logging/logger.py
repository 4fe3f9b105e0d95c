"""Structured logging for Outcome diagnostics.

Library internals log through stdlib ``logging``. This module is the
structured layer used by log_outcome() and by application code that wants
key=value events: a BoundLogger carries context, a renderer writes entries
either as readable console lines or as JSON lines.

Context is merged per entry in this order, later layers winning:
    log_context() scopes  <  logger.bind()  <  call-site keywords

Quick Start:
    >>> from resultflow.runtime.observability.logging import configure_logging, get_logger
    >>> configure_logging(format="json", level="INFO")
    >>> log = get_logger("checkout").bind(cart="c-9")
    >>> with log_context(request_id="r-1"):
    ...     log.info("payment captured", amount=1200)
    {"timestamp": "...", "level": "info", "event": "payment captured", "request_id": "r-1", ...}
"""

from __future__ import annotations

import logging
import sys
import time
import traceback
from contextvars import ContextVar, Token
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol, TextIO, runtime_checkable

import orjson

from resultflow.foundation.errors import JsonDict, JsonMapping, JsonValue

if TYPE_CHECKING:
    from resultflow.monads.outcome import Outcome

_scoped: ContextVar[JsonDict] = ContextVar("resultflow_log_scope", default={})


# ─────────────────────────────────────────────────────────────────────────────
# Entries & Renderers
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class LogEntry:
    """One structured event with its fully merged context."""

    timestamp: float
    level: str
    event: str
    context: JsonDict

    def when(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp, tz=UTC)

    @property
    def ts_iso(self) -> str:
        return self.when().isoformat()

    @property
    def ts_human(self) -> str:
        """HH:MM:SS.mmm in UTC."""
        return self.when().strftime("%H:%M:%S.%f")[:-3]


@runtime_checkable
class LogRenderer(Protocol):
    def render(self, entry: LogEntry) -> None: ...


@dataclass(frozen=True, slots=True)
class _Palette:
    reset: str = ""
    dim: str = ""
    bold: str = ""
    key: str = ""
    text: str = ""
    number: str = ""
    other: str = ""
    error: str = ""
    levels: tuple[tuple[str, str], ...] = ()

    def level(self, name: str) -> str:
        return dict(self.levels).get(name, self.dim)


_PLAIN = _Palette()
_ANSI = _Palette(
    reset="\033[0m", dim="\033[2m", bold="\033[1m", key="\033[36m", text="\033[33m",
    number="\033[34m", other="\033[37m", error="\033[31m",
    levels=(("debug", "\033[2m"), ("info", "\033[32m"), ("warning", "\033[33m"),
            ("error", "\033[31m"), ("critical", "\033[1;31m")),
)


@dataclass(slots=True)
class ConsoleRenderer:
    """Readable one-line events: ``12:00:01.250 [warning] retrying attempt=2 svc="db"``.

    Context keys are sorted. A traceback bound as ``exc_info`` is printed on
    the following lines.
    """

    output: TextIO = field(default_factory=lambda: sys.stderr)
    colors: bool | None = None  # None = follow output.isatty()
    show_timestamp: bool = True

    def __post_init__(self) -> None:
        if self.colors is None:
            isatty = getattr(self.output, "isatty", None)
            self.colors = bool(isatty and isatty())

    def render(self, entry: LogEntry) -> None:
        p = _ANSI if self.colors else _PLAIN
        head = f"{p.dim}{entry.ts_human}{p.reset} " if self.show_timestamp else ""
        line = f"{head}{p.level(entry.level)}[{entry.level}]{p.reset} {p.bold}{entry.event}{p.reset}"
        pairs = " ".join(
            f"{p.key}{key}{p.reset}={_console_value(value, p)}"
            for key, value in sorted(entry.context.items())
            if key != "exc_info"
        )
        self.output.write(f"{line} {pairs}\n" if pairs else f"{line}\n")
        if (tb := entry.context.get("exc_info")) is not None:
            self.output.write(f"{p.error}{tb}{p.reset}\n")


@dataclass(slots=True)
class JsonRenderer:
    """JSON Lines for log shippers. Values orjson cannot encode are written as repr()."""

    output: TextIO = field(default_factory=lambda: sys.stdout)
    sort_keys: bool = False

    def render(self, entry: LogEntry) -> None:
        options = orjson.OPT_NON_STR_KEYS | (orjson.OPT_SORT_KEYS if self.sort_keys else 0)
        payload = {"timestamp": entry.ts_iso, "level": entry.level, "event": entry.event, **entry.context}
        self.output.write(orjson.dumps(payload, default=repr, option=options).decode() + "\n")


@dataclass(slots=True)
class NoOpRenderer:
    """Discards everything."""

    def render(self, entry: LogEntry) -> None:
        return None


# ─────────────────────────────────────────────────────────────────────────────
# Logger
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class BoundLogger:
    """Immutable structured logger; every bind-style call returns a new logger.

    Example:
        >>> log = BoundLogger(context={"service": "billing"})
        >>> log.bind(invoice="inv-3").warning("charge retried", attempt=2)
    """

    context: JsonDict = field(default_factory=dict)
    _renderer: LogRenderer | None = None
    _level: int = logging.DEBUG

    def bind(self, **kw: JsonValue) -> BoundLogger:
        return replace(self, context={**self.context, **kw})

    def bind_outcome(self, outcome: Outcome[object, object]) -> BoundLogger:
        """Bind the branch and the payload's type name."""
        if outcome.is_success():
            return self.bind(ok=True, value_type=type(outcome.value).__name__)
        return self.bind(ok=False, error_type=type(outcome.error).__name__)

    def unbind(self, *keys: str) -> BoundLogger:
        return replace(self, context={k: v for k, v in self.context.items() if k not in keys})

    def new(self, **kw: JsonValue) -> BoundLogger:
        """Logger with only the given context."""
        return replace(self, context=dict(kw))

    def is_enabled_for(self, level: int | str) -> bool:
        return _to_level(level) >= self._level

    def log(self, level: int | str, event: str, **kw: JsonValue) -> None:
        """Emit at a numeric level or a level name such as "warning"."""
        number = _to_level(level)
        if number < self._level:
            return
        entry = LogEntry(time.time(), logging.getLevelName(number).lower(), event,
                         {**_scoped.get(), **self.context, **kw})
        (self._renderer or _active_renderer()).render(entry)

    def debug(self, event: str, **kw: JsonValue) -> None:
        self.log(logging.DEBUG, event, **kw)

    def info(self, event: str, **kw: JsonValue) -> None:
        self.log(logging.INFO, event, **kw)

    def warning(self, event: str, **kw: JsonValue) -> None:
        self.log(logging.WARNING, event, **kw)

    def error(self, event: str, **kw: JsonValue) -> None:
        self.log(logging.ERROR, event, **kw)

    def critical(self, event: str, **kw: JsonValue) -> None:
        self.log(logging.CRITICAL, event, **kw)

    def exception(self, event: str, **kw: JsonValue) -> None:
        """error() plus the traceback of the exception being handled."""
        self.log(logging.ERROR, event, exc_info=traceback.format_exc(), **kw)

    def scope(self, **kw: JsonValue) -> LogScope:
        """Context added to every entry emitted inside the with-block, by any logger."""
        return LogScope(kw)


class LogScope:
    """Context manager pushing key-value pairs onto the scoped log context."""

    __slots__ = ("_ctx", "_token")

    def __init__(self, ctx: JsonMapping) -> None:
        self._ctx: JsonDict = dict(ctx)
        self._token: Token[JsonDict] | None = None

    def __enter__(self) -> LogScope:
        self._token = _scoped.set({**_scoped.get(), **self._ctx})
        return self

    def __exit__(self, *_: object) -> None:
        if self._token is not None:
            _scoped.reset(self._token)
            self._token = None


def log_context(**kw: JsonValue) -> LogScope:
    """Scoped context for a with-block.

    Example:
        >>> with log_context(request_id="r-1"):
        ...     get_logger().info("handled")  # includes request_id
    """
    return LogScope(kw)


# ─────────────────────────────────────────────────────────────────────────────
# Configuration
# ─────────────────────────────────────────────────────────────────────────────


_renderer: ContextVar[LogRenderer | None] = ContextVar("resultflow_log_renderer", default=None)
_threshold: ContextVar[int] = ContextVar("resultflow_log_level", default=logging.INFO)


def configure_logging(
    format: str = "console",  # noqa: A002
    level: str = "INFO",
    *,
    output: TextIO | None = None,
    colors: bool | None = None,
) -> LogRenderer:
    """Select the global renderer and the level of loggers created afterwards.

    Args:
        format: "console", "json" or "none"
        level: Level name; unknown names fall back to INFO
        output: Stream to write to (console defaults to stderr, json to stdout)
        colors: Force ANSI colors on or off for the console renderer

    Raises:
        ValueError: Unknown format
    """
    match format:
        case "console":
            renderer: LogRenderer = ConsoleRenderer(output=output or sys.stderr, colors=colors)
        case "json":
            renderer = JsonRenderer(output=output or sys.stdout)
        case "none":
            renderer = NoOpRenderer()
        case _:
            raise ValueError(f"Unknown format: {format}. Use 'console', 'json', or 'none'")
    _threshold.set(_to_level(level, logging.INFO))
    _renderer.set(renderer)
    return renderer


def configure_from_settings(*, output: TextIO | None = None) -> LogRenderer:
    """configure_logging() driven by RESULTFLOW_LOG_FORMAT / RESULTFLOW_LOG_LEVEL."""
    from resultflow.foundation.config import get_settings

    settings = get_settings().logging
    return configure_logging(format=settings.format, level=settings.level, output=output)


def get_logger(name: str | None = None, **initial_context: JsonValue) -> BoundLogger:
    """Logger at the configured level; name is bound as ``logger``."""
    if name:
        initial_context["logger"] = name
    return BoundLogger(context=initial_context, _level=_threshold.get())


def _active_renderer() -> LogRenderer:
    renderer = _renderer.get()
    if renderer is None:
        renderer = ConsoleRenderer()
        _renderer.set(renderer)
    return renderer


def _to_level(level: int | str, default: int = logging.ERROR) -> int:
    """Numeric level; names are case-insensitive and unknown names map to default."""
    if isinstance(level, int):
        return level
    number = logging.getLevelName(level.upper())
    return number if isinstance(number, int) else default


def _console_value(value: object, p: _Palette) -> str:
    match value:
        case str():
            return f'{p.text}"{value}"{p.reset}'
        case bool() | None:
            return f"{p.number}{str(value).lower()}{p.reset}"
        case int() | float():
            return f"{p.number}{value}{p.reset}"
        case dict():
            return f"{p.dim}{{{len(value)} items}}{p.reset}"
        case list() | tuple():
            return f"{p.dim}[{len(value)} items]{p.reset}"
        case _:
            return f"{p.other}{value!r}{p.reset}"
