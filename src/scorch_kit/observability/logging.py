"""
scorch-kit — structured run logging.

File: src/scorch_kit/observability/logging.py

Purpose
- Write one JSON object per line to ``<log_dir>/<run_id>/scorch.jsonl``.
- Route structlog events through the same stdlib handlers; event keywords
  land under ``fields`` and correlation keys are lifted to the top level.
- Carry experiment/component/stage correlation across asyncio tasks.

Threading
- Emitting threads only enqueue. A ``QueueListener`` thread formats and writes.
- A full queue drops the record and counts it instead of blocking a pause.
"""

from __future__ import annotations

import atexit
import contextvars
import json
import logging
import logging.handlers
import math
import queue
import threading
import time
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Final

import structlog

JSONValue = str | int | float | bool | None | list["JSONValue"] | dict[str, "JSONValue"]

LOG_FILENAME: Final[str] = "scorch.jsonl"
ROOT_LOGGER_NAME: Final[str] = "scorch_kit"

CORRELATION_KEYS: Final[tuple[str, ...]] = ("run_id", "experiment", "component", "stage")

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRIBUTES: Final[frozenset[str]] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "correlation"}

_correlation: contextvars.ContextVar[Mapping[str, str]] = contextvars.ContextVar(
    "scorch_log_correlation", default={}
)

_active_lock = threading.Lock()
_active: RunLogHandle | None = None
_atexit_hooked = False


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Settings for one run's JSON-lines log."""

    run_id: str
    base_log_dir: Path | str = Path("logs")
    logger_name: str = ROOT_LOGGER_NAME
    level: int | str = "INFO"
    queue_size: int = 4096
    log_filename: str = LOG_FILENAME
    log_to_stdout: bool = False


class _DroppingQueueHandler(logging.handlers.QueueHandler):
    def __init__(self, log_queue: queue.Queue[logging.LogRecord]) -> None:
        super().__init__(log_queue)
        self._dropped = 0
        self._dropped_lock = threading.Lock()

    @property
    def dropped(self) -> int:
        with self._dropped_lock:
            return self._dropped

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        # The listener thread cannot see this thread's contextvars.
        bound = _correlation.get()
        if bound:
            record.correlation = dict(bound)
        return super().prepare(record)  # type: ignore[no-any-return]

    def enqueue(self, record: logging.LogRecord) -> None:
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            with self._dropped_lock:
                self._dropped += 1


class _JsonLinesFormatter(logging.Formatter):
    def __init__(self, run_id: str) -> None:
        super().__init__()
        self._run_id = run_id

    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, JSONValue] = {
            "timestamp": _utc_timestamp(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": self._run_id,
        }

        bound = getattr(record, "correlation", None)
        if isinstance(bound, Mapping):
            line.update({str(key): str(value) for key, value in bound.items() if value})

        fields: dict[str, JSONValue] = {}
        for key, value in vars(record).items():
            if key in _RECORD_ATTRIBUTES or key.startswith("_"):
                continue
            if key in CORRELATION_KEYS:
                if isinstance(value, str) and value.strip():
                    line[key] = value.strip()
                continue
            fields[key] = _jsonable(value)
        if fields:
            line["fields"] = fields

        if record.exc_info is not None:
            line["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            line["stack"] = str(record.stack_info)

        return json.dumps(line, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class RunLogHandle:
    """Live logging pipeline for one run; shut it down to flush the file."""

    def __init__(
        self,
        *,
        logger: logging.Logger,
        run_id: str,
        log_path: Path,
        queue_handler: _DroppingQueueHandler,
        listener: logging.handlers.QueueListener,
        sinks: tuple[logging.Handler, ...],
    ) -> None:
        self.logger = logger
        self.run_id = run_id
        self.log_path = log_path
        self._queue_handler = queue_handler
        self._listener = listener
        self._sinks = sinks
        self._lock = threading.Lock()
        self._closed = False

    @property
    def dropped_records(self) -> int:
        return self._queue_handler.dropped

    @property
    def is_shutdown(self) -> bool:
        return self._closed

    def flush(self, *, timeout_seconds: float = 2.0) -> None:
        pending = self._queue_handler.queue
        deadline = time.monotonic() + max(timeout_seconds, 0.0)
        while getattr(pending, "unfinished_tasks", 0) and time.monotonic() < deadline:
            time.sleep(0.01)
        for sink in self._sinks:
            sink.flush()

    def shutdown(self, *, timeout_seconds: float = 2.0) -> None:
        with self._lock:
            if self._closed:
                return
            self.flush(timeout_seconds=timeout_seconds)
            self._listener.stop()
            self.logger.removeHandler(self._queue_handler)
            self._queue_handler.close()
            for sink in self._sinks:
                sink.close()
            self._closed = True


def setup_structured_logging(config: LoggingConfig) -> RunLogHandle:
    """Start the JSON-lines pipeline for ``config.run_id`` and route structlog into it.

    Any previously active pipeline is shut down first.
    """

    run_id = _require_text(config.run_id, "run_id")
    logger_name = _require_text(config.logger_name, "logger_name")
    filename = _require_text(config.log_filename, "log_filename")
    if Path(filename).name != filename:
        raise ValueError("log_filename must not include path separators")
    if isinstance(config.queue_size, bool) or config.queue_size <= 0:
        raise ValueError("queue_size must be a positive integer")
    level = _level_number(config.level)

    shutdown_logging()

    log_path = Path(config.base_log_dir) / run_id / filename
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = _JsonLinesFormatter(run_id)
    sinks: list[logging.Handler] = [logging.FileHandler(log_path, encoding="utf-8")]
    if config.log_to_stdout:
        sinks.append(logging.StreamHandler())
    for sink in sinks:
        sink.setLevel(level)
        sink.setFormatter(formatter)

    queue_handler = _DroppingQueueHandler(queue.Queue(maxsize=config.queue_size))
    queue_handler.setLevel(level)
    listener = logging.handlers.QueueListener(
        queue_handler.queue, *sinks, respect_handler_level=True
    )

    logger = logging.getLogger(logger_name)
    for stale in list(logger.handlers):
        logger.removeHandler(stale)
        stale.close()
    logger.setLevel(level)
    logger.propagate = False
    logger.addHandler(queue_handler)
    listener.start()

    configure_structlog()

    handle = RunLogHandle(
        logger=logger,
        run_id=run_id,
        log_path=log_path,
        queue_handler=queue_handler,
        listener=listener,
        sinks=tuple(sinks),
    )
    _activate(handle)
    return handle


def setup_logging(
    observability_config: Mapping[str, object] | None = None,
    *,
    run_id: str,
    log_dir: Path | str | None = None,
    logger_name: str = ROOT_LOGGER_NAME,
) -> logging.Logger:
    """Configure run logging from a validated ``[observability]`` section."""

    section = dict(observability_config or {})
    level = section.get("log_level", "INFO")
    base_dir = log_dir if log_dir is not None else section.get("log_dir", "logs")
    handle = setup_structured_logging(
        LoggingConfig(
            run_id=run_id,
            base_log_dir=base_dir if isinstance(base_dir, (str, Path)) else "logs",
            logger_name=logger_name,
            level=level if isinstance(level, (int, str)) else "INFO",
            log_to_stdout=section.get("log_to_stdout") is True,
        )
    )
    return handle.logger


def configure_structlog() -> None:
    """Send structlog events to stdlib logging as message + ``extra`` fields."""

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def get_active_logging_handle() -> RunLogHandle | None:
    with _active_lock:
        return _active


def flush_logging(handle: RunLogHandle | None = None, *, timeout_seconds: float = 2.0) -> None:
    target = handle if handle is not None else get_active_logging_handle()
    if target is not None:
        target.flush(timeout_seconds=timeout_seconds)


def shutdown_logging(handle: RunLogHandle | None = None, *, timeout_seconds: float = 2.0) -> None:
    """Stop the listener and close sinks; defaults to the active pipeline."""

    global _active
    with _active_lock:
        target = handle if handle is not None else _active
        if target is not None and target is _active:
            _active = None
    if target is not None:
        target.shutdown(timeout_seconds=timeout_seconds)


def get_correlation_context() -> dict[str, str]:
    return dict(_correlation.get())


@contextmanager
def correlation_scope(**fields: str | None) -> Iterator[None]:
    """Bind correlation fields for records emitted in this scope.

    ``None`` or a blank value unbinds a key for the duration of the scope.
    """

    bound = dict(_correlation.get())
    for key, value in fields.items():
        if value is None or not str(value).strip():
            bound.pop(key, None)
        else:
            bound[key] = str(value).strip()
    token = _correlation.set(bound)
    try:
        yield
    finally:
        _correlation.reset(token)


def _activate(handle: RunLogHandle) -> None:
    global _active, _atexit_hooked
    with _active_lock:
        _active = handle
        if not _atexit_hooked:
            atexit.register(shutdown_logging)
            _atexit_hooked = True


def _require_text(value: object, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{label} must be a non-empty string")
    return value.strip()


def _level_number(level: int | str) -> int:
    if isinstance(level, bool):
        raise ValueError("level must be a name or number")
    if isinstance(level, int):
        return level
    number = logging.getLevelName(str(level).strip().upper())
    if not isinstance(number, int):
        raise ValueError(f"unsupported logging level {level!r}")
    return number


def _utc_timestamp(epoch_seconds: float) -> str:
    moment = datetime.fromtimestamp(epoch_seconds, tz=UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _jsonable(value: object) -> JSONValue:
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else str(value)
    if isinstance(value, Enum):
        return _jsonable(value.value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, Mapping):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        items = [_jsonable(item) for item in value]
        return sorted(items, key=repr) if isinstance(value, (set, frozenset)) else items
    return str(value)


__all__ = [
    "CORRELATION_KEYS",
    "LOG_FILENAME",
    "LoggingConfig",
    "RunLogHandle",
    "configure_structlog",
    "correlation_scope",
    "flush_logging",
    "get_active_logging_handle",
    "get_correlation_context",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
