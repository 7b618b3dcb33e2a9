"""Logging bootstrap for tracelens.

configure() wires the `tracelens` logger to a rotating file and to stderr.
While the TUI is running it owns the terminal, so attach_in_app() takes the
stderr handler out and routes warnings into the app instead; detach_in_app()
puts it back.

// [LAW:single-enforcer] Handler wiring on the `tracelens` logger happens in this module only.
"""

from __future__ import annotations

import logging
import os
import threading
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "tracelens"
DEFAULT_LOG_DIR = "~/.local/share/tracelens/logs"
MAX_LOG_BYTES = 20 * 1024 * 1024
LOG_BACKUPS = 5

# (level name, formatted message)
LogDrain = Callable[[str, str], None]


@dataclass(frozen=True)
class LoggingRuntime:
    level_name: str
    level: int
    file_path: str


_RUNTIME: LoggingRuntime | None = None
_console: logging.Handler | None = None


def _level_from_env() -> int:
    name = os.environ.get("TRACELENS_LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _log_file_path(session_name: str) -> Path:
    explicit = os.environ.get("TRACELENS_LOG_FILE")
    if explicit:
        return Path(explicit)
    log_dir = Path(os.path.expanduser(os.environ.get("TRACELENS_LOG_DIR", DEFAULT_LOG_DIR)))
    safe = "".join(ch if ch.isalnum() or ch in "-_" else "-" for ch in session_name).strip("-_")
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return log_dir / f"{safe or 'session'}-{stamp}-{os.getpid()}.log"


def configure(session_name: str = "unnamed-session") -> LoggingRuntime:
    """Attach the file and stderr handlers. Repeated calls return the first runtime."""
    global _RUNTIME, _console
    if _RUNTIME is not None:
        return _RUNTIME

    level = _level_from_env()
    path = _log_file_path(session_name)
    path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
    )
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    _console = logging.StreamHandler()
    _console.setFormatter(logging.Formatter("[%(name)s] %(levelname)s %(message)s"))

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.propagate = False
    logger.handlers.clear()
    for handler in (file_handler, _console):
        handler.setLevel(level)
        logger.addHandler(handler)

    # Third-party libraries stay at warning+.
    root = logging.getLogger()
    if root.level > logging.WARNING:
        root.setLevel(logging.WARNING)
    logging.captureWarnings(True)

    _RUNTIME = LoggingRuntime(logging.getLevelName(level), level, str(path))
    return _RUNTIME


def get_runtime() -> LoggingRuntime | None:
    return _RUNTIME


class InAppLogHandler(logging.Handler):
    """Hands formatted records to the app; buffers them until a drain connects."""

    def __init__(self, level: int = logging.WARNING, backlog: int = 200):
        super().__init__(level)
        self.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        self._drain: LogDrain | None = None
        self._backlog: deque[tuple[str, str]] = deque(maxlen=backlog)
        self._drain_lock = threading.Lock()

    def connect(self, drain: LogDrain) -> None:
        with self._drain_lock:
            self._drain = drain
            pending = list(self._backlog)
            self._backlog.clear()
        for level_name, message in pending:
            drain(level_name, message)

    def disconnect(self) -> None:
        with self._drain_lock:
            self._drain = None

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = (record.levelname, self.format(record))
            with self._drain_lock:
                drain = self._drain
                if drain is None:
                    self._backlog.append(entry)
                    return
            drain(*entry)
        except Exception:
            self.handleError(record)


def attach_in_app(drain: LogDrain) -> InAppLogHandler:
    """Route warnings to drain and silence stderr until detach_in_app()."""
    logger = logging.getLogger(ROOT_LOGGER)
    if _console is not None:
        logger.removeHandler(_console)
    handler = InAppLogHandler()
    handler.connect(drain)
    logger.addHandler(handler)
    return handler


def detach_in_app(handler: InAppLogHandler) -> None:
    logger = logging.getLogger(ROOT_LOGGER)
    handler.disconnect()
    logger.removeHandler(handler)
    if _console is not None and _console not in logger.handlers:
        logger.addHandler(_console)


def reset() -> None:
    """Close every handler on the `tracelens` logger and forget the runtime."""
    global _RUNTIME, _console
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    _RUNTIME = None
    _console = None
