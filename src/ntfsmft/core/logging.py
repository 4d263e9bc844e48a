"""Diagnostics for ntfsmft: log lines and scan progress on stderr.

stdout carries dumped entries only, so nothing in this module writes there.
Log lines are either plain text::

    [WARNING] Fixup verification failed for entry 12 (entry=12 stride=1)

or one JSON object per line when ``--log-format json`` is used.
"""

import json
import sys
import time
from datetime import UTC, datetime
from typing import Any, Literal

LogLevel = Literal["debug", "info", "warning", "error"]
LogFormat = Literal["text", "json"]

_SILENCED_WHEN_QUIET = frozenset({"debug", "info"})

_verbose = False
_quiet = False
_log_format: LogFormat = "text"


def configure_logging(log_format: LogFormat = "text", quiet: bool = False, verbose: bool = False) -> None:
    """Set the process-wide log switches (called once by the CLI group).

    Args:
        log_format: ``text`` or ``json`` lines
        quiet: Drop debug and info lines, progress and metrics
        verbose: Emit debug lines
    """
    global _log_format, _quiet, _verbose
    _log_format = log_format
    _quiet = quiet
    _verbose = verbose


def is_quiet() -> bool:
    return _quiet


def _enabled(level: LogLevel) -> bool:
    if _quiet and level in _SILENCED_WHEN_QUIET:
        return False
    return level != "debug" or _verbose


def _text_line(message: str, level: LogLevel, context: dict[str, Any]) -> str:
    parts = [] if level == "info" else [f"[{level.upper()}]"]
    parts.append(message)
    if context:
        parts.append("(" + " ".join(f"{key}={value}" for key, value in context.items()) + ")")
    return " ".join(parts)


def _json_line(message: str, level: LogLevel, context: dict[str, Any]) -> str:
    record = {"timestamp": datetime.now(UTC).isoformat(), "level": level, "message": message}
    record.update(context)
    return json.dumps(record, default=str)


def log(message: str, level: LogLevel = "info", **context: Any) -> None:
    """Write one log line to stderr.

    Keyword arguments become structured fields, typically ``entry`` and
    ``offset`` so a line can be traced back to the record that caused it.
    """
    if not _enabled(level):
        return
    render = _json_line if _log_format == "json" else _text_line
    print(render(message, level, context), file=sys.stderr)


def debug(message: str, **context: Any) -> None:
    log(message, "debug", **context)


def info(message: str, **context: Any) -> None:
    log(message, "info", **context)


def warning(message: str, **context: Any) -> None:
    log(message, "warning", **context)


def error(message: str, **context: Any) -> None:
    log(message, "error", **context)


class ScanProgress:
    """Entry counter for a dump, redrawn on stderr at most ten times a second.

    Args:
        total: Number of entries expected, or None when only a count is known
    """

    REFRESH_SECONDS = 0.1

    def __init__(self, total: int | None = None):
        self.total = total
        self.done = 0
        self._started = time.perf_counter()
        self._drawn_at = 0.0

    @property
    def elapsed(self) -> float:
        return time.perf_counter() - self._started

    @property
    def rate(self) -> float:
        elapsed = self.elapsed
        return self.done / elapsed if elapsed > 0 else 0.0

    def advance(self, count: int = 1) -> None:
        self.done += count
        if _quiet:
            return
        now = time.perf_counter()
        if now - self._drawn_at >= self.REFRESH_SECONDS:
            self._drawn_at = now
            self._draw()

    def _draw(self) -> None:
        rate = self.rate
        if _log_format == "json":
            state: dict[str, Any] = {"entries": self.done, "rate": round(rate, 1)}
            if self.total:
                state["total"] = self.total
                state["percentage"] = round(self.done * 100 / self.total, 1)
            print(json.dumps({"progress": state}), file=sys.stderr)
            return

        if self.total:
            eta = (self.total - self.done) / rate if rate > 0 else 0.0
            line = (
                f"\rEntries: {self.done}/{self.total} ({self.done * 100 / self.total:.1f}%)"
                f" {rate:.0f}/s, ETA {format_duration(eta)}"
            )
        else:
            line = f"\rEntries: {self.done} ({rate:.0f}/s)"
        print(line, end="", file=sys.stderr)

    def finish(self, skipped: int = 0) -> None:
        """Print the final count, including entries skipped on decode errors."""
        if _quiet:
            return
        elapsed = self.elapsed
        if _log_format == "json":
            summary = {"entries": self.done, "skipped": skipped, "duration_seconds": round(elapsed, 2)}
            print(json.dumps({"complete": summary}), file=sys.stderr)
        else:
            print(
                f"\nDumped {self.done} entries ({skipped} skipped) in {format_duration(elapsed)}",
                file=sys.stderr,
            )


def format_duration(seconds: float) -> str:
    """Render seconds as ``12.3s``, ``4m 05s`` or ``1h 02m``."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    if minutes < 60:
        return f"{minutes}m {secs:02d}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes:02d}m"
