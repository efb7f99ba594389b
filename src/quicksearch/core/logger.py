"""Structured logging: console lines plus a JSONL search-event log."""

import json
import logging
import os
import sys
import threading
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import IO, Any

from quicksearch.core.config import config


def _format_duration(seconds: float) -> str:
    if seconds < 0:
        return "0ms"
    if seconds >= 1:
        return f"{seconds:.1f}s"
    ms = seconds * 1000
    if ms >= 1:
        return f"{ms:.0f}ms"
    if ms > 0:
        return "<1ms"
    return "0ms"


def _short_query(query: str, max_len: int = 60) -> str:
    s = (query or "").replace("\n", " ").strip()
    return s[:max_len] + "..." if len(s) > max_len else s


def _use_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    try:
        return sys.stdout.isatty()
    except Exception:
        return False


def _c(role: str) -> str:
    if not _use_color():
        return ""
    codes = {
        "dim": "\033[38;5;239m",
        "query": "\033[38;5;81m",  # cyan for query text
        "publish": "\033[38;5;78m",  # green for published sections
        "stale": "\033[38;5;245m",  # gray for dropped results
        "short": "\033[38;5;221m",  # yellow for short-circuits
        "fail": "\033[38;5;203m",  # red for source failures
    }
    return codes.get(role, "")


def _reset() -> str:
    if not _use_color():
        return ""
    return "\033[0m"


@dataclass
class LogEvent:
    event_type: str
    timestamp: str
    data: dict[str, Any]

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class QuickSearchLogger:
    def __init__(self):
        self.log_file = config.logs_dir / "search.log"
        self._file_lock = threading.Lock()
        self._log_file_handle: IO[str] | None = None
        self._setup_console_logger()

    def _setup_console_logger(self):
        self.console = logging.getLogger("quicksearch")
        self.console.setLevel(logging.DEBUG)
        self._console_formatter = logging.Formatter(
            "%(asctime)s │ %(message)s", datefmt="%H:%M:%S"
        )
        if not self.console.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(getattr(logging, config.log_level, logging.INFO))
            handler.setFormatter(self._console_formatter)
            self.console.addHandler(handler)

    def _handle(self) -> IO[str]:
        if self._log_file_handle is None:
            config.logs_dir.mkdir(parents=True, exist_ok=True)
            self._log_file_handle = open(self.log_file, "a", encoding="utf-8")
        return self._log_file_handle

    def log_event(self, event: LogEvent) -> None:
        if not config.event_log_enabled:
            return
        with self._file_lock:
            handle = self._handle()
            handle.write(event.to_json() + "\n")
            handle.flush()

    def close(self) -> None:
        with self._file_lock:
            if self._log_file_handle is not None:
                self._log_file_handle.close()
                self._log_file_handle = None

    def _timestamp(self) -> str:
        return datetime.now().isoformat()

    def query_changed(self, raw: str, generation: int, mode: str):
        self.log_event(
            LogEvent(
                event_type="QUERY_CHANGED",
                timestamp=self._timestamp(),
                data={"query": raw[:200], "generation": generation, "mode": mode},
            )
        )
        self.console.debug(
            f"{_c('query')}#{generation} {mode}{_reset()}  '{_short_query(raw)}'"
        )

    def short_circuit(self, generation: int, kind: str, value: str):
        self.log_event(
            LogEvent(
                event_type="SHORT_CIRCUIT",
                timestamp=self._timestamp(),
                data={"generation": generation, "kind": kind, "value": value[:200]},
            )
        )
        self.console.info(f"{_c('short')}#{generation} {kind}{_reset()} → {value}")

    def shortcut_navigation(self, target_id: str, residual: str):
        self.log_event(
            LogEvent(
                event_type="SHORTCUT_NAVIGATION",
                timestamp=self._timestamp(),
                data={"target": target_id, "query": residual[:200]},
            )
        )
        self.console.info(
            f"{_c('short')}Shortcut{_reset()} {target_id}  '{_short_query(residual)}'"
        )

    def dispatch(self, generation: int, sources: list[str]):
        self.log_event(
            LogEvent(
                event_type="DISPATCH",
                timestamp=self._timestamp(),
                data={"generation": generation, "sources": sources},
            )
        )
        self.console.debug(f"#{generation} dispatch → {', '.join(sources) or '(none)'}")

    def publish(
        self,
        generation: int,
        section: str,
        result_count: int,
        *,
        duration_seconds: float | None = None,
    ):
        data: dict[str, Any] = {
            "generation": generation,
            "section": section,
            "results": result_count,
        }
        if duration_seconds is not None:
            data["duration_seconds"] = round(duration_seconds, 4)
        self.log_event(
            LogEvent(event_type="PUBLISH", timestamp=self._timestamp(), data=data)
        )
        dur = (
            f"  in {_format_duration(duration_seconds)}"
            if duration_seconds is not None
            else ""
        )
        self.console.debug(
            f"{_c('publish')}#{generation} {section}{_reset()}  {result_count} result(s){dur}"
        )

    def stale_discarded(self, generation: int, current: int, section: str):
        self.log_event(
            LogEvent(
                event_type="STALE_DISCARDED",
                timestamp=self._timestamp(),
                data={"generation": generation, "current": current, "section": section},
            )
        )
        self.console.debug(
            f"{_c('stale')}#{generation} {section} dropped (current #{current}){_reset()}"
        )

    def source_failed(self, source: str, reason: str):
        self.log_event(
            LogEvent(
                event_type="SOURCE_FAILED",
                timestamp=self._timestamp(),
                data={"source": source, "reason": reason[:500]},
            )
        )
        self.console.warning(f"{_c('fail')}Source {source} failed{_reset()}: {reason}")

    def error(self, message: str, *args, exception: Exception | None = None, **kwargs):
        self.log_event(
            LogEvent(
                event_type="ERROR",
                timestamp=self._timestamp(),
                data={
                    "message": message,
                    "exception": str(exception) if exception else None,
                },
            )
        )
        allowed = {"exc_info", "stack_info", "stacklevel", "extra"}
        log_kwargs = {k: v for k, v in kwargs.items() if k in allowed}
        if exception and "exc_info" not in log_kwargs:
            log_kwargs["exc_info"] = exception
        self.console.error(f"Error: {message}", *args, **log_kwargs)

    def info(self, message: str, *args, **kwargs):
        allowed = {"exc_info", "stack_info", "stacklevel", "extra"}
        log_kwargs = {k: v for k, v in kwargs.items() if k in allowed}
        self.console.info(message, *args, **log_kwargs)

    def warning(self, message: str, *args, **kwargs):
        self.log_event(
            LogEvent(
                event_type="WARNING",
                timestamp=self._timestamp(),
                data={"message": message[:500]},
            )
        )
        allowed = {"exc_info", "stack_info", "stacklevel", "extra"}
        log_kwargs = {k: v for k, v in kwargs.items() if k in allowed}
        self.console.warning(message, *args, **log_kwargs)

    def debug(self, message: str, *args, **kwargs):
        allowed = {"exc_info", "stack_info", "stacklevel", "extra"}
        log_kwargs = {k: v for k, v in kwargs.items() if k in allowed}
        self.console.debug(message, *args, **log_kwargs)


logger = QuickSearchLogger()
