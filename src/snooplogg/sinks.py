"""
Sinks (output destinations).

A controller accepts any object with a write(payload) method. The Sink base
class adds the optional parts of that contract:

    object_mode               True: receive the raw LogMessage, not text
    isatty()                  decides the colors default
    add_end_listener(cb)      close() calls cb; the controller uses it to
    remove_end_listener(cb)   detach the sink automatically

Stock sinks: StreamSink (text stream, stderr by default), FileSink (append,
optional daily rotation) and RecordSink (in-memory ring of raw messages).
"""

import sys
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional, TextIO

from snooplogg.buffer import HistoryBuffer
from snooplogg.records import LogMessage


class Sink(ABC):
    """Base sink."""

    object_mode = False

    def __init__(self, name: str | None = None):
        self.name = name or type(self).__name__
        self._end_listeners: list[Callable[[], None]] = []
        self._closed = False

    @abstractmethod
    def write(self, payload: Any) -> None:
        """Receive one rendered line (text mode) or one LogMessage."""
        ...

    def isatty(self) -> bool:
        return False

    def flush(self) -> None:
        """Flush buffered output. Override in buffered sinks."""
        pass

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Flush, then tell listeners this sink is finished."""
        if self._closed:
            return
        self.flush()
        self._closed = True
        for listener in list(self._end_listeners):
            listener()

    def add_end_listener(self, listener: Callable[[], None]) -> None:
        self._end_listeners.append(listener)

    def remove_end_listener(self, listener: Callable[[], None]) -> None:
        try:
            self._end_listeners.remove(listener)
        except ValueError:
            pass


class StreamSink(Sink):
    """
    Writes rendered text to a stream. With no stream given, writes to
    whatever sys.stderr is at write time.
    """

    def __init__(self, stream: TextIO | None = None, name: str = "stream"):
        super().__init__(name)
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stderr

    def write(self, payload: Any) -> None:
        self.stream.write(payload if isinstance(payload, str) else str(payload))

    def isatty(self) -> bool:
        isatty = getattr(self.stream, "isatty", None)
        return bool(isatty()) if callable(isatty) else False

    def flush(self) -> None:
        flush = getattr(self.stream, "flush", None)
        if callable(flush):
            flush()


class FileSink(Sink):
    """
    Appends rendered text to a file.
    rotation="daily" writes to <stem>_<YYYY-MM-DD><suffix> and switches
    files when the UTC date changes.
    """

    def __init__(
        self,
        path: str | Path = "logs/snooplogg.log",
        rotation: str = "none",
        name: str = "file",
    ):
        if rotation not in ("none", "daily"):
            raise ValueError(f"Unknown rotation '{rotation}'")
        super().__init__(name)
        self.base_path = Path(path)
        self.rotation = rotation
        self._current_date: Optional[str] = None
        self._file: Optional[TextIO] = None
        self._lock = threading.Lock()

    def _path_for(self, date_str: str) -> Path:
        if self.rotation == "daily":
            suffix = self.base_path.suffix or ".log"
            return self.base_path.parent / f"{self.base_path.stem}_{date_str}{suffix}"
        return self.base_path

    def _ensure_file(self, now: datetime) -> None:
        """Open or rotate. Must hold self._lock."""
        date_str = now.strftime("%Y-%m-%d")
        if self._file is not None and (self.rotation != "daily" or self._current_date == date_str):
            return

        if self._file is not None:
            self._file.close()

        self.base_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self._path_for(date_str), "a", encoding="utf-8")
        self._current_date = date_str

    @property
    def current_path(self) -> Optional[Path]:
        if self._current_date is None:
            return None
        return self._path_for(self._current_date)

    def write(self, payload: Any, now: datetime | None = None) -> None:
        if self._closed:
            raise ValueError(f"Sink '{self.name}' is closed")
        with self._lock:
            self._ensure_file(now or datetime.now(timezone.utc))
            self._file.write(payload if isinstance(payload, str) else str(payload))

    def flush(self) -> None:
        with self._lock:
            if self._file:
                self._file.flush()

    def close(self) -> None:
        if self._closed:
            return
        with self._lock:
            if self._file:
                self._file.close()
                self._file = None
        super().close()

    def cleanup_old_files(self, retention_days: int) -> int:
        """Remove rotated files older than retention_days. Returns count removed."""
        if not self.base_path.parent.exists():
            return 0

        cutoff = datetime.now(timezone.utc).timestamp() - retention_days * 86400
        suffix = self.base_path.suffix or ".log"
        current = self.current_path
        removed = 0
        for f in self.base_path.parent.glob(f"{self.base_path.stem}_*{suffix}"):
            if f != current and f.stat().st_mtime < cutoff:
                f.unlink()
                removed += 1
        return removed


class RecordSink(Sink):
    """
    Object-mode sink keeping the last N raw messages in memory.
    Useful for tests and for in-process inspection of recent output.
    """

    object_mode = True

    def __init__(self, capacity: int = 1000, name: str = "records"):
        super().__init__(name)
        self._buffer: HistoryBuffer[LogMessage] = HistoryBuffer(capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._buffer.max_size

    @capacity.setter
    def capacity(self, value: int) -> None:
        with self._lock:
            self._buffer.resize(value)

    @property
    def count(self) -> int:
        return len(self._buffer)

    def write(self, payload: Any) -> None:
        with self._lock:
            self._buffer.push(payload)

    def get_recent(
        self,
        n: int = 100,
        ns: str | None = None,
        method: str | None = None,
    ) -> list[LogMessage]:
        """
        Newest n records, oldest first. ns matches the namespace itself and
        its descendants.
        """
        with self._lock:
            records = list(self._buffer)

        if ns is not None:
            records = [r for r in records if r.ns == ns or r.ns.startswith(f"{ns}:")]
        if method is not None:
            records = [r for r in records if r.method == method]

        return records[-n:] if n > 0 else []

    def clear(self) -> None:
        with self._lock:
            self._buffer.clear()
