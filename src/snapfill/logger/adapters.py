"""
Log adapters (output destinations).

Terminal for interactive runs, File for persistent diagnostics, Memory
as a bounded ring buffer that tests and the CLI can read back.
"""

import sys
import threading
from abc import ABC, abstractmethod
from collections import deque
from pathlib import Path

from snapfill.logger.records import LogRecord, LogLevel
from snapfill.logger.formatters import (
    LogFormatter,
    CompactFormatter,
    DetailedFormatter,
)


class LogAdapter(ABC):

    def __init__(self, name: str, min_level: int = LogLevel.INFO, formatter: LogFormatter | None = None):
        self.name = name
        self.min_level = min_level
        self._formatter = formatter

    @property
    def formatter(self) -> LogFormatter:
        if self._formatter is None:
            self._formatter = self._default_formatter()
        return self._formatter

    @formatter.setter
    def formatter(self, value: LogFormatter) -> None:
        self._formatter = value

    def _default_formatter(self) -> LogFormatter:
        return CompactFormatter()

    @abstractmethod
    def emit(self, record: LogRecord) -> None:
        """Write a record that already passed routing."""
        ...

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.flush()


class TerminalAdapter(LogAdapter):
    """ANSI-colored output. ERROR and above go to stderr."""

    COLORS = {
        LogLevel.TRACE: "\033[90m",
        LogLevel.DEBUG: "\033[36m",
        LogLevel.VERBOSE: "\033[96m",
        LogLevel.INFO: "\033[37m",
        LogLevel.NOTICE: "\033[97m",
        LogLevel.WARNING: "\033[33m",
        LogLevel.ERROR: "\033[31m",
        LogLevel.CRITICAL: "\033[1;91m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        name: str = "terminal",
        min_level: int = LogLevel.INFO,
        formatter: LogFormatter | None = None,
        color: bool = True,
    ):
        super().__init__(name, min_level, formatter)
        self.color = color

    def emit(self, record: LogRecord) -> None:
        formatted = self.formatter.format(record)
        if self.color:
            formatted = f"{self._get_color(record.level)}{formatted}{self.RESET}"
        stream = sys.stderr if record.level >= LogLevel.ERROR else sys.stdout
        print(formatted, file=stream, flush=True)

    def _get_color(self, level: int) -> str:
        """Color of the nearest standard level at or below `level`."""
        for threshold in sorted(self.COLORS, reverse=True):
            if level >= threshold:
                return self.COLORS[threshold]
        return ""


class FileAdapter(LogAdapter):
    """Appends detailed lines to a single log file, creating parents as needed."""

    def __init__(
        self,
        name: str = "logfile",
        min_level: int = LogLevel.DEBUG,
        formatter: LogFormatter | None = None,
        path: str | Path = "logs/snapfill.log",
    ):
        super().__init__(name, min_level, formatter)
        self.path = Path(path)
        self._file = None
        self._lock = threading.Lock()

    def _default_formatter(self) -> LogFormatter:
        return DetailedFormatter()

    def emit(self, record: LogRecord) -> None:
        formatted = self.formatter.format(record)
        with self._lock:
            if self._file is None:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self._file = open(self.path, "a", encoding="utf-8")
            self._file.write(formatted + "\n")

    def flush(self) -> None:
        with self._lock:
            if self._file:
                self._file.flush()

    def close(self) -> None:
        self.flush()
        with self._lock:
            if self._file:
                self._file.close()
                self._file = None


class MemoryAdapter(LogAdapter):
    """Ring buffer of the last N records."""

    def __init__(
        self,
        name: str = "memory",
        min_level: int = LogLevel.DEBUG,
        formatter: LogFormatter | None = None,
        ring_buffer_size: int = 1000,
    ):
        super().__init__(name, min_level, formatter)
        self._buffer: deque[LogRecord] = deque(maxlen=ring_buffer_size)
        self._lock = threading.Lock()

    def _default_formatter(self) -> LogFormatter:
        return DetailedFormatter()

    def emit(self, record: LogRecord) -> None:
        with self._lock:
            self._buffer.append(record)

    def get_recent(self, n: int = 100, tags: set[str] | None = None) -> list[LogRecord]:
        """Most recent n records, optionally only those carrying any of `tags`."""
        with self._lock:
            records = list(self._buffer)
        if tags:
            records = [r for r in records if r.tags & tags]
        return records[-n:]

    def messages(self) -> list[str]:
        with self._lock:
            return [r.message for r in self._buffer]

    def clear(self) -> None:
        with self._lock:
            self._buffer.clear()

    @property
    def count(self) -> int:
        return len(self._buffer)
