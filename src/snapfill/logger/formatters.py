"""
Log formatters.

  - compact:  "14:32:05 [    INFO] Backfilled volatility series"
  - detailed: timestamp, level, tags, message, then key=value context
  - json:     one JSON object per line
"""

import json
from abc import ABC, abstractmethod
from typing import Any

from snapfill.logger.records import LogRecord


class LogFormatter(ABC):

    @abstractmethod
    def format(self, record: LogRecord) -> str: ...


class CompactFormatter(LogFormatter):

    def format(self, record: LogRecord) -> str:
        ts = record.timestamp.strftime("%H:%M:%S")
        return f"{ts} [{record.level_name:>8}] {record.message}"


class DetailedFormatter(LogFormatter):
    """
    Example:
        2024-06-28 14:32:05.123456 [   DEBUG] [generators.volatility] Anchored walk | anchor=14.3000 offset=-0.8200
    """

    def format(self, record: LogRecord) -> str:
        ts = record.timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")
        tags_str = ",".join(sorted(record.tags)) if record.tags else "-"
        line = f"{ts} [{record.level_name:>8}] [{tags_str}] {record.message}"

        extras = {k: v for k, v in record.context.items() if v is not None}
        if extras:
            line += " | " + " ".join(f"{k}={_format_value(v)}" for k, v in extras.items())
        return line


class JsonFormatter(LogFormatter):

    def format(self, record: LogRecord) -> str:
        obj: dict[str, Any] = {
            "timestamp": record.timestamp.isoformat(),
            "level": record.level,
            "level_name": record.level_name,
            "message": record.message,
            "tags": sorted(record.tags),
        }
        if record.context:
            obj["context"] = {k: _serialize_value(v) for k, v in record.context.items()}
        return json.dumps(obj, default=str)


def build_formatter(name: str | None) -> LogFormatter | None:
    """Formatter by config name; None means the adapter's default."""
    if name is None:
        return None
    formatters = {
        "compact": CompactFormatter,
        "detailed": DetailedFormatter,
        "json": JsonFormatter,
    }
    try:
        return formatters[name]()
    except KeyError:
        raise ValueError(f"Unknown formatter '{name}'. Use one of: {', '.join(formatters)}")


def _format_value(v: Any) -> str:
    if isinstance(v, float):
        return f"{v:.4f}"
    return str(v)


def _serialize_value(v: Any) -> Any:
    if isinstance(v, (str, int, float, bool, type(None))):
        return v
    if isinstance(v, (list, tuple, set, frozenset)):
        return [_serialize_value(i) for i in v]
    if isinstance(v, dict):
        return {str(k): _serialize_value(val) for k, val in v.items()}
    return str(v)
