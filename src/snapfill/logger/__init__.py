"""
snapfill diagnostic logger.

Singleton with a routing matrix and tag-gated emission: log statements
stay in place and are switched on by level or by tag.
"""

from snapfill.logger.core import SnapfillLogger
from snapfill.logger.records import LogRecord, LogLevel
from snapfill.logger.adapters import (
    LogAdapter,
    TerminalAdapter,
    FileAdapter,
    MemoryAdapter,
)
from snapfill.logger.routing import RoutingMatrix, RoutingRule
from snapfill.logger.formatters import LogFormatter, CompactFormatter, DetailedFormatter, JsonFormatter

__all__ = [
    "SnapfillLogger",
    "LogRecord",
    "LogLevel",
    "LogAdapter",
    "TerminalAdapter",
    "FileAdapter",
    "MemoryAdapter",
    "RoutingMatrix",
    "RoutingRule",
    "LogFormatter",
    "CompactFormatter",
    "DetailedFormatter",
    "JsonFormatter",
]
