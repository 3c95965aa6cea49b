"""
Log levels and records.

Levels use Python-compatible numeric values, with three extra levels
(TRACE, VERBOSE, NOTICE) slotted between the standard ones.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any


class LogLevel(IntEnum):
    TRACE = 5
    DEBUG = 10
    VERBOSE = 15
    INFO = 20
    NOTICE = 25
    WARNING = 30
    ERROR = 40
    CRITICAL = 50

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        """Case-insensitive lookup by name."""
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(
                f"Unknown log level '{name}'. "
                f"Valid levels: {', '.join(m.name for m in cls)}"
            )


LEVEL_NAMES: dict[int, str] = {member.value: member.name for member in LogLevel}


def level_name(level: int) -> str:
    """Display name for a level value; unknown values render as their number."""
    return LEVEL_NAMES.get(level, str(level))


def resolve_level(value: int | str) -> int:
    """Level name or number -> number."""
    if isinstance(value, bool):
        raise TypeError("Expected int or str for level, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return LogLevel.from_name(value).value
    raise TypeError(f"Expected int or str for level, got {type(value).__name__}")


@dataclass(frozen=True)
class LogRecord:
    """
    Immutable record built by SnapfillLogger.log() and handed to adapters.

    context carries the keyword arguments of the log call, e.g. the
    anchor and offset of a volatility backfill.
    """
    timestamp: datetime
    level: int
    level_name: str
    message: str
    tags: frozenset[str] = field(default_factory=frozenset)
    context: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        level: int,
        message: str,
        tags: set[str] | frozenset[str] | None = None,
        **context: Any,
    ) -> "LogRecord":
        return cls(
            timestamp=datetime.now(timezone.utc),
            level=level,
            level_name=level_name(level),
            message=message,
            tags=frozenset(tags) if tags else frozenset(),
            context=context,
        )
