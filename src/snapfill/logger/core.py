"""
SnapfillLogger: singleton diagnostic logger.

One instance, several adapters, a routing matrix. Most calls exit at
_should_emit() without building a record: generator log statements are
cheap until a level or tag turns them on.
"""

import threading
from typing import Any, Optional

from snapfill.logger.records import LogRecord, LogLevel, resolve_level
from snapfill.logger.adapters import (
    LogAdapter,
    TerminalAdapter,
    FileAdapter,
    MemoryAdapter,
)
from snapfill.logger.routing import RoutingMatrix
from snapfill.logger.formatters import build_formatter


class SnapfillLogger:
    """
    Usage:
        log = SnapfillLogger.instance()
        log.info("Backfilled index panel", tags={"snapshot"})
        log.debug("Anchored walk", tags={"generators.volatility"}, offset=-0.82)
    """

    _instance: Optional["SnapfillLogger"] = None
    _lock = threading.Lock()

    TRACE = LogLevel.TRACE
    DEBUG = LogLevel.DEBUG
    VERBOSE = LogLevel.VERBOSE
    INFO = LogLevel.INFO
    NOTICE = LogLevel.NOTICE
    WARNING = LogLevel.WARNING
    ERROR = LogLevel.ERROR
    CRITICAL = LogLevel.CRITICAL

    def __init__(self) -> None:
        self._adapters: dict[str, LogAdapter] = {}
        self._routing = RoutingMatrix()
        self._active_tags: set[str] = set()
        self._tag_levels: dict[str, int] = {}
        self._current_level: int = LogLevel.INFO
        self._emit_lock = threading.Lock()

    @classmethod
    def instance(cls) -> "SnapfillLogger":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Close adapters and drop the singleton. Tests only."""
        with cls._lock:
            if cls._instance is not None:
                for adapter in cls._instance._adapters.values():
                    adapter.close()
                cls._instance = None

    # ── Configuration ─────────────────────────────────────────────

    def configure(self, config: dict) -> None:
        """
        Configure from a dict (a LoggerConfig dump or parsed YAML):

            current_level: INFO
            adapters:
                terminal: {type: terminal, min_level: INFO, color: true}
                logfile:  {type: file, path: logs/snapfill.log, min_level: DEBUG}
                memory:   {type: memory, ring_buffer_size: 500}
            tag_levels:
                generators.volatility: DEBUG
            routing:
                critical_override: true
                tag_routes:
                    snapshot: [terminal, logfile]
        """
        if config.get("current_level") is not None:
            self._current_level = resolve_level(config["current_level"])

        for name, adapter_cfg in (config.get("adapters") or {}).items():
            self.add_adapter(_build_adapter(name, adapter_cfg))

        for tag, threshold in (config.get("tag_levels") or {}).items():
            self._tag_levels[tag] = resolve_level(threshold)

        routing_cfg = config.get("routing") or {}
        self._routing.critical_override = routing_cfg.get("critical_override", True)
        for tag, adapter_names in (routing_cfg.get("tag_routes") or {}).items():
            self._routing.add_tag_route(tag, adapter_names)

    def configure_defaults(self) -> None:
        """Terminal at INFO, nothing else."""
        self._current_level = LogLevel.INFO
        self.add_adapter(TerminalAdapter(color=True))
        self._routing.critical_override = True

    # ── Adapters ──────────────────────────────────────────────────

    def add_adapter(self, adapter: LogAdapter) -> None:
        """Add or replace (closing the old one) an adapter by name."""
        old = self._adapters.get(adapter.name)
        if old is not None and old is not adapter:
            old.close()
        self._adapters[adapter.name] = adapter

    def get_adapter(self, name: str) -> LogAdapter | None:
        return self._adapters.get(name)

    # ── Tags & levels ─────────────────────────────────────────────

    def activate_tag(self, tag: str) -> None:
        self._active_tags.add(tag)

    def set_tag_level(self, tag: str, threshold: int | str) -> None:
        """A tag whose threshold is <= current_level emits at any level."""
        self._tag_levels[tag] = resolve_level(threshold)

    @property
    def current_level(self) -> int:
        return self._current_level

    @current_level.setter
    def current_level(self, value: int | str) -> None:
        self._current_level = resolve_level(value)

    # ── Core ──────────────────────────────────────────────────────

    def log(
        self,
        level: int,
        message: str,
        tags: set[str] | None = None,
        **context: Any,
    ) -> None:
        """
        Emit when level >= current_level, or any tag is active, or any
        tag's auto-activate threshold is <= current_level.
        """
        tags = tags or set()

        if not self._should_emit(level, tags):
            return

        record = LogRecord.create(level=level, message=message, tags=tags, **context)

        with self._emit_lock:
            for adapter_name, adapter in self._adapters.items():
                if self._routing.should_route(record, adapter_name, adapter.min_level):
                    try:
                        adapter.emit(record)
                    except Exception:
                        # adapter failure never reaches the caller
                        pass

    def _should_emit(self, level: int, tags: set[str]) -> bool:
        if not self._adapters:
            return False

        if level >= self._current_level:
            return True

        if tags & self._active_tags:
            return True

        for tag in tags:
            threshold = self._tag_levels.get(tag)
            if threshold is not None and threshold <= self._current_level:
                return True

        return False

    def trace(self, message: str, tags: set[str] | None = None, **ctx: Any) -> None:
        self.log(LogLevel.TRACE, message, tags, **ctx)

    def debug(self, message: str, tags: set[str] | None = None, **ctx: Any) -> None:
        self.log(LogLevel.DEBUG, message, tags, **ctx)

    def verbose(self, message: str, tags: set[str] | None = None, **ctx: Any) -> None:
        self.log(LogLevel.VERBOSE, message, tags, **ctx)

    def info(self, message: str, tags: set[str] | None = None, **ctx: Any) -> None:
        self.log(LogLevel.INFO, message, tags, **ctx)

    def notice(self, message: str, tags: set[str] | None = None, **ctx: Any) -> None:
        self.log(LogLevel.NOTICE, message, tags, **ctx)

    def warning(self, message: str, tags: set[str] | None = None, **ctx: Any) -> None:
        self.log(LogLevel.WARNING, message, tags, **ctx)

    def error(self, message: str, tags: set[str] | None = None, **ctx: Any) -> None:
        self.log(LogLevel.ERROR, message, tags, **ctx)

    def critical(self, message: str, tags: set[str] | None = None, **ctx: Any) -> None:
        self.log(LogLevel.CRITICAL, message, tags, **ctx)

    # ── Lifecycle ─────────────────────────────────────────────────

    def flush(self) -> None:
        for adapter in self._adapters.values():
            adapter.flush()

    def close(self) -> None:
        for adapter in self._adapters.values():
            adapter.close()


def _build_adapter(name: str, cfg: dict) -> LogAdapter:
    adapter_type = cfg.get("type", name)
    min_level = resolve_level(cfg.get("min_level", LogLevel.INFO))
    formatter = build_formatter(cfg.get("formatter"))

    if adapter_type == "terminal":
        color = cfg.get("color")
        return TerminalAdapter(
            name=name,
            min_level=min_level,
            formatter=formatter,
            color=True if color is None else color,
        )
    elif adapter_type == "file":
        return FileAdapter(
            name=name,
            min_level=min_level,
            formatter=formatter,
            path=cfg.get("path") or "logs/snapfill.log",
        )
    elif adapter_type == "memory":
        return MemoryAdapter(
            name=name,
            min_level=min_level,
            formatter=formatter,
            ring_buffer_size=cfg.get("ring_buffer_size") or 1000,
        )
    else:
        raise ValueError(f"Unknown adapter type '{adapter_type}' for adapter '{name}'")
