"""
Routing matrix: which adapters receive which records.

For each adapter, in order:
1. critical_override: CRITICAL goes everywhere
2. tag routes: a record carrying a routed tag goes to the listed adapters
3. otherwise: record.level >= adapter.min_level
"""

from dataclasses import dataclass

from snapfill.logger.records import LogRecord, LogLevel


@dataclass
class RoutingRule:
    tag: str
    adapter_names: list[str]
    min_level: int = 0


class RoutingMatrix:

    def __init__(self, critical_override: bool = True):
        self.critical_override = critical_override
        self._tag_routes: dict[str, RoutingRule] = {}

    def add_tag_route(self, tag: str, adapter_names: list[str], min_level: int = 0) -> None:
        """Always send records tagged `tag` to these adapters (at or above min_level)."""
        self._tag_routes[tag] = RoutingRule(
            tag=tag, adapter_names=list(adapter_names), min_level=min_level
        )

    def should_route(self, record: LogRecord, adapter_name: str, adapter_min_level: int) -> bool:
        if self.critical_override and record.level >= LogLevel.CRITICAL:
            return True

        for tag in record.tags:
            rule = self._tag_routes.get(tag)
            if rule and adapter_name in rule.adapter_names and record.level >= rule.min_level:
                return True

        return record.level >= adapter_min_level

    @property
    def tag_routes(self) -> dict[str, RoutingRule]:
        return dict(self._tag_routes)
