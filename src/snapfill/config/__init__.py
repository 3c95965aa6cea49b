"""
Pydantic configuration schemas for snapfill.

Every field has a default, so an empty YAML file (or no file at all)
gives the dashboard's stock behavior. Overrides are validated on load.

Usage:
    config = BackfillConfig.from_yaml("snapfill.yaml")
    config.volatility.reversion   # 0.02
    config.to_dict()
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from snapfill.errors import ConfigError


# ═══════════════════════════════════════════════════════════════════
#  Generator Params
# ═══════════════════════════════════════════════════════════════════

class VolatilityWalkParams(BaseModel):
    """Mean-reverting walk for a volatility-style index (Component A)."""
    length: int = Field(365, ge=2)
    baseline: float = 13.5           # calm-regime starting level
    target: float = 15.0             # mean-reversion level
    reversion: float = Field(0.02, ge=0.0, le=1.0)
    step: float = Field(1.0, ge=0.0)  # perturbation half-width
    floor: float = 10.0
    ceiling: float = 45.0
    post_shift_floor: float = 0.0
    reclamp_upper: bool = False
    decimals: Optional[int] = Field(2, ge=0)

    @model_validator(mode="after")
    def check_band(self) -> "VolatilityWalkParams":
        if self.floor >= self.ceiling:
            raise ValueError(
                f"floor ({self.floor}) must be below ceiling ({self.ceiling})"
            )
        return self


class PriceWalkParams(BaseModel):
    """
    Two-point interpolated walk for an instrument price (Component B).

    Prices below 1 round to extra places, one per leading zero after the
    decimal point (0.004 rounds to 5 places with decimals=2).
    """
    length: int = Field(30, ge=2)
    volatility: float = Field(0.02, ge=0.0)
    flat_threshold: float = Field(0.001, ge=0.0)
    fallback_ratio: float = Field(0.95, gt=0.0)
    floor: Optional[float] = None
    decimals: Optional[int] = Field(2, ge=0)


class InsightThresholds(BaseModel):
    """Volatility levels at which the panel's market read changes."""
    fear: float = 25.0
    caution: float = 17.0

    @model_validator(mode="after")
    def check_order(self) -> "InsightThresholds":
        if self.caution >= self.fear:
            raise ValueError(
                f"caution threshold ({self.caution}) must be below fear ({self.fear})"
            )
        return self


# ═══════════════════════════════════════════════════════════════════
#  Logger Config
# ═══════════════════════════════════════════════════════════════════

class LogAdapterConfig(BaseModel):
    type: str
    min_level: int | str = 20
    color: Optional[bool] = None              # terminal
    path: Optional[str] = None                # file
    ring_buffer_size: Optional[int] = None    # memory
    formatter: Optional[str] = None           # any


class LogRoutingConfig(BaseModel):
    critical_override: bool = True
    tag_routes: Optional[dict[str, list[str]]] = None


class LoggerConfig(BaseModel):
    current_level: int | str = 20
    adapters: Optional[dict[str, LogAdapterConfig]] = None
    tag_levels: Optional[dict[str, int | str]] = None
    routing: Optional[LogRoutingConfig] = None


# ═══════════════════════════════════════════════════════════════════
#  Top-Level Config
# ═══════════════════════════════════════════════════════════════════

class BackfillConfig(BaseModel):
    """
    Top-level config.

    Example:
        volatility:
          reclamp_upper: true
        price:
          floor: 0.0
        insight:
          fear: 30
        logger:
          current_level: DEBUG
          adapters:
            terminal: {type: terminal, min_level: INFO}
    """
    volatility: VolatilityWalkParams = Field(default_factory=VolatilityWalkParams)
    price: PriceWalkParams = Field(default_factory=PriceWalkParams)
    insight: InsightThresholds = Field(default_factory=InsightThresholds)
    logger: Optional[LoggerConfig] = None

    @property
    def config_hash(self) -> str:
        """SHA256 of the canonical JSON dump."""
        d = self.model_dump(exclude_none=True)
        canonical = json.dumps(d, sort_keys=True, default=str)
        return hashlib.sha256(canonical.encode()).hexdigest()

    @classmethod
    def from_yaml(cls, path: str | Path) -> "BackfillConfig":
        """Load and validate a YAML file. Unreadable files raise ConfigError."""
        path = Path(path)
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(str(path), str(e)) from e
        return cls.from_yaml_string(raw, source=str(path))

    @classmethod
    def from_yaml_string(cls, yaml_string: str, source: str = "<string>") -> "BackfillConfig":
        try:
            data = yaml.safe_load(yaml_string)
        except yaml.YAMLError as e:
            raise ConfigError(source, f"invalid YAML: {e}") from e
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(source, f"expected a mapping, got {type(data).__name__}")
        return cls.model_validate(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BackfillConfig":
        return cls.model_validate(data)

    def to_dict(self, exclude_none: bool = True) -> dict:
        return self.model_dump(exclude_none=exclude_none)


__all__ = [
    "VolatilityWalkParams",
    "PriceWalkParams",
    "InsightThresholds",
    "LogAdapterConfig",
    "LogRoutingConfig",
    "LoggerConfig",
    "BackfillConfig",
    "ValidationError",
]
