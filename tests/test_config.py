"""
Tests for Pydantic config schemas.

Covers:
- Defaults reproduce the dashboard's constants
- YAML parsing (file and string), empty files
- Validation errors on out-of-range values
- Config hashing
- LoggerConfig round-trip into SnapfillLogger.configure()
"""

import pytest
from pydantic import ValidationError

from snapfill.config import (
    BackfillConfig,
    InsightThresholds,
    LoggerConfig,
    PriceWalkParams,
    VolatilityWalkParams,
)
from snapfill.errors import ConfigError
from snapfill.logger.adapters import MemoryAdapter
from snapfill.logger.core import SnapfillLogger


@pytest.fixture(autouse=True)
def reset_logger():
    SnapfillLogger.reset()
    yield
    SnapfillLogger.reset()


# ═══════════════════════════════════════════════════════════════════
#  Defaults
# ═══════════════════════════════════════════════════════════════════

class TestDefaults:
    def test_volatility_defaults(self):
        p = VolatilityWalkParams()
        assert p.length == 365
        assert p.baseline == 13.5
        assert p.target == 15.0
        assert p.reversion == 0.02
        assert p.step == 1.0
        assert (p.floor, p.ceiling) == (10.0, 45.0)
        assert p.post_shift_floor == 0.0
        assert p.reclamp_upper is False

    def test_price_defaults(self):
        p = PriceWalkParams()
        assert p.length == 30
        assert p.volatility == 0.02
        assert p.flat_threshold == 0.001
        assert p.fallback_ratio == 0.95
        assert p.floor is None

    def test_insight_defaults(self):
        t = InsightThresholds()
        assert (t.caution, t.fear) == (17.0, 25.0)

    def test_empty_config(self):
        config = BackfillConfig()
        assert config.volatility == VolatilityWalkParams()
        assert config.logger is None


# ═══════════════════════════════════════════════════════════════════
#  YAML
# ═══════════════════════════════════════════════════════════════════

class TestYaml:
    YAML = """
volatility:
  reclamp_upper: true
  ceiling: 60
price:
  floor: 0.0
  volatility: 0.05
insight:
  fear: 30
logger:
  current_level: DEBUG
  adapters:
    memory: {type: memory, min_level: DEBUG}
"""

    def test_from_string(self):
        config = BackfillConfig.from_yaml_string(self.YAML)
        assert config.volatility.reclamp_upper is True
        assert config.volatility.ceiling == 60.0
        assert config.volatility.floor == 10.0
        assert config.price.floor == 0.0
        assert config.price.volatility == 0.05
        assert config.insight.fear == 30.0
        assert config.logger.current_level == "DEBUG"

    def test_from_file(self, tmp_path):
        path = tmp_path / "snapfill.yaml"
        path.write_text(self.YAML, encoding="utf-8")
        config = BackfillConfig.from_yaml(path)
        assert config.volatility.ceiling == 60.0

    def test_empty_yaml_is_defaults(self):
        assert BackfillConfig.from_yaml_string("") == BackfillConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Cannot load config"):
            BackfillConfig.from_yaml(tmp_path / "absent.yaml")

    def test_non_mapping(self):
        with pytest.raises(ConfigError, match="expected a mapping"):
            BackfillConfig.from_yaml_string("- a\n- b\n")

    def test_invalid_yaml(self):
        with pytest.raises(ConfigError, match="invalid YAML"):
            BackfillConfig.from_yaml_string("volatility: [unclosed")

    def test_logger_section_configures_logger(self):
        config = BackfillConfig.from_yaml_string(self.YAML)
        log = SnapfillLogger.instance()
        log.configure(config.logger.model_dump(exclude_none=True))
        assert isinstance(log.get_adapter("memory"), MemoryAdapter)
        assert log.current_level == 10


# ═══════════════════════════════════════════════════════════════════
#  Validation
# ═══════════════════════════════════════════════════════════════════

class TestValidation:
    def test_floor_above_ceiling(self):
        with pytest.raises(ValidationError, match="floor"):
            VolatilityWalkParams(floor=50.0, ceiling=45.0)

    def test_reversion_out_of_range(self):
        with pytest.raises(ValidationError):
            VolatilityWalkParams(reversion=1.5)

    def test_length_too_short(self):
        with pytest.raises(ValidationError):
            PriceWalkParams(length=1)

    def test_negative_volatility(self):
        with pytest.raises(ValidationError):
            PriceWalkParams(volatility=-0.1)

    def test_thresholds_order(self):
        with pytest.raises(ValidationError, match="caution"):
            InsightThresholds(fear=15.0, caution=20.0)

    def test_nested_error_from_dict(self):
        with pytest.raises(ValidationError):
            BackfillConfig.from_dict({"price": {"fallback_ratio": 0}})


# ═══════════════════════════════════════════════════════════════════
#  Hash / export
# ═══════════════════════════════════════════════════════════════════

class TestHash:
    def test_identical_configs_same_hash(self):
        a = BackfillConfig.from_dict({"price": {"floor": 0.0}})
        b = BackfillConfig.from_dict({"price": {"floor": 0.0}})
        assert a.config_hash == b.config_hash

    def test_different_configs_differ(self):
        a = BackfillConfig()
        b = BackfillConfig.from_dict({"volatility": {"reclamp_upper": True}})
        assert a.config_hash != b.config_hash

    def test_to_dict_excludes_none(self):
        d = BackfillConfig().to_dict()
        assert "logger" not in d
        assert "floor" not in d["price"]
        assert d["volatility"]["length"] == 365

    def test_logger_config_accepts_names_and_numbers(self):
        cfg = LoggerConfig(current_level="WARNING", tag_levels={"generators": 10})
        assert cfg.tag_levels["generators"] == 10
