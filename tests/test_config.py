"""
Unit tests for configuration loading.
"""

import pytest
import yaml

from planning_engine.config import EngineConfig


class TestEngineConfig:
    """Tests for EngineConfig.from_dict and from_yaml."""

    def test_defaults(self, config):
        assert config.statements.tax_rate == 0.35
        assert config.statements.days_in_year == 360
        assert config.benchmarks.ltv_cac_min == 3.0
        assert config.taxes.professional_withholding == 0.11
        assert config.cascade.target_margin == 0.15

    def test_partial_override_keeps_defaults(self):
        config = EngineConfig.from_dict({'statements': {'tax_rate': 0.30}})

        assert config.statements.tax_rate == 0.30
        assert config.statements.days_receivable == 30.0
        assert config.benchmarks.runway_min_months == 6.0

    def test_unknown_section_raises(self):
        with pytest.raises(ValueError, match="sections"):
            EngineConfig.from_dict({'statement': {}})

    def test_unknown_key_raises(self):
        with pytest.raises(ValueError, match="tax_rat"):
            EngineConfig.from_dict({'statements': {'tax_rat': 0.3}})

    def test_invalid_day_count_raises(self):
        with pytest.raises(ValueError, match="days_in_year"):
            EngineConfig.from_dict({'statements': {'days_in_year': 364}})

    def test_rate_out_of_range_raises(self):
        with pytest.raises(ValueError, match="tax_rate"):
            EngineConfig.from_dict({'statements': {'tax_rate': 1.5}})

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text(yaml.safe_dump({
            'statements': {'days_in_year': 365},
            'benchmarks': {'churn_max': 0.05},
        }), encoding='utf-8')

        config = EngineConfig.from_yaml(path)

        assert config.statements.days_in_year == 365
        assert config.benchmarks.churn_max == 0.05

    def test_empty_yaml_yields_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding='utf-8')

        assert EngineConfig.from_yaml(path) == EngineConfig()

    def test_non_mapping_yaml_raises(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n", encoding='utf-8')

        with pytest.raises(ValueError, match="mapping"):
            EngineConfig.from_yaml(path)

    def test_to_dict_round_trips(self, config):
        assert EngineConfig.from_dict(config.to_dict()) == config
