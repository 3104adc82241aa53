"""
Unit tests for the cash conversion cycle.
"""

import pytest

from planning_engine.analysis import cash_conversion_for_model, classify_ccc, compute_ccc
from planning_engine.config import CashConversionBands


class TestComputeCcc:
    """Tests for compute_ccc."""

    def test_supplier_financed(self):
        result = compute_ccc(daily_sales=100.0, receivables=3000.0,
                             payables=4500.0, daily_cost_of_sales=100.0)

        assert result.dso == pytest.approx(30.0)
        assert result.dpo == pytest.approx(45.0)
        assert result.ccc == pytest.approx(-15.0)
        assert result.interpretation == 'favorable'
        assert result.working_capital_required == pytest.approx(-1500.0)

    def test_cash_intensive(self):
        result = compute_ccc(daily_sales=100.0, receivables=6000.0,
                             payables=1000.0, daily_cost_of_sales=100.0)

        assert result.ccc == pytest.approx(50.0)
        assert result.interpretation == 'cash_intensive'

    def test_zero_daily_sales(self):
        result = compute_ccc(daily_sales=0.0, receivables=1000.0,
                             payables=0.0, daily_cost_of_sales=0.0)

        assert result.dso == 0.0
        assert result.dpo == 0.0
        assert result.ccc == 0.0
        assert result.interpretation == 'neutral'

    def test_to_dict(self):
        data = compute_ccc(100.0, 3000.0, 3000.0, 100.0).to_dict()

        assert data['ccc'] == pytest.approx(0.0)
        assert data['interpretation'] == 'neutral'


class TestClassifyCcc:
    """Band edges belong to the neutral band."""

    @pytest.mark.parametrize("ccc,label", [
        (-5.01, 'favorable'),
        (-5.0, 'neutral'),
        (0.0, 'neutral'),
        (10.0, 'neutral'),
        (10.01, 'cash_intensive'),
    ])
    def test_bands(self, ccc, label):
        assert classify_ccc(ccc) == label

    def test_custom_bands(self):
        bands = CashConversionBands(favorable_below=0.0, intensive_above=5.0)

        assert classify_ccc(-1.0, bands) == 'favorable'
        assert classify_ccc(6.0, bands) == 'cash_intensive'


class TestCashConversionForModel:
    """Uses the same day-count as the statement generator."""

    def test_reference_scenario(self, scenario_model, statement_config):
        result = cash_conversion_for_model(scenario_model, statement_config)

        assert result.dso == pytest.approx(30.0)
        assert result.dpo == pytest.approx(45.0)
        assert result.interpretation == 'favorable'
