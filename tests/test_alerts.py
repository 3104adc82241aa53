"""
Unit tests for the financial health alert rules.

Verifies:
- Each rule triggers on its threshold
- A LTV/CAC ratio of 0 means "not computable" and never alerts
- Missing inputs skip their rules
- Output is stable-sorted by severity
"""

from datetime import datetime
from typing import Optional, get_type_hints

import pytest

from planning_engine.analysis import Alert, Severity, evaluate, sort_alerts
from planning_engine.analysis.metrics import SaaSKpis, UnitEconomics
from planning_engine.config import AlertBenchmarks
from planning_engine.financial_statements import BalanceSheet, build_balance_sheet


def _economics(ltv_cac_ratio=4.0, churn_rate=0.03, cac=50_000.0):
    return UnitEconomics(cac=cac, arpu=40_000.0, churn_rate=churn_rate,
                         ltv_cac_ratio=ltv_cac_ratio)


def _titles(alerts, fragment):
    return [a for a in alerts if fragment in a.title]


@pytest.fixture
def healthy_kpis():
    return SaaSKpis(runway_months=24.0)


@pytest.fixture
def unbalanced_sheet():
    return build_balance_sheet(
        year=2026, cash=100.0, receivables=0.0,
        fixed_assets_gross=0.0, accumulated_depreciation=0.0,
        software_gross=0.0, accumulated_amortization=0.0,
        payables=0.0, escrow_liability=0.0, tax_payable=0.0,
        paid_in_capital=50.0, legal_reserve=0.0,
        retained_earnings=0.0, current_year_net_income=0.0,
    )


class TestLtvCacRule:
    """Boundary behavior of the LTV/CAC rule."""

    def test_zero_ratio_does_not_alert(self, healthy_kpis):
        alerts = evaluate(_economics(ltv_cac_ratio=0.0), None, healthy_kpis, 0)

        assert _titles(alerts, "LTV/CAC") == []

    def test_just_below_minimum_alerts(self, healthy_kpis):
        alerts = _titles(evaluate(_economics(ltv_cac_ratio=2.99), None, healthy_kpis, 0),
                         "LTV/CAC")

        assert len(alerts) == 1
        assert alerts[0].severity == Severity.CRITICAL
        assert alerts[0].current_value == 2.99
        assert alerts[0].benchmark_value == 3.0

    def test_minimum_does_not_alert(self, healthy_kpis):
        alerts = evaluate(_economics(ltv_cac_ratio=3.0), None, healthy_kpis, 0)

        assert _titles(alerts, "LTV/CAC") == []


class TestRules:
    """One test per rule."""

    def test_runway_below_minimum(self):
        alerts = evaluate(None, None, SaaSKpis(runway_months=4.5), None)

        assert len(alerts) == 1
        assert alerts[0].severity == Severity.CRITICAL
        assert alerts[0].current_value == 4.5
        assert alerts[0].benchmark_value == 6.0

    def test_runway_at_minimum_is_fine(self):
        assert evaluate(None, None, SaaSKpis(runway_months=6.0), None) == []

    def test_unbalanced_sheet(self, unbalanced_sheet):
        alerts = evaluate(None, unbalanced_sheet, None, None)

        assert len(alerts) == 1
        assert alerts[0].severity == Severity.CRITICAL
        assert alerts[0].current_value == pytest.approx(50.0)

    def test_balanced_sheet(self, scenario_model):
        assert evaluate(None, scenario_model.balance_sheet, None, None) == []

    def test_high_churn(self):
        alerts = evaluate(_economics(churn_rate=0.08), None, None, None)

        assert len(alerts) == 1
        assert alerts[0].severity == Severity.HIGH
        assert alerts[0].current_value == 0.08
        assert alerts[0].benchmark_value == 0.07

    def test_high_cac(self):
        alerts = evaluate(_economics(cac=150_000.0), None, None, None)

        assert len(alerts) == 1
        assert alerts[0].severity == Severity.HIGH
        assert alerts[0].benchmark_value == 100_000.0

    def test_negative_months(self):
        assert evaluate(None, None, None, 2) == []

        alerts = evaluate(None, None, None, 3)
        assert len(alerts) == 1
        assert alerts[0].severity == Severity.HIGH
        assert alerts[0].current_value == 3.0

    def test_all_inputs_missing(self):
        assert evaluate(None, None, None, None) == []

    def test_custom_benchmarks(self):
        benchmarks = AlertBenchmarks(runway_min_months=12.0)
        alerts = evaluate(None, None, SaaSKpis(runway_months=9.0), None, benchmarks)

        assert len(alerts) == 1
        assert alerts[0].benchmark_value == 12.0


class TestOrdering:
    """Severity ordering is stable."""

    def test_evaluate_orders_by_severity(self, unbalanced_sheet):
        economics = _economics(ltv_cac_ratio=2.0, churn_rate=0.10, cac=200_000.0)
        alerts = evaluate(economics, unbalanced_sheet, SaaSKpis(runway_months=3.0), 5)

        severities = [a.severity for a in alerts]
        assert severities == [Severity.CRITICAL] * 3 + [Severity.HIGH] * 3
        # Detection order preserved within a tier
        assert alerts[0].category == 'Liquidity'
        assert "LTV/CAC" in alerts[1].title
        assert alerts[2].category == 'Accounting'
        assert "churn" in alerts[3].title
        assert "CAC" in alerts[4].title
        assert alerts[5].category == 'Liquidity'

    def test_sort_alerts_is_stable(self):
        def make(severity, title):
            return Alert(severity=severity, category='Test', title=title, description='',
                         current_value=0.0, benchmark_value=0.0, recommended_action='')

        alerts = [
            make(Severity.MEDIUM, 'm1'),
            make(Severity.HIGH, 'h1'),
            make(Severity.CRITICAL, 'c1'),
            make(Severity.MEDIUM, 'm2'),
            make(Severity.CRITICAL, 'c2'),
            make(Severity.HIGH, 'h2'),
        ]

        assert [a.title for a in sort_alerts(alerts)] == ['c1', 'c2', 'h1', 'h2', 'm1', 'm2']


class TestAlert:
    """Alerts are immutable records."""

    def test_fields(self):
        alert = evaluate(None, None, SaaSKpis(runway_months=1.0), None)[0]

        assert len(alert.id) == 36
        assert isinstance(alert.timestamp, datetime)

    def test_unique_ids(self):
        first = evaluate(None, None, SaaSKpis(runway_months=1.0), None)[0]
        second = evaluate(None, None, SaaSKpis(runway_months=1.0), None)[0]

        assert first.id != second.id

    def test_frozen(self):
        alert = evaluate(None, None, SaaSKpis(runway_months=1.0), None)[0]

        with pytest.raises(AttributeError):
            alert.title = 'changed'

    def test_to_dict(self):
        data = evaluate(None, None, SaaSKpis(runway_months=1.0), None)[0].to_dict()

        assert data['severity'] == 'CRITICAL'
        assert isinstance(data['timestamp'], str)


class TestSignature:
    """Every input of evaluate is typed and optional."""

    def test_balance_sheet_annotation(self):
        hints = get_type_hints(evaluate)

        assert hints['balance_sheet'] == Optional[BalanceSheet]
        assert hints['kpis'] == Optional[SaaSKpis]
