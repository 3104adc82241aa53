"""
Unit tests for the three-statement generator.

Verifies:
- Reference scenario ties (A = L + E, cash reconciles)
- Balance sheet cash and cash flow ending cash are derived independently
- Fail-fast input validation
- Degenerate inputs never produce NaN or infinity
- Triangulation reports tampered statements
"""

import math
from dataclasses import replace

import pytest

from planning_engine.financial_statements import (
    CarryForwardState,
    YearInputs,
    build_balance_sheet,
    generate,
    validate_triangulation,
)
from planning_engine.financial_statements.triangulation import (
    BALANCE_EQUATION,
    CASH_RECONCILES,
    ESCROW_TRACKED,
    NET_INCOME_CLOSES,
)


def _rebuild_balance_sheet(bs, **overrides):
    """Rebuild a balance sheet from an existing one with some values changed."""
    values = dict(
        year=bs.year,
        cash=bs.cash,
        receivables=bs.current_assets.receivables,
        fixed_assets_gross=bs.non_current_assets.fixed_assets_gross,
        accumulated_depreciation=bs.non_current_assets.accumulated_depreciation,
        software_gross=bs.non_current_assets.software_gross,
        accumulated_amortization=bs.non_current_assets.accumulated_amortization,
        payables=bs.current_liabilities.payables,
        escrow_liability=bs.current_liabilities.escrow_liability,
        tax_payable=bs.current_liabilities.tax_payable,
        paid_in_capital=bs.equity.paid_in_capital,
        legal_reserve=bs.equity.legal_reserve,
        retained_earnings=bs.equity.retained_earnings,
        current_year_net_income=bs.equity.current_year_net_income,
    )
    values.update(overrides)
    return build_balance_sheet(**values)


class TestReferenceScenario:
    """500M capital, 1.2B revenue, 700M cost, 300M OPEX, 35% tax."""

    def test_income_statement(self, scenario_model):
        is_ = scenario_model.income_statement

        assert is_.ebit == pytest.approx(200_000_000)
        assert is_.income_tax == pytest.approx(70_000_000)
        assert is_.net_income == pytest.approx(130_000_000)

    def test_balance_sheet_balances(self, scenario_model):
        eq = scenario_model.balance_sheet.equation

        assert eq.balanced
        assert abs(eq.difference) <= 1.0
        assert eq.assets == pytest.approx(787_500_000)
        assert eq.liabilities == pytest.approx(157_500_000)
        assert eq.equity == pytest.approx(630_000_000)

    def test_working_capital_uses_360_day_year(self, scenario_model):
        bs = scenario_model.balance_sheet

        assert bs.current_assets.receivables == pytest.approx(100_000_000)
        assert bs.current_liabilities.payables == pytest.approx(87_500_000)

    def test_cash_reconciles(self, scenario_model):
        cf = scenario_model.cash_flow

        assert cf.reconciles
        assert cf.ending_cash == pytest.approx(687_500_000)
        assert cf.balance_sheet_cash == pytest.approx(687_500_000)
        assert abs(cf.difference) <= 1.0

    def test_tax_payable_is_current_year_tax(self, scenario_model):
        assert scenario_model.balance_sheet.current_liabilities.tax_payable == pytest.approx(70_000_000)

    def test_triangulation_valid(self, scenario_model):
        tri = scenario_model.triangulation

        assert tri.valid
        assert tri.errors == []
        assert all(tri.checks().values())


class TestGenerate:
    """Tests for generate with investment, escrow and financing."""

    def setup_method(self):
        self.prior = CarryForwardState(
            cash=309_000_000,   # balanced opening position
            paid_in_capital=400_000_000,
            legal_reserve=5_000_000,
            retained_earnings=-20_000_000,
            fixed_assets_gross=80_000_000,
            accumulated_depreciation=8_000_000,
            software_gross=20_000_000,
            accumulated_amortization=4_000_000,
            receivables=40_000_000,
            payables=30_000_000,
            tax_payable=12_000_000,
            escrow_balance=10_000_000,
        )
        self.inputs = YearInputs(
            year=2028,
            gross_revenue=900_000_000,
            cost_of_sales=450_000_000,
            operating_expenses=320_000_000,
            depreciation=8_000_000,
            amortization=4_000_000,
            financial_expenses=3_000_000,
            escrow_balance=30_000_000,
            capex=16_000_000,
            software_investment=6_400_000,
            equity_issuance=50_000_000,
            partner_contributions=10_000_000,
        )

    def test_all_checks_pass(self):
        model = generate(self.inputs, self.prior)

        assert model.triangulation.valid
        assert model.balance_sheet.equation.balanced
        assert model.cash_flow.reconciles

    def test_fixed_assets_roll_forward(self):
        nca = generate(self.inputs, self.prior).balance_sheet.non_current_assets

        assert nca.fixed_assets_gross == pytest.approx(96_000_000)
        assert nca.accumulated_depreciation == pytest.approx(16_000_000)
        assert nca.software_gross == pytest.approx(26_400_000)
        assert nca.accumulated_amortization == pytest.approx(8_000_000)

    def test_equity_components(self):
        equity = generate(self.inputs, self.prior).balance_sheet.equity

        assert equity.paid_in_capital == pytest.approx(460_000_000)
        assert equity.legal_reserve == pytest.approx(5_000_000)
        assert equity.retained_earnings == pytest.approx(-20_000_000)

    def test_escrow_delta_in_operating_cash(self):
        cf = generate(self.inputs, self.prior).cash_flow

        assert cf.change_in_escrow == pytest.approx(20_000_000)
        assert cf.financing_cash_flow == pytest.approx(60_000_000)
        assert cf.investing_cash_flow == pytest.approx(-22_400_000)

    def test_loss_year_still_ties(self):
        inputs = replace(self.inputs, gross_revenue=200_000_000)
        model = generate(inputs, self.prior)

        assert model.income_statement.income_tax == 0.0
        assert model.triangulation.valid

    def test_config_tax_rate_is_used(self, statement_config):
        low_tax = replace(statement_config, tax_rate=0.10)
        model = generate(self.inputs, self.prior, low_tax)

        assert model.income_statement.tax_rate == 0.10
        assert model.triangulation.valid

    def test_365_day_year(self, statement_config, scenario_inputs, seeded_state):
        model = generate(scenario_inputs, seeded_state,
                         replace(statement_config, days_in_year=365))

        assert model.balance_sheet.current_assets.receivables == pytest.approx(1.2e9 / 365 * 30)
        assert model.triangulation.valid

    def test_to_frame_has_year_column(self):
        frame = generate(self.inputs, self.prior).to_frame()

        assert list(frame.columns) == [2028]
        assert frame.loc[('income_statement', 'net_income'), 2028] == pytest.approx(
            generate(self.inputs, self.prior).income_statement.net_income)


class TestInputValidation:
    """Negative, NaN and infinite inputs fail fast."""

    def test_negative_revenue_raises(self, seeded_state):
        with pytest.raises(ValueError, match="gross_revenue"):
            generate(YearInputs(2026, -1.0, 0.0, 0.0), seeded_state)

    def test_nan_cost_raises(self, seeded_state):
        with pytest.raises(ValueError, match="cost_of_sales"):
            generate(YearInputs(2026, 100.0, float('nan'), 0.0), seeded_state)

    def test_infinite_opex_raises(self, seeded_state):
        with pytest.raises(ValueError):
            generate(YearInputs(2026, 100.0, 0.0, float('inf')), seeded_state)

    def test_negative_days_receivable_raises(self, seeded_state):
        with pytest.raises(ValueError, match="days_receivable"):
            generate(YearInputs(2026, 100.0, 50.0, 10.0, days_receivable=-1), seeded_state)

    def test_negative_capital_raises(self):
        with pytest.raises(ValueError):
            CarryForwardState.seed(-1.0)


class TestDegenerateInputs:
    """Zero revenue is valid and must not produce NaN or infinity."""

    def test_zero_revenue(self, seeded_state):
        model = generate(YearInputs(2026, 0.0, 0.0, 0.0), seeded_state)

        assert model.income_statement.gross_margin == 0.0
        assert model.triangulation.valid
        for statement in (model.income_statement, model.balance_sheet, model.cash_flow):
            for value in statement.to_dict().values():
                if isinstance(value, float):
                    assert math.isfinite(value)

    def test_zero_revenue_with_opex_burns_cash(self, seeded_state):
        model = generate(YearInputs(2026, 0.0, 0.0, 100_000_000), seeded_state)

        assert model.cash_flow.ending_cash == pytest.approx(400_000_000)
        assert model.income_statement.income_tax == 0.0
        assert model.triangulation.valid


class TestTriangulation:
    """Tampered statements are reported, never raised."""

    def _check(self, model, bs=None, cf=None, opening_re=0.0, prior_escrow=0.0):
        return validate_triangulation(
            model.income_statement,
            bs or model.balance_sheet,
            cf or model.cash_flow,
            opening_retained_earnings=opening_re,
            prior_escrow=prior_escrow,
        )

    def test_extra_cash_breaks_balance_and_reconciliation(self, scenario_model):
        bs = _rebuild_balance_sheet(scenario_model.balance_sheet,
                                    cash=scenario_model.balance_sheet.cash + 1000)
        result = self._check(scenario_model, bs=bs)

        assert not result.valid
        assert not result.balance_equation
        assert not result.cash_reconciles
        kinds = {e.kind for e in result.errors}
        assert kinds == {BALANCE_EQUATION, CASH_RECONCILES}

    def test_error_carries_signed_difference(self, scenario_model):
        bs = _rebuild_balance_sheet(scenario_model.balance_sheet,
                                    cash=scenario_model.balance_sheet.cash + 1000)
        result = self._check(scenario_model, bs=bs)
        cash_error = [e for e in result.errors if e.kind == CASH_RECONCILES][0]

        assert cash_error.difference == pytest.approx(-1000)

    def test_net_income_mismatch(self, scenario_model):
        bs = _rebuild_balance_sheet(scenario_model.balance_sheet,
                                    current_year_net_income=0.0,
                                    retained_earnings=130_000_000)
        result = self._check(scenario_model, bs=bs)

        assert not result.net_income_closes
        assert result.balance_equation
        assert any(e.kind == NET_INCOME_CLOSES for e in result.errors)

    def test_escrow_mismatch(self, scenario_model):
        cf = replace(scenario_model.cash_flow, change_in_escrow=5_000_000)
        result = self._check(scenario_model, cf=cf)

        assert not result.escrow_tracked
        assert [e.kind for e in result.errors] == [ESCROW_TRACKED]

    def test_negative_escrow(self, scenario_model):
        bs = _rebuild_balance_sheet(scenario_model.balance_sheet,
                                    escrow_liability=-10.0, tax_payable=70_000_010)
        cf = replace(scenario_model.cash_flow, change_in_escrow=-10.0)
        result = self._check(scenario_model, bs=bs, cf=cf)

        assert not result.escrow_tracked
        assert any(e.message == "Escrow liability is negative" for e in result.errors)

    def test_to_dict_preserves_flags(self, scenario_model):
        data = scenario_model.triangulation.to_dict()

        assert data['valid'] is True
        assert data['balance_equation'] is True
        assert data['errors'] == []
