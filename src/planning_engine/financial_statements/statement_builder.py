# src/planning_engine/financial_statements/statement_builder.py
"""
Statement Builder

Builds the three interconnected statements for one fiscal year in an order
that needs no plugs:

1. Income Statement from the year's revenue, costs and D&A
2. Working capital balances from day-counts
3. Balance Sheet, with cash derived from receipts and payments (direct)
4. Cash Flow Statement, with ending cash derived from net income (indirect)
5. Triangulation of the four cross-statement identities

The year is a pure function of (YearInputs, CarryForwardState, config).
The carry-forward state is replaced once per year via `advance`, never
mutated.
"""

from dataclasses import dataclass, asdict, replace
from typing import Any, Dict, Optional

import pandas as pd

from ..config import StatementConfig
from ..utils.numeric import require_finite, require_non_negative, all_finite
from .income_statement import IncomeStatement, build_income_statement
from .balance_sheet import (
    BalanceSheet,
    build_balance_sheet,
    derive_cash_direct,
    working_capital_balances,
)
from .cash_flow import CashFlowStatement, build_cash_flow_statement
from .triangulation import TriangulationResult, validate_triangulation


@dataclass
class YearInputs:
    """Input data for one fiscal year."""

    # ============================================
    # REQUIRED FIELDS
    # ============================================
    year: int
    gross_revenue: float
    cost_of_sales: float
    operating_expenses: float

    # ============================================
    # OPTIONAL FIELDS
    # ============================================

    # Non-cash charges
    depreciation: float = 0.0
    amortization: float = 0.0

    # Interest and bank charges below EBIT
    financial_expenses: float = 0.0

    # Working capital terms
    days_receivable: float = 30.0
    days_payable: float = 45.0

    # Money held for third parties at year end
    escrow_balance: float = 0.0

    # Investment
    capex: float = 0.0
    software_investment: float = 0.0

    # Financing
    equity_issuance: float = 0.0
    partner_contributions: float = 0.0

    MONETARY_FIELDS = (
        'gross_revenue', 'cost_of_sales', 'operating_expenses',
        'depreciation', 'amortization', 'financial_expenses',
        'escrow_balance', 'capex', 'software_investment',
        'equity_issuance', 'partner_contributions',
    )

    def validate(self) -> None:
        """Raise ValueError on negative, NaN or infinite inputs."""
        for name in self.MONETARY_FIELDS:
            require_non_negative(name, getattr(self, name))
        for name in ('days_receivable', 'days_payable'):
            value = require_finite(name, getattr(self, name))
            if value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")


@dataclass(frozen=True)
class CarryForwardState:
    """
    Balances handed from one fiscal year to the next.

    Seeded once from the initial capital, then replaced by `advance` after
    each generated year.
    """
    cash: float = 0.0
    paid_in_capital: float = 0.0
    legal_reserve: float = 0.0
    retained_earnings: float = 0.0
    fixed_assets_gross: float = 0.0
    accumulated_depreciation: float = 0.0
    software_gross: float = 0.0
    accumulated_amortization: float = 0.0
    receivables: float = 0.0
    payables: float = 0.0
    tax_payable: float = 0.0
    escrow_balance: float = 0.0

    @classmethod
    def seed(cls, initial_capital: float) -> 'CarryForwardState':
        """Opening state of a new company: the capital sits in the bank."""
        capital = require_non_negative('initial_capital', initial_capital)
        return cls(cash=capital, paid_in_capital=capital)

    @property
    def fixed_assets_net(self) -> float:
        return self.fixed_assets_gross - self.accumulated_depreciation

    @property
    def software_net(self) -> float:
        return self.software_gross - self.accumulated_amortization

    def advance(self, model: 'ThreeStatementModel') -> 'CarryForwardState':
        """
        Closing balances of `model` become the next year's opening state.

        Cash is taken from the cash flow statement's ending cash, which the
        triangulation has compared against the balance sheet.
        """
        bs = model.balance_sheet
        nca = bs.non_current_assets
        cl = bs.current_liabilities
        return replace(
            self,
            cash=model.cash_flow.ending_cash,
            paid_in_capital=bs.equity.paid_in_capital,
            legal_reserve=bs.equity.legal_reserve,
            retained_earnings=bs.equity.retained_earnings + bs.equity.current_year_net_income,
            fixed_assets_gross=nca.fixed_assets_gross,
            accumulated_depreciation=nca.accumulated_depreciation,
            software_gross=nca.software_gross,
            accumulated_amortization=nca.accumulated_amortization,
            receivables=bs.current_assets.receivables,
            payables=cl.payables,
            tax_payable=cl.tax_payable,
            escrow_balance=cl.escrow_liability,
        )

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class ThreeStatementModel:
    """The three statements of one fiscal year plus their consistency check."""
    year: int
    income_statement: IncomeStatement
    balance_sheet: BalanceSheet
    cash_flow: CashFlowStatement
    triangulation: TriangulationResult

    @property
    def is_consistent(self) -> bool:
        return self.triangulation.valid

    def to_dict(self) -> Dict[str, Any]:
        return {
            'year': self.year,
            'income_statement': self.income_statement.to_dict(),
            'balance_sheet': self.balance_sheet.to_dict(),
            'cash_flow': self.cash_flow.to_dict(),
            'triangulation': self.triangulation.to_dict(),
        }

    def to_frame(self) -> pd.DataFrame:
        """One row per line item: (statement, item) -> value for the year."""
        rows = []
        for statement, values in (('income_statement', self.income_statement.to_dict()),
                                  ('balance_sheet', self.balance_sheet.to_dict()),
                                  ('cash_flow', self.cash_flow.to_dict())):
            for item, value in values.items():
                rows.append({'statement': statement, 'item': item, self.year: value})
        return pd.DataFrame(rows).set_index(['statement', 'item'])


def generate(year_inputs: YearInputs,
             carry_forward: CarryForwardState,
             config: Optional[StatementConfig] = None) -> ThreeStatementModel:
    """
    Generate the three statements for one year.

    Args:
        year_inputs: Revenue, costs and flows of the year
        carry_forward: Opening balances from the previous year
        config: Tax rate, day-count and tolerance

    Returns:
        ThreeStatementModel; inconsistencies are reported in its
        triangulation, never raised.

    Raises:
        ValueError: on negative, NaN or infinite inputs
    """
    config = config or StatementConfig()
    year_inputs.validate()
    prior = carry_forward

    # 1. Income statement
    income_statement = build_income_statement(
        gross_revenue=year_inputs.gross_revenue,
        cost_of_sales=year_inputs.cost_of_sales,
        operating_expenses=year_inputs.operating_expenses,
        depreciation=year_inputs.depreciation,
        amortization=year_inputs.amortization,
        tax_rate=config.tax_rate,
        financial_expenses=year_inputs.financial_expenses,
    )

    # 2. Working capital
    receivables, payables = working_capital_balances(
        gross_revenue=year_inputs.gross_revenue,
        cost_of_sales=year_inputs.cost_of_sales,
        days_receivable=year_inputs.days_receivable,
        days_payable=year_inputs.days_payable,
        days_in_year=config.days_in_year,
    )
    tax_payable = income_statement.income_tax
    escrow = year_inputs.escrow_balance
    equity_inflows = year_inputs.equity_issuance + year_inputs.partner_contributions

    # 3. Balance sheet, cash from receipts and payments
    cash = derive_cash_direct(
        opening_cash=prior.cash,
        gross_revenue=year_inputs.gross_revenue,
        receivables=receivables,
        prior_receivables=prior.receivables,
        cost_of_sales=year_inputs.cost_of_sales,
        payables=payables,
        prior_payables=prior.payables,
        operating_expenses=year_inputs.operating_expenses,
        financial_expenses=year_inputs.financial_expenses,
        prior_tax_payable=prior.tax_payable,
        escrow_liability=escrow,
        prior_escrow=prior.escrow_balance,
        capex=year_inputs.capex,
        software_investment=year_inputs.software_investment,
        equity_inflows=equity_inflows,
    )

    balance_sheet = build_balance_sheet(
        year=year_inputs.year,
        cash=cash,
        receivables=receivables,
        fixed_assets_gross=prior.fixed_assets_gross + year_inputs.capex,
        accumulated_depreciation=prior.accumulated_depreciation + year_inputs.depreciation,
        software_gross=prior.software_gross + year_inputs.software_investment,
        accumulated_amortization=prior.accumulated_amortization + year_inputs.amortization,
        payables=payables,
        escrow_liability=escrow,
        tax_payable=tax_payable,
        paid_in_capital=prior.paid_in_capital + equity_inflows,
        legal_reserve=prior.legal_reserve,
        retained_earnings=prior.retained_earnings,
        current_year_net_income=income_statement.net_income,
        tolerance=config.tolerance,
    )

    # 4. Cash flow, ending cash from net income
    cash_flow = build_cash_flow_statement(
        net_income=income_statement.net_income,
        depreciation=year_inputs.depreciation,
        amortization=year_inputs.amortization,
        receivables=receivables,
        prior_receivables=prior.receivables,
        payables=payables,
        prior_payables=prior.payables,
        tax_payable=tax_payable,
        prior_tax_payable=prior.tax_payable,
        escrow_liability=escrow,
        prior_escrow=prior.escrow_balance,
        capex=year_inputs.capex,
        software_investment=year_inputs.software_investment,
        equity_issuance=year_inputs.equity_issuance,
        partner_contributions=year_inputs.partner_contributions,
        opening_cash=prior.cash,
        balance_sheet_cash=balance_sheet.cash,
        tolerance=config.tolerance,
    )

    # 5. Triangulation
    triangulation = validate_triangulation(
        income_statement=income_statement,
        balance_sheet=balance_sheet,
        cash_flow=cash_flow,
        opening_retained_earnings=prior.retained_earnings,
        prior_escrow=prior.escrow_balance,
        tolerance=config.tolerance,
    )

    model = ThreeStatementModel(
        year=year_inputs.year,
        income_statement=income_statement,
        balance_sheet=balance_sheet,
        cash_flow=cash_flow,
        triangulation=triangulation,
    )

    for name, values in (('income statement', income_statement.to_dict()),
                         ('balance sheet', balance_sheet.to_dict()),
                         ('cash flow', cash_flow.to_dict())):
        if not all_finite(values):
            raise ValueError(f"Non-finite value in {name} for {year_inputs.year}")

    return model
