"""
triangulation.py

Cross-statement consistency checks for one fiscal year.

Four identities are checked with an absolute tolerance:
    1. Balance equation: A = L + E
    2. Cash reconciles: indirect-method ending cash == balance sheet cash
    3. Net income closes: IS net income == BS current-year result, and
       opening RE + NI == BS retained earnings + current-year result
    4. Escrow tracked: escrow >= 0 and its movement matches the cash flow

Failures are reported, never raised; a broken model is still returned so
the caller can display what went wrong.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List

from .income_statement import IncomeStatement
from .balance_sheet import BalanceSheet
from .cash_flow import CashFlowStatement
from ..utils.numeric import is_close


BALANCE_EQUATION = 'balance_equation'
CASH_RECONCILES = 'cash_reconciles'
NET_INCOME_CLOSES = 'net_income_closes'
ESCROW_TRACKED = 'escrow_tracked'


@dataclass
class TriangulationError:
    kind: str
    message: str
    expected: float
    actual: float
    difference: float
    severity: str = 'CRITICAL'


@dataclass
class TriangulationResult:
    """Outcome of the triangulation for one year."""
    balance_equation: bool
    cash_reconciles: bool
    net_income_closes: bool
    escrow_tracked: bool
    errors: List[TriangulationError] = field(default_factory=list)
    metrics: Dict[str, float] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return len(self.errors) == 0

    def checks(self) -> Dict[str, bool]:
        return {
            BALANCE_EQUATION: self.balance_equation,
            CASH_RECONCILES: self.cash_reconciles,
            NET_INCOME_CLOSES: self.net_income_closes,
            ESCROW_TRACKED: self.escrow_tracked,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['valid'] = self.valid
        return data


def validate_triangulation(income_statement: IncomeStatement,
                           balance_sheet: BalanceSheet,
                           cash_flow: CashFlowStatement,
                           opening_retained_earnings: float,
                           prior_escrow: float,
                           tolerance: float = 1.0) -> TriangulationResult:
    """
    Check that the three statements agree with each other.

    Args:
        income_statement: Income statement for the year
        balance_sheet: Year-end balance sheet
        cash_flow: Cash flow statement for the year
        opening_retained_earnings: Cumulative retained earnings before the year
        prior_escrow: Escrow liability at the start of the year
        tolerance: Absolute tolerance in currency units

    Returns:
        TriangulationResult with one error entry per failed identity
    """
    errors = []

    # 1. A = L + E
    eq = balance_sheet.equation
    balance_ok = is_close(eq.assets, eq.liabilities + eq.equity, tolerance)
    if not balance_ok:
        errors.append(TriangulationError(
            kind=BALANCE_EQUATION,
            message="Assets do not equal liabilities plus equity",
            expected=eq.liabilities + eq.equity,
            actual=eq.assets,
            difference=eq.assets - eq.liabilities - eq.equity,
        ))

    # 2. Indirect-method cash vs balance sheet cash
    cash_ok = is_close(cash_flow.ending_cash, balance_sheet.cash, tolerance)
    if not cash_ok:
        errors.append(TriangulationError(
            kind=CASH_RECONCILES,
            message="Cash flow ending cash does not match balance sheet cash",
            expected=balance_sheet.cash,
            actual=cash_flow.ending_cash,
            difference=cash_flow.ending_cash - balance_sheet.cash,
        ))

    # 3. Net income flows into equity
    equity = balance_sheet.equity
    ni_matches = is_close(income_statement.net_income,
                          equity.current_year_net_income, tolerance)
    if not ni_matches:
        errors.append(TriangulationError(
            kind=NET_INCOME_CLOSES,
            message="Income statement net income differs from the balance sheet result",
            expected=income_statement.net_income,
            actual=equity.current_year_net_income,
            difference=equity.current_year_net_income - income_statement.net_income,
        ))

    expected_cumulative = opening_retained_earnings + income_statement.net_income
    reported_cumulative = equity.retained_earnings + equity.current_year_net_income
    re_rolls = is_close(expected_cumulative, reported_cumulative, tolerance)
    if not re_rolls:
        errors.append(TriangulationError(
            kind=NET_INCOME_CLOSES,
            message="Retained earnings do not roll forward by net income",
            expected=expected_cumulative,
            actual=reported_cumulative,
            difference=reported_cumulative - expected_cumulative,
        ))

    # 4. Escrow held for third parties
    escrow = balance_sheet.current_liabilities.escrow_liability
    escrow_non_negative = escrow >= 0
    if not escrow_non_negative:
        errors.append(TriangulationError(
            kind=ESCROW_TRACKED,
            message="Escrow liability is negative",
            expected=0.0,
            actual=escrow,
            difference=escrow,
        ))

    escrow_movement = escrow - prior_escrow
    escrow_flows = is_close(escrow_movement, cash_flow.change_in_escrow, tolerance)
    if not escrow_flows:
        errors.append(TriangulationError(
            kind=ESCROW_TRACKED,
            message="Escrow movement differs between balance sheet and cash flow",
            expected=escrow_movement,
            actual=cash_flow.change_in_escrow,
            difference=cash_flow.change_in_escrow - escrow_movement,
        ))

    metrics = {
        'total_assets': eq.assets,
        'total_liabilities': eq.liabilities,
        'total_equity': eq.equity,
        'balance_difference': eq.difference,
        'balance_sheet_cash': balance_sheet.cash,
        'cash_flow_ending_cash': cash_flow.ending_cash,
        'cash_difference': cash_flow.ending_cash - balance_sheet.cash,
        'net_income': income_statement.net_income,
        'escrow_liability': escrow,
        'escrow_change': escrow_movement,
    }

    return TriangulationResult(
        balance_equation=balance_ok,
        cash_reconciles=cash_ok,
        net_income_closes=ni_matches and re_rolls,
        escrow_tracked=escrow_non_negative and escrow_flows,
        errors=errors,
        metrics=metrics,
    )
