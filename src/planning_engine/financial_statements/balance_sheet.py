"""
Balance Sheet Construction

Year-end statement of financial position for a services company: no
inventory, no debt. The escrow liability is money collected on behalf of
third parties; it sits in cash but is owed, never revenue.

The cash asset is derived here with the direct method (collections minus
payments). The cash flow statement derives ending cash independently with
the indirect method, so comparing both is a real check, not a tautology.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from ..utils.numeric import is_close


@dataclass
class CurrentAssets:
    cash: float = 0.0
    receivables: float = 0.0

    @property
    def total(self) -> float:
        return self.cash + self.receivables


@dataclass
class NonCurrentAssets:
    fixed_assets_gross: float = 0.0
    accumulated_depreciation: float = 0.0
    software_gross: float = 0.0
    accumulated_amortization: float = 0.0

    @property
    def fixed_assets_net(self) -> float:
        return self.fixed_assets_gross - self.accumulated_depreciation

    @property
    def software_net(self) -> float:
        return self.software_gross - self.accumulated_amortization

    @property
    def total(self) -> float:
        return self.fixed_assets_net + self.software_net


@dataclass
class CurrentLiabilities:
    payables: float = 0.0
    escrow_liability: float = 0.0
    tax_payable: float = 0.0

    @property
    def total(self) -> float:
        return self.payables + self.escrow_liability + self.tax_payable


@dataclass
class Equity:
    paid_in_capital: float = 0.0
    legal_reserve: float = 0.0
    retained_earnings: float = 0.0   # opening balance, prior years' results
    current_year_net_income: float = 0.0

    @property
    def total(self) -> float:
        return (self.paid_in_capital + self.legal_reserve +
                self.retained_earnings + self.current_year_net_income)


@dataclass
class AccountingEquation:
    """A = L + E, with the signed difference always reported."""
    assets: float
    liabilities: float
    equity: float
    difference: float
    balanced: bool


@dataclass
class BalanceSheet:
    """Balance sheet at fiscal year end."""
    year: int
    current_assets: CurrentAssets
    non_current_assets: NonCurrentAssets
    current_liabilities: CurrentLiabilities
    equity: Equity
    equation: AccountingEquation

    @property
    def cash(self) -> float:
        return self.current_assets.cash

    @property
    def total_assets(self) -> float:
        return self.current_assets.total + self.non_current_assets.total

    @property
    def total_liabilities(self) -> float:
        return self.current_liabilities.total

    @property
    def total_equity(self) -> float:
        return self.equity.total

    @property
    def working_capital(self) -> float:
        return self.current_assets.total - self.current_liabilities.total

    def to_dict(self) -> Dict[str, float]:
        """
        Convert balance sheet to dictionary format.

        Returns:
            Dictionary with all balance sheet items
        """
        ca = self.current_assets
        nca = self.non_current_assets
        cl = self.current_liabilities
        eq = self.equity
        return {
            # Assets
            'cash': ca.cash,
            'receivables': ca.receivables,
            'current_assets': ca.total,
            'fixed_assets_gross': nca.fixed_assets_gross,
            'accumulated_depreciation': nca.accumulated_depreciation,
            'fixed_assets_net': nca.fixed_assets_net,
            'software_gross': nca.software_gross,
            'accumulated_amortization': nca.accumulated_amortization,
            'software_net': nca.software_net,
            'non_current_assets': nca.total,
            'total_assets': self.total_assets,

            # Liabilities
            'payables': cl.payables,
            'escrow_liability': cl.escrow_liability,
            'tax_payable': cl.tax_payable,
            'total_liabilities': self.total_liabilities,

            # Equity
            'paid_in_capital': eq.paid_in_capital,
            'legal_reserve': eq.legal_reserve,
            'retained_earnings': eq.retained_earnings,
            'current_year_net_income': eq.current_year_net_income,
            'total_equity': self.total_equity,

            # Check
            'balance_difference': self.equation.difference,
            'balanced': self.equation.balanced,
        }


def working_capital_balances(
    gross_revenue: float,
    cost_of_sales: float,
    days_receivable: float,
    days_payable: float,
    days_in_year: int = 360
) -> Tuple[float, float]:
    """
    Receivables and payables from day-counts.

    receivables = revenue / days_in_year * days_receivable
    payables    = cost of sales / days_in_year * days_payable

    Negative day-counts are a caller bug and are rejected.
    """
    if days_receivable < 0:
        raise ValueError(f"days_receivable must be >= 0, got {days_receivable}")
    if days_payable < 0:
        raise ValueError(f"days_payable must be >= 0, got {days_payable}")
    if days_in_year <= 0:
        raise ValueError(f"days_in_year must be > 0, got {days_in_year}")

    daily_sales = gross_revenue / days_in_year
    daily_cost_of_sales = cost_of_sales / days_in_year
    return daily_sales * days_receivable, daily_cost_of_sales * days_payable


def derive_cash_direct(
    opening_cash: float,
    gross_revenue: float,
    receivables: float,
    prior_receivables: float,
    cost_of_sales: float,
    payables: float,
    prior_payables: float,
    operating_expenses: float,
    financial_expenses: float,
    prior_tax_payable: float,
    escrow_liability: float,
    prior_escrow: float,
    capex: float,
    software_investment: float,
    equity_inflows: float
) -> float:
    """
    Year-end cash from actual receipts and payments.

    Taxes paid in the year are last year's liability; this year's tax is
    accrued as tax payable. Escrow collected but not yet paid out stays in
    the bank.
    """
    collections = gross_revenue - (receivables - prior_receivables)
    supplier_payments = cost_of_sales - (payables - prior_payables)
    taxes_paid = prior_tax_payable
    escrow_retained = escrow_liability - prior_escrow

    return (opening_cash
            + collections
            - supplier_payments
            - operating_expenses
            - financial_expenses
            - taxes_paid
            + escrow_retained
            - capex
            - software_investment
            + equity_inflows)


def build_balance_sheet(
    year: int,
    cash: float,
    receivables: float,
    fixed_assets_gross: float,
    accumulated_depreciation: float,
    software_gross: float,
    accumulated_amortization: float,
    payables: float,
    escrow_liability: float,
    tax_payable: float,
    paid_in_capital: float,
    legal_reserve: float,
    retained_earnings: float,
    current_year_net_income: float,
    tolerance: float = 1.0
) -> BalanceSheet:
    """Assemble the balance sheet and evaluate the accounting equation."""
    current_assets = CurrentAssets(cash=cash, receivables=receivables)
    non_current_assets = NonCurrentAssets(
        fixed_assets_gross=fixed_assets_gross,
        accumulated_depreciation=accumulated_depreciation,
        software_gross=software_gross,
        accumulated_amortization=accumulated_amortization,
    )
    current_liabilities = CurrentLiabilities(
        payables=payables,
        escrow_liability=escrow_liability,
        tax_payable=tax_payable,
    )
    equity = Equity(
        paid_in_capital=paid_in_capital,
        legal_reserve=legal_reserve,
        retained_earnings=retained_earnings,
        current_year_net_income=current_year_net_income,
    )

    total_assets = current_assets.total + non_current_assets.total
    total_liabilities = current_liabilities.total
    total_equity = equity.total
    difference = total_assets - total_liabilities - total_equity

    equation = AccountingEquation(
        assets=total_assets,
        liabilities=total_liabilities,
        equity=total_equity,
        difference=difference,
        balanced=is_close(total_assets, total_liabilities + total_equity, tolerance),
    )

    return BalanceSheet(
        year=year,
        current_assets=current_assets,
        non_current_assets=non_current_assets,
        current_liabilities=current_liabilities,
        equity=equity,
        equation=equation,
    )
