"""
Income Statement Construction

Top-down P&L for one fiscal year:

    gross revenue - cost of sales           = gross profit
    gross profit  - operating expenses      = EBITDA
    EBITDA        - depreciation - amortization = EBIT
    EBIT          - financial expenses      = pre-tax income
    pre-tax income - income tax             = net income

Depreciation and amortization are inputs; the orchestrator derives them
from the carried-forward asset balances.
"""

from dataclasses import dataclass, asdict
from typing import Dict, List, Tuple

from ..utils.numeric import safe_divide


@dataclass
class IncomeStatement:
    """Data structure for income statement components."""
    gross_revenue: float = 0.0
    cost_of_sales: float = 0.0
    gross_profit: float = 0.0
    operating_expenses: float = 0.0
    ebitda: float = 0.0
    depreciation: float = 0.0
    amortization: float = 0.0
    ebit: float = 0.0
    financial_expenses: float = 0.0
    pre_tax_income: float = 0.0
    tax_rate: float = 0.0
    income_tax: float = 0.0
    net_income: float = 0.0

    @property
    def depreciation_and_amortization(self) -> float:
        return self.depreciation + self.amortization

    # Margins are 0 when there is no revenue, never NaN or infinity
    @property
    def gross_margin(self) -> float:
        return safe_divide(self.gross_profit, self.gross_revenue)

    @property
    def ebitda_margin(self) -> float:
        return safe_divide(self.ebitda, self.gross_revenue)

    @property
    def ebit_margin(self) -> float:
        return safe_divide(self.ebit, self.gross_revenue)

    @property
    def net_margin(self) -> float:
        return safe_divide(self.net_income, self.gross_revenue)

    @property
    def effective_tax_rate(self) -> float:
        if self.pre_tax_income <= 0:
            return 0.0
        return safe_divide(self.income_tax, self.pre_tax_income)

    def to_dict(self) -> Dict[str, float]:
        """
        Convert income statement to dictionary format.

        Returns:
            Dictionary with all line items and margins
        """
        data = asdict(self)
        data.update({
            'depreciation_and_amortization': self.depreciation_and_amortization,
            'gross_margin': self.gross_margin,
            'ebitda_margin': self.ebitda_margin,
            'ebit_margin': self.ebit_margin,
            'net_margin': self.net_margin,
            'effective_tax_rate': self.effective_tax_rate,
        })
        return data

    def validate(self, tolerance: float = 1e-6) -> Tuple[bool, List[str]]:
        """
        Validate the formula chain.

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        errors = []

        if abs(self.gross_profit - (self.gross_revenue - self.cost_of_sales)) > tolerance:
            errors.append("Gross profit calculation error")

        if abs(self.ebitda - (self.gross_profit - self.operating_expenses)) > tolerance:
            errors.append("EBITDA calculation error")

        expected_ebit = self.ebitda - self.depreciation - self.amortization
        if abs(self.ebit - expected_ebit) > tolerance:
            errors.append("EBIT calculation error")

        if self.income_tax < 0:
            errors.append("Income tax is negative")

        if abs(self.net_income - (self.pre_tax_income - self.income_tax)) > tolerance:
            errors.append("Net income calculation error")

        return len(errors) == 0, errors


def calculate_income_tax(pre_tax_income: float, tax_rate: float) -> float:
    """Flat rate on positive income only; no loss carryback is modeled."""
    return max(0.0, pre_tax_income * tax_rate)


def build_income_statement(
    gross_revenue: float,
    cost_of_sales: float,
    operating_expenses: float,
    depreciation: float,
    amortization: float,
    tax_rate: float,
    financial_expenses: float = 0.0
) -> IncomeStatement:
    """
    Construct income statement from components.

    Args:
        gross_revenue: Annual gross revenue
        cost_of_sales: Direct costs of the services sold
        operating_expenses: OPEX (payroll, admin, tech, marketing)
        depreciation: Depreciation expense for the year
        amortization: Software amortization for the year
        tax_rate: Corporate income tax rate
        financial_expenses: Interest and bank charges

    Returns:
        IncomeStatement
    """
    gross_profit = gross_revenue - cost_of_sales
    ebitda = gross_profit - operating_expenses
    ebit = ebitda - depreciation - amortization
    pre_tax_income = ebit - financial_expenses
    income_tax = calculate_income_tax(pre_tax_income, tax_rate)
    net_income = pre_tax_income - income_tax

    return IncomeStatement(
        gross_revenue=gross_revenue,
        cost_of_sales=cost_of_sales,
        gross_profit=gross_profit,
        operating_expenses=operating_expenses,
        ebitda=ebitda,
        depreciation=depreciation,
        amortization=amortization,
        ebit=ebit,
        financial_expenses=financial_expenses,
        pre_tax_income=pre_tax_income,
        tax_rate=tax_rate,
        income_tax=income_tax,
        net_income=net_income,
    )
