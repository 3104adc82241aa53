"""
cash_conversion.py

Cash Conversion Cycle for a services company (no inventory):

    DSO = receivables / daily sales
    DPO = payables / daily cost of sales
    CCC = DSO - DPO

A negative cycle means suppliers finance operations; a long positive one
means growth consumes cash.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Optional

from ..config import CashConversionBands, StatementConfig
from ..utils.numeric import safe_divide

FAVORABLE = 'favorable'
NEUTRAL = 'neutral'
CASH_INTENSIVE = 'cash_intensive'

DESCRIPTIONS = {
    FAVORABLE: "Suppliers finance operations: cash comes in before it goes out.",
    NEUTRAL: "Collections and payments are roughly matched.",
    CASH_INTENSIVE: "Cash is collected well after suppliers are paid; growth needs working capital.",
}


@dataclass
class CashConversionCycle:
    dso: float
    dpo: float
    ccc: float
    interpretation: str
    description: str
    working_capital_required: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def classify_ccc(ccc: float, bands: Optional[CashConversionBands] = None) -> str:
    bands = bands or CashConversionBands()
    if ccc < bands.favorable_below:
        return FAVORABLE
    if ccc > bands.intensive_above:
        return CASH_INTENSIVE
    return NEUTRAL


def compute_ccc(daily_sales: float,
                receivables: float,
                payables: float,
                daily_cost_of_sales: float,
                bands: Optional[CashConversionBands] = None) -> CashConversionCycle:
    """
    Compute DSO, DPO and the cash conversion cycle.

    A zero daily figure yields 0 days for that side instead of an error.
    """
    dso = safe_divide(receivables, daily_sales)
    dpo = safe_divide(payables, daily_cost_of_sales)
    ccc = dso - dpo
    label = classify_ccc(ccc, bands)

    return CashConversionCycle(
        dso=dso,
        dpo=dpo,
        ccc=ccc,
        interpretation=label,
        description=DESCRIPTIONS[label],
        working_capital_required=ccc * daily_sales,
    )


def cash_conversion_for_model(model, config: Optional[StatementConfig] = None,
                              bands: Optional[CashConversionBands] = None) -> CashConversionCycle:
    """CCC of a generated year, using the generator's day-count convention."""
    config = config or StatementConfig()
    income_statement = model.income_statement
    balance_sheet = model.balance_sheet

    daily_sales = income_statement.gross_revenue / config.days_in_year
    daily_cost_of_sales = income_statement.cost_of_sales / config.days_in_year

    return compute_ccc(
        daily_sales=daily_sales,
        receivables=balance_sheet.current_assets.receivables,
        payables=balance_sheet.current_liabilities.payables,
        daily_cost_of_sales=daily_cost_of_sales,
        bands=bands,
    )
