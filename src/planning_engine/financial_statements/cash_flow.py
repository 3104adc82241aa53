"""
Cash Flow Statement Construction

Indirect method: start from net income, add back non-cash charges, adjust
for working capital movements, then investing and financing flows.

    CFO = NI + D + A - dAR + dAP + dTax payable + dEscrow
    CFI = -capex - software investment
    CFF = equity issuance + partner contributions

Ending cash = opening cash + CFO + CFI + CFF, compared against the balance
sheet cash (derived with the direct method) with an absolute tolerance.
"""

from dataclasses import dataclass, asdict
from typing import Dict

from ..utils.numeric import is_close


@dataclass
class CashFlowStatement:
    """Data structure for cash flow statement components."""
    # Operating activities
    net_income: float = 0.0
    depreciation: float = 0.0
    amortization: float = 0.0
    change_in_receivables: float = 0.0
    change_in_payables: float = 0.0
    change_in_tax_payable: float = 0.0
    change_in_escrow: float = 0.0
    operating_cash_flow: float = 0.0

    # Investing activities
    capex: float = 0.0
    software_investment: float = 0.0
    investing_cash_flow: float = 0.0

    # Financing activities
    equity_issuance: float = 0.0
    partner_contributions: float = 0.0
    financing_cash_flow: float = 0.0

    # Summary
    net_change_in_cash: float = 0.0
    opening_cash: float = 0.0
    ending_cash: float = 0.0

    # Reconciliation with the balance sheet
    balance_sheet_cash: float = 0.0
    difference: float = 0.0
    reconciles: bool = True

    @property
    def free_cash_flow(self) -> float:
        return self.operating_cash_flow + self.investing_cash_flow

    def to_dict(self) -> Dict[str, float]:
        """Convert cash flow statement to dictionary format."""
        data = asdict(self)
        data['free_cash_flow'] = self.free_cash_flow
        return data


def build_cash_flow_statement(
    net_income: float,
    depreciation: float,
    amortization: float,
    receivables: float,
    prior_receivables: float,
    payables: float,
    prior_payables: float,
    tax_payable: float,
    prior_tax_payable: float,
    escrow_liability: float,
    prior_escrow: float,
    capex: float,
    software_investment: float,
    equity_issuance: float,
    partner_contributions: float,
    opening_cash: float,
    balance_sheet_cash: float,
    tolerance: float = 1.0
) -> CashFlowStatement:
    """
    Construct cash flow statement using the indirect method.

    Args:
        net_income: Net income from the income statement
        depreciation: Non-cash depreciation expense
        amortization: Non-cash amortization expense
        receivables / prior_receivables: Closing and opening receivables
        payables / prior_payables: Closing and opening payables
        tax_payable / prior_tax_payable: Closing and opening tax payable
        escrow_liability / prior_escrow: Closing and opening escrow held
        capex: Fixed asset purchases
        software_investment: Capitalized software
        equity_issuance: New shares issued
        partner_contributions: Additional partner capital
        opening_cash: Cash at the start of the year
        balance_sheet_cash: Year-end cash reported on the balance sheet
        tolerance: Absolute reconciliation tolerance

    Returns:
        CashFlowStatement
    """
    change_in_receivables = receivables - prior_receivables
    change_in_payables = payables - prior_payables
    change_in_tax_payable = tax_payable - prior_tax_payable
    change_in_escrow = escrow_liability - prior_escrow

    # Assets increasing consume cash, liabilities increasing provide it
    operating_cash_flow = (net_income + depreciation + amortization
                           - change_in_receivables
                           + change_in_payables
                           + change_in_tax_payable
                           + change_in_escrow)

    investing_cash_flow = -capex - software_investment
    financing_cash_flow = equity_issuance + partner_contributions

    net_change_in_cash = operating_cash_flow + investing_cash_flow + financing_cash_flow
    ending_cash = opening_cash + net_change_in_cash
    difference = ending_cash - balance_sheet_cash

    return CashFlowStatement(
        net_income=net_income,
        depreciation=depreciation,
        amortization=amortization,
        change_in_receivables=change_in_receivables,
        change_in_payables=change_in_payables,
        change_in_tax_payable=change_in_tax_payable,
        change_in_escrow=change_in_escrow,
        operating_cash_flow=operating_cash_flow,
        capex=capex,
        software_investment=software_investment,
        investing_cash_flow=investing_cash_flow,
        equity_issuance=equity_issuance,
        partner_contributions=partner_contributions,
        financing_cash_flow=financing_cash_flow,
        net_change_in_cash=net_change_in_cash,
        opening_cash=opening_cash,
        ending_cash=ending_cash,
        balance_sheet_cash=balance_sheet_cash,
        difference=difference,
        reconciles=is_close(ending_cash, balance_sheet_cash, tolerance),
    )
