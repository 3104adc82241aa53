"""
statement_printer.py

Utility functions for printing the three statements, the triangulation,
alerts and the unit cost cascade.
"""

import numpy as np
from typing import Dict, Iterable, List, Tuple


def fmt_currency(val: float) -> str:
    """Format currency value."""
    if val is None or (isinstance(val, float) and np.isnan(val)):
        return "N/A"
    if abs(val) >= 1e9:
        return f"${val/1e9:,.2f}B"
    elif abs(val) >= 1e6:
        return f"${val/1e6:,.1f}M"
    elif abs(val) >= 1e3:
        return f"${val/1e3:,.1f}K"
    else:
        return f"${val:,.0f}"


def fmt_pct(val: float) -> str:
    if val is None or (isinstance(val, float) and np.isnan(val)):
        return "N/A"
    return f"{val * 100:.1f}%"


def _print_rows(rows: List[Tuple[str, float]]):
    for name, value in rows:
        marker = "★" if name.isupper() else "○"
        print(f"{marker} {name:<44} {fmt_currency(value):>16}")


def print_three_statements(model, width: int = 70):
    """Print income statement, balance sheet and cash flow of one year."""
    is_ = model.income_statement
    bs = model.balance_sheet
    cf = model.cash_flow

    print(f"\n{'━'*width}")
    print(f"{'FINANCIAL STATEMENTS - ' + str(model.year):^{width}}")
    print(f"{'━'*width}")

    # Income Statement
    print(f"\n{'─'*width}")
    print(f"{'INCOME STATEMENT':^{width}}")
    print(f"{'─'*width}")
    _print_rows([
        ('Gross Revenue', is_.gross_revenue),
        ('Cost of Sales', is_.cost_of_sales),
        ('GROSS PROFIT', is_.gross_profit),
        ('Operating Expenses', is_.operating_expenses),
        ('EBITDA', is_.ebitda),
        ('Depreciation', is_.depreciation),
        ('Amortization', is_.amortization),
        ('EBIT', is_.ebit),
        ('Financial Expenses', is_.financial_expenses),
        ('Pre-tax Income', is_.pre_tax_income),
        ('Income Tax', is_.income_tax),
        ('NET INCOME', is_.net_income),
    ])
    print(f"  Gross margin {fmt_pct(is_.gross_margin)} | EBITDA margin "
          f"{fmt_pct(is_.ebitda_margin)} | Net margin {fmt_pct(is_.net_margin)}")

    # Balance Sheet
    ca = bs.current_assets
    nca = bs.non_current_assets
    cl = bs.current_liabilities
    eq = bs.equity
    print(f"\n{'─'*width}")
    print(f"{'BALANCE SHEET':^{width}}")
    print(f"{'─'*width}")
    _print_rows([
        ('  Cash', ca.cash),
        ('  Receivables', ca.receivables),
        ('  Fixed Assets (Net)', nca.fixed_assets_net),
        ('  Software (Net)', nca.software_net),
        ('TOTAL ASSETS', bs.total_assets),
        ('  Payables', cl.payables),
        ('  Escrow Liability', cl.escrow_liability),
        ('  Tax Payable', cl.tax_payable),
        ('TOTAL LIABILITIES', bs.total_liabilities),
        ('  Paid-in Capital', eq.paid_in_capital),
        ('  Legal Reserve', eq.legal_reserve),
        ('  Retained Earnings', eq.retained_earnings),
        ('  Current Year Result', eq.current_year_net_income),
        ('TOTAL EQUITY', bs.total_equity),
    ])

    # Cash Flow
    print(f"\n{'─'*width}")
    print(f"{'CASH FLOW STATEMENT':^{width}}")
    print(f"{'─'*width}")
    _print_rows([
        ('  Net Income', cf.net_income),
        ('  Depreciation & Amortization', cf.depreciation + cf.amortization),
        ('  Change in Receivables', -cf.change_in_receivables),
        ('  Change in Payables', cf.change_in_payables),
        ('  Change in Tax Payable', cf.change_in_tax_payable),
        ('  Change in Escrow', cf.change_in_escrow),
        ('OPERATING CASH FLOW', cf.operating_cash_flow),
        ('INVESTING CASH FLOW', cf.investing_cash_flow),
        ('FINANCING CASH FLOW', cf.financing_cash_flow),
        ('  Opening Cash', cf.opening_cash),
        ('ENDING CASH', cf.ending_cash),
    ])


def print_triangulation(result):
    """Print the four cross-statement checks."""
    for name, passed in result.checks().items():
        status = "✓" if passed else "✗"
        print(f"    {status} {name}")
    for error in result.errors:
        print(f"      [{error.severity}] {error.message}: expected "
              f"{fmt_currency(error.expected)}, got {fmt_currency(error.actual)} "
              f"(diff: {fmt_currency(error.difference)})")


def print_series_summary(models: Dict[int, object], width: int = 70):
    """One line per year: revenue, net income, ending cash, consistency."""
    print(f"\n{'='*width}")
    print("MULTI-YEAR SUMMARY")
    print(f"{'='*width}")
    print(f"{'Year':<6} {'Revenue':>14} {'Net Income':>14} {'Ending Cash':>14} {'Tied':>6}")
    print(f"{'─'*width}")
    for year in sorted(models):
        model = models[year]
        tied = "✓" if model.triangulation.valid else "✗"
        print(f"{year:<6} {fmt_currency(model.income_statement.gross_revenue):>14} "
              f"{fmt_currency(model.income_statement.net_income):>14} "
              f"{fmt_currency(model.cash_flow.ending_cash):>14} {tied:>6}")


def print_alerts(alerts: Iterable):
    alerts = list(alerts)
    if not alerts:
        print("  No alerts.")
        return
    for alert in alerts:
        print(f"  [{alert.severity.value}] {alert.category}: {alert.title}")
        print(f"      {alert.description}")
        print(f"      Current: {alert.current_value:,.2f} | Benchmark: {alert.benchmark_value:,.2f}")
        print(f"      Action: {alert.recommended_action}")


def format_cascade(result, width: int = 63) -> str:
    """Render a unit cost cascade as plain text."""
    lines = [
        "═" * width,
        f"   UNIT ANALYSIS: {result.sku_code} ({result.concept})",
        f"   Revenue: {result.gross_revenue:,.0f} | Mix: {result.digital_mix:.0%} digital"
        f" / {result.cash_mix:.0%} cash",
        "═" * width,
        "",
    ]

    for step in result.steps:
        sign = '+' if step.kind == 'inflow' else '=' if step.kind == 'info' else '-'
        if step.code == 'PE':
            amount = (f"{result.break_even_units} units" if result.break_even_units is not None
                      else "unreachable")
        else:
            amount = f"{abs(step.amount):,.0f}"

        lines.append(f"{step.order}. {step.concept} [{step.code}]")
        lines.append(f"   {sign} {amount}")
        lines.append(f"   Formula: {step.formula}")
        if step.kind != 'info':
            lines.append(f"   Running total: {step.running_total:,.0f}")
        if step.warning:
            lines.append(f"   ! {step.warning}")
        lines.append("")

    lines.append(f"Contribution margin: {result.contribution_margin:,.0f} "
                 f"({result.contribution_margin_pct:.2%})")
    target = (f"{result.target_volume_units} units" if result.target_volume_units is not None
              else "unreachable")
    lines.append(f"Target volume: {target}")
    lines.append(f"Settlement: {result.settlement_days:.1f} days (mix-weighted)")
    lines.append("Verifications:")
    for name, passed in result.verifications.items():
        lines.append(f"   {'✓' if passed else '✗'} {name}")

    return "\n".join(lines)
