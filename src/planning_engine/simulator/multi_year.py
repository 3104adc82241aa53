"""
multi_year.py

Multi-Year Statement Simulation.
Chains the three-statement generator across consecutive fiscal years,
carrying closing balances forward as the next year's opening state.
"""

import pandas as pd
from typing import Dict, Optional

from ..config import StatementConfig
from ..projection import AnnualProjection, ProjectionProvider, MONTHS_PER_YEAR
from ..financial_statements.statement_builder import (
    CarryForwardState,
    ThreeStatementModel,
    YearInputs,
    generate,
)
from ..reporting.statement_printer import fmt_currency, print_triangulation
from ..utils.numeric import is_close


def year_inputs_from_projection(projection: AnnualProjection,
                                state: CarryForwardState,
                                config: StatementConfig,
                                partner_contributions: float = 0.0) -> YearInputs:
    """
    Derive one year's generator inputs from the projection and prior balances.

    Depreciation and amortization apply a flat rate to the prior gross
    balances, capped at the remaining net book value so an asset is never
    written down below zero. Investment is a fixed share of OPEX and the
    escrow balance is a fraction of one average month of revenue.
    """
    depreciation = min(config.depreciation_rate * state.fixed_assets_gross,
                       state.fixed_assets_net)
    amortization = min(config.amortization_rate * state.software_gross,
                       state.software_net)

    return YearInputs(
        year=projection.year,
        gross_revenue=projection.gross_revenue,
        cost_of_sales=projection.direct_cost,
        operating_expenses=projection.opex,
        depreciation=max(0.0, depreciation),
        amortization=max(0.0, amortization),
        days_receivable=config.days_receivable,
        days_payable=config.days_payable,
        escrow_balance=config.escrow_revenue_fraction * projection.gross_revenue / MONTHS_PER_YEAR,
        capex=config.capex_opex_ratio * projection.opex,
        software_investment=config.software_opex_ratio * projection.opex,
        partner_contributions=partner_contributions,
    )


def run_series(start_year: int,
               end_year: int,
               provider: ProjectionProvider,
               initial_capital: float = 0.0,
               config: Optional[StatementConfig] = None,
               initial_state: Optional[CarryForwardState] = None,
               partner_contributions: Optional[Dict[int, float]] = None,
               verbose: bool = False) -> Dict[int, ThreeStatementModel]:
    """
    Generate statements for every year in [start_year, end_year].

    Args:
        start_year: First fiscal year
        end_year: Last fiscal year (inclusive)
        provider: Callable returning the AnnualProjection of a year, or None
        initial_capital: Paid-in capital used to seed the opening state
        config: Statement parameters
        initial_state: Explicit opening state; overrides initial_capital
        partner_contributions: Optional {year: amount} of new partner capital
        verbose: Print progress

    Returns:
        {year: ThreeStatementModel} in ascending year order. Years for which
        the provider returns None are absent and leave the state untouched.
    """
    config = config or StatementConfig()
    contributions = partner_contributions or {}
    state = initial_state if initial_state is not None else CarryForwardState.seed(initial_capital)

    if verbose:
        print("\n" + "=" * 70)
        print("MULTI-YEAR STATEMENT SIMULATION")
        print("=" * 70)
        print(f"Horizon: {start_year}-{end_year}")
        print(f"Opening cash: {fmt_currency(state.cash)}")

    models = {}
    for year in range(start_year, end_year + 1):
        projection = provider(year)
        if projection is None:
            if verbose:
                print(f"\n  {year}: no projection available, skipped")
            continue

        inputs = year_inputs_from_projection(projection, state, config,
                                             contributions.get(year, 0.0))
        model = generate(inputs, state, config)
        models[year] = model
        state = state.advance(model)

        if verbose:
            is_ = model.income_statement
            print(f"\n  {year}: revenue {fmt_currency(is_.gross_revenue)}, "
                  f"net income {fmt_currency(is_.net_income)}, "
                  f"ending cash {fmt_currency(model.cash_flow.ending_cash)}")
            print_triangulation(model.triangulation)

    return models


def verify_series(models: Dict[int, ThreeStatementModel],
                  tolerance: float = 1.0,
                  verbose: bool = False) -> Dict[str, Dict[str, bool]]:
    """
    Verify the identities that link consecutive generated years.

    Returns:
        {"<prior>-><year>": {check name: passed}} for each adjacent pair
    """
    results = {}
    years = sorted(models)

    for prev_year, year in zip(years, years[1:]):
        prev = models[prev_year]
        curr = models[year]
        prev_equity = prev.balance_sheet.equity
        curr_equity = curr.balance_sheet.equity
        prev_nca = prev.balance_sheet.non_current_assets
        curr_nca = curr.balance_sheet.non_current_assets

        checks = {
            'opening cash = prior ending cash':
                curr.cash_flow.opening_cash == prev.cash_flow.ending_cash,
            'RE rollforward': is_close(
                curr_equity.retained_earnings,
                prev_equity.retained_earnings + prev_equity.current_year_net_income,
                tolerance),
            'accumulated depreciation non-decreasing':
                curr_nca.accumulated_depreciation >= prev_nca.accumulated_depreciation,
            'accumulated amortization non-decreasing':
                curr_nca.accumulated_amortization >= prev_nca.accumulated_amortization,
            'triangulation': curr.triangulation.valid,
        }
        key = f"{prev_year}->{year}"
        results[key] = checks

        if verbose:
            print(f"\n  {key}")
            for name, passed in checks.items():
                status = "✓" if passed else "✗"
                print(f"    {status} {name}")

    return results


def series_to_dataframe(models: Dict[int, ThreeStatementModel]) -> pd.DataFrame:
    """All line items of all years, one column per year."""
    if not models:
        return pd.DataFrame()
    return pd.concat([models[year].to_frame() for year in sorted(models)], axis=1)
