"""
cli.py

Planning Engine - Main Entry Point

Usage:
    planning-engine                               # Sample projections 2026-2031
    planning-engine --config engine.yaml          # Override parameters
    planning-engine --sku ING-002 --mix 0.7       # Unit cascade for another product
    planning-engine --help                        # All options
"""

import argparse
import sys

from .analysis.alerts import evaluate
from .analysis.cash_conversion import cash_conversion_for_model
from .analysis.metrics import (
    kpis_from_projection,
    ltv_cac_rating,
    negative_operating_months,
    unit_economics,
)
from .catalog import load_default_catalog
from .config import EngineConfig
from .diagnostics.unit_cascade import trace
from .projection import StaticProjectionProvider, create_sample_projections
from .reporting.statement_printer import (
    fmt_currency,
    format_cascade,
    print_alerts,
    print_series_summary,
    print_three_statements,
)
from .simulator.multi_year import run_series, verify_series
from .utils.numeric import safe_divide


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Three-statement planning engine')
    parser.add_argument('--config', type=str, default=None, help='YAML file with parameter overrides')
    parser.add_argument('--start-year', type=int, default=2026, help='First fiscal year (default: 2026)')
    parser.add_argument('--end-year', type=int, default=2031, help='Last fiscal year (default: 2031)')
    parser.add_argument('--capital', type=float, default=500e6, help='Initial paid-in capital (default: 500M)')
    parser.add_argument('--seed', type=int, default=42, help='Seed for the sample projections')
    parser.add_argument('--full', action='store_true', help='Print full statements for every year')
    parser.add_argument('--arpu', type=float, default=45_000, help='Monthly ARPU for unit economics')
    parser.add_argument('--churn', type=float, default=0.05, help='Monthly churn as a fraction')
    parser.add_argument('--cac', type=float, default=80_000, help='Customer acquisition cost')
    parser.add_argument('--sku', type=str, default='ING-001', help='Product traced by the unit cascade')
    parser.add_argument('--quantity', type=int, default=1, help='Units traced by the unit cascade')
    parser.add_argument('--mix', type=float, default=None, help='Digital payment mix in [0, 1]')
    parser.add_argument('--skip-cascade', action='store_true', help='Skip the unit cascade')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = EngineConfig.from_yaml(args.config) if args.config else EngineConfig()
    except (OSError, ValueError) as e:
        print(f"Invalid configuration: {e}")
        return 1

    print("=" * 70)
    print("PLANNING ENGINE")
    print("Interconnected three-statement model")
    print("=" * 70)

    # [1] Projections
    print("\n[1] Loading Projections...")
    projections = create_sample_projections(args.start_year, args.end_year, seed=args.seed)
    provider = StaticProjectionProvider(projections)
    print(f"Years: {args.start_year}-{args.end_year} ({len(projections)} with data)")

    # [2] Statements
    print("\n[2] Generating Statements...")
    models = run_series(args.start_year, args.end_year, provider,
                        initial_capital=args.capital,
                        config=config.statements,
                        verbose=True)
    if not models:
        print("No years generated.")
        return 1

    print_series_summary(models)
    if args.full:
        for year in sorted(models):
            print_three_statements(models[year])

    print("\n[3] Cross-Year Checks...")
    checks = verify_series(models, tolerance=config.statements.tolerance, verbose=True)

    # [4] Diagnostics on the last year
    last_year = max(models)
    last_model = models[last_year]
    print(f"\n[4] Diagnostics ({last_year})...")

    ccc = cash_conversion_for_model(last_model, config.statements, config.cash_conversion)
    print(f"  DSO {ccc.dso:.1f} days | DPO {ccc.dpo:.1f} days | CCC {ccc.ccc:.1f} days "
          f"({ccc.interpretation})")
    print(f"  {ccc.description}")
    print(f"  Working capital required: {fmt_currency(ccc.working_capital_required)}")

    projection = projections[last_year]
    prior = projections.get(last_year - 1)
    kpis = kpis_from_projection(projection, last_model.cash_flow.ending_cash, prior)
    economics = unit_economics(args.arpu, args.churn, args.cac)

    catalog = load_default_catalog()
    acquisition = catalog.acquisition_spend()
    print(f"  Initial investment (catalog): {fmt_currency(catalog.investment_total())}")
    print(f"  Acquisition budget: {fmt_currency(acquisition)}/month "
          f"(~{safe_divide(acquisition, args.cac):.0f} customers/month at CAC "
          f"{fmt_currency(args.cac)})")
    print(f"  LTV/CAC {economics.ltv_cac_ratio:.2f} ({ltv_cac_rating(economics.ltv_cac_ratio)})")
    alerts = evaluate(economics, last_model.balance_sheet, kpis,
                      negative_operating_months(projection), config.benchmarks)
    print(f"\n  Alerts ({len(alerts)}):")
    print_alerts(alerts)

    # [5] Unit cascade
    if not args.skip_cascade:
        print("\n[5] Unit Cost Cascade...")
        try:
            cascade = trace(args.sku, quantity=args.quantity, digital_mix=args.mix, config=config)
        except ValueError as e:
            print(f"  Cascade failed: {e}")
            return 1
        print(format_cascade(cascade))
        print_alerts(cascade.alerts)

    consistent = (all(m.triangulation.valid for m in models.values()) and
                  all(all(c.values()) for c in checks.values()))
    print("\n" + "=" * 70)
    print("COMPLETE" if consistent else "COMPLETE WITH INCONSISTENCIES")
    print("=" * 70)
    return 0 if consistent else 2


if __name__ == "__main__":
    sys.exit(main())
