"""
metrics.py

Burn rate, runway, margins and unit economics.

All ratios are fractions (0.07 is 7%); the reporting layer formats them.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Iterable, Optional

from ..projection import AnnualProjection
from ..utils.numeric import safe_divide

# Runway thresholds in months
RUNWAY_CRITICAL = 6
RUNWAY_WARNING = 12
RUNWAY_INFINITE = 999.0


@dataclass
class BurnRate:
    monthly_burn: float
    runway_months: float
    status: str


@dataclass
class Margins:
    gross_margin: float
    ebitda_margin: float
    net_margin: float


@dataclass
class UnitEconomics:
    """Per-customer economics."""
    cac: float
    arpu: float
    churn_rate: float           # monthly, as a fraction
    lifespan_months: float = 0.0
    ltv: float = 0.0
    ltv_cac_ratio: float = 0.0
    payback_months: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class SaaSKpis:
    mrr: float = 0.0
    arr: float = 0.0
    growth_rate: float = 0.0
    rule_of_40: float = 0.0
    burn_rate: float = 0.0
    runway_months: float = RUNWAY_INFINITE

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class GrossUp:
    taxable_base: float
    withholding: float
    total_payable: float


def burn_rate(monthly_revenue: float, monthly_costs: float) -> float:
    """Monthly cash burn: costs in excess of revenue, never negative."""
    return max(0.0, monthly_costs - monthly_revenue)


def runway_months(available_cash: float, monthly_burn: float) -> float:
    """Months of cash left at the current burn, capped at 999."""
    if monthly_burn <= 0:
        return RUNWAY_INFINITE
    return min(available_cash / monthly_burn, RUNWAY_INFINITE)


def runway_status(months: float) -> str:
    if months < RUNWAY_CRITICAL:
        return 'critical'
    if months < RUNWAY_WARNING:
        return 'warning'
    return 'healthy'


def burn_rate_summary(monthly_revenue: float, monthly_costs: float,
                      available_cash: float) -> BurnRate:
    burn = burn_rate(monthly_revenue, monthly_costs)
    runway = runway_months(available_cash, burn)
    return BurnRate(monthly_burn=burn, runway_months=runway, status=runway_status(runway))


def margins(revenue: float, cost_of_sales: float, opex: float,
            depreciation: float = 0.0, taxes: float = 0.0) -> Margins:
    """Margins as fractions of revenue; all 0 when revenue is 0."""
    gross_profit = revenue - cost_of_sales
    ebitda = gross_profit - opex
    net = ebitda - depreciation - taxes
    return Margins(
        gross_margin=safe_divide(gross_profit, revenue),
        ebitda_margin=safe_divide(ebitda, revenue),
        net_margin=safe_divide(net, revenue),
    )


def unit_economics(arpu: float, churn_rate: float, cac: float) -> UnitEconomics:
    """
    LTV = ARPU / churn, LTV/CAC and CAC payback.

    Churn outside (0, 1) or a non-positive ARPU makes LTV undefined; the
    ratio is then 0, which the alert rules treat as "not computable".
    """
    if churn_rate <= 0 or churn_rate >= 1 or arpu <= 0:
        return UnitEconomics(cac=cac, arpu=arpu, churn_rate=churn_rate)

    lifespan = 1 / churn_rate
    ltv = arpu * lifespan
    return UnitEconomics(
        cac=cac,
        arpu=arpu,
        churn_rate=churn_rate,
        lifespan_months=lifespan,
        ltv=ltv,
        ltv_cac_ratio=safe_divide(ltv, cac) if cac > 0 else 0.0,
        payback_months=safe_divide(cac, arpu),
    )


def ltv_cac_rating(ratio: float) -> str:
    if ratio >= 5:
        return 'excellent'
    if ratio >= 3:
        return 'good'
    if ratio >= 1:
        return 'warning'
    return 'critical'


def gross_up(net_amount: float, withholding_rate: float) -> GrossUp:
    """
    Taxable base such that base - withholding == net_amount.

    base = net / (1 - rate). A rate outside [0, 1) means no withholding.
    """
    if withholding_rate >= 1 or withholding_rate < 0:
        return GrossUp(taxable_base=net_amount, withholding=0.0, total_payable=net_amount)

    base = net_amount / (1 - withholding_rate)
    return GrossUp(taxable_base=base, withholding=base - net_amount, total_payable=base)


def count_consecutive_negative(values: Iterable[float]) -> int:
    """Length of the run of negative values at the end of the sequence."""
    run = 0
    for value in values:
        run = run + 1 if value < 0 else 0
    return run


def negative_operating_months(projection: AnnualProjection) -> int:
    """Trailing months of negative operating result (EBITDA) in a projection."""
    return count_consecutive_negative(projection.monthly_ebitda())


def kpis_from_projection(projection: AnnualProjection, available_cash: float,
                         prior: Optional[AnnualProjection] = None) -> SaaSKpis:
    """Headline KPIs from the last month of an annual projection."""
    last = projection.months[-1]
    growth = 0.0
    if prior is not None:
        growth = safe_divide(projection.gross_revenue - prior.gross_revenue,
                             prior.gross_revenue)
    burn = burn_rate(last.gross_revenue, last.direct_cost + last.opex)
    return SaaSKpis(
        mrr=last.gross_revenue,
        arr=last.gross_revenue * 12,
        growth_rate=growth,
        rule_of_40=growth + projection.ebitda_margin,
        burn_rate=burn,
        runway_months=runway_months(available_cash, burn),
    )
