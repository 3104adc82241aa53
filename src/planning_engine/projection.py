"""
projection.py

Boundary with the Annual Projection Provider.

The per-SKU monthly aggregation lives upstream; the engine only consumes
its output: one AnnualProjection per fiscal year with twelve monthly
records and the annual totals. A provider is any callable
`year -> Optional[AnnualProjection]`; returning None means "no data for
that year" and the orchestrator skips it.
"""

import numpy as np
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .utils.numeric import require_finite, safe_divide


MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class MonthlyProjection:
    """One month of projected operations."""
    month: int
    gross_revenue: float
    direct_cost: float
    opex: float

    @property
    def ebitda(self) -> float:
        return self.gross_revenue - self.direct_cost - self.opex


@dataclass(frozen=True)
class AnnualProjection:
    """
    Annual totals plus the monthly breakdown for one year.

    Values are taken as ground truth: the engine never re-derives revenue.
    """
    year: int
    months: Tuple[MonthlyProjection, ...]
    gross_revenue: float
    direct_cost: float
    opex: float

    @property
    def ebitda(self) -> float:
        return self.gross_revenue - self.direct_cost - self.opex

    @property
    def gross_margin(self) -> float:
        return safe_divide(self.gross_revenue - self.direct_cost, self.gross_revenue)

    @property
    def ebitda_margin(self) -> float:
        return safe_divide(self.ebitda, self.gross_revenue)

    @property
    def opex_ratio(self) -> float:
        return safe_divide(self.opex, self.gross_revenue)

    @classmethod
    def from_months(cls, year: int, months: Iterable[MonthlyProjection]) -> 'AnnualProjection':
        """Aggregate twelve monthly records into an annual projection."""
        months = tuple(sorted(months, key=lambda m: m.month))
        if len(months) != MONTHS_PER_YEAR:
            raise ValueError(
                f"Projection for {year} needs {MONTHS_PER_YEAR} months, got {len(months)}"
            )
        if [m.month for m in months] != list(range(1, MONTHS_PER_YEAR + 1)):
            raise ValueError(f"Projection for {year} must cover months 1..12 exactly once")
        for m in months:
            for name in ('gross_revenue', 'direct_cost', 'opex'):
                require_finite(f"{year}-{m.month:02d} {name}", getattr(m, name))

        return cls(
            year=year,
            months=months,
            gross_revenue=sum(m.gross_revenue for m in months),
            direct_cost=sum(m.direct_cost for m in months),
            opex=sum(m.opex for m in months),
        )

    @classmethod
    def flat(cls, year: int, gross_revenue: float, direct_cost: float,
             opex: float) -> 'AnnualProjection':
        """Spread annual totals evenly over twelve months."""
        months = [
            MonthlyProjection(
                month=m,
                gross_revenue=gross_revenue / MONTHS_PER_YEAR,
                direct_cost=direct_cost / MONTHS_PER_YEAR,
                opex=opex / MONTHS_PER_YEAR,
            )
            for m in range(1, MONTHS_PER_YEAR + 1)
        ]
        projection = cls.from_months(year, months)
        # Keep the caller's exact annual figures instead of the re-summed ones
        return cls(year=year, months=projection.months, gross_revenue=gross_revenue,
                   direct_cost=direct_cost, opex=opex)

    def monthly_ebitda(self) -> List[float]:
        return [m.ebitda for m in self.months]


ProjectionProvider = Callable[[int], Optional[AnnualProjection]]


class StaticProjectionProvider:
    """Provider backed by a prebuilt {year: AnnualProjection} mapping."""

    def __init__(self, projections: Dict[int, AnnualProjection]):
        self.projections = dict(projections)

    def __call__(self, year: int) -> Optional[AnnualProjection]:
        return self.projections.get(year)


def create_sample_projections(start_year: int = 2026,
                              end_year: int = 2031,
                              base_monthly_revenue: float = 60e6,
                              monthly_growth: float = 0.03,
                              direct_cost_ratio: float = 0.55,
                              monthly_fixed_opex: float = 40e6,
                              seed: int = 42) -> Dict[int, AnnualProjection]:
    """Create deterministic sample projections for demos and testing."""
    rng = np.random.default_rng(seed)
    n_months = (end_year - start_year + 1) * MONTHS_PER_YEAR
    if n_months <= 0:
        return {}

    growth = 1 + rng.normal(monthly_growth, 0.01, n_months)
    revenue = base_monthly_revenue * np.cumprod(growth)
    direct = revenue * np.clip(rng.normal(direct_cost_ratio, 0.02, n_months), 0.3, 0.9)
    opex = monthly_fixed_opex * np.cumprod(np.full(n_months, 1.004))

    projections = {}
    for i, year in enumerate(range(start_year, end_year + 1)):
        months = [
            MonthlyProjection(
                month=m + 1,
                gross_revenue=float(revenue[i * MONTHS_PER_YEAR + m]),
                direct_cost=float(direct[i * MONTHS_PER_YEAR + m]),
                opex=float(opex[i * MONTHS_PER_YEAR + m]),
            )
            for m in range(MONTHS_PER_YEAR)
        ]
        projections[year] = AnnualProjection.from_months(year, months)
    return projections
