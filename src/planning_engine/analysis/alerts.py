"""
alerts.py

Financial health rules.

Each rule compares one metric with its benchmark and emits an Alert when
the metric is out of bounds. Every input may be missing (None); a rule
whose input is missing is simply not evaluated.

Rules:
    runway < 6 months                         CRITICAL
    0 < LTV/CAC < 3.0                         CRITICAL
    balance sheet equation not balanced       CRITICAL
    monthly churn > 7%                        HIGH
    CAC > 100,000                             HIGH
    >= 3 consecutive negative cash months     HIGH
"""

import uuid
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from ..config import AlertBenchmarks
from ..financial_statements.balance_sheet import BalanceSheet
from .metrics import SaaSKpis, UnitEconomics


class Severity(Enum):
    CRITICAL = 'CRITICAL'
    HIGH = 'HIGH'
    MEDIUM = 'MEDIUM'

    @property
    def rank(self) -> int:
        return SEVERITY_RANK[self]


SEVERITY_RANK = {
    Severity.CRITICAL: 0,
    Severity.HIGH: 1,
    Severity.MEDIUM: 2,
}


@dataclass(frozen=True)
class Alert:
    severity: Severity
    category: str
    title: str
    description: str
    current_value: float
    benchmark_value: float
    recommended_action: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['severity'] = self.severity.value
        data['timestamp'] = self.timestamp.isoformat()
        return data


def sort_alerts(alerts: Iterable[Alert]) -> List[Alert]:
    """Most severe first; alerts of equal severity keep their order."""
    return sorted(alerts, key=lambda a: a.severity.rank)


def evaluate(unit_economics: Optional[UnitEconomics],
             balance_sheet: Optional[BalanceSheet],
             kpis: Optional[SaaSKpis],
             consecutive_negative_months: Optional[int],
             benchmarks: Optional[AlertBenchmarks] = None) -> List[Alert]:
    """
    Run every rule and return the triggered alerts sorted by severity.

    Args:
        unit_economics: CAC, churn and LTV/CAC, or None
        balance_sheet: Anything with an `equation` (balanced, difference), or None
        kpis: Runway and burn KPIs, or None
        consecutive_negative_months: Trailing months of negative operating cash, or None
        benchmarks: Thresholds; defaults when omitted

    Returns:
        List of Alert, CRITICAL first
    """
    b = benchmarks or AlertBenchmarks()
    alerts = []

    # 1. Runway
    if kpis is not None:
        if kpis.runway_months < b.runway_min_months:
            alerts.append(Alert(
                severity=Severity.CRITICAL,
                category='Liquidity',
                title=f"Critical runway: less than {b.runway_min_months:g} months",
                description=f"At the current burn rate only {kpis.runway_months:.1f} "
                            f"months of operation remain.",
                current_value=kpis.runway_months,
                benchmark_value=b.runway_min_months,
                recommended_action="Raise a funding round or cut burn by 40%",
            ))

    # 2. LTV/CAC; a ratio of 0 means "not computable" and is ignored
    if unit_economics is not None:
        ratio = unit_economics.ltv_cac_ratio
        if 0 < ratio < b.ltv_cac_min:
            alerts.append(Alert(
                severity=Severity.CRITICAL,
                category='Efficiency',
                title=f"LTV/CAC below {b.ltv_cac_min:.1f}: unit economics not sustainable",
                description=f"Current ratio {ratio:.2f}. Each acquired customer destroys value.",
                current_value=ratio,
                benchmark_value=b.ltv_cac_min,
                recommended_action="Reduce CAC or raise LTV through upsell and lower churn",
            ))

    # 3. Balance equation
    if balance_sheet is not None:
        equation = balance_sheet.equation
        if not equation.balanced:
            alerts.append(Alert(
                severity=Severity.CRITICAL,
                category='Accounting',
                title="Balance sheet does not balance",
                description=f"Assets differ from liabilities plus equity by "
                            f"{equation.difference:,.2f}.",
                current_value=equation.difference,
                benchmark_value=0.0,
                recommended_action="Review asset, liability and equity calculations",
            ))

    # 4. Churn
    if unit_economics is not None:
        churn = unit_economics.churn_rate
        if churn > b.churn_max:
            alerts.append(Alert(
                severity=Severity.HIGH,
                category='Efficiency',
                title="High monthly churn",
                description=f"Current churn {churn:.1%} (maximum recommended {b.churn_max:.0%}).",
                current_value=churn,
                benchmark_value=b.churn_max,
                recommended_action="Launch a retention program and improve NPS",
            ))

    # 5. CAC
    if unit_economics is not None:
        if unit_economics.cac > b.cac_max:
            alerts.append(Alert(
                severity=Severity.HIGH,
                category='Efficiency',
                title="CAC above benchmark",
                description=f"Current CAC {unit_economics.cac:,.0f} "
                            f"(maximum {b.cac_max:,.0f}).",
                current_value=unit_economics.cac,
                benchmark_value=b.cac_max,
                recommended_action="Optimize acquisition channels and conversion",
            ))

    # 6. Persistent negative operating cash
    if consecutive_negative_months is not None:
        if consecutive_negative_months >= b.negative_cash_months_max:
            alerts.append(Alert(
                severity=Severity.HIGH,
                category='Liquidity',
                title="Persistent negative operating cash flow",
                description=f"{consecutive_negative_months} consecutive months with "
                            f"negative operating cash flow.",
                current_value=float(consecutive_negative_months),
                benchmark_value=float(b.negative_cash_months_max),
                recommended_action="Review the cost structure and speed up collections",
            ))

    return sort_alerts(alerts)
