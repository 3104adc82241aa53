"""
unit_cascade.py

Unit Cost Cascade.

Replays the money flow of one sale of a single product: gross price in,
then payment channel fees, the lawyer payout with the withholding tax the
platform assumes on top of it, the levy on the payout, compliance and
messaging costs and the local industry tax. What is left is the
contribution margin, from which break-even and target volumes follow.

The payment channel split is driven by `digital_mix`, the fraction of
sales paid through the digital gateway; the rest is collected in cash
through the rural network, which also triggers SMS notifications.

Fees come from the catalog. A direct cost flagged `is_percentage` is a
fraction of its base (the ticket price for channel and service fees, the
paid-out amount for the payout levy); otherwise it is a flat amount per
unit. Tax rates carried by the catalog (local industry tax, payout levy)
are read from it; the withholding rate, which the catalog does not carry,
comes from `config.taxes`.

This is an audit of the pricing model, not a financial statement.
`verify` re-derives each fee from its base and compares it with the amount
the cascade emitted, so a fee applied to the wrong base shows up as a
failed verification.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..analysis.alerts import Alert, Severity, sort_alerts
from ..analysis.metrics import gross_up
from ..catalog import Catalog, DirectCostItem, OpexItem, RevenueItem, load_default_catalog
from ..config import CascadeConfig, EngineConfig
from ..utils.numeric import ceil_units, is_close, require_finite, safe_divide

INFLOW = 'inflow'
OUTFLOW = 'outflow'
TAX = 'tax'
INFO = 'info'

# Catalog codes walked by the cascade
DIGITAL_FEE = 'C-VAR-06'
CASH_FEE = 'C-VAR-07'
SMS = 'C-VAR-09'
WITHHOLDING = 'C-VAR-04'
PAYOUT_LEVY = 'C-VAR-05'
COMPLIANCE = 'C-VAR-10'
MESSAGING = 'C-VAR-08'
LOCAL_TAX = 'IMP-002'
CLOUD = 'G-TEC-01'
CONTRIBUTION_MARGIN = 'MC'
BREAK_EVEN = 'PE'
NO_PAYOUT = 'PAYOUT'


@dataclass
class UnitCascadeStep:
    """
    One line of the cascade.

    Outflow and tax amounts are negative. The break-even step carries the
    unit count, or None when break-even is unreachable.
    """
    order: int
    concept: str
    code: str
    kind: str
    formula: str
    amount: Optional[float]
    running_total: float
    warning: Optional[str] = None
    is_error: bool = False


@dataclass
class UnitCascadeResult:
    sku_code: str
    concept: str
    unit_price: float
    quantity: int
    gross_revenue: float
    digital_mix: float
    steps: List[UnitCascadeStep]
    contribution_margin: float
    contribution_margin_pct: float
    contribution_margin_per_unit: float
    break_even_units: Optional[int]      # None: unreachable with this margin
    target_volume_units: Optional[int]   # None: target margin unreachable
    fixed_costs: float
    settlement_days: float = 0.0         # mix-weighted days until the money lands
    payout_code: str = NO_PAYOUT
    verifications: Dict[str, bool] = field(default_factory=dict)
    alerts: List[Alert] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def cash_mix(self) -> float:
        return 1 - self.digital_mix

    @property
    def all_verified(self) -> bool:
        return all(self.verifications.values())

    def step(self, code: str) -> Optional[UnitCascadeStep]:
        for s in self.steps:
            if s.code == code:
                return s
        return None

    def amount(self, code: str) -> Optional[float]:
        s = self.step(code)
        if s is None:
            raise KeyError(f"No cascade step with code {code}")
        return s.amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sku_code': self.sku_code,
            'concept': self.concept,
            'unit_price': self.unit_price,
            'quantity': self.quantity,
            'gross_revenue': self.gross_revenue,
            'digital_mix': self.digital_mix,
            'cash_mix': self.cash_mix,
            'steps': [vars(s).copy() for s in self.steps],
            'contribution_margin': self.contribution_margin,
            'contribution_margin_pct': self.contribution_margin_pct,
            'contribution_margin_per_unit': self.contribution_margin_per_unit,
            'break_even_units': self.break_even_units,
            'target_volume_units': self.target_volume_units,
            'fixed_costs': self.fixed_costs,
            'settlement_days': self.settlement_days,
            'payout_code': self.payout_code,
            'verifications': dict(self.verifications),
            'alerts': [a.to_dict() for a in self.alerts],
            'timestamp': self.timestamp.isoformat(),
        }


class _Cascade:
    """Accumulates ordered steps and the running total."""

    def __init__(self):
        self.steps: List[UnitCascadeStep] = []
        self.total = 0.0

    def inflow(self, concept, code, formula, amount):
        self.total += amount
        return self._add(concept, code, INFLOW, formula, amount)

    def outflow(self, concept, code, formula, amount, kind=OUTFLOW, warning=None):
        self.total -= amount
        return self._add(concept, code, kind, formula, -amount, warning)

    def info(self, concept, code, formula, amount, warning=None, is_error=False):
        return self._add(concept, code, INFO, formula, amount, warning, is_error)

    def _add(self, concept, code, kind, formula, amount, warning=None, is_error=False):
        step = UnitCascadeStep(
            order=len(self.steps) + 1,
            concept=concept,
            code=code,
            kind=kind,
            formula=formula,
            amount=amount,
            running_total=self.total,
            warning=warning,
            is_error=is_error,
        )
        self.steps.append(step)
        return step


def unit_fee(item: DirectCostItem, base: float) -> float:
    """Fee for one unit: a fraction of `base` for percentage items, else flat."""
    return item.unit_value * base if item.is_percentage else item.unit_value


def _fee_formula(item: DirectCostItem, base: float, quantity: int, share: str = '') -> str:
    price = (f"{item.unit_value:.2%} of {base:,.0f}" if item.is_percentage
             else f"{item.unit_value:,.0f}")
    return f"{price} x {quantity}" + (f" x {share}" if share else '')


def _settlement_days(digital_item: DirectCostItem, cash_item: DirectCostItem,
                     digital_mix: float) -> float:
    digital_days = digital_item.settlement_days or 0
    cash_days = cash_item.settlement_days or 0
    return digital_mix * digital_days + (1 - digital_mix) * cash_days


def trace(sku_code: str,
          quantity: int = 1,
          digital_mix: Optional[float] = None,
          catalog: Optional[Catalog] = None,
          config: Optional[EngineConfig] = None) -> UnitCascadeResult:
    """
    Trace the money flow of `quantity` units of `sku_code`.

    Args:
        sku_code: Revenue item code (e.g. 'ING-001')
        quantity: Units sold
        digital_mix: Fraction paid through the digital gateway, in [0, 1]
        catalog: Item catalog; the bundled catalog when omitted
        config: Withholding rate and cascade assumptions

    Returns:
        UnitCascadeResult

    Raises:
        ValueError: unknown SKU, non-positive quantity or mix outside [0, 1]
    """
    config = config or EngineConfig()
    catalog = catalog or load_default_catalog()
    withholding_rate = config.taxes.professional_withholding
    assumptions = config.cascade

    if digital_mix is None:
        digital_mix = assumptions.default_digital_mix
    digital_mix = require_finite('digital_mix', digital_mix)
    if not 0 <= digital_mix <= 1:
        raise ValueError(f"digital_mix must be between 0 and 1, got {digital_mix}")
    if quantity <= 0:
        raise ValueError(f"quantity must be > 0, got {quantity}")

    item = catalog.get(sku_code)
    if not isinstance(item, RevenueItem):
        raise ValueError(f"Unknown SKU: {sku_code}")

    price = item.unit_value
    cash_mix = 1 - digital_mix
    cascade = _Cascade()

    # 1. Money in
    gross_revenue = price * quantity
    cascade.inflow(f"Gross revenue ({item.concept})", sku_code,
                   f"{price:,.0f} x {quantity} unit(s)", gross_revenue)

    # 2. Payment channel split
    digital_item = catalog.require(DIGITAL_FEE, DirectCostItem)
    digital_fee = unit_fee(digital_item, price) * quantity * digital_mix
    cascade.outflow(f"Payment gateway ({digital_mix:.0%} digital)", DIGITAL_FEE,
                    _fee_formula(digital_item, price, quantity, f"{digital_mix:.2f}"),
                    digital_fee)

    cash_item = catalog.require(CASH_FEE, DirectCostItem)
    cash_fee = unit_fee(cash_item, price) * quantity * cash_mix
    cascade.outflow(f"Cash collection ({cash_mix:.0%} cash)", CASH_FEE,
                    _fee_formula(cash_item, price, quantity, f"{cash_mix:.2f}"),
                    cash_fee)

    sms_item = catalog.require(SMS, DirectCostItem)
    sms_cost = unit_fee(sms_item, price) * quantity * cash_mix
    cascade.outflow("Transactional SMS (cash channel only)", SMS,
                    _fee_formula(sms_item, price, quantity, f"{cash_mix:.2f}"),
                    sms_cost)

    # 3. Lawyer payout, grossed up for the withholding the platform assumes
    payout_item = catalog.linked_cost(sku_code)
    payout_code = payout_item.code if payout_item is not None else NO_PAYOUT
    net_payout = unit_fee(payout_item, price) * quantity if payout_item is not None else 0.0
    grossed = gross_up(net_payout, withholding_rate)
    withholding = grossed.withholding

    withholding_item = catalog.require(WITHHOLDING, DirectCostItem)
    cascade.outflow("Net lawyer payout (guaranteed)", payout_code,
                    f"Guaranteed net {net_payout:,.0f}", net_payout)
    cascade.outflow(f"Assumed withholding ({withholding_rate:.0%} gross-up)",
                    WITHHOLDING,
                    f"{net_payout:,.0f} / (1 - {withholding_rate:.0%}) - {net_payout:,.0f}",
                    withholding, kind=TAX,
                    warning="Hidden cost: paid to the tax authority by the platform"
                    if withholding > 0 and withholding_item.hidden_cost else None)

    # 4. Levy on everything paid out of the account
    levy_item = catalog.require(PAYOUT_LEVY, DirectCostItem)
    levy_base = net_payout + withholding
    levy = unit_fee(levy_item, levy_base / quantity) * quantity if levy_base > 0 else 0.0
    cascade.outflow("Financial transactions levy on payout", PAYOUT_LEVY,
                    _fee_formula(levy_item, levy_base / quantity, quantity),
                    levy, kind=TAX)

    # 5. Compliance and messaging
    compliance_item = catalog.require(COMPLIANCE, DirectCostItem)
    compliance = unit_fee(compliance_item, price) * quantity
    cascade.outflow("Sanctions list screening", COMPLIANCE,
                    _fee_formula(compliance_item, price, quantity), compliance)

    messaging_item = catalog.require(MESSAGING, DirectCostItem)
    messaging = unit_fee(messaging_item, price) * quantity
    cascade.outflow("WhatsApp Business API", MESSAGING,
                    _fee_formula(messaging_item, price, quantity), messaging)

    # 6. Local industry tax, on gross revenue
    local_rate = catalog.tax_rate(LOCAL_TAX)
    local_tax = gross_revenue * local_rate
    cascade.outflow("Local industry tax (on gross revenue)", LOCAL_TAX,
                    f"{gross_revenue:,.0f} x {local_rate:.3%}",
                    local_tax, kind=TAX)

    # 7. Contribution margin
    contribution_margin = cascade.total
    margin_pct = safe_divide(contribution_margin, gross_revenue)
    margin_per_unit = contribution_margin / quantity
    cascade.info("Contribution margin", CONTRIBUTION_MARGIN,
                 f"{margin_pct:.2%} of gross revenue", contribution_margin,
                 is_error=margin_pct < assumptions.minimum_viable_margin)

    # 8. Fixed costs and break-even
    cloud_item = catalog.require(CLOUD, OpexItem)
    fixed_costs = (catalog.payroll_total() +
                   cloud_item.unit_value * assumptions.estimated_active_users)

    break_even = ceil_units(fixed_costs / margin_per_unit) if margin_per_unit > 0 else None

    target_denominator = margin_per_unit - assumptions.target_margin * price
    target_volume = (ceil_units(fixed_costs / target_denominator)
                     if target_denominator > 0 else None)

    cascade.info("Break-even (units/month)", BREAK_EVEN,
                 f"Fixed costs {fixed_costs:,.0f} / margin per unit {margin_per_unit:,.0f}",
                 float(break_even) if break_even is not None else None,
                 warning=None if break_even is not None
                 else "Unreachable: contribution margin per unit is not positive")

    result = UnitCascadeResult(
        sku_code=sku_code,
        concept=item.concept,
        unit_price=price,
        quantity=quantity,
        gross_revenue=gross_revenue,
        digital_mix=digital_mix,
        steps=cascade.steps,
        contribution_margin=contribution_margin,
        contribution_margin_pct=margin_pct,
        contribution_margin_per_unit=margin_per_unit,
        break_even_units=break_even,
        target_volume_units=target_volume,
        fixed_costs=fixed_costs,
        settlement_days=_settlement_days(digital_item, cash_item, digital_mix),
        payout_code=payout_code,
    )
    result.verifications = verify(result, catalog, config)
    result.alerts = _alerts(result, cloud_item, withholding_rate, assumptions)
    return result


def verify(result: UnitCascadeResult,
           catalog: Optional[Catalog] = None,
           config: Optional[EngineConfig] = None) -> Dict[str, bool]:
    """
    Audit the emitted steps of a cascade.

    Each fee is re-derived from its base (ticket price, channel share,
    grossed-up payout, gross revenue step) and compared with the step
    amount, within one currency unit.

    Returns:
        {check name: passed}
    """
    config = config or EngineConfig()
    catalog = catalog or load_default_catalog()
    rate = config.taxes.professional_withholding
    quantity = result.quantity
    price = result.unit_price

    def charged(code):
        return -result.amount(code)

    net_payout = charged(result.payout_code)
    expected_withholding = net_payout * rate / (1 - rate) if 0 <= rate < 1 else 0.0

    digital_item = catalog.require(DIGITAL_FEE, DirectCostItem)
    expected_digital = unit_fee(digital_item, price) * quantity * result.digital_mix

    sms_item = catalog.require(SMS, DirectCostItem)
    expected_sms = unit_fee(sms_item, price) * quantity * result.cash_mix

    expected_local_tax = result.amount(result.sku_code) * catalog.tax_rate(LOCAL_TAX)

    return {
        'withholding_base_correct': is_close(charged(WITHHOLDING), expected_withholding),
        'digital_fee_only_digital': (is_close(charged(DIGITAL_FEE), expected_digital)
                                     and (result.digital_mix > 0 or charged(DIGITAL_FEE) == 0)),
        'sms_only_cash_channel': (is_close(charged(SMS), expected_sms)
                                  and (result.cash_mix > 0 or charged(SMS) == 0)),
        'local_tax_on_gross_revenue': is_close(charged(LOCAL_TAX), expected_local_tax),
        'cloud_cost_scales': catalog.require(CLOUD, OpexItem).per_user,
    }


def _alerts(result: UnitCascadeResult, cloud_item: OpexItem, withholding_rate: float,
            assumptions: CascadeConfig) -> List[Alert]:
    margin_pct = result.contribution_margin_pct
    alerts = []
    if margin_pct < 0:
        alerts.append(Alert(
            severity=Severity.CRITICAL,
            category='Profitability',
            title="Model not viable: negative contribution margin",
            description="Every sale of this product loses money.",
            current_value=margin_pct,
            benchmark_value=assumptions.minimum_viable_margin,
            recommended_action="Review the cost structure or raise the price",
        ))
    elif margin_pct < assumptions.minimum_viable_margin:
        alerts.append(Alert(
            severity=Severity.HIGH,
            category='Profitability',
            title="Dangerously low contribution margin",
            description=f"A {margin_pct:.2%} margin cannot cover fixed costs.",
            current_value=margin_pct,
            benchmark_value=assumptions.minimum_viable_margin,
            recommended_action="Renegotiate payouts or channel fees",
        ))

    if not result.verifications['cloud_cost_scales']:
        alerts.append(Alert(
            severity=Severity.MEDIUM,
            category='Efficiency',
            title="Cloud cost does not scale with users",
            description="Server spend is configured as fixed instead of per active user.",
            current_value=cloud_item.unit_value,
            benchmark_value=0.0,
            recommended_action="Model cloud cost per monthly active user",
        ))

    if not result.verifications['withholding_base_correct']:
        net_payout = -result.amount(result.payout_code)
        alerts.append(Alert(
            severity=Severity.CRITICAL,
            category='Tax',
            title="Withholding gross-up error",
            description="Assumed withholding is not computed on the grossed-up base.",
            current_value=-result.amount(WITHHOLDING),
            benchmark_value=net_payout * withholding_rate / (1 - withholding_rate),
            recommended_action="Use withholding = net / (1 - rate) - net",
        ))

    return sort_alerts(alerts)
