"""
items.py

Catalog entries. A closed set of variants sharing the common fields of
CatalogItem; each variant adds only what applies to it.
"""

from dataclasses import dataclass, asdict
from typing import Any, ClassVar, Dict, Optional


@dataclass(frozen=True)
class CatalogItem:
    """Common fields of every catalog entry."""
    code: str
    concept: str
    unit_value: float
    category: str = ''
    subcategory: str = ''
    driver: str = ''
    frequency: str = ''
    account_code: str = ''
    notes: str = ''
    active: bool = True

    kind: ClassVar[str] = 'item'

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['kind'] = self.kind
        return data


@dataclass(frozen=True)
class RevenueItem(CatalogItem):
    vat_applies: bool = False
    vat_rate: float = 0.0

    kind: ClassVar[str] = 'revenue'

    @property
    def price_with_vat(self) -> float:
        return self.unit_value * (1 + self.vat_rate) if self.vat_applies else self.unit_value


@dataclass(frozen=True)
class DirectCostItem(CatalogItem):
    linked_to: Optional[str] = None
    is_percentage: bool = False
    hidden_cost: bool = False
    settlement_days: Optional[int] = None

    kind: ClassVar[str] = 'direct_cost'


@dataclass(frozen=True)
class OpexItem(CatalogItem):
    is_payroll: bool = False
    is_acquisition_cost: bool = False
    per_user: bool = False

    kind: ClassVar[str] = 'opex'


@dataclass(frozen=True)
class TaxItem(CatalogItem):
    kind: ClassVar[str] = 'tax'

    @property
    def rate(self) -> float:
        return self.unit_value


@dataclass(frozen=True)
class CapexItem(CatalogItem):
    kind: ClassVar[str] = 'capex'


# YAML section name -> variant
SECTIONS = {
    'revenue': RevenueItem,
    'direct_costs': DirectCostItem,
    'opex': OpexItem,
    'taxes': TaxItem,
    'capex': CapexItem,
}
