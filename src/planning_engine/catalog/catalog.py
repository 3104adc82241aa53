"""
catalog.py

Master catalog: lookup of revenue, cost, tax and investment items by code.
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type, Union

import yaml

from .items import (
    CatalogItem,
    CapexItem,
    DirectCostItem,
    OpexItem,
    RevenueItem,
    SECTIONS,
    TaxItem,
)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / 'data' / 'catalog.yaml'


class Catalog:
    """Read-only collection of catalog items keyed by code."""

    def __init__(self, items: Iterable[CatalogItem]):
        self._items: Dict[str, CatalogItem] = {}
        for item in items:
            if item.code in self._items:
                raise ValueError(f"Duplicate catalog code: {item.code}")
            self._items[item.code] = item

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, code: str) -> bool:
        return code in self._items

    def __iter__(self):
        return iter(self._items.values())

    def get(self, code: str) -> Optional[CatalogItem]:
        return self._items.get(code)

    def require(self, code: str, kind: Type[CatalogItem] = CatalogItem) -> CatalogItem:
        """Like get, but a missing or mistyped code raises ValueError."""
        item = self._items.get(code)
        if item is None:
            raise ValueError(f"Unknown catalog code: {code}")
        if not isinstance(item, kind):
            raise ValueError(f"Catalog item {code} is a {item.kind}, expected {kind.kind}")
        return item

    def by_kind(self, kind: Type[CatalogItem], active_only: bool = True) -> List[CatalogItem]:
        return [item for item in self._items.values()
                if isinstance(item, kind) and (item.active or not active_only)]

    def linked_cost(self, code: str) -> Optional[DirectCostItem]:
        """The direct cost linked to `code` (e.g. the payout of a consultation)."""
        for item in self.by_kind(DirectCostItem):
            if item.linked_to == code:
                return item
        return None

    def payroll_total(self) -> float:
        """Monthly payroll of all active payroll items."""
        return sum(item.unit_value for item in self.by_kind(OpexItem) if item.is_payroll)

    def acquisition_spend(self) -> float:
        """Monthly budget of the opex items flagged as customer acquisition."""
        return sum(item.unit_value for item in self.by_kind(OpexItem) if item.is_acquisition_cost)

    def investment_total(self) -> float:
        return sum(item.unit_value for item in self.by_kind(CapexItem, active_only=False))

    def tax_rate(self, code: str) -> float:
        return self.require(code, TaxItem).rate

    def validate_links(self) -> Tuple[bool, List[str]]:
        """
        Check that every linked direct cost points at an existing revenue
        item or direct cost.

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        errors = []
        for item in self.by_kind(DirectCostItem, active_only=False):
            if item.linked_to is None:
                continue
            target = self.get(item.linked_to)
            if not isinstance(target, (RevenueItem, DirectCostItem)):
                errors.append(f"Cost {item.code} linked to missing item {item.linked_to}")
        return len(errors) == 0, errors

    @classmethod
    def from_dict(cls, data: Dict[str, List[Dict[str, Any]]]) -> 'Catalog':
        """Build from {section: [item fields, ...]} as stored in YAML."""
        unknown = set(data) - set(SECTIONS)
        if unknown:
            raise ValueError(f"Unknown catalog sections: {sorted(unknown)}")

        items = []
        for section, item_cls in SECTIONS.items():
            for entry in data.get(section) or []:
                try:
                    items.append(item_cls(**entry))
                except TypeError as e:
                    raise ValueError(f"Invalid {section} entry {entry.get('code')}: {e}") from e
        return cls(items)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        data = {section: [] for section in SECTIONS}
        for section, item_cls in SECTIONS.items():
            for item in self._items.values():
                if type(item) is item_cls:
                    entry = item.to_dict()
                    entry.pop('kind')
                    data[section].append(entry)
        return data


def load_catalog(path: Union[str, Path]) -> Catalog:
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Catalog file {path} must contain a mapping")
    return Catalog.from_dict(data)


_default_catalog = None


def load_default_catalog() -> Catalog:
    """The bundled master catalog, parsed once."""
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = load_catalog(DEFAULT_CATALOG_PATH)
    return _default_catalog
