"""
Catalog Module

Revenue, cost, tax and investment items referenced by code.
"""

from .items import (
    CatalogItem,
    RevenueItem,
    DirectCostItem,
    OpexItem,
    TaxItem,
    CapexItem,
)
from .catalog import Catalog, load_catalog, load_default_catalog

__all__ = [
    'CatalogItem',
    'RevenueItem',
    'DirectCostItem',
    'OpexItem',
    'TaxItem',
    'CapexItem',
    'Catalog',
    'load_catalog',
    'load_default_catalog',
]
