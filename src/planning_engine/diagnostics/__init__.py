"""
Diagnostics Module

Developer-facing audits of the pricing model.
"""

from .unit_cascade import UnitCascadeResult, UnitCascadeStep, trace, unit_fee, verify

__all__ = [
    'UnitCascadeResult',
    'UnitCascadeStep',
    'trace',
    'unit_fee',
    'verify',
]
