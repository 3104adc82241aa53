"""
Utility Functions Module

Numeric guards shared by the statement generator and the analyzers.
"""

from .numeric import (
    safe_divide,
    is_close,
    ceil_units,
    require_finite,
    require_non_negative,
    all_finite,
)

__all__ = [
    'safe_divide',
    'is_close',
    'ceil_units',
    'require_finite',
    'require_non_negative',
    'all_finite',
]
