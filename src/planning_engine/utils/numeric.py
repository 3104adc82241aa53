"""
numeric.py

Small numeric helpers shared by the statement generator and analyzers.
"""

import numpy as np
from typing import Dict, Optional


def safe_divide(num: float, denom: float, default: float = 0.0) -> float:
    """Divide, returning `default` for a zero, missing or non-finite denominator."""
    if denom is None or denom == 0 or not np.isfinite(denom):
        return default
    result = num / denom
    if not np.isfinite(result):
        return default
    return float(result)


def is_close(a: float, b: float, tolerance: float = 1.0) -> bool:
    """Absolute-tolerance comparison used for all accounting identities."""
    return abs(a - b) <= tolerance


def ceil_units(value: float) -> int:
    """Round a unit count up to the next whole unit."""
    return int(np.ceil(value))


def require_finite(name: str, value: float) -> float:
    """Reject NaN / infinity at an input boundary."""
    if value is None or not np.isfinite(value):
        raise ValueError(f"{name} must be a finite number, got {value!r}")
    return float(value)


def require_non_negative(name: str, value: float) -> float:
    """Reject negative or non-finite monetary inputs."""
    value = require_finite(name, value)
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return value


def all_finite(values: Dict[str, Optional[float]]) -> bool:
    """True when every numeric entry is finite (None entries are ignored)."""
    return all(np.isfinite(v) for v in values.values() if isinstance(v, (int, float)))
