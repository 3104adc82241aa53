"""
Analysis Module

Cash conversion, headline metrics and the financial health alert rules.
"""

from .cash_conversion import (
    CashConversionCycle,
    classify_ccc,
    compute_ccc,
    cash_conversion_for_model,
)
from .metrics import (
    BurnRate,
    Margins,
    UnitEconomics,
    SaaSKpis,
    GrossUp,
    burn_rate,
    runway_months,
    runway_status,
    burn_rate_summary,
    margins,
    unit_economics,
    ltv_cac_rating,
    gross_up,
    count_consecutive_negative,
    negative_operating_months,
    kpis_from_projection,
)
from .alerts import Alert, Severity, evaluate, sort_alerts

__all__ = [
    'CashConversionCycle',
    'classify_ccc',
    'compute_ccc',
    'cash_conversion_for_model',
    'BurnRate',
    'Margins',
    'UnitEconomics',
    'SaaSKpis',
    'GrossUp',
    'burn_rate',
    'runway_months',
    'runway_status',
    'burn_rate_summary',
    'margins',
    'unit_economics',
    'ltv_cac_rating',
    'gross_up',
    'count_consecutive_negative',
    'negative_operating_months',
    'kpis_from_projection',
    'Alert',
    'Severity',
    'evaluate',
    'sort_alerts',
]
