"""
Multi-Year Simulator

Runs the three-statement generator year over year.
"""

from ..financial_statements.statement_builder import CarryForwardState
from .multi_year import (
    run_series,
    verify_series,
    series_to_dataframe,
    year_inputs_from_projection,
)

__all__ = [
    'CarryForwardState',
    'run_series',
    'verify_series',
    'series_to_dataframe',
    'year_inputs_from_projection',
]
