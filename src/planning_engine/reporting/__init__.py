"""
Reporting Module

Console rendering of statements, checks, alerts and cascades.
"""

from .statement_printer import (
    fmt_currency,
    fmt_pct,
    print_three_statements,
    print_triangulation,
    print_series_summary,
    print_alerts,
    format_cascade,
)

__all__ = [
    'fmt_currency',
    'fmt_pct',
    'print_three_statements',
    'print_triangulation',
    'print_series_summary',
    'print_alerts',
    'format_cascade',
]
