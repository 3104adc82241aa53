"""
Planning Engine

Interconnected three-statement financial model for a services company.

Main Components:
- Financial Statements (Income Statement, Balance Sheet, Cash Flow)
- Triangulation of the cross-statement identities
- Multi-year simulation with carried-forward balances
- Cash conversion cycle and financial health alerts
- Unit cost cascade diagnostic over the product catalog
"""

__version__ = "1.0.0"

from planning_engine.config import EngineConfig, StatementConfig
from planning_engine.projection import (
    AnnualProjection,
    MonthlyProjection,
    StaticProjectionProvider,
    create_sample_projections,
)
from planning_engine.financial_statements import (
    CarryForwardState,
    ThreeStatementModel,
    TriangulationResult,
    YearInputs,
    generate,
)
from planning_engine.simulator import run_series, verify_series, series_to_dataframe
from planning_engine.analysis import (
    Alert,
    Severity,
    compute_ccc,
    evaluate,
    sort_alerts,
)
from planning_engine.catalog import Catalog, load_default_catalog
from planning_engine.diagnostics import trace

__all__ = [
    # Configuration
    'EngineConfig',
    'StatementConfig',

    # Projection boundary
    'AnnualProjection',
    'MonthlyProjection',
    'StaticProjectionProvider',
    'create_sample_projections',

    # Statements
    'CarryForwardState',
    'ThreeStatementModel',
    'TriangulationResult',
    'YearInputs',
    'generate',

    # Multi-year
    'run_series',
    'verify_series',
    'series_to_dataframe',

    # Analysis
    'Alert',
    'Severity',
    'compute_ccc',
    'evaluate',
    'sort_alerts',

    # Catalog and diagnostics
    'Catalog',
    'load_default_catalog',
    'trace',
]
