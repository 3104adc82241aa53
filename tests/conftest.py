"""
Pytest fixtures for the planning engine test suite.

Provides:
- Default configuration objects
- The reference one-year scenario (500M capital, 1.2B revenue)
- Static projection providers for multi-year runs
"""

import pytest

from planning_engine.catalog import load_default_catalog
from planning_engine.config import EngineConfig, StatementConfig
from planning_engine.financial_statements import CarryForwardState, YearInputs, generate
from planning_engine.projection import (
    AnnualProjection,
    StaticProjectionProvider,
    create_sample_projections,
)


@pytest.fixture
def config():
    return EngineConfig()


@pytest.fixture
def statement_config():
    return StatementConfig()


@pytest.fixture
def catalog():
    return load_default_catalog()


@pytest.fixture
def scenario_inputs():
    """1.2B revenue, 700M cost of sales, 300M OPEX, no D&A or investment."""
    return YearInputs(
        year=2026,
        gross_revenue=1_200_000_000,
        cost_of_sales=700_000_000,
        operating_expenses=300_000_000,
    )


@pytest.fixture
def seeded_state():
    return CarryForwardState.seed(500_000_000)


@pytest.fixture
def scenario_model(scenario_inputs, seeded_state, statement_config):
    return generate(scenario_inputs, seeded_state, statement_config)


@pytest.fixture
def sample_projections():
    return create_sample_projections(2026, 2030, seed=7)


@pytest.fixture
def sample_provider(sample_projections):
    return StaticProjectionProvider(sample_projections)


@pytest.fixture
def flat_provider():
    """Same flat year every year: 1.2B revenue, 700M cost, 300M OPEX."""
    def provider(year):
        return AnnualProjection.flat(year, 1_200_000_000, 700_000_000, 300_000_000)
    return provider
