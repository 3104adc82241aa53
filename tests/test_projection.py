"""
Unit tests for the projection boundary types.
"""

import pytest

from planning_engine.projection import (
    AnnualProjection,
    MonthlyProjection,
    StaticProjectionProvider,
    create_sample_projections,
)


def _months(revenue=100.0, cost=40.0, opex=30.0):
    return [MonthlyProjection(m, revenue, cost, opex) for m in range(1, 13)]


class TestAnnualProjection:
    """Tests for AnnualProjection construction."""

    def test_from_months_sums_totals(self):
        projection = AnnualProjection.from_months(2026, _months())

        assert projection.gross_revenue == pytest.approx(1200.0)
        assert projection.direct_cost == pytest.approx(480.0)
        assert projection.opex == pytest.approx(360.0)
        assert projection.ebitda == pytest.approx(360.0)
        assert projection.gross_margin == pytest.approx(0.6)

    def test_months_are_sorted(self):
        projection = AnnualProjection.from_months(2026, reversed(_months()))

        assert [m.month for m in projection.months] == list(range(1, 13))

    def test_wrong_month_count_raises(self):
        with pytest.raises(ValueError, match="12 months"):
            AnnualProjection.from_months(2026, _months()[:11])

    def test_duplicate_month_raises(self):
        months = _months()[:11] + [MonthlyProjection(3, 1.0, 1.0, 1.0)]

        with pytest.raises(ValueError):
            AnnualProjection.from_months(2026, months)

    def test_nan_value_raises(self):
        months = _months()
        months[4] = MonthlyProjection(5, float('nan'), 0.0, 0.0)

        with pytest.raises(ValueError, match="gross_revenue"):
            AnnualProjection.from_months(2026, months)

    def test_flat_keeps_exact_totals(self):
        projection = AnnualProjection.flat(2026, 1_000_000_000.0, 1.0, 7.0)

        assert projection.gross_revenue == 1_000_000_000.0
        assert projection.opex == 7.0
        assert len(projection.months) == 12

    def test_zero_revenue_ratios(self):
        projection = AnnualProjection.flat(2026, 0.0, 0.0, 10.0)

        assert projection.gross_margin == 0.0
        assert projection.opex_ratio == 0.0


class TestProviders:
    """Tests for providers and sample data."""

    def test_static_provider_returns_none_for_missing_year(self):
        provider = StaticProjectionProvider({2026: AnnualProjection.flat(2026, 1.0, 0.0, 0.0)})

        assert provider(2026).year == 2026
        assert provider(2027) is None

    def test_sample_projections_are_deterministic(self):
        first = create_sample_projections(2026, 2028, seed=3)
        second = create_sample_projections(2026, 2028, seed=3)

        assert list(first) == [2026, 2027, 2028]
        assert first[2027].gross_revenue == second[2027].gross_revenue

    def test_sample_projections_empty_range(self):
        assert create_sample_projections(2030, 2026) == {}
