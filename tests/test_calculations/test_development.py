"""Tests for land payments and construction drawdowns."""

import pytest

from hospitality_model.calculations.development import (
    construction_flows,
    construction_outflows_by_year,
    drawdown_curve,
    land_outflows_by_year,
    land_payments,
    outflows_by_year,
)
from hospitality_model.models import ConstructionConfig, ConstructionCurve, LandConfig


class TestDrawdownCurve:
    """Tests for drawdown_curve."""

    @pytest.mark.parametrize("curve", list(ConstructionCurve))
    def test_sums_to_budget(self, curve):
        """Every curve spends exactly the budget."""
        spend = drawdown_curve(10_000_000, 18, curve)
        assert len(spend) == 18
        assert sum(spend) == pytest.approx(10_000_000, abs=0.01)
        assert all(amount >= 0 for amount in spend)

    def test_linear_is_equal(self):
        """Linear spends the same every month."""
        spend = drawdown_curve(1_200_000, 12, ConstructionCurve.LINEAR)
        assert spend == [100_000.0] * 12

    def test_s_curve_peaks_mid_build(self):
        """The S-curve spends most in the middle months."""
        spend = drawdown_curve(1_200_000, 12, ConstructionCurve.S_CURVE)
        assert spend[5] > spend[0]
        assert spend[6] > spend[11]

    def test_front_and_back_loaded_mirror(self):
        """Back-loaded is the front-loaded curve reversed."""
        front = drawdown_curve(1_000_000, 10, ConstructionCurve.FRONT_LOADED)
        back = drawdown_curve(1_000_000, 10, ConstructionCurve.BACK_LOADED)
        assert front[0] > front[-1]
        assert back[-1] == pytest.approx(front[0], rel=1e-9)

    @pytest.mark.parametrize("budget,months", [(1_000_000, 0), (1_000_000, -3), (0, 12), (-5, 12)])
    def test_invalid_inputs(self, budget, months):
        """Non-positive budgets and durations are rejected."""
        with pytest.raises(ValueError):
            drawdown_curve(budget, months)


class TestConstructionFlows:
    """Tests for monthly and annual construction outflows."""

    def test_flows_offset_by_start_month(self):
        """Months start at start_month and may be negative."""
        config = ConstructionConfig(id="c", name="Build", total_budget=600_000, start_month=-6,
                                    duration_months=6, curve_type=ConstructionCurve.LINEAR)
        flows = construction_flows(config)
        assert sorted(flows) == [-6, -5, -4, -3, -2, -1]

    def test_pre_start_months_fall_into_year_zero(self):
        """Spend before month 0 is funded in Year 0."""
        config = ConstructionConfig(id="c", name="Build", total_budget=2_400_000, start_month=-6,
                                    duration_months=24, curve_type=ConstructionCurve.LINEAR)
        by_year = construction_outflows_by_year(config, horizon_years=3)
        assert by_year[0] == pytest.approx(100_000 * 18)
        assert by_year[1] == pytest.approx(100_000 * 6)
        assert by_year[2] == 0.0

    def test_months_beyond_horizon_dropped(self):
        """Outflows after the horizon are not counted."""
        assert outflows_by_year({0: 1.0, 12: 2.0, 36: 5.0}, horizon_years=2) == [1.0, 2.0]


class TestLandPayments:
    """Tests for land acquisition schedules."""

    def test_down_payment_and_equal_installments(self):
        """Remaining cost is split equally over the months before start."""
        land = LandConfig(id="l", name="Plot", total_cost=10_000_000, acquisition_month=-12,
                          down_payment=2_000_000, down_payment_month=-12)
        payments = land_payments(land)
        assert payments[0].cash_flow == -2_000_000
        installments = payments[1:]
        assert len(installments) == 12
        assert all(p.cash_flow == pytest.approx(-8_000_000 / 12) for p in installments)
        assert installments[-1].month == 0

    def test_barter_credit_is_positive(self):
        """A barter share comes back as a positive credit."""
        land = LandConfig(id="l", name="Plot", total_cost=10_000_000, acquisition_month=-12,
                          down_payment=2_000_000, down_payment_month=-12, barter_value=0.1)
        credits = [p for p in land_payments(land) if p.cash_flow > 0]
        assert len(credits) == 1
        assert credits[0].cash_flow == pytest.approx(1_000_000)

    def test_net_land_outflow_by_year(self):
        """Year 0 carries the whole pre-start payment stream less barter."""
        land = LandConfig(id="l", name="Plot", total_cost=10_000_000, acquisition_month=-12,
                          down_payment=2_000_000, down_payment_month=-12, barter_value=0.1)
        by_year = land_outflows_by_year([land], horizon_years=2)
        assert by_year[0] == pytest.approx(9_000_000)
        assert by_year[1] == 0.0
