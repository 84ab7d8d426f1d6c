"""Tests for the operation engines, drivers and sponsor view."""

from dataclasses import replace

import pytest

from hospitality_model.calculations.operations import (
    OPERATION_ENGINES,
    apply_sponsor_view,
    normalize_seasonality,
    ramp_up_factor,
    run_operation,
)
from hospitality_model.models import (
    BeachClubConfig,
    FlexConfig,
    HotelConfig,
    LeaseTerms,
    OperationType,
    OwnershipModel,
    PNL_LINES,
    RacquetConfig,
    RampUpConfig,
    RampUpCurve,
    RentBasis,
    RestaurantConfig,
    RetailConfig,
    SeniorLivingConfig,
    VillasConfig,
    WellnessConfig,
)
from tests.fixtures.test_inputs import MONTHLY_NOI, MONTHLY_ROOM_REVENUE, MONTHLY_TOTAL_REVENUE

OPEX = dict(payroll_pct=0.3, utilities_pct=0.05, marketing_pct=0.03, maintenance_opex_pct=0.04, maintenance_capex_pct=0.02)
SEASONAL = (0.5, 0.55, 0.6, 0.65, 0.7, 0.8, 0.9, 0.9, 0.75, 0.6, 0.55, 0.5)

ALL_OPERATIONS = [
    HotelConfig(id="hotel", keys=50, avg_daily_rate=180, occupancy_by_month=SEASONAL,
                food_revenue_pct_of_rooms=0.2, food_cogs_pct=0.3, commissions_pct=0.1, **OPEX),
    VillasConfig(id="villas", units=8, avg_nightly_rate=700, occupancy_by_month=SEASONAL,
                 other_revenue_pct_of_rental=0.05, **OPEX),
    RestaurantConfig(id="restaurant", covers=60, avg_check=40, turnover_by_month=(1.2,) * 12,
                     food_revenue_pct_of_total=0.7, beverage_revenue_pct_of_total=0.3,
                     food_cogs_pct=0.3, beverage_cogs_pct=0.2, **OPEX),
    BeachClubConfig(id="beach", daily_passes=200, avg_daily_pass_price=35, memberships=150,
                    avg_membership_fee=2400, utilization_by_month=SEASONAL,
                    food_revenue_pct_of_total=0.2, food_cogs_pct=0.35, **OPEX),
    RacquetConfig(id="racquet", courts=6, avg_court_rate=40, hours_per_day=12, memberships=80,
                  avg_membership_fee=1800, utilization_by_month=SEASONAL, **OPEX),
    RetailConfig(id="retail", sqm=1200, avg_rent_per_sqm=45, occupancy_by_month=(0.9,) * 12, **OPEX),
    FlexConfig(id="flex", sqm=800, avg_rent_per_sqm=60, occupancy_by_month=(0.75,) * 12, **OPEX),
    WellnessConfig(id="wellness", memberships=300, avg_membership_fee=1500, daily_passes=40,
                   avg_daily_pass_price=60, utilization_by_month=SEASONAL, **OPEX),
    SeniorLivingConfig(id="senior", units=90, avg_monthly_rate=5200, occupancy_by_month=(0.88,) * 12,
                       care_revenue_pct_of_rental=0.25, care_cogs_pct=0.6, **OPEX),
]


class TestHotelEngine:
    """Tests for the hotel revenue and cost drivers."""

    def test_room_revenue_is_keys_occupancy_days_adr(self, hotel_config):
        """Room revenue should be keys x occupancy x 30 x ADR."""
        result = run_operation(hotel_config)
        assert result.monthly_pnl[0].room_revenue == pytest.approx(MONTHLY_ROOM_REVENUE)

    def test_total_revenue_includes_ancillary(self, hotel_config):
        """F&B and other revenue are percentages of room revenue."""
        month = run_operation(hotel_config).monthly_pnl[0]
        assert month.food_revenue == pytest.approx(MONTHLY_ROOM_REVENUE * 0.30)
        assert month.revenue_total == pytest.approx(MONTHLY_TOTAL_REVENUE)

    def test_noi_after_cogs_opex_and_capex(self, hotel_config):
        """NOI = revenue - COGS - opex - maintenance capex."""
        month = run_operation(hotel_config).monthly_pnl[0]
        assert month.noi == pytest.approx(MONTHLY_NOI)
        assert month.gross_operating_profit - month.opex_total - month.maintenance_capex == pytest.approx(month.noi)

    def test_produces_twelve_months_per_year(self, hotel_config):
        """A 5-year horizon yields 60 months and 5 annual records."""
        result = run_operation(hotel_config)
        assert len(result.monthly_pnl) == 60
        assert [a.year_index for a in result.annual_pnl] == [0, 1, 2, 3, 4]


class TestAllOperationEngines:
    """Properties every operation engine must hold."""

    def test_registry_covers_every_type(self):
        """Every OperationType should have an engine."""
        assert set(OPERATION_ENGINES) == set(OperationType)

    @pytest.mark.parametrize("config", ALL_OPERATIONS, ids=lambda c: c.id)
    def test_annual_equals_sum_of_months_exactly(self, config):
        """Each annual line should equal the plain sum of its 12 months."""
        result = run_operation(config)
        for annual in result.annual_pnl:
            months = [m for m in result.monthly_pnl if m.year_index == annual.year_index]
            assert len(months) == 12
            for name in PNL_LINES:
                assert getattr(annual, name) == sum((getattr(m, name) for m in months), 0.0)

    @pytest.mark.parametrize("config", ALL_OPERATIONS, ids=lambda c: c.id)
    def test_revenue_positive_and_noi_identity(self, config):
        """Revenue should be positive and NOI = EBITDA - capex."""
        for month in run_operation(config).monthly_pnl[:12]:
            assert month.revenue_total > 0
            assert month.noi == pytest.approx(month.ebitda - month.maintenance_capex)

    def test_restaurant_turnover_not_capped(self):
        """Restaurant turnover above 1 turn per day is kept."""
        config = RestaurantConfig(id="r", covers=10, avg_check=50, turnover_by_month=(2.5,) * 12,
                                  food_revenue_pct_of_total=1.0)
        month = run_operation(config).monthly_pnl[0]
        assert month.revenue_total == pytest.approx(10 * 2.5 * 30 * 50)

    def test_restaurant_revenue_not_grossed_up(self):
        """Restaurant covers x check is the total; unassigned share lands on the room line."""
        config = RestaurantConfig(id="r", covers=20, avg_check=40, turnover_by_month=(1.0,) * 12,
                                  food_revenue_pct_of_total=0.6, beverage_revenue_pct_of_total=0.3,
                                  other_revenue_pct_of_total=0.0)
        month = run_operation(config).monthly_pnl[0]
        total = 20 * 1.0 * 30 * 40
        assert month.revenue_total == pytest.approx(total)
        assert month.food_revenue == pytest.approx(total * 0.6)
        assert month.beverage_revenue == pytest.approx(total * 0.3)
        assert month.room_revenue == pytest.approx(total * 0.1)

    def test_occupancy_clamped_by_seasonality(self):
        """Seasonality pushing occupancy above 1 is clamped to 1."""
        seasonality = (2.0,) + (10.0 / 11,) * 11
        config = HotelConfig(id="h", keys=10, avg_daily_rate=100, occupancy_by_month=(0.9,) * 12,
                             seasonality_curve=seasonality)
        month = run_operation(config).monthly_pnl[0]
        assert month.room_revenue == pytest.approx(10 * 1.0 * 30 * 100)


class TestSeasonality:
    """Tests for seasonality normalization."""

    def test_normalizes_to_mean_one(self):
        """A curve is rescaled to average 1.0."""
        curve = normalize_seasonality([2.0] * 6 + [4.0] * 6)
        assert sum(curve) / 12 == pytest.approx(1.0)
        assert curve[0] == pytest.approx(2.0 / 3.0)

    def test_wrong_length_raises(self):
        """A curve without 12 values is rejected."""
        with pytest.raises(ValueError):
            normalize_seasonality([1.0] * 11)


class TestRampUp:
    """Tests for ramp-up factors."""

    @pytest.mark.parametrize("curve", [RampUpCurve.LINEAR, RampUpCurve.S_CURVE, RampUpCurve.EXPONENTIAL])
    def test_monotone_and_bounded(self, curve):
        """Ramp-up factors never decrease and stay within [0, 1]."""
        ramp = RampUpConfig(ramp_up_months=12, curve=curve, start_month=3)
        factors = [ramp_up_factor(m, ramp) for m in range(-2, 24)]
        assert all(0.0 <= f <= 1.0 for f in factors)
        assert all(b >= a for a, b in zip(factors, factors[1:]))

    def test_zero_before_start_full_after(self):
        """Nothing before start_month, full capacity after the ramp."""
        ramp = RampUpConfig(ramp_up_months=6, start_month=2)
        assert ramp_up_factor(1, ramp) == 0.0
        assert ramp_up_factor(2, ramp) == 0.0
        assert ramp_up_factor(5, ramp) == pytest.approx(0.5)
        assert ramp_up_factor(8, ramp) == 1.0

    def test_custom_factors_clamped(self):
        """Custom factors outside [0, 1] are clamped."""
        ramp = RampUpConfig(ramp_up_months=3, curve=RampUpCurve.CUSTOM, custom_factors=(-0.5, 0.4, 1.7))
        assert [ramp_up_factor(m, ramp) for m in range(3)] == [0.0, 0.4, 1.0]

    def test_ramp_reduces_first_year_revenue(self, hotel_config):
        """A 12-month linear ramp lowers year 0 revenue but not year 1."""
        ramped = replace(hotel_config, ramp_up_config=RampUpConfig(ramp_up_months=12))
        base = run_operation(hotel_config).annual_pnl
        result = run_operation(ramped).annual_pnl
        assert result[0].revenue_total < base[0].revenue_total
        assert result[1].revenue_total == pytest.approx(base[1].revenue_total)


class TestSponsorView:
    """Tests for the ownership-model transform."""

    def test_co_invest_scales_every_line(self, hotel_config):
        """Co-invest contributes the ownership share of every line."""
        config = replace(hotel_config, ownership_model=OwnershipModel.CO_INVEST_OPCO, ownership_pct=0.4)
        month = run_operation(config).monthly_pnl[0]
        sponsor = apply_sponsor_view(month, config, periods_per_year=12)
        for name in PNL_LINES:
            assert getattr(sponsor, name) == pytest.approx(getattr(month, name) * 0.4)

    def test_fixed_lease_replaces_lines_with_rent(self, hotel_config):
        """Fixed lease: monthly base rent as revenue and NOI, no costs."""
        config = replace(
            hotel_config,
            ownership_model=OwnershipModel.BUILD_AND_LEASE_FIXED,
            lease_terms=LeaseTerms(base_rent=1_200_000),
        )
        sponsor = apply_sponsor_view(run_operation(config).monthly_pnl[0], config, periods_per_year=12)
        assert sponsor.revenue_total == pytest.approx(100_000)
        assert sponsor.noi == pytest.approx(100_000)
        assert sponsor.cash_flow == pytest.approx(100_000)
        assert sponsor.opex_total == 0.0
        assert sponsor.cogs_total == 0.0

    def test_variable_lease_on_noi(self, hotel_config):
        """Variable rent on NOI adds a share of the asset NOI to base rent."""
        config = replace(
            hotel_config,
            ownership_model=OwnershipModel.BUILD_AND_LEASE_VARIABLE,
            lease_terms=LeaseTerms(base_rent=120_000, variable_rent_pct=0.1, variable_rent_basis=RentBasis.NOI),
        )
        month = run_operation(config).monthly_pnl[0]
        sponsor = apply_sponsor_view(month, config, periods_per_year=12)
        assert sponsor.noi == pytest.approx(10_000 + month.noi * 0.1)

    def test_inactive_operation_contributes_nothing(self, hotel_config):
        """Inactive operations are zeroed."""
        config = replace(hotel_config, is_active=False)
        sponsor = apply_sponsor_view(run_operation(config).monthly_pnl[0], config, periods_per_year=12)
        assert all(getattr(sponsor, name) == 0.0 for name in PNL_LINES)
