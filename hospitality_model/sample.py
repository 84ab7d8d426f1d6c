"""Ready-made model inputs for examples and smoke checks."""

from .models.capital import AmortizationType, CapitalStructureConfig, DebtTrancheConfig, TrancheType
from .models.model import FullModelInput
from .models.operations import HotelConfig, RestaurantConfig, VillasConfig
from .models.project import ProjectConfig, ProjectScenario
from .models.waterfall import EquityClass, WaterfallConfig

SAMPLE_START_YEAR = 2026
SAMPLE_HORIZON_YEARS = 5
SAMPLE_INVESTMENT = 50_000_000


def sample_hotel(start_year: int = SAMPLE_START_YEAR, horizon_years: int = SAMPLE_HORIZON_YEARS) -> HotelConfig:
    """100-key hotel at $250 ADR and a flat 70% occupancy."""
    return HotelConfig(
        id="sample-hotel-1",
        name="Sample Hotel",
        start_year=start_year,
        horizon_years=horizon_years,
        keys=100,
        avg_daily_rate=250.0,
        occupancy_by_month=(0.70,) * 12,
        food_revenue_pct_of_rooms=0.30,
        beverage_revenue_pct_of_rooms=0.15,
        other_revenue_pct_of_rooms=0.10,
        food_cogs_pct=0.35,
        beverage_cogs_pct=0.25,
        payroll_pct=0.35,
        utilities_pct=0.05,
        marketing_pct=0.03,
        maintenance_opex_pct=0.04,
        other_opex_pct=0.03,
        maintenance_capex_pct=0.02,
    )


def sample_villas(start_year: int = SAMPLE_START_YEAR, horizon_years: int = SAMPLE_HORIZON_YEARS) -> VillasConfig:
    return VillasConfig(
        id="sample-villas-1",
        name="Sample Villas",
        start_year=start_year,
        horizon_years=horizon_years,
        units=12,
        avg_nightly_rate=600.0,
        occupancy_by_month=(0.55, 0.55, 0.60, 0.65, 0.70, 0.80, 0.85, 0.85, 0.70, 0.60, 0.55, 0.60),
        food_revenue_pct_of_rental=0.10,
        other_revenue_pct_of_rental=0.05,
        food_cogs_pct=0.35,
        payroll_pct=0.25,
        utilities_pct=0.04,
        marketing_pct=0.03,
        maintenance_opex_pct=0.05,
        maintenance_capex_pct=0.03,
    )


def sample_restaurant(start_year: int = SAMPLE_START_YEAR, horizon_years: int = SAMPLE_HORIZON_YEARS) -> RestaurantConfig:
    return RestaurantConfig(
        id="sample-restaurant-1",
        name="Sample Restaurant",
        start_year=start_year,
        horizon_years=horizon_years,
        covers=80,
        avg_check=45.0,
        turnover_by_month=(1.5,) * 12,
        food_revenue_pct_of_total=0.65,
        beverage_revenue_pct_of_total=0.30,
        other_revenue_pct_of_total=0.05,
        food_cogs_pct=0.32,
        beverage_cogs_pct=0.22,
        payroll_pct=0.30,
        utilities_pct=0.04,
        marketing_pct=0.02,
        maintenance_opex_pct=0.02,
        other_opex_pct=0.03,
        maintenance_capex_pct=0.02,
    )


def sample_model_input() -> FullModelInput:
    """Single hotel, $50M investment, 65% senior loan, 70/30 LP/GP.

    Example:
        >>> from hospitality_model.pipeline import run_full_model
        >>> output = run_full_model(sample_model_input())
        >>> len(output.consolidated_annual_pnl)
        5
    """
    return FullModelInput(
        scenario=ProjectScenario(
            id="sample-scenario",
            name="Sample Hotel Scenario",
            start_year=SAMPLE_START_YEAR,
            horizon_years=SAMPLE_HORIZON_YEARS,
            operations=(sample_hotel(),),
        ),
        project_config=ProjectConfig(
            discount_rate=0.10,
            terminal_growth_rate=0.02,
            initial_investment=SAMPLE_INVESTMENT,
            working_capital_percentage=0.05,
        ),
        capital_config=CapitalStructureConfig(
            initial_investment=SAMPLE_INVESTMENT,
            debt_tranches=(
                DebtTrancheConfig(
                    id="senior-loan",
                    label="Senior Loan",
                    tranche_type=TrancheType.SENIOR,
                    initial_principal=SAMPLE_INVESTMENT * 0.65,
                    interest_rate=0.10,
                    amortization_type=AmortizationType.MORTGAGE,
                    term_years=5,
                    amortization_years=5,
                ),
            ),
        ),
        waterfall_config=WaterfallConfig(
            equity_classes=(
                EquityClass(id="lp", name="Limited Partner", contribution_pct=0.7, distribution_pct=0.7),
                EquityClass(id="gp", name="General Partner", contribution_pct=0.3, distribution_pct=0.3),
            ),
        ),
    )


def sample_resort_input() -> FullModelInput:
    """The sample hotel plus villas and a restaurant on the same capital stack."""
    base = sample_model_input()
    scenario = ProjectScenario(
        id="sample-resort",
        name="Sample Resort Scenario",
        start_year=SAMPLE_START_YEAR,
        horizon_years=SAMPLE_HORIZON_YEARS,
        operations=(sample_hotel(), sample_villas(), sample_restaurant()),
    )
    return FullModelInput(
        scenario=scenario,
        project_config=base.project_config,
        capital_config=base.capital_config,
        waterfall_config=base.waterfall_config,
    )
