"""Senior living operation engine."""

from typing import Dict

from ...models.operations import SeniorLivingConfig
from .base import OperationResult, run_monthly_engine


def _revenue(config: SeniorLivingConfig, occupancy: float) -> Dict[str, float]:
    rental_revenue = config.units * occupancy * config.avg_monthly_rate
    care_revenue = rental_revenue * config.care_revenue_pct_of_rental
    return {
        "room_revenue": rental_revenue,
        "food_revenue": rental_revenue * config.food_revenue_pct_of_rental,
        "beverage_revenue": 0.0,
        # Care revenue is reported with other revenue
        "other_revenue": care_revenue + rental_revenue * config.other_revenue_pct_of_rental,
    }


def _departmental(config: SeniorLivingConfig, revenue: Dict[str, float]) -> Dict[str, float]:
    care_revenue = revenue["room_revenue"] * config.care_revenue_pct_of_rental
    return {
        "food_cogs": revenue["food_revenue"] * config.food_cogs_pct,
        "beverage_cogs": care_revenue * config.care_cogs_pct,  # Care COGS
    }


def run_senior_living_engine(config: SeniorLivingConfig) -> OperationResult:
    """Monthly and annual P&L for senior living.

    Rental revenue = units x occupancy x monthly rate (no day factor).
    Care, food and other revenue are percentages of rental; care COGS is
    carried on the beverage COGS line.
    """
    return run_monthly_engine(config, _revenue, _departmental)
