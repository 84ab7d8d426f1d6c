"""Villas operation engine."""

from typing import Dict

from ...models.operations import VillasConfig
from .base import OperationResult, run_monthly_engine
from .drivers import DAYS_PER_MONTH


def _revenue(config: VillasConfig, occupancy: float) -> Dict[str, float]:
    occupied_nights = config.units * occupancy * DAYS_PER_MONTH
    rental_revenue = occupied_nights * config.avg_nightly_rate
    # Rental revenue is carried on the room line
    return {
        "room_revenue": rental_revenue,
        "food_revenue": rental_revenue * config.food_revenue_pct_of_rental,
        "beverage_revenue": rental_revenue * config.beverage_revenue_pct_of_rental,
        "other_revenue": rental_revenue * config.other_revenue_pct_of_rental,
    }


def _departmental(config: VillasConfig, revenue: Dict[str, float]) -> Dict[str, float]:
    return {
        "food_cogs": revenue["food_revenue"] * config.food_cogs_pct,
        "beverage_cogs": revenue["beverage_revenue"] * config.beverage_cogs_pct,
        "commissions": revenue["room_revenue"] * config.commissions_pct,
    }


def run_villas_engine(config: VillasConfig) -> OperationResult:
    """Monthly and annual P&L for a villa programme: units x occupancy x 30 x nightly rate."""
    return run_monthly_engine(config, _revenue, _departmental)
