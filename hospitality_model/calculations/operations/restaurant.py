"""Restaurant operation engine."""

from typing import Dict

from ...models.operations import RestaurantConfig
from .base import OperationResult, run_monthly_engine, split_of_total
from .drivers import DAYS_PER_MONTH


def _revenue(config: RestaurantConfig, turnover: float) -> Dict[str, float]:
    covers_served = config.covers * turnover * DAYS_PER_MONTH
    total_revenue = covers_served * config.avg_check
    return split_of_total(
        total_revenue,
        config.food_revenue_pct_of_total,
        config.beverage_revenue_pct_of_total,
        config.other_revenue_pct_of_total,
    )


def _departmental(config: RestaurantConfig, revenue: Dict[str, float]) -> Dict[str, float]:
    return {
        "food_cogs": revenue["food_revenue"] * config.food_cogs_pct,
        "beverage_cogs": revenue["beverage_revenue"] * config.beverage_cogs_pct,
    }


def run_restaurant_engine(config: RestaurantConfig) -> OperationResult:
    """Monthly and annual P&L for a restaurant.

    Total revenue = covers x turnover x 30 x average check. Turnover is
    turns per day and is not capped at 1. Food, beverage and other are
    shares of the total; any remainder sits on the room line.
    """
    return run_monthly_engine(config, _revenue, _departmental)
