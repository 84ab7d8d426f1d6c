"""Racquet club operation engine."""

from typing import Dict

from ...models.operations import RacquetConfig
from .base import OperationResult, gross_up, run_monthly_engine, split_of_total
from .drivers import DAYS_PER_MONTH


def _revenue(config: RacquetConfig, utilization: float) -> Dict[str, float]:
    court_hours = config.courts * utilization * config.hours_per_day * DAYS_PER_MONTH
    court_revenue = court_hours * config.avg_court_rate
    membership_revenue = config.memberships * config.avg_membership_fee / 12

    food, beverage, other = (
        config.food_revenue_pct_of_total,
        config.beverage_revenue_pct_of_total,
        config.other_revenue_pct_of_total,
    )
    total_revenue = gross_up(court_revenue + membership_revenue, food, beverage, other)
    return split_of_total(total_revenue, food, beverage, other)


def _departmental(config: RacquetConfig, revenue: Dict[str, float]) -> Dict[str, float]:
    return {
        "food_cogs": revenue["food_revenue"] * config.food_cogs_pct,
        "beverage_cogs": revenue["beverage_revenue"] * config.beverage_cogs_pct,
    }


def run_racquet_engine(config: RacquetConfig) -> OperationResult:
    """Monthly and annual P&L for a racquet club.

    Court revenue = courts x utilization x hours/day x 30 x court rate.
    Memberships add memberships x annual fee / 12 every month regardless
    of utilization. The primary revenue is grossed up by the food,
    beverage and other shares of total revenue.
    """
    return run_monthly_engine(config, _revenue, _departmental)
