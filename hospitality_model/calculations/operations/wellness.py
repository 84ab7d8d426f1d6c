"""Wellness and spa operation engine."""

from typing import Dict

from ...models.operations import WellnessConfig
from .base import OperationResult, gross_up, run_monthly_engine, split_of_total
from .drivers import DAYS_PER_MONTH


def _revenue(config: WellnessConfig, utilization: float) -> Dict[str, float]:
    pass_revenue = config.daily_passes * utilization * DAYS_PER_MONTH * config.avg_daily_pass_price
    membership_revenue = config.memberships * config.avg_membership_fee / 12

    food, beverage, other = (
        config.food_revenue_pct_of_total,
        config.beverage_revenue_pct_of_total,
        config.other_revenue_pct_of_total,
    )
    total_revenue = gross_up(pass_revenue + membership_revenue, food, beverage, other)
    return split_of_total(total_revenue, food, beverage, other)


def _departmental(config: WellnessConfig, revenue: Dict[str, float]) -> Dict[str, float]:
    return {
        "food_cogs": revenue["food_revenue"] * config.food_cogs_pct,
        "beverage_cogs": revenue["beverage_revenue"] * config.beverage_cogs_pct,
    }


def run_wellness_engine(config: WellnessConfig) -> OperationResult:
    """Monthly and annual P&L for a wellness or spa operation.

    Primary revenue is daily passes x utilization x 30 x pass price plus
    one twelfth of annual membership fees, grossed up so food, beverage
    and other land at their shares of the total.
    """
    return run_monthly_engine(config, _revenue, _departmental)
