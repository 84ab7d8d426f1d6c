"""Hotel operation engine."""

from typing import Dict

from ...models.operations import HotelConfig
from .base import OperationResult, run_monthly_engine
from .drivers import DAYS_PER_MONTH


def _revenue(config: HotelConfig, occupancy: float) -> Dict[str, float]:
    occupied_room_nights = config.keys * occupancy * DAYS_PER_MONTH
    room_revenue = occupied_room_nights * config.avg_daily_rate
    return {
        "room_revenue": room_revenue,
        "food_revenue": room_revenue * config.food_revenue_pct_of_rooms,
        "beverage_revenue": room_revenue * config.beverage_revenue_pct_of_rooms,
        "other_revenue": room_revenue * config.other_revenue_pct_of_rooms,
    }


def _departmental(config: HotelConfig, revenue: Dict[str, float]) -> Dict[str, float]:
    return {
        "food_cogs": revenue["food_revenue"] * config.food_cogs_pct,
        "beverage_cogs": revenue["beverage_revenue"] * config.beverage_cogs_pct,
        "commissions": revenue["room_revenue"] * config.commissions_pct,
    }


def run_hotel_engine(config: HotelConfig) -> OperationResult:
    """Monthly and annual P&L for a hotel.

    Room revenue = keys x occupancy x 30 x ADR. Food, beverage and other
    revenue are percentages of room revenue; commissions are a percentage
    of room revenue and count as departmental expense.

    Example:
        >>> result = run_hotel_engine(HotelConfig(id="h", keys=100, avg_daily_rate=250,
        ...                                       occupancy_by_month=(0.7,) * 12))
        >>> result.monthly_pnl[0].room_revenue
        525000.0
    """
    return run_monthly_engine(config, _revenue, _departmental)
