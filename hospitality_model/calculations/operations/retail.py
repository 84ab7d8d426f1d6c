"""Retail and flex space operation engines.

Both lease floor area per square meter and carry no COGS; rental income
sits on the room line and other income is a share of rental.
"""

from typing import Dict, Union

from ...models.operations import FlexConfig, RetailConfig
from .base import OperationResult, run_monthly_engine

LeasedSpaceConfig = Union[RetailConfig, FlexConfig]


def _revenue(config: LeasedSpaceConfig, occupancy: float) -> Dict[str, float]:
    rental_revenue = config.sqm * occupancy * config.avg_rent_per_sqm
    return {
        "room_revenue": rental_revenue,
        "food_revenue": 0.0,
        "beverage_revenue": 0.0,
        "other_revenue": rental_revenue * config.other_revenue_pct_of_total,
    }


def _departmental(config: LeasedSpaceConfig, revenue: Dict[str, float]) -> Dict[str, float]:
    return {}


def run_retail_engine(config: RetailConfig) -> OperationResult:
    """Monthly and annual P&L for retail space: sqm x occupancy x monthly rent."""
    return run_monthly_engine(config, _revenue, _departmental)


def run_flex_engine(config: FlexConfig) -> OperationResult:
    """Monthly and annual P&L for flexible workspace, priced like retail."""
    return run_monthly_engine(config, _revenue, _departmental)
