"""Operation engines: monthly and annual P&L per asset kind.

``run_operation`` dispatches on ``OperationConfig.operation_type``.
"""

from typing import Callable, Dict

from ...models.operations import OperationConfig, OperationType
from .base import OperationResult
from .beach_club import run_beach_club_engine
from .drivers import DAYS_PER_MONTH, apply_ramp_up, normalize_seasonality, ramp_up_factor, seasonality_curve
from .hotel import run_hotel_engine
from .racquet import run_racquet_engine
from .restaurant import run_restaurant_engine
from .retail import run_flex_engine, run_retail_engine
from .senior_living import run_senior_living_engine
from .sponsor import apply_sponsor_view, sponsor_monthly
from .villas import run_villas_engine
from .wellness import run_wellness_engine

OPERATION_ENGINES: Dict[OperationType, Callable[..., OperationResult]] = {
    OperationType.HOTEL: run_hotel_engine,
    OperationType.VILLAS: run_villas_engine,
    OperationType.RESTAURANT: run_restaurant_engine,
    OperationType.BEACH_CLUB: run_beach_club_engine,
    OperationType.RACQUET: run_racquet_engine,
    OperationType.RETAIL: run_retail_engine,
    OperationType.FLEX: run_flex_engine,
    OperationType.WELLNESS: run_wellness_engine,
    OperationType.SENIOR_LIVING: run_senior_living_engine,
}


def run_operation(config: OperationConfig) -> OperationResult:
    """Run the engine registered for ``config.operation_type``."""
    engine = OPERATION_ENGINES.get(config.operation_type)
    if engine is None:
        raise ValueError(f"No engine registered for operation type {config.operation_type!r}")
    return engine(config)


__all__ = [
    "DAYS_PER_MONTH",
    "OPERATION_ENGINES",
    "OperationResult",
    "apply_ramp_up",
    "apply_sponsor_view",
    "normalize_seasonality",
    "ramp_up_factor",
    "run_operation",
    "seasonality_curve",
    "sponsor_monthly",
]
