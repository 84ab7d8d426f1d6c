"""Monthly driver adjustments shared by the operation engines.

Utilization for a month is the base curve value, multiplied by the
normalized seasonality factor and the ramp-up factor, then clamped.
"""

import math
from typing import Optional, Sequence, Tuple

from ...models.operations import MONTHS_PER_YEAR, OperationConfig, RampUpConfig, RampUpCurve

DAYS_PER_MONTH = 30
SEASONALITY_TOLERANCE = 0.001  # Curves this close to mean 1.0 are used as-is

FLAT_SEASONALITY: Tuple[float, ...] = (1.0,) * MONTHS_PER_YEAR


def normalize_seasonality(curve: Sequence[float]) -> Tuple[float, ...]:
    """Scale a 12-month seasonality curve so its mean is 1.0.

    Args:
        curve: Twelve monthly multipliers.

    Returns:
        The normalized curve.

    Example:
        >>> normalize_seasonality([2.0] * 12)
        (1.0, 1.0, ...)
    """
    if len(curve) != MONTHS_PER_YEAR:
        raise ValueError(f"Seasonality curve must have exactly 12 values, got {len(curve)}")

    average = sum(curve) / MONTHS_PER_YEAR
    if abs(average - 1.0) < SEASONALITY_TOLERANCE:
        return tuple(curve)
    if average == 0:
        raise ValueError("Seasonality curve must not average to zero")
    return tuple(value / average for value in curve)


def seasonality_curve(curve: Optional[Sequence[float]]) -> Tuple[float, ...]:
    """The normalized curve, or flat when none is configured."""
    if not curve:
        return FLAT_SEASONALITY
    return normalize_seasonality(curve)


def ramp_up_factor(month: int, ramp: Optional[RampUpConfig]) -> float:
    """Share of full capacity reached at absolute ``month``, in [0, 1]."""
    if ramp is None:
        return 1.0

    elapsed = month - ramp.start_month
    if elapsed < 0:
        return 0.0
    if elapsed >= ramp.ramp_up_months:
        return 1.0

    progress = elapsed / ramp.ramp_up_months
    if ramp.curve == RampUpCurve.S_CURVE:
        factor = 0.5 * (1 + math.sin(math.pi * (progress - 0.5)))
    elif ramp.curve == RampUpCurve.EXPONENTIAL:
        factor = 1 - math.exp(-progress)
    elif ramp.curve == RampUpCurve.CUSTOM and ramp.custom_factors and len(ramp.custom_factors) > elapsed:
        factor = ramp.custom_factors[elapsed]
    else:
        factor = progress

    return max(0.0, min(1.0, factor))


def apply_ramp_up(value: float, month: int, ramp: Optional[RampUpConfig]) -> float:
    """Scale ``value`` by the ramp-up factor for ``month``."""
    return value * ramp_up_factor(month, ramp)


def monthly_utilization(config: OperationConfig, month_index: int, month_number: int,
                        seasonality: Sequence[float]) -> float:
    """Utilization for one month after seasonality, ramp-up and clamping.

    Bounded curves (occupancy, utilization) clamp to [0, 1]; restaurant
    turnover is only floored at 0.
    """
    value = config.utilization_curve[month_index] * seasonality[month_index]

    ramp = config.ramp_up_config
    if ramp is not None and ramp.apply_to_occupancy:
        value = apply_ramp_up(value, month_number, ramp)

    if config.curve_is_bounded:
        return max(0.0, min(1.0, value))
    return max(0.0, value)


def revenue_ramp_factor(config: OperationConfig, month_number: int) -> float:
    """Factor applied to every revenue line when ramp-up targets revenue."""
    ramp = config.ramp_up_config
    if ramp is None or not ramp.apply_to_revenue:
        return 1.0
    return ramp_up_factor(month_number, ramp)
