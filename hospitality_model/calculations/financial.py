"""Time-value-of-money primitives shared by the project, capital and waterfall engines.

Index 0 of every cash-flow series is the undiscounted initial period.
Results that are numerically undefined (no sign change, zero denominator)
are returned as ``None``.
"""

import logging
from typing import Optional, Sequence

import numpy as np
import numpy_financial as npf

logger = logging.getLogger(__name__)

IRR_LOWER_BOUND = -0.99  # IRR cannot reach -100%
IRR_UPPER_BOUND = 10.0   # 1000%
IRR_TOLERANCE = 1e-6
IRR_MAX_ITERATIONS = 100
NEWTON_STEPS = 5


def npv(rate: float, cash_flows: Sequence[float]) -> float:
    """Net present value with cash flow 0 undiscounted.

    Example:
        >>> npv(0.10, [-1000, 500, 600])
        -49.58...
    """
    if len(cash_flows) == 0:
        return 0.0
    return float(npf.npv(rate, cash_flows))


def _npv_derivative(rate: float, flows: np.ndarray) -> float:
    periods = np.arange(len(flows))
    return float(np.sum(-periods * flows / (1.0 + rate) ** (periods + 1)))


def irr(
    cash_flows: Sequence[float],
    tolerance: float = IRR_TOLERANCE,
    max_iterations: int = IRR_MAX_ITERATIONS,
) -> Optional[float]:
    """Internal rate of return by bisection on [-0.99, 10], refined by Newton steps.

    Args:
        cash_flows: Periodic cash flows, index 0 first.
        tolerance: Convergence tolerance on the rate bracket.
        max_iterations: Bisection iteration cap.

    Returns:
        The rate, or None when the series is empty, all zero, never changes
        sign, or NPV does not change sign across the bracket.
    """
    if len(cash_flows) == 0:
        return None

    flows = np.asarray(cash_flows, dtype=float)
    if np.all(np.abs(flows) < tolerance):
        return None
    if np.all(flows >= 0) or np.all(flows <= 0):
        return None

    # NPV tolerance scales with the size of the flows
    scale = max(1.0, float(np.max(np.abs(flows))))

    low, high = IRR_LOWER_BOUND, IRR_UPPER_BOUND
    npv_low = npv(low, flows)
    npv_high = npv(high, flows)
    if np.sign(npv_low) == np.sign(npv_high):
        logger.warning("IRR bracket [%s, %s] has no sign change; returning None", low, high)
        return None

    mid = (low + high) / 2
    for _ in range(max_iterations):
        mid = (low + high) / 2
        npv_mid = npv(mid, flows)
        if abs(npv_mid) < tolerance * scale or (high - low) / 2 < tolerance * 1e-3:
            break
        if np.sign(npv_mid) == np.sign(npv_low):
            low, npv_low = mid, npv_mid
        else:
            high = mid

    rate = mid
    for _ in range(NEWTON_STEPS):
        slope = _npv_derivative(rate, flows)
        if slope == 0:
            break
        candidate = rate - npv(rate, flows) / slope
        if not (IRR_LOWER_BOUND <= candidate <= IRR_UPPER_BOUND):
            break
        if abs(npv(candidate, flows)) > abs(npv(rate, flows)):
            break
        rate = candidate

    if abs(npv(rate, flows)) < tolerance * 10 * scale:
        return float(rate)
    return None


def equity_multiple(cash_flows: Sequence[float]) -> float:
    """Sum of inflows over the absolute sum of outflows.

    Returns ``inf`` for inflows with no outflows and 0.0 for an empty or
    all-zero series.
    """
    positive = sum(cf for cf in cash_flows if cf > 0)
    negative = sum(-cf for cf in cash_flows if cf < 0)
    if negative == 0:
        return float("inf") if positive > 0 else 0.0
    return positive / negative


def payback_period(cash_flows: Sequence[float]) -> Optional[float]:
    """Years until cumulative cash flow turns non-negative, interpolated.

    Example:
        >>> payback_period([-1000, 500, 600, 700])
        1.833...
    """
    cumulative = 0.0
    for i, cf in enumerate(cash_flows):
        previous = cumulative
        cumulative += cf
        if i == 0 and cumulative >= 0:
            return 0.0
        if cumulative >= 0 and previous < 0:
            fraction = abs(previous) / cf
            return i - 1 + fraction
    return None
