"""Land acquisition and construction drawdown schedules.

Months are relative to the project start and may be negative for
spending that happens before Year 0. Outflows are reported as positive
amounts; the project engine subtracts them from cash flow.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Sequence

from ..models.operations import MONTHS_PER_YEAR
from ..models.project import (
    ConstructionConfig,
    ConstructionCurve,
    InstallmentMethod,
    LandConfig,
)

logger = logging.getLogger(__name__)

FRONT_LOADED_STEEPNESS = 5.0
BUDGET_TOLERANCE = 0.01


@dataclass
class LandPayment:
    """A single land cash event. ``cash_flow`` is negative for payments."""

    month: int
    cash_flow: float
    description: str


def _s_curve_cdf(progress: float) -> float:
    x = max(0.0, min(1.0, progress))
    return 0.5 * (1 + math.sin(math.pi * (x - 0.5)))


def _front_loaded_cdf(progress: float) -> float:
    if progress <= 0:
        return 0.0
    if progress >= 1:
        return 1.0
    return (1 - math.exp(-FRONT_LOADED_STEEPNESS * progress)) / (1 - math.exp(-FRONT_LOADED_STEEPNESS))


def drawdown_curve(
    total_budget: float,
    months: int,
    curve: ConstructionCurve = ConstructionCurve.S_CURVE,
) -> List[float]:
    """Spread a construction budget over ``months``.

    Args:
        total_budget: Amount to spend, must be positive.
        months: Construction duration, must be positive.
        curve: Spending shape.

    Returns:
        Monthly spend. The last month absorbs any rounding so the series
        sums to ``total_budget``.

    Example:
        >>> drawdown_curve(1_200_000, 12, ConstructionCurve.LINEAR)[0]
        100000.0
    """
    if months <= 0:
        raise ValueError(f"Construction duration must be greater than 0 months, got {months}")
    if total_budget <= 0:
        raise ValueError(f"Total construction budget must be greater than 0, got {total_budget}")

    if curve == ConstructionCurve.LINEAR:
        return [total_budget / months] * months

    cdf = _front_loaded_cdf if curve in (ConstructionCurve.FRONT_LOADED, ConstructionCurve.BACK_LOADED) else _s_curve_cdf
    spend = [total_budget * (cdf((i + 1) / months) - cdf(i / months)) for i in range(months)]
    if curve == ConstructionCurve.BACK_LOADED:
        spend.reverse()

    difference = total_budget - sum(spend)
    spend[-1] += difference

    if abs(sum(spend) - total_budget) > BUDGET_TOLERANCE:
        logger.warning("Construction drawdown sums to %.2f, budget is %.2f", sum(spend), total_budget)
    return spend


def construction_flows(config: ConstructionConfig) -> Dict[int, float]:
    """Construction spend keyed by month relative to project start."""
    spend = drawdown_curve(config.total_budget, config.duration_months, config.curve_type)
    return {config.start_month + i: amount for i, amount in enumerate(spend)}


def land_payments(config: LandConfig) -> List[LandPayment]:
    """Down payment, installments and barter credit for one land parcel, by month."""
    payments = []
    if config.down_payment > 0:
        payments.append(LandPayment(
            config.down_payment_month, -config.down_payment, f"Down payment for {config.name}"
        ))

    remaining = config.total_cost - config.down_payment
    if remaining > 0:
        if config.installment_method == InstallmentMethod.CUSTOM or config.installments:
            for installment in config.installments:
                payments.append(LandPayment(
                    installment.month,
                    -installment.amount,
                    installment.description or f"Installment for {config.name}",
                ))
        else:
            count = max(1, -config.acquisition_month)
            amount = remaining / count
            for i in range(count):
                payments.append(LandPayment(
                    config.acquisition_month + i + 1,
                    -amount,
                    f"Equal installment {i + 1} of {count} for {config.name}",
                ))

    if config.barter_value > 0:
        month = config.barter_month if config.barter_month is not None else config.acquisition_month
        payments.append(LandPayment(month, config.barter_value * config.total_cost, f"Barter credit for {config.name}"))

    payments.sort(key=lambda p: p.month)
    return payments


def outflows_by_year(monthly_outflows: Dict[int, float], horizon_years: int) -> List[float]:
    """Bucket monthly outflows into operating years.

    Months before the project start fall into Year 0; months beyond the
    horizon are dropped.
    """
    by_year = [0.0] * horizon_years
    for month, amount in sorted(monthly_outflows.items()):
        year_index = 0 if month < 0 else month // MONTHS_PER_YEAR
        if year_index < horizon_years:
            by_year[year_index] += amount
    return by_year


def land_outflows_by_year(land: Sequence[LandConfig], horizon_years: int) -> List[float]:
    """Net land outflow per year (payments less barter credits)."""
    monthly: Dict[int, float] = {}
    for parcel in land:
        for payment in land_payments(parcel):
            monthly[payment.month] = monthly.get(payment.month, 0.0) - payment.cash_flow
    return outflows_by_year(monthly, horizon_years)


def construction_outflows_by_year(construction: ConstructionConfig, horizon_years: int) -> List[float]:
    return outflows_by_year(construction_flows(construction), horizon_years)
