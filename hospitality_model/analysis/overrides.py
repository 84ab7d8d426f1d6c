"""Builders that derive a new ``FullModelInput`` from a base plus one override.

All configs are frozen, so every builder returns new objects via
``dataclasses.replace`` and leaves its argument untouched.
"""

from dataclasses import replace
from typing import Iterable

from ..models.model import FullModelInput
from ..models.operations import OperationConfig


def scale_utilization(operation: OperationConfig, factor: float) -> OperationConfig:
    """Multiply an operation's monthly occupancy/utilization/turnover curve.

    Occupancy and utilization stay within [0, 1]; restaurant turnover is
    only floored at zero.
    """
    scaled = []
    for value in operation.utilization_curve:
        value = max(0.0, value * factor)
        if operation.curve_is_bounded:
            value = min(1.0, value)
        scaled.append(value)
    return replace(operation, **{operation.curve_field: tuple(scaled)})


def scale_rate(operation: OperationConfig, factor: float) -> OperationConfig:
    """Multiply the nightly/daily rate of room-based operations; others pass through."""
    if operation.rate_field is None:
        return operation
    return replace(operation, **{operation.rate_field: getattr(operation, operation.rate_field) * factor})


def with_operations(model_input: FullModelInput, operations: Iterable[OperationConfig]) -> FullModelInput:
    scenario = replace(model_input.scenario, operations=tuple(operations))
    return replace(model_input, scenario=scenario)


def with_project(model_input: FullModelInput, **changes) -> FullModelInput:
    return replace(model_input, project_config=replace(model_input.project_config, **changes))


def with_capital(model_input: FullModelInput, **changes) -> FullModelInput:
    return replace(model_input, capital_config=replace(model_input.capital_config, **changes))


def scale_occupancy(model_input: FullModelInput, factor: float) -> FullModelInput:
    return with_operations(model_input, (scale_utilization(op, factor) for op in model_input.scenario.operations))


def scale_adr(model_input: FullModelInput, factor: float) -> FullModelInput:
    return with_operations(model_input, (scale_rate(op, factor) for op in model_input.scenario.operations))


def scale_debt(model_input: FullModelInput, factor: float) -> FullModelInput:
    """Multiply every tranche's initial principal."""
    tranches = tuple(
        replace(t, initial_principal=t.initial_principal * factor)
        for t in model_input.capital_config.debt_tranches
    )
    return with_capital(model_input, debt_tranches=tranches)


def scale_interest(model_input: FullModelInput, factor: float) -> FullModelInput:
    """Multiply every tranche's interest rate, floored at zero."""
    tranches = tuple(
        replace(t, interest_rate=max(0.0, t.interest_rate * factor))
        for t in model_input.capital_config.debt_tranches
    )
    return with_capital(model_input, debt_tranches=tranches)


def set_discount_rate(model_input: FullModelInput, rate: float) -> FullModelInput:
    return with_project(model_input, discount_rate=rate)


def set_terminal_growth(model_input: FullModelInput, rate: float) -> FullModelInput:
    return with_project(model_input, terminal_growth_rate=rate)


def set_investment(model_input: FullModelInput, amount: float) -> FullModelInput:
    """Replace the initial investment in both the project and capital configs."""
    return with_capital(with_project(model_input, initial_investment=amount), initial_investment=amount)


def merge_operations(base: FullModelInput, target: FullModelInput) -> FullModelInput:
    """Take the target's operations, keeping everything else from ``base``."""
    return with_operations(base, target.scenario.operations)


def merge_capital(base: FullModelInput, target: FullModelInput) -> FullModelInput:
    return replace(base, capital_config=target.capital_config)


def merge_development(base: FullModelInput, target: FullModelInput) -> FullModelInput:
    """Take the target's project config, start year and horizon."""
    scenario = replace(
        base.scenario,
        start_year=target.scenario.start_year,
        horizon_years=target.scenario.horizon_years,
    )
    return replace(base, scenario=scenario, project_config=target.project_config)

