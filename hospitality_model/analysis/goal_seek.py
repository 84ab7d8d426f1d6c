"""Goal seek: find the input value that makes a KPI hit a target.

Bisection over one input variable. Each step sets the variable on a copy
of the base input, runs the full pipeline and compares the chosen KPI with
the target. The KPI is assumed monotone in the variable over the search
range; ``DECREASING_VARIABLES`` lists the inputs that push KPIs down as
they rise.

Typical usage:
    config = GoalSeekConfig(TargetKpi.NPV, 0.0, InputVariable.ADR)
    result = solve_for_target(model_input, config)
    print(f"Breakeven ADR: {result.value:.2f}")
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from ..errors import ConfigurationError, GoalSeekError, ValidationIssue
from ..models.model import FullModelInput
from ..models.operations import OperationType
from ..pipeline.orchestrator import run_full_model
from . import overrides

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 0.0001  # Relative to the target; absolute when the target is 0
DEFAULT_MAX_ITERATIONS = 50
MIN_BRACKET_WIDTH = 1e-10
RATE_MARGIN = 0.0001  # Keeps discount rate and terminal growth apart

RATED_TYPES = (OperationType.HOTEL, OperationType.VILLAS)


class TargetKpi(str, Enum):
    NPV = "npv"
    UNLEVERED_IRR = "unlevered_irr"
    LEVERED_IRR = "levered_irr"  # First partner
    EQUITY_MULTIPLE = "equity_multiple"
    MOIC = "moic"  # First partner


class InputVariable(str, Enum):
    ADR = "adr"
    OCCUPANCY = "occupancy"
    DISCOUNT_RATE = "discount_rate"
    INITIAL_INVESTMENT = "initial_investment"
    DEBT_AMOUNT = "debt_amount"
    INTEREST_RATE = "interest_rate"
    TERMINAL_GROWTH_RATE = "terminal_growth_rate"


DECREASING_VARIABLES = frozenset({
    InputVariable.DISCOUNT_RATE,
    InputVariable.INITIAL_INVESTMENT,
    InputVariable.INTEREST_RATE,
})

DEFAULT_BOUNDS = {
    InputVariable.ADR: (0.0, 5000.0),
    InputVariable.OCCUPANCY: (0.0, 1.0),
    InputVariable.DISCOUNT_RATE: (0.0, 0.5),
    InputVariable.INITIAL_INVESTMENT: (0.0, 100_000_000.0),
    InputVariable.DEBT_AMOUNT: (0.0, 100_000_000.0),
    InputVariable.INTEREST_RATE: (0.0, 0.2),
    InputVariable.TERMINAL_GROWTH_RATE: (0.0, 0.1),
}


@dataclass(frozen=True)
class GoalSeekConfig:
    """What to solve for.

    Attributes:
        target_kpi: KPI to match
        target_value: Value the KPI should reach
        input_variable: Input the solver moves
        min_value: Lower search bound; defaults per variable
        max_value: Upper search bound; defaults per variable
        tolerance: Relative tolerance on the KPI (absolute for a zero target)
        max_iterations: Bisection steps before giving up
        operation_id: Operation whose rate the ADR variable sets; defaults
            to the first hotel or villas
    """

    target_kpi: TargetKpi
    target_value: float
    input_variable: InputVariable
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    tolerance: float = DEFAULT_TOLERANCE
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    operation_id: Optional[str] = None


@dataclass(frozen=True)
class GoalSeekResult:
    value: float
    achieved_kpi: float
    iterations: int
    converged: bool = True


def _rated_operation_index(model_input: FullModelInput, operation_id: Optional[str]) -> int:
    for i, op in enumerate(model_input.scenario.operations):
        if operation_id is not None:
            if op.id == operation_id:
                if op.rate_field is None:
                    break
                return i
        elif op.operation_type in RATED_TYPES:
            return i
    raise ConfigurationError([ValidationIssue(
        "operation_id",
        f"no hotel or villas operation{f' with id {operation_id!r}' if operation_id else ''} to set ADR on",
        "not_found",
    )])


def _first_tranche(model_input: FullModelInput, **changes) -> FullModelInput:
    tranches = model_input.capital_config.debt_tranches
    if not tranches:
        raise ConfigurationError([ValidationIssue(
            "capital_config.debt_tranches", "a debt tranche is required", "required"
        )])
    return overrides.with_capital(model_input, debt_tranches=(replace(tranches[0], **changes),) + tranches[1:])


def set_input(
    model_input: FullModelInput,
    variable: InputVariable,
    value: float,
    operation_id: Optional[str] = None,
) -> FullModelInput:
    """Return a copy of ``model_input`` with one variable set to ``value``.

    ADR sets one operation's nightly rate; occupancy sets a flat curve on
    every occupancy-driven operation; debt amount and interest rate change
    the first tranche.
    """
    variable = InputVariable(variable)
    if variable == InputVariable.ADR:
        operations = list(model_input.scenario.operations)
        i = _rated_operation_index(model_input, operation_id)
        operations[i] = replace(operations[i], **{operations[i].rate_field: value})
        return overrides.with_operations(model_input, operations)
    if variable == InputVariable.OCCUPANCY:
        return overrides.with_operations(model_input, (
            replace(op, occupancy_by_month=(value,) * 12) if op.curve_field == "occupancy_by_month" else op
            for op in model_input.scenario.operations
        ))
    if variable == InputVariable.DISCOUNT_RATE:
        return overrides.set_discount_rate(model_input, value)
    if variable == InputVariable.TERMINAL_GROWTH_RATE:
        return overrides.set_terminal_growth(model_input, value)
    if variable == InputVariable.INITIAL_INVESTMENT:
        return overrides.set_investment(model_input, value)
    if variable == InputVariable.DEBT_AMOUNT:
        return _first_tranche(model_input, initial_principal=value)
    if variable == InputVariable.INTEREST_RATE:
        return _first_tranche(model_input, interest_rate=value)
    raise ValueError(f"Unknown input variable: {variable}")


def _bounds(base: FullModelInput, config: GoalSeekConfig) -> Tuple[float, float]:
    """Search range, with defaults kept inside what validation accepts."""
    low, high = DEFAULT_BOUNDS[config.input_variable]
    project = base.project_config
    capital = base.capital_config
    if config.input_variable == InputVariable.DISCOUNT_RATE:
        low = max(low, project.terminal_growth_rate + RATE_MARGIN)
    elif config.input_variable == InputVariable.TERMINAL_GROWTH_RATE:
        high = min(high, project.discount_rate - RATE_MARGIN)
    elif config.input_variable == InputVariable.DEBT_AMOUNT:
        others = sum((t.initial_principal for t in capital.debt_tranches[1:]), 0.0)
        high = min(high, capital.initial_investment - others)
    elif config.input_variable == InputVariable.INITIAL_INVESTMENT:
        low = max(low, capital.total_debt)

    if config.min_value is not None:
        low = config.min_value
    if config.max_value is not None:
        high = config.max_value
    if low >= high:
        raise ConfigurationError([ValidationIssue(
            "min_value", f"must be below max_value, got [{low}, {high}]", "invalid_range"
        )])
    return low, high


def _converged(actual: float, target: float, tolerance: float) -> bool:
    if target == 0:
        return abs(actual) <= tolerance
    return abs(actual - target) <= tolerance * abs(target)


def solve_for_target(base: FullModelInput, config: GoalSeekConfig) -> GoalSeekResult:
    """Solve for the input value that brings ``config.target_kpi`` to its target.

    Args:
        base: Input every trial is derived from.
        config: Target, variable, bounds and tolerance.

    Returns:
        GoalSeekResult with the solved value and the KPI it produces.

    Raises:
        ConfigurationError: If the bounds are empty or the variable cannot
            be set on this input.
        GoalSeekError: If the KPI is undefined at a trial value or the
            target is not reached within ``max_iterations``.
    """
    low, high = _bounds(base, config)
    decreasing = config.input_variable in DECREASING_VARIABLES
    logger.info(
        "Goal seek: %s -> %s = %s over [%s, %s]",
        config.input_variable.value, config.target_kpi.value, config.target_value, low, high,
    )

    mid = actual = None
    for iteration in range(1, config.max_iterations + 1):
        mid = (low + high) / 2
        trial = set_input(base, config.input_variable, mid, config.operation_id)
        actual = run_full_model(trial).kpis().get(config.target_kpi.value)
        if actual is None:
            raise GoalSeekError(
                f"{config.target_kpi.value} is undefined at {config.input_variable.value}={mid}",
                last_value=mid,
            )
        logger.debug("Goal seek step %d: %s=%s gives %s", iteration, config.input_variable.value, mid, actual)

        if _converged(actual, config.target_value, config.tolerance):
            return GoalSeekResult(value=mid, achieved_kpi=actual, iterations=iteration)

        if (actual < config.target_value) != decreasing:
            low = mid
        else:
            high = mid
        if high - low < MIN_BRACKET_WIDTH:
            logger.warning("Goal seek bracket collapsed at %s without meeting tolerance", mid)
            return GoalSeekResult(value=mid, achieved_kpi=actual, iterations=iteration, converged=False)

    raise GoalSeekError(
        f"Goal seek did not reach {config.target_kpi.value}={config.target_value} "
        f"in {config.max_iterations} iterations",
        last_value=mid,
        last_kpi=actual,
    )
