"""One- and two-variable sensitivity grids over the full model.

Each grid cell derives a new ``FullModelInput`` from the base through one of
the builders in ``overrides`` and re-runs the whole pipeline.

Typical usage:
    config = SensitivityConfig(
        x=SensitivityRange(SensitivityVariable.OCCUPANCY, 0.8, 1.2, steps=5),
        y=SensitivityRange(SensitivityVariable.DISCOUNT_RATE, 0.08, 0.12, steps=3),
    )
    result = run_sensitivity(model_input, config)
    npv_grid = result.kpi_matrix("npv")
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

import numpy as np

from ..errors import ConfigurationError, GridSizeError, ModelError, ValidationIssue
from ..models.model import FullModelInput
from ..pipeline.orchestrator import run_full_model
from . import overrides

logger = logging.getLogger(__name__)

MAX_SENSITIVITY_STEPS = 10

SENSITIVITY_KPIS = ("npv", "unlevered_irr", "levered_irr", "moic", "equity_multiple", "wacc")


class SensitivityVariable(str, Enum):
    OCCUPANCY = "occupancy"
    ADR = "adr"
    DISCOUNT_RATE = "discount_rate"
    EXIT_CAP = "exit_cap"  # Accepted but has no effect on the model
    INITIAL_INVESTMENT = "initial_investment"
    DEBT_AMOUNT = "debt_amount"
    INTEREST_RATE = "interest_rate"
    TERMINAL_GROWTH_RATE = "terminal_growth_rate"


# Multipliers applied to the base value; every other variable replaces it
MULTIPLICATIVE_VARIABLES = frozenset({
    SensitivityVariable.OCCUPANCY,
    SensitivityVariable.ADR,
    SensitivityVariable.DEBT_AMOUNT,
    SensitivityVariable.INTEREST_RATE,
})

_APPLIERS: Dict[SensitivityVariable, Callable[[FullModelInput, float], FullModelInput]] = {
    SensitivityVariable.OCCUPANCY: overrides.scale_occupancy,
    SensitivityVariable.ADR: overrides.scale_adr,
    SensitivityVariable.DISCOUNT_RATE: overrides.set_discount_rate,
    SensitivityVariable.EXIT_CAP: lambda model_input, value: model_input,
    SensitivityVariable.INITIAL_INVESTMENT: overrides.set_investment,
    SensitivityVariable.DEBT_AMOUNT: overrides.scale_debt,
    SensitivityVariable.INTEREST_RATE: overrides.scale_interest,
    SensitivityVariable.TERMINAL_GROWTH_RATE: overrides.set_terminal_growth,
}


def apply_variable(model_input: FullModelInput, variable: SensitivityVariable, value: float) -> FullModelInput:
    """Return a copy of ``model_input`` with one sensitivity variable applied."""
    return _APPLIERS[SensitivityVariable(variable)](model_input, value)


@dataclass(frozen=True)
class SensitivityRange:
    """Evenly spaced values from ``min_value`` to ``max_value`` inclusive.

    For multiplicative variables the values are factors (1.0 = base case);
    otherwise they replace the base value outright.
    """

    variable: SensitivityVariable
    min_value: float
    max_value: float
    steps: int = 5

    def values(self) -> List[float]:
        if self.steps <= 1:
            return [self.min_value]
        return [float(v) for v in np.linspace(self.min_value, self.max_value, self.steps)]


@dataclass(frozen=True)
class SensitivityConfig:
    x: SensitivityRange
    y: Optional[SensitivityRange] = None


@dataclass
class SensitivityRun:
    """KPIs for one grid cell. KPIs are None where the model failed or is undefined."""

    x_value: float
    y_value: Optional[float]
    kpis: Dict[str, Optional[float]]
    error: Optional[str] = None


@dataclass
class SensitivityResult:
    config: SensitivityConfig
    base_kpis: Dict[str, Optional[float]]
    runs: List[SensitivityRun] = field(default_factory=list)
    # Two-variable runs only, indexed [x][y]
    matrix: Optional[List[List[SensitivityRun]]] = None

    @property
    def x_values(self) -> List[float]:
        return self.config.x.values()

    @property
    def y_values(self) -> List[float]:
        return self.config.y.values() if self.config.y is not None else []

    def kpi_series(self, kpi: str) -> List[Optional[float]]:
        return [run.kpis.get(kpi) for run in self.runs]

    def kpi_matrix(self, kpi: str) -> List[List[Optional[float]]]:
        """Grid of one KPI with rows for x values and columns for y values."""
        if self.matrix is None:
            raise ValueError("kpi_matrix needs a two-variable sensitivity result")
        return [[run.kpis.get(kpi) for run in row] for row in self.matrix]


def _check_grid(config: SensitivityConfig) -> None:
    axes = [("x", config.x)] + ([("y", config.y)] if config.y is not None else [])
    issues = [
        ValidationIssue(f"{axis}.steps", f"must be at least 1, got {grid_range.steps}", "out_of_range")
        for axis, grid_range in axes
        if grid_range.steps < 1
    ]
    if issues:
        raise ConfigurationError(issues)
    steps_x = config.x.steps
    steps_y = config.y.steps if config.y is not None else 1
    if steps_x > MAX_SENSITIVITY_STEPS or steps_y > MAX_SENSITIVITY_STEPS:
        raise GridSizeError(steps_x, steps_y, MAX_SENSITIVITY_STEPS)


def _select_kpis(model_input: FullModelInput) -> Dict[str, Optional[float]]:
    kpis = run_full_model(model_input).kpis()
    return {name: kpis.get(name) for name in SENSITIVITY_KPIS}


def _run_cell(model_input: FullModelInput, x_value: float, y_value: Optional[float]) -> SensitivityRun:
    try:
        kpis = _select_kpis(model_input)
    except ModelError as e:
        logger.warning("Sensitivity run at x=%s y=%s failed: %s", x_value, y_value, e)
        return SensitivityRun(x_value, y_value, {name: None for name in SENSITIVITY_KPIS}, error=str(e))
    return SensitivityRun(x_value, y_value, kpis)


def run_sensitivity(
    base: FullModelInput,
    config: SensitivityConfig,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> SensitivityResult:
    """Run the model over a one- or two-variable grid.

    Args:
        base: Input every grid cell is derived from.
        config: Variables and ranges. Between 1 and ``MAX_SENSITIVITY_STEPS``
            steps per axis.
        progress_callback: Optional callback(completed, total).

    Returns:
        SensitivityResult with one run per cell, plus the [x][y] matrix for
        two-variable grids.

    Raises:
        GridSizeError: If either axis has more than ``MAX_SENSITIVITY_STEPS``
            steps. Raised before any model run.
        ConfigurationError: If an axis has fewer than 1 step or the base
            input itself is invalid.
    """
    _check_grid(config)

    x_values = config.x.values()
    y_values = config.y.values() if config.y is not None else [None]
    total = len(x_values) * len(y_values)
    logger.info(
        "Running sensitivity on %s%s: %d runs",
        config.x.variable.value,
        f" x {config.y.variable.value}" if config.y is not None else "",
        total,
    )

    result = SensitivityResult(config=config, base_kpis=_select_kpis(base))
    rows: List[List[SensitivityRun]] = []
    completed = 0
    for x_value in x_values:
        x_input = apply_variable(base, config.x.variable, x_value)
        row = []
        for y_value in y_values:
            cell_input = x_input if y_value is None else apply_variable(x_input, config.y.variable, y_value)
            run = _run_cell(cell_input, x_value, y_value)
            result.runs.append(run)
            row.append(run)
            completed += 1
            if progress_callback is not None:
                progress_callback(completed, total)
        rows.append(row)

    if config.y is not None:
        result.matrix = rows
    return result
