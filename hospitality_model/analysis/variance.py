"""NPV variance bridge between two scenarios.

Starting from the base, the target's operations, then its capital structure,
then its development/timing inputs are merged in one at a time. The NPV change
after each merge is attributed to that step.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Tuple, Union

from ..models.model import FullModelInput, NamedScenario
from ..pipeline.orchestrator import run_full_model
from .overrides import merge_capital, merge_development, merge_operations

logger = logging.getLogger(__name__)

RESIDUAL_TOLERANCE = 0.01

_BRIDGE_STEPS: Tuple[Tuple[str, Callable[[FullModelInput, FullModelInput], FullModelInput]], ...] = (
    ("Operational Impact", merge_operations),
    ("Capital Impact", merge_capital),
    ("Development Impact", merge_development),
)


@dataclass(frozen=True)
class BridgeStep:
    label: str
    value: float
    cumulative_value: float


def _model_input(scenario: Union[NamedScenario, FullModelInput]) -> FullModelInput:
    if isinstance(scenario, NamedScenario):
        return scenario.model_input
    return scenario


def calculate_variance_bridge(
    base: Union[NamedScenario, FullModelInput],
    target: Union[NamedScenario, FullModelInput],
) -> List[BridgeStep]:
    """Attribute the NPV difference between two scenarios.

    Args:
        base: Starting scenario.
        target: Scenario to bridge to.

    Returns:
        Operational, capital and development steps in that order, plus a
        ``Residual`` step when the merged input still misses the target NPV
        by more than ``RESIDUAL_TOLERANCE``. Each step carries the running
        NPV after it is applied.
    """
    base_input = _model_input(base)
    target_input = _model_input(target)

    previous_npv = run_full_model(base_input).project.project_kpis.npv
    working = base_input
    steps = []
    for label, merge in _BRIDGE_STEPS:
        working = merge(working, target_input)
        npv = run_full_model(working).project.project_kpis.npv
        steps.append(BridgeStep(label=label, value=npv - previous_npv, cumulative_value=npv))
        previous_npv = npv

    target_npv = run_full_model(target_input).project.project_kpis.npv
    residual = target_npv - previous_npv
    if abs(residual) > RESIDUAL_TOLERANCE:
        logger.info("Variance bridge residual of %.2f", residual)
        steps.append(BridgeStep(label="Residual", value=residual, cumulative_value=target_npv))
    return steps
