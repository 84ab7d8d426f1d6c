"""Exception types raised by the modeling pipeline."""

from dataclasses import dataclass
from typing import List, Optional, Sequence


@dataclass(frozen=True)
class ValidationIssue:
    """A single problem found while validating an input or a stage output."""

    path: str  # Dot path to the offending field, e.g. "operations[0].payroll_pct"
    message: str
    code: str = "invalid_value"

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


def _summarize(issues: Sequence[ValidationIssue], limit: int = 3) -> str:
    head = "; ".join(str(issue) for issue in issues[:limit])
    if len(issues) > limit:
        head += f" (+{len(issues) - limit} more)"
    return head


class ModelError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(ModelError):
    """Invalid input configuration, raised before any engine runs."""

    def __init__(self, issues: Sequence[ValidationIssue], message: Optional[str] = None):
        self.issues: List[ValidationIssue] = list(issues)
        super().__init__(message or f"Invalid configuration: {_summarize(self.issues)}")


class GridSizeError(ConfigurationError):
    """Sensitivity grid larger than the allowed maximum."""

    def __init__(self, steps_x: int, steps_y: int, max_steps: int):
        self.steps_x = steps_x
        self.steps_y = steps_y
        self.max_steps = max_steps
        issue = ValidationIssue(
            path="range",
            message=f"grid {steps_x}x{steps_y} exceeds {max_steps}x{max_steps}",
            code="grid_too_large",
        )
        super().__init__(
            [issue],
            message=(
                f"Sensitivity analysis grid size exceeds maximum allowed "
                f"({max_steps}x{max_steps}). Requested: {steps_x}x{steps_y}"
            ),
        )


class ContractViolationError(ModelError):
    """A stage produced output that breaks the contract of the next stage."""

    def __init__(self, boundary: str, issues: Sequence[ValidationIssue]):
        self.boundary = boundary
        self.issues: List[ValidationIssue] = list(issues)
        super().__init__(f"Contract violation at {boundary}: {_summarize(self.issues)}")


class ScenarioEngineError(ModelError):
    """The scenario engine returned an error result."""

    def __init__(self, error):
        self.error = error  # EngineError
        super().__init__(f"{error.code}: {error.message}")


class GoalSeekError(ModelError):
    """The solver could not reach the target KPI."""

    def __init__(self, message: str, last_value: Optional[float] = None, last_kpi: Optional[float] = None):
        self.last_value = last_value
        self.last_kpi = last_kpi
        super().__init__(message)
