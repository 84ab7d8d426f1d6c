"""Analysis engines built on the full model pipeline."""

from ..calculations.covenants import BreachEvent, CovenantStatus, check_covenants, evaluate_covenants
from .overrides import (
    scale_utilization,
    scale_rate,
    scale_occupancy,
    scale_adr,
    scale_debt,
    scale_interest,
    set_discount_rate,
    set_terminal_growth,
    set_investment,
    with_operations,
    with_project,
    with_capital,
)
from .sensitivity import (
    MAX_SENSITIVITY_STEPS,
    SensitivityVariable,
    SensitivityRange,
    SensitivityConfig,
    SensitivityRun,
    SensitivityResult,
    apply_variable,
    run_sensitivity,
)
from .variance import BridgeStep, calculate_variance_bridge
from .simulation import (
    DistributionType,
    SimulationConfig,
    KpiStatistics,
    SimulationIteration,
    SimulationResult,
    RiskMetrics,
    calculate_risk_metrics,
    run_simulation,
)
from .goal_seek import (
    TargetKpi,
    InputVariable,
    GoalSeekConfig,
    GoalSeekResult,
    set_input,
    solve_for_target,
)
from .portfolio import PortfolioMetrics, aggregate_by_operation_type
from .comparison import (
    ScenarioTriadResult,
    ScenarioComparison,
    ScenarioSummary,
    run_scenario_triad,
    compare_scenarios,
    build_scenario_summary,
)

__all__ = [
    "BreachEvent",
    "CovenantStatus",
    "check_covenants",
    "evaluate_covenants",
    "scale_utilization",
    "scale_rate",
    "scale_occupancy",
    "scale_adr",
    "scale_debt",
    "scale_interest",
    "set_discount_rate",
    "set_terminal_growth",
    "set_investment",
    "with_operations",
    "with_project",
    "with_capital",
    "MAX_SENSITIVITY_STEPS",
    "SensitivityVariable",
    "SensitivityRange",
    "SensitivityConfig",
    "SensitivityRun",
    "SensitivityResult",
    "apply_variable",
    "run_sensitivity",
    "BridgeStep",
    "calculate_variance_bridge",
    "DistributionType",
    "SimulationConfig",
    "KpiStatistics",
    "SimulationIteration",
    "SimulationResult",
    "RiskMetrics",
    "calculate_risk_metrics",
    "run_simulation",
    "TargetKpi",
    "InputVariable",
    "GoalSeekConfig",
    "GoalSeekResult",
    "set_input",
    "solve_for_target",
    "PortfolioMetrics",
    "aggregate_by_operation_type",
    "ScenarioTriadResult",
    "ScenarioComparison",
    "ScenarioSummary",
    "run_scenario_triad",
    "compare_scenarios",
    "build_scenario_summary",
]
