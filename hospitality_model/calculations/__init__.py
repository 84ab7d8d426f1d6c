"""Calculation engines for the hospitality financial model."""

from .financial import npv, irr, equity_multiple, payback_period
from .operations import OPERATION_ENGINES, OperationResult, run_operation, apply_sponsor_view
from .scenario import (
    SCENARIO_INVALID_CONFIG,
    SCENARIO_OPERATION_FAILURE,
    EngineError,
    EngineResult,
    ScenarioEngineOutput,
    run_scenario_engine,
)
from .development import LandPayment, drawdown_curve, construction_flows, land_payments
from .project import (
    UnleveredFcf,
    DcfValuation,
    ProjectKpis,
    WaccMetrics,
    BreakevenMetrics,
    ProjectEngineResult,
    run_project_engine,
    calculate_wacc,
    calculate_breakeven_occupancy,
)

# Debt schedules and levered cash flow
from .capital import (
    DebtScheduleEntry,
    MonthlyDebtScheduleEntry,
    TrancheSchedule,
    LeveredFcf,
    DebtKpi,
    CapitalEngineResult,
    run_capital_engine,
    annual_tranche_schedule,
    monthly_tranche_schedule,
)
from .covenants import (
    MonthlyCashFlow,
    MonthlyDebtKpi,
    CovenantStatus,
    BreachEvent,
    check_covenants,
    evaluate_covenants,
)
from .waterfall import (
    PartnerResult,
    WaterfallRow,
    ClawbackAdjustment,
    WaterfallResult,
    run_waterfall_engine,
)

__all__ = [
    "npv",
    "irr",
    "equity_multiple",
    "payback_period",
    "OPERATION_ENGINES",
    "OperationResult",
    "run_operation",
    "apply_sponsor_view",
    "SCENARIO_INVALID_CONFIG",
    "SCENARIO_OPERATION_FAILURE",
    "EngineError",
    "EngineResult",
    "ScenarioEngineOutput",
    "run_scenario_engine",
    "LandPayment",
    "drawdown_curve",
    "construction_flows",
    "land_payments",
    "UnleveredFcf",
    "DcfValuation",
    "ProjectKpis",
    "WaccMetrics",
    "BreakevenMetrics",
    "ProjectEngineResult",
    "run_project_engine",
    "calculate_wacc",
    "calculate_breakeven_occupancy",
    "DebtScheduleEntry",
    "MonthlyDebtScheduleEntry",
    "TrancheSchedule",
    "LeveredFcf",
    "DebtKpi",
    "CapitalEngineResult",
    "run_capital_engine",
    "annual_tranche_schedule",
    "monthly_tranche_schedule",
    "MonthlyCashFlow",
    "MonthlyDebtKpi",
    "CovenantStatus",
    "BreachEvent",
    "check_covenants",
    "evaluate_covenants",
    "PartnerResult",
    "WaterfallRow",
    "ClawbackAdjustment",
    "WaterfallResult",
    "run_waterfall_engine",
]
