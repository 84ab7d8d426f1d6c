"""Scenario engine: run every operation and consolidate sponsor P&L.

Failures are returned as ``EngineResult`` errors rather than raised, so
batch analyses can skip a failing variant and keep going.
"""

import logging
from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

from ..errors import ValidationIssue
from ..models.operations import MONTHS_PER_YEAR
from ..models.pnl import ConsolidatedAnnualPnl, ConsolidatedMonthlyPnl, MonthlyPnl, sum_lines
from ..models.project import ProjectScenario
from ..models.validation import scenario_issues
from .operations import OperationResult, run_operation, sponsor_monthly

logger = logging.getLogger(__name__)

T = TypeVar("T")

SCENARIO_INVALID_CONFIG = "SCENARIO_INVALID_CONFIG"
SCENARIO_OPERATION_FAILURE = "SCENARIO_OPERATION_FAILURE"


@dataclass
class EngineError:
    """Why an engine could not produce a result."""

    code: str
    message: str
    issues: List[ValidationIssue] = field(default_factory=list)


@dataclass
class EngineResult(Generic[T]):
    """Either ``data`` (ok) or ``error``."""

    ok: bool
    data: Optional[T] = None
    error: Optional[EngineError] = None

    @classmethod
    def success(cls, data: T) -> "EngineResult[T]":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, code: str, message: str, issues: Optional[List[ValidationIssue]] = None) -> "EngineResult[T]":
        return cls(ok=False, error=EngineError(code=code, message=message, issues=list(issues or [])))


@dataclass
class ScenarioEngineOutput:
    """Per-operation results plus the consolidated sponsor P&L."""

    operations: List[OperationResult]
    consolidated_annual_pnl: List[ConsolidatedAnnualPnl]
    consolidated_monthly_pnl: List[ConsolidatedMonthlyPnl]
    sponsor_monthly_pnl: List[List[MonthlyPnl]] = field(default_factory=list)


def consolidate_monthly(sponsor_records: List[List[MonthlyPnl]], horizon_years: int) -> List[ConsolidatedMonthlyPnl]:
    """Sum sponsor monthly P&L across operations for every month of the horizon.

    Months beyond an operation's own horizon contribute nothing; months
    beyond the scenario horizon are dropped.
    """
    by_month = {}
    for records in sponsor_records:
        for record in records:
            by_month.setdefault(record.month_number, []).append(record)

    consolidated = []
    for month_number in range(horizon_years * MONTHS_PER_YEAR):
        year_index, month_index = divmod(month_number, MONTHS_PER_YEAR)
        consolidated.append(ConsolidatedMonthlyPnl(
            year_index=year_index,
            month_index=month_index,
            month_number=month_number,
            **sum_lines(by_month.get(month_number, [])),
        ))
    return consolidated


def consolidate_annual(monthly: List[ConsolidatedMonthlyPnl], horizon_years: int) -> List[ConsolidatedAnnualPnl]:
    """One record per year index, each the exact sum of its 12 consolidated months."""
    annual = []
    for year_index in range(horizon_years):
        months = [m for m in monthly if m.year_index == year_index]
        annual.append(ConsolidatedAnnualPnl(year_index=year_index, **sum_lines(months)))
    return annual


def run_scenario_engine(scenario: ProjectScenario) -> EngineResult[ScenarioEngineOutput]:
    """Run all operation engines and consolidate their sponsor P&L.

    Args:
        scenario: The operations and common horizon.

    Returns:
        ``EngineResult`` holding a ``ScenarioEngineOutput``, or an error with
        code ``SCENARIO_INVALID_CONFIG`` (validation issues) or
        ``SCENARIO_OPERATION_FAILURE`` (an engine raised).
    """
    issues = scenario_issues(scenario)
    if issues:
        return EngineResult.failure(
            SCENARIO_INVALID_CONFIG, "Scenario configuration failed validation", issues
        )

    operations = []
    sponsor_records = []
    for i, config in enumerate(scenario.operations):
        try:
            result = run_operation(config)
        except (ValueError, ArithmeticError) as exc:
            logger.warning("Operation %s failed: %s", config.id, exc)
            return EngineResult.failure(
                SCENARIO_OPERATION_FAILURE,
                f"Operation {config.name or config.id} failed to execute",
                [ValidationIssue(f"scenario.operations[{i}]", str(exc), "operation_failure")],
            )
        operations.append(result)
        sponsor_records.append(sponsor_monthly(result.monthly_pnl, config))

    monthly = consolidate_monthly(sponsor_records, scenario.horizon_years)
    annual = consolidate_annual(monthly, scenario.horizon_years)
    logger.debug("Consolidated %d operations over %d years", len(operations), scenario.horizon_years)

    return EngineResult.success(ScenarioEngineOutput(
        operations=operations,
        consolidated_annual_pnl=annual,
        consolidated_monthly_pnl=monthly,
        sponsor_monthly_pnl=sponsor_records,
    ))
