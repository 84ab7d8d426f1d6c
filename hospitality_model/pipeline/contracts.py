"""Contract checks between pipeline stages.

Each check raises ``ContractViolationError`` listing every problem found;
short or gapped series are never padded.
"""

from typing import List, Sequence

from ..calculations.capital import CapitalEngineResult, DebtScheduleEntry
from ..calculations.project import ProjectEngineResult
from ..calculations.scenario import ScenarioEngineOutput
from ..errors import ContractViolationError, ValidationIssue
from ..models.operations import MONTHS_PER_YEAR
from ..models.pnl import ConsolidatedAnnualPnl

BALANCE_TOLERANCE = 1e-6


def _year_index_issues(path: str, year_indexes: Sequence[int], expected_years: int) -> List[ValidationIssue]:
    if list(year_indexes) == list(range(expected_years)):
        return []
    seen = set(year_indexes)
    issues = [
        ValidationIssue(path, f"missing year_index {i}", "missing_period")
        for i in range(expected_years)
        if i not in seen
    ]
    if len(seen) != len(year_indexes):
        issues.append(ValidationIssue(path, "duplicate year_index values", "duplicate_period"))
    if not issues:
        issues.append(ValidationIssue(path, "year_index values are out of order", "period_order"))
    return issues


def check_scenario_to_project(horizon_years: int, output: ScenarioEngineOutput) -> None:
    issues = []
    annual = output.consolidated_annual_pnl
    if len(annual) != horizon_years:
        issues.append(ValidationIssue(
            "consolidated_annual_pnl",
            f"expected {horizon_years} annual periods, got {len(annual)}",
            "period_count",
        ))
    issues += _year_index_issues("consolidated_annual_pnl", [p.year_index for p in annual], horizon_years)

    expected_months = horizon_years * MONTHS_PER_YEAR
    monthly = output.consolidated_monthly_pnl
    if len(monthly) != expected_months:
        issues.append(ValidationIssue(
            "consolidated_monthly_pnl",
            f"expected {expected_months} monthly periods, got {len(monthly)}",
            "period_count",
        ))
    elif [m.month_number for m in monthly] != list(range(expected_months)):
        issues.append(ValidationIssue("consolidated_monthly_pnl", "month_number sequence has gaps", "missing_period"))

    if issues:
        raise ContractViolationError("scenario->project", issues)


def check_project_to_capital(consolidated: Sequence[ConsolidatedAnnualPnl], result: ProjectEngineResult) -> None:
    expected = len(consolidated)
    issues = []
    if len(result.unlevered_fcf) != expected:
        issues.append(ValidationIssue(
            "unlevered_fcf", f"expected {expected} years, got {len(result.unlevered_fcf)}", "period_count"
        ))
    issues += _year_index_issues("unlevered_fcf", [u.year_index for u in result.unlevered_fcf], expected)
    if len(result.dcf_valuation.cash_flows) != expected + 1:
        issues.append(ValidationIssue(
            "dcf_valuation.cash_flows",
            f"expected {expected + 1} entries, got {len(result.dcf_valuation.cash_flows)}",
            "period_count",
        ))
    if issues:
        raise ContractViolationError("project->capital", issues)


def _balance_issues(path: str, entries: Sequence[DebtScheduleEntry]) -> List[ValidationIssue]:
    issues = []
    for t, entry in enumerate(entries):
        scale = max(1.0, abs(entry.beginning_balance))
        if abs(entry.beginning_balance - entry.principal - entry.ending_balance) > BALANCE_TOLERANCE * scale:
            issues.append(ValidationIssue(f"{path}[{t}]", "beginning - principal != ending", "balance_mismatch"))
        if t + 1 < len(entries) and entry.beginning_balance > 0:
            if abs(entry.ending_balance - entries[t + 1].beginning_balance) > BALANCE_TOLERANCE * scale:
                issues.append(ValidationIssue(
                    f"{path}[{t}]", "ending balance does not carry to next period", "balance_carry"
                ))
    return issues


def check_capital_to_waterfall(horizon_years: int, result: CapitalEngineResult) -> None:
    issues = []
    if len(result.levered_fcf) != horizon_years:
        issues.append(ValidationIssue(
            "levered_fcf", f"expected {horizon_years} years, got {len(result.levered_fcf)}", "period_count"
        ))
    issues += _year_index_issues("levered_fcf", [l.year_index for l in result.levered_fcf], horizon_years)
    if len(result.owner_levered_cash_flows) != horizon_years + 1:
        issues.append(ValidationIssue(
            "owner_levered_cash_flows",
            f"expected {horizon_years + 1} entries, got {len(result.owner_levered_cash_flows)}",
            "period_count",
        ))
    for schedule in result.tranche_schedules:
        issues += _balance_issues(f"tranche_schedules[{schedule.tranche_id}]", schedule.entries)
    if issues:
        raise ContractViolationError("capital->waterfall", issues)
