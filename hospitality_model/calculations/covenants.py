"""Monthly covenant monitoring.

Each covenant is tested against every month in order. A failing month
increments that covenant's consecutive-breach counter; a passing month
resets it. Breaches inside the grace period are warnings, later ones are
critical.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..models.capital import Covenant, CovenantType

SEVERITY_WARNING = "warning"
SEVERITY_CRITICAL = "critical"


@dataclass
class MonthlyCashFlow:
    """Owner cash after debt service for one month."""

    year_index: int
    month_index: int
    month_number: int
    noi: float  # Before maintenance capex
    debt_service: float
    maintenance_capex: float
    cash_flow: float
    cash_position: float  # Cumulative, starting from zero


@dataclass
class MonthlyDebtKpi:
    year_index: int
    month_index: int
    month_number: int
    dscr: Optional[float]
    ltv: Optional[float]


@dataclass
class CovenantStatus:
    covenant_id: str
    covenant_type: CovenantType
    year_index: int
    month_index: int
    month_number: int
    threshold: float
    actual_value: Optional[float]
    passed: bool
    consecutive_breaches: int = 0
    severity: Optional[str] = None
    covenant_name: str = ""


@dataclass
class BreachEvent:
    covenant_id: str
    covenant_type: CovenantType
    year_index: int
    month_index: int
    month_number: int
    actual_value: float
    threshold: float
    consecutive_breaches: int
    severity: str
    covenant_name: str = ""


def _test(covenant: Covenant, flow: MonthlyCashFlow, kpi: Optional[MonthlyDebtKpi]):
    """Return (actual value, passed). Undefined ratios are not tested."""
    if covenant.covenant_type == CovenantType.MIN_DSCR:
        value = kpi.dscr if kpi else None
        return value, value is None or value >= covenant.threshold
    if covenant.covenant_type == CovenantType.MAX_LTV:
        value = kpi.ltv if kpi else None
        return value, value is None or value <= covenant.threshold
    value = flow.cash_position
    return value, value >= covenant.threshold


def evaluate_covenants(
    flows: Sequence[MonthlyCashFlow],
    debt_kpis: Sequence[MonthlyDebtKpi],
    covenants: Sequence[Covenant],
) -> List[CovenantStatus]:
    """Pass/fail status for every covenant and every month.

    Args:
        flows: Monthly cash flows in month order.
        debt_kpis: Monthly DSCR and LTV, matched to flows by month number.
        covenants: Covenants to test.

    Returns:
        One status per covenant per month, covenant-major.
    """
    kpis_by_month = {k.month_number: k for k in debt_kpis}
    statuses = []
    for covenant in covenants:
        consecutive = 0
        for flow in flows:
            value, passed = _test(covenant, flow, kpis_by_month.get(flow.month_number))
            severity = None
            if passed:
                consecutive = 0
            else:
                consecutive += 1
                severity = SEVERITY_WARNING if consecutive <= covenant.grace_period else SEVERITY_CRITICAL
            statuses.append(CovenantStatus(
                covenant_id=covenant.id,
                covenant_type=covenant.covenant_type,
                year_index=flow.year_index,
                month_index=flow.month_index,
                month_number=flow.month_number,
                threshold=covenant.threshold,
                actual_value=value,
                passed=passed,
                consecutive_breaches=consecutive,
                severity=severity,
                covenant_name=covenant.name,
            ))
    return statuses


def check_covenants(
    flows: Sequence[MonthlyCashFlow],
    debt_kpis: Sequence[MonthlyDebtKpi],
    covenants: Sequence[Covenant],
) -> List[BreachEvent]:
    """Breach events only, in covenant then month order."""
    return [
        BreachEvent(
            covenant_id=s.covenant_id,
            covenant_type=s.covenant_type,
            year_index=s.year_index,
            month_index=s.month_index,
            month_number=s.month_number,
            actual_value=s.actual_value,
            threshold=s.threshold,
            consecutive_breaches=s.consecutive_breaches,
            severity=s.severity,
            covenant_name=s.covenant_name,
        )
        for s in evaluate_covenants(flows, debt_kpis, covenants)
        if not s.passed
    ]
