"""Capital engine: debt schedules, levered cash flow and debt KPIs.

Each tranche gets an annual and a monthly amortization table. Principal is
the amount repaid in the period, so every entry satisfies
``beginning_balance - principal == ending_balance``. Interest is paid in
cash and never capitalized. Entries before a tranche's start year are zero.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy_financial as npf

from ..models.capital import AmortizationType, CapitalStructureConfig, DebtTrancheConfig, TrancheType
from ..models.operations import MONTHS_PER_YEAR
from ..models.pnl import ConsolidatedAnnualPnl, ConsolidatedMonthlyPnl
from .covenants import (
    BreachEvent,
    CovenantStatus,
    MonthlyCashFlow,
    MonthlyDebtKpi,
    check_covenants,
    evaluate_covenants,
)
from .project import UnleveredFcf

logger = logging.getLogger(__name__)

PRINCIPAL_TOLERANCE = 0.01


@dataclass
class DebtScheduleEntry:
    year_index: int
    beginning_balance: float = 0.0
    interest: float = 0.0
    principal: float = 0.0
    ending_balance: float = 0.0
    exit_fee: float = 0.0

    @property
    def debt_service(self) -> float:
        return self.interest + self.principal + self.exit_fee


@dataclass
class MonthlyDebtScheduleEntry:
    year_index: int
    month_index: int
    month_number: int
    beginning_balance: float = 0.0
    interest: float = 0.0
    principal: float = 0.0
    ending_balance: float = 0.0
    exit_fee: float = 0.0

    @property
    def debt_service(self) -> float:
        return self.interest + self.principal + self.exit_fee


@dataclass
class TrancheSchedule:
    """Annual and monthly schedules for one tranche."""

    tranche_id: str
    label: str
    tranche_type: TrancheType
    is_senior: bool
    entries: List[DebtScheduleEntry]
    monthly_entries: List[MonthlyDebtScheduleEntry] = field(default_factory=list)
    origination_fee: float = 0.0
    net_proceeds: float = 0.0


@dataclass
class LeveredFcf:
    year_index: int
    unlevered_fcf: float
    interest: float
    principal: float
    exit_fees: float
    debt_service: float
    levered_fcf: float


@dataclass
class DebtKpi:
    """Annual coverage and leverage. Ratios are None when undefined."""

    year_index: int
    dscr: Optional[float]
    senior_dscr: Optional[float]
    ltv: Optional[float]
    debt_service: float = 0.0
    senior_debt_service: float = 0.0


@dataclass
class CapitalEngineResult:
    debt_schedule: List[DebtScheduleEntry]
    tranche_schedules: List[TrancheSchedule]
    levered_fcf: List[LeveredFcf]
    owner_levered_cash_flows: List[float]  # horizon + 1 entries
    debt_kpis: List[DebtKpi]
    monthly_debt_schedule: List[MonthlyDebtScheduleEntry] = field(default_factory=list)
    monthly_cash_flow: List[MonthlyCashFlow] = field(default_factory=list)
    monthly_debt_kpis: List[MonthlyDebtKpi] = field(default_factory=list)
    covenant_statuses: List[CovenantStatus] = field(default_factory=list)
    covenant_breaches: List[BreachEvent] = field(default_factory=list)

    @property
    def total_debt_service(self) -> List[float]:
        return [e.debt_service for e in self.debt_schedule]


def _check_tranche(tranche: DebtTrancheConfig) -> None:
    if tranche.initial_principal < 0:
        raise ValueError(f"Tranche {tranche.id} has negative principal {tranche.initial_principal}")
    if tranche.initial_principal > 0 and tranche.term_years <= 0:
        raise ValueError(f"Tranche {tranche.id} has principal but term_years={tranche.term_years}")


def _repayment(tranche: DebtTrancheConfig, beginning: float) -> float:
    """Principal repaid on refinance: the configured share, or everything."""
    if tranche.refinance_amount_pct >= 1:
        return beginning
    return beginning * tranche.refinance_amount_pct


def annual_tranche_schedule(tranche: DebtTrancheConfig, horizon_years: int) -> List[DebtScheduleEntry]:
    """Annual amortization table for one tranche.

    Mortgage tranches repay ``balance / remaining amortization years`` after
    the IO period. Every type repays what is left at maturity, which is a
    balloon when the term is shorter than the amortization. Interest-only
    and bullet tranches repay nothing before then.

    Raises:
        ValueError: On a negative principal, a principal with no term, or
            when repayments and the final balance do not reconcile to the
            principal.
    """
    _check_tranche(tranche)
    principal_amount = tranche.initial_principal
    if principal_amount == 0:
        return [DebtScheduleEntry(year_index=t) for t in range(horizon_years)]

    start = tranche.start_year
    maturity = start + tranche.term_years - 1
    io_end = start + tranche.io_years
    amortization_end = io_end + tranche.effective_amortization_years

    entries = []
    balance = 0.0
    for t in range(horizon_years):
        if t == start:
            balance = principal_amount
        beginning = balance if t >= start else 0.0
        interest = principal = exit_fee = 0.0

        if beginning > 0:
            interest = beginning * tranche.interest_rate
            if tranche.refinance_at_year is not None and t == tranche.refinance_at_year:
                principal = _repayment(tranche, beginning)
                exit_fee = principal * tranche.exit_fee_pct
            elif t == maturity:
                principal = beginning
                exit_fee = principal * tranche.exit_fee_pct
            elif tranche.amortization_type == AmortizationType.MORTGAGE and t >= io_end:
                remaining = max(1, amortization_end - t)
                principal = min(beginning, beginning / remaining)

        ending = beginning - principal if principal < beginning else 0.0
        entries.append(DebtScheduleEntry(
            year_index=t,
            beginning_balance=beginning,
            interest=interest,
            principal=principal,
            ending_balance=ending,
            exit_fee=exit_fee,
        ))
        balance = ending

    if start < horizon_years:
        repaid = sum((e.principal for e in entries), 0.0)
        if abs(repaid + entries[-1].ending_balance - principal_amount) > PRINCIPAL_TOLERANCE:
            raise ValueError(
                f"Tranche {tranche.id}: repaid {repaid:.2f} plus final balance "
                f"{entries[-1].ending_balance:.2f} does not equal principal {principal_amount:.2f}"
            )
    return entries


def monthly_tranche_schedule(tranche: DebtTrancheConfig, horizon_years: int) -> List[MonthlyDebtScheduleEntry]:
    """Monthly amortization table for one tranche.

    Mortgage months after the IO period pay the level payment from
    ``numpy_financial.pmt`` over the amortization months; the principal part
    is the payment less interest, capped at the balance.
    """
    _check_tranche(tranche)
    months = horizon_years * MONTHS_PER_YEAR
    entries = [
        MonthlyDebtScheduleEntry(year_index=m // MONTHS_PER_YEAR, month_index=m % MONTHS_PER_YEAR, month_number=m)
        for m in range(months)
    ]
    principal_amount = tranche.initial_principal
    if principal_amount == 0:
        return entries

    rate = tranche.interest_rate / MONTHS_PER_YEAR
    start = tranche.start_year * MONTHS_PER_YEAR
    last = start + tranche.term_years * MONTHS_PER_YEAR - 1
    io_end = start + tranche.io_years * MONTHS_PER_YEAR
    amortization_months = tranche.effective_amortization_years * MONTHS_PER_YEAR
    refinance = tranche.refinance_at_year * MONTHS_PER_YEAR if tranche.refinance_at_year is not None else None

    if amortization_months > 0:
        payment = float(-npf.pmt(rate, amortization_months, principal_amount))
    else:
        payment = principal_amount

    balance = 0.0
    for entry in entries:
        m = entry.month_number
        if m == start:
            balance = principal_amount
        beginning = balance if m >= start else 0.0
        interest = principal = exit_fee = 0.0

        if beginning > 0:
            interest = beginning * rate
            if m == refinance:
                principal = _repayment(tranche, beginning)
                exit_fee = principal * tranche.exit_fee_pct
            elif m == last:
                principal = beginning
                exit_fee = principal * tranche.exit_fee_pct
            elif tranche.amortization_type == AmortizationType.MORTGAGE and m >= io_end:
                principal = max(0.0, min(payment - interest, beginning))

        entry.beginning_balance = beginning
        entry.interest = interest
        entry.principal = principal
        entry.ending_balance = beginning - principal if principal < beginning else 0.0
        entry.exit_fee = exit_fee
        balance = entry.ending_balance

    return entries


def _aggregate_annual(schedules: Sequence[TrancheSchedule], horizon_years: int) -> List[DebtScheduleEntry]:
    totals = [DebtScheduleEntry(year_index=t) for t in range(horizon_years)]
    for schedule in schedules:
        for total, entry in zip(totals, schedule.entries):
            total.beginning_balance += entry.beginning_balance
            total.interest += entry.interest
            total.principal += entry.principal
            total.ending_balance += entry.ending_balance
            total.exit_fee += entry.exit_fee
    return totals


def _aggregate_monthly(schedules: Sequence[TrancheSchedule], horizon_years: int) -> List[MonthlyDebtScheduleEntry]:
    totals = [
        MonthlyDebtScheduleEntry(year_index=m // MONTHS_PER_YEAR, month_index=m % MONTHS_PER_YEAR, month_number=m)
        for m in range(horizon_years * MONTHS_PER_YEAR)
    ]
    for schedule in schedules:
        for total, entry in zip(totals, schedule.monthly_entries):
            total.beginning_balance += entry.beginning_balance
            total.interest += entry.interest
            total.principal += entry.principal
            total.ending_balance += entry.ending_balance
            total.exit_fee += entry.exit_fee
    return totals


def _ratio(numerator: float, denominator: float) -> Optional[float]:
    return numerator / denominator if denominator > 0 else None


def _ltv(balance: float, investment: float) -> Optional[float]:
    if balance <= 0 or investment <= 0:
        return None
    return balance / investment


def _monthly_cash_flow(
    monthly_pnl: Sequence[ConsolidatedMonthlyPnl],
    debt: Sequence[MonthlyDebtScheduleEntry],
) -> List[MonthlyCashFlow]:
    debt_by_month = {e.month_number: e for e in debt}
    flows = []
    position = 0.0
    for pnl in monthly_pnl:
        entry = debt_by_month.get(pnl.month_number)
        debt_service = entry.debt_service if entry else 0.0
        noi = pnl.noi + pnl.maintenance_capex
        cash_flow = noi - debt_service - pnl.maintenance_capex
        position += cash_flow
        flows.append(MonthlyCashFlow(
            year_index=pnl.year_index,
            month_index=pnl.month_index,
            month_number=pnl.month_number,
            noi=noi,
            debt_service=debt_service,
            maintenance_capex=pnl.maintenance_capex,
            cash_flow=cash_flow,
            cash_position=position,
        ))
    return flows


def _monthly_debt_kpis(
    monthly_pnl: Sequence[ConsolidatedMonthlyPnl],
    debt: Sequence[MonthlyDebtScheduleEntry],
    investment: float,
) -> List[MonthlyDebtKpi]:
    debt_by_month = {e.month_number: e for e in debt}
    kpis = []
    for pnl in monthly_pnl:
        entry = debt_by_month.get(pnl.month_number)
        kpis.append(MonthlyDebtKpi(
            year_index=pnl.year_index,
            month_index=pnl.month_index,
            month_number=pnl.month_number,
            dscr=_ratio(pnl.noi, entry.debt_service) if entry else None,
            ltv=_ltv(entry.beginning_balance, investment) if entry else None,
        ))
    return kpis


def run_capital_engine(
    consolidated_pnl: Sequence[ConsolidatedAnnualPnl],
    unlevered_fcf: Sequence[UnleveredFcf],
    capital_config: CapitalStructureConfig,
    consolidated_monthly_pnl: Optional[Sequence[ConsolidatedMonthlyPnl]] = None,
) -> CapitalEngineResult:
    """Build debt schedules and turn unlevered into owner levered cash flow.

    Args:
        consolidated_pnl: Annual P&L, one record per year; NOI feeds DSCR.
        unlevered_fcf: Project engine UFCF, one record per year.
        capital_config: Investment, tranches and covenants.
        consolidated_monthly_pnl: When given, monthly cash flow, monthly
            KPIs and covenant results are produced as well.

    Returns:
        CapitalEngineResult. ``owner_levered_cash_flows`` is the Year 0
        equity outflow followed by one levered FCF per year.

    Raises:
        ValueError: If the P&L and UFCF lengths differ or a tranche is
            malformed.
    """
    horizon = len(consolidated_pnl)
    if len(unlevered_fcf) != horizon:
        raise ValueError(f"Expected {horizon} UFCF records, got {len(unlevered_fcf)}")

    schedules = []
    for tranche in capital_config.debt_tranches:
        origination_fee = tranche.initial_principal * tranche.origination_fee_pct
        schedules.append(TrancheSchedule(
            tranche_id=tranche.id,
            label=tranche.label,
            tranche_type=tranche.tranche_type,
            is_senior=tranche.is_senior,
            entries=annual_tranche_schedule(tranche, horizon),
            monthly_entries=monthly_tranche_schedule(tranche, horizon),
            origination_fee=origination_fee,
            net_proceeds=tranche.initial_principal - origination_fee,
        ))

    debt_schedule = _aggregate_annual(schedules, horizon)
    senior_schedule = _aggregate_annual([s for s in schedules if s.is_senior], horizon)

    levered = []
    for t in range(horizon):
        entry = debt_schedule[t]
        ufcf = unlevered_fcf[t].unlevered_free_cash_flow
        levered.append(LeveredFcf(
            year_index=t,
            unlevered_fcf=ufcf,
            interest=entry.interest,
            principal=entry.principal,
            exit_fees=entry.exit_fee,
            debt_service=entry.debt_service,
            levered_fcf=ufcf - entry.debt_service,
        ))

    investment = capital_config.initial_investment
    net_proceeds = sum((s.net_proceeds for s in schedules), 0.0)
    equity_invested = investment - net_proceeds
    owner_flows = [-equity_invested] + [l.levered_fcf for l in levered]

    debt_kpis = []
    for t, pnl in enumerate(consolidated_pnl):
        debt_service = debt_schedule[t].debt_service
        senior_service = senior_schedule[t].debt_service
        debt_kpis.append(DebtKpi(
            year_index=t,
            dscr=_ratio(pnl.noi, debt_service),
            senior_dscr=_ratio(pnl.noi, senior_service),
            ltv=_ltv(debt_schedule[t].beginning_balance, investment),
            debt_service=debt_service,
            senior_debt_service=senior_service,
        ))

    result = CapitalEngineResult(
        debt_schedule=debt_schedule,
        tranche_schedules=schedules,
        levered_fcf=levered,
        owner_levered_cash_flows=owner_flows,
        debt_kpis=debt_kpis,
        monthly_debt_schedule=_aggregate_monthly(schedules, horizon),
    )

    if consolidated_monthly_pnl is not None:
        result.monthly_cash_flow = _monthly_cash_flow(consolidated_monthly_pnl, result.monthly_debt_schedule)
        result.monthly_debt_kpis = _monthly_debt_kpis(
            consolidated_monthly_pnl, result.monthly_debt_schedule, investment
        )
        if capital_config.covenants:
            result.covenant_statuses = evaluate_covenants(
                result.monthly_cash_flow, result.monthly_debt_kpis, capital_config.covenants
            )
            result.covenant_breaches = check_covenants(
                result.monthly_cash_flow, result.monthly_debt_kpis, capital_config.covenants
            )
            if result.covenant_breaches:
                logger.info("%d covenant breach months", len(result.covenant_breaches))

    logger.debug("Capital engine: %d tranches, equity %.2f", len(schedules), equity_invested)
    return result
