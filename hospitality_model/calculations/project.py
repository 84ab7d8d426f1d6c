"""Project engine: unlevered free cash flow, DCF valuation and project KPIs."""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..models.capital import CapitalStructureConfig
from ..models.pnl import ConsolidatedAnnualPnl
from ..models.project import ProjectConfig
from .development import construction_outflows_by_year, land_outflows_by_year
from .financial import equity_multiple, irr, npv, payback_period

logger = logging.getLogger(__name__)


@dataclass
class UnleveredFcf:
    """Unlevered free cash flow for one operating year."""

    year_index: int
    noi: float  # Before maintenance capex
    maintenance_capex: float
    change_in_working_capital: float
    land_outflow: float = 0.0
    construction_outflow: float = 0.0
    unlevered_free_cash_flow: float = 0.0


@dataclass
class DcfValuation:
    """Discounted cash flow valuation.

    ``cash_flows`` has horizon + 1 entries: the Year 0 outflow followed by
    each year's UFCF, with the terminal value added to the last one.
    """

    discount_rate: float
    terminal_growth_rate: float
    cash_flows: List[float]
    npv: float
    enterprise_value: float
    equity_value: float
    terminal_value: float


@dataclass
class WaccMetrics:
    equity_percentage: float
    debt_percentage: float
    cost_of_equity: float
    cost_of_debt: float
    tax_rate: float
    wacc: float


@dataclass
class ProjectKpis:
    npv: float
    unlevered_irr: Optional[float]
    equity_multiple: float
    payback_period: Optional[float]
    wacc: Optional[float] = None


@dataclass
class BreakevenMetrics:
    """DSCR = 1.0 breakeven against first-year debt service."""

    breakeven_occupancy: Optional[float]
    noi_required_for_breakeven: Optional[float]
    method: str = "dscr_breakeven"


@dataclass
class ProjectEngineResult:
    unlevered_fcf: List[UnleveredFcf]
    dcf_valuation: DcfValuation
    project_kpis: ProjectKpis
    wacc_metrics: Optional[WaccMetrics] = None
    development_outflows: List[float] = field(default_factory=list)


def working_capital_changes(revenues: Sequence[float], working_capital_pct: float) -> List[float]:
    """Change in working capital per year, with revenue before Year 0 taken as zero."""
    changes = []
    previous = 0.0
    for revenue in revenues:
        changes.append(working_capital_pct * (revenue - previous))
        previous = revenue
    return changes


def calculate_wacc(project_config: ProjectConfig, capital_config: CapitalStructureConfig) -> WaccMetrics:
    """WACC = E% x cost of equity + D% x cost of debt x (1 - tax).

    The cost of equity is the project discount rate; the cost of debt is
    the principal-weighted tranche rate.
    """
    investment = capital_config.initial_investment
    total_debt = 0.0
    weighted_interest = 0.0
    for tranche in capital_config.debt_tranches:
        if tranche.initial_principal > 0:
            total_debt += tranche.initial_principal
            weighted_interest += tranche.initial_principal * tranche.interest_rate

    equity = investment - total_debt
    equity_pct = equity / investment if investment > 0 else 0.0
    debt_pct = total_debt / investment if investment > 0 else 0.0
    cost_of_debt = weighted_interest / total_debt if total_debt > 0 else 0.0
    tax_rate = project_config.tax_rate

    return WaccMetrics(
        equity_percentage=equity_pct,
        debt_percentage=debt_pct,
        cost_of_equity=project_config.discount_rate,
        cost_of_debt=cost_of_debt,
        tax_rate=tax_rate,
        wacc=equity_pct * project_config.discount_rate + debt_pct * cost_of_debt * (1 - tax_rate),
    )


def calculate_breakeven_occupancy(
    consolidated_pnl: Sequence[ConsolidatedAnnualPnl],
    first_year_debt_service: float,
) -> BreakevenMetrics:
    """NOI needed for DSCR = 1.0, as a share of first-year NOI.

    Returns 0 when there is no debt service, and None when first-year NOI
    is not positive or could not cover the debt service even at the
    modeled occupancy.
    """
    if not consolidated_pnl:
        return BreakevenMetrics(breakeven_occupancy=None, noi_required_for_breakeven=None)
    if first_year_debt_service <= 0:
        return BreakevenMetrics(breakeven_occupancy=0.0, noi_required_for_breakeven=0.0)

    baseline = consolidated_pnl[0]
    if baseline.noi <= 0 or baseline.revenue_total <= 0 or first_year_debt_service > baseline.noi:
        return BreakevenMetrics(breakeven_occupancy=None, noi_required_for_breakeven=first_year_debt_service)

    return BreakevenMetrics(
        breakeven_occupancy=first_year_debt_service / baseline.noi,
        noi_required_for_breakeven=first_year_debt_service,
    )


def run_project_engine(
    consolidated_pnl: Sequence[ConsolidatedAnnualPnl],
    config: ProjectConfig,
    capital_config: Optional[CapitalStructureConfig] = None,
) -> ProjectEngineResult:
    """Convert consolidated P&L into UFCF, a DCF valuation and project KPIs.

    UFCF(t) = NOI before capex - maintenance capex - change in working
    capital - land and construction outflows. The consolidated NOI already
    nets maintenance capex, so capex is added back before being deducted
    once.

    Args:
        consolidated_pnl: One record per year, year_index 0..H-1.
        config: Discount rate, terminal growth, investment, working capital.
        capital_config: When given, WACC is computed from it.

    Returns:
        ProjectEngineResult with H UFCF records and an H+1 cash-flow series.
    """
    horizon = len(consolidated_pnl)
    if horizon == 0:
        raise ValueError("Project engine requires at least one year of consolidated P&L")

    r = config.discount_rate
    g = config.terminal_growth_rate

    wc_changes = working_capital_changes([p.revenue_total for p in consolidated_pnl], config.working_capital_percentage)

    land_by_year = land_outflows_by_year(config.land, horizon) if config.land else [0.0] * horizon
    construction_by_year = (
        construction_outflows_by_year(config.construction, horizon)
        if config.construction is not None
        else [0.0] * horizon
    )
    development = [land + build for land, build in zip(land_by_year, construction_by_year)]

    unlevered = []
    for t, pnl in enumerate(consolidated_pnl):
        noi_before_capex = pnl.noi + pnl.maintenance_capex
        # Year 0 development spend replaces the initial investment instead
        later_outflow = development[t] if t > 0 else 0.0
        ufcf = noi_before_capex - pnl.maintenance_capex - wc_changes[t] - later_outflow
        if not math.isfinite(ufcf):
            logger.warning("Non-finite UFCF at year %d (NOI %s, capex %s)", t, pnl.noi, pnl.maintenance_capex)
        unlevered.append(UnleveredFcf(
            year_index=pnl.year_index,
            noi=noi_before_capex,
            maintenance_capex=pnl.maintenance_capex,
            change_in_working_capital=wc_changes[t],
            land_outflow=land_by_year[t] if t > 0 else 0.0,
            construction_outflow=construction_by_year[t] if t > 0 else 0.0,
            unlevered_free_cash_flow=ufcf,
        ))

    year0 = -development[0] if config.has_development_flows else -config.initial_investment

    flows = [u.unlevered_free_cash_flow for u in unlevered]
    last = flows[-1]
    terminal_value = last * (1 + g) / (r - g) if r > g else 0.0
    cash_flows = [year0] + flows[:-1] + [last + terminal_value]

    value = npv(r, cash_flows)

    wacc_metrics = calculate_wacc(config, capital_config) if capital_config is not None else None

    kpis = ProjectKpis(
        npv=value,
        unlevered_irr=irr(cash_flows),
        equity_multiple=equity_multiple(cash_flows),
        payback_period=payback_period(cash_flows),
        wacc=wacc_metrics.wacc if wacc_metrics else None,
    )

    return ProjectEngineResult(
        unlevered_fcf=unlevered,
        dcf_valuation=DcfValuation(
            discount_rate=r,
            terminal_growth_rate=g,
            cash_flows=cash_flows,
            npv=value,
            enterprise_value=value,
            equity_value=value,
            terminal_value=terminal_value,
        ),
        project_kpis=kpis,
        wacc_metrics=wacc_metrics,
        development_outflows=development,
    )
