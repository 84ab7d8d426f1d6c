"""Monthly P&L loop shared by every operation engine.

Each engine supplies two functions: one turning a month's utilization
into the four revenue lines, and one turning those revenue lines into
departmental costs (COGS and commissions). Opex, capex and the profit
lines follow the same rules for every asset kind.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List

from ...models.operations import MONTHS_PER_YEAR, OperationConfig, OperationType
from ...models.pnl import AnnualPnl, MonthlyPnl, REVENUE_LINES, aggregate_annual
from .drivers import monthly_utilization, revenue_ramp_factor, seasonality_curve

RevenueFn = Callable[[OperationConfig, float], Dict[str, float]]
CostFn = Callable[[OperationConfig, Dict[str, float]], Dict[str, float]]


@dataclass
class OperationResult:
    """Monthly and annual P&L for one operation (asset view, before sponsor transform)."""

    operation_id: str
    operation_type: OperationType
    monthly_pnl: List[MonthlyPnl] = field(default_factory=list)
    annual_pnl: List[AnnualPnl] = field(default_factory=list)


def gross_up(primary_revenue: float, food_pct: float, beverage_pct: float, other_pct: float) -> float:
    """Total revenue when ancillary lines are a share of the total.

    ``total = primary / (1 - food - beverage - other)``, or the primary
    revenue itself when the ancillary shares leave nothing.
    """
    remaining = 1 - food_pct - beverage_pct - other_pct
    if remaining > 0:
        return primary_revenue / remaining
    return primary_revenue


def split_of_total(total: float, food_pct: float, beverage_pct: float, other_pct: float) -> Dict[str, float]:
    """Allocate a total across the revenue lines; the room line keeps the remainder."""
    food = total * food_pct
    beverage = total * beverage_pct
    other = total * other_pct
    return {
        "room_revenue": total - food - beverage - other,
        "food_revenue": food,
        "beverage_revenue": beverage,
        "other_revenue": other,
    }


def build_monthly_pnl(
    config: OperationConfig,
    year_index: int,
    month_index: int,
    revenue: Dict[str, float],
    departmental: Dict[str, float],
) -> MonthlyPnl:
    """Apply opex, capex and profit rules to one month of revenue and COGS."""
    total_revenue = sum(revenue[name] for name in REVENUE_LINES)

    payroll = config.fixed_payroll + total_revenue * config.payroll_pct
    other_opex = config.fixed_other_expenses + total_revenue * config.other_opex_pct
    utilities = total_revenue * config.utilities_pct
    marketing = total_revenue * config.marketing_pct
    maintenance_opex = total_revenue * config.maintenance_opex_pct
    total_opex = payroll + utilities + marketing + maintenance_opex + other_opex

    maintenance_capex = total_revenue * config.maintenance_capex_pct

    food_cogs = departmental.get("food_cogs", 0.0)
    beverage_cogs = departmental.get("beverage_cogs", 0.0)
    commissions = departmental.get("commissions", 0.0)

    gross_operating_profit = total_revenue - (food_cogs + beverage_cogs + commissions)
    ebitda = gross_operating_profit - total_opex
    noi = ebitda - maintenance_capex

    return MonthlyPnl(
        year_index=year_index,
        month_index=month_index,
        operation_id=config.id,
        food_cogs=food_cogs,
        beverage_cogs=beverage_cogs,
        commissions=commissions,
        payroll=payroll,
        utilities=utilities,
        marketing=marketing,
        maintenance_opex=maintenance_opex,
        other_opex=other_opex,
        gross_operating_profit=gross_operating_profit,
        ebitda=ebitda,
        noi=noi,
        maintenance_capex=maintenance_capex,
        cash_flow=noi,
        **revenue,
    )


def run_monthly_engine(config: OperationConfig, revenue_fn: RevenueFn, cost_fn: CostFn) -> OperationResult:
    """Run ``horizon_years`` x 12 months and roll them up to annual P&L."""
    seasonality = seasonality_curve(config.seasonality_curve)

    monthly = []
    for year_index in range(config.horizon_years):
        for month_index in range(MONTHS_PER_YEAR):
            month_number = year_index * MONTHS_PER_YEAR + month_index
            utilization = monthly_utilization(config, month_index, month_number, seasonality)

            revenue = revenue_fn(config, utilization)
            factor = revenue_ramp_factor(config, month_number)
            if factor != 1.0:
                revenue = {name: value * factor for name, value in revenue.items()}

            departmental = cost_fn(config, revenue)
            monthly.append(build_monthly_pnl(config, year_index, month_index, revenue, departmental))

    return OperationResult(
        operation_id=config.id,
        operation_type=config.operation_type,
        monthly_pnl=monthly,
        annual_pnl=aggregate_annual(monthly, config.horizon_years, config.id),
    )
