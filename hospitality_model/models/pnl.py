"""Profit and loss records shared by the operation, scenario and project stages."""

from dataclasses import dataclass, replace
from typing import Iterable, List, Sequence, TypeVar

# Line items carried on every P&L record, in statement order.
REVENUE_LINES = ("room_revenue", "food_revenue", "beverage_revenue", "other_revenue")
COGS_LINES = ("food_cogs", "beverage_cogs", "commissions")
OPEX_LINES = ("payroll", "utilities", "marketing", "maintenance_opex", "other_opex")
PROFIT_LINES = ("gross_operating_profit", "ebitda", "noi", "maintenance_capex", "cash_flow")
PNL_LINES = REVENUE_LINES + COGS_LINES + OPEX_LINES + PROFIT_LINES

P = TypeVar("P", bound="PnlLines")


@dataclass
class PnlLines:
    """Statement line items for one period.

    ``commissions`` are departmental expenses on room revenue and count
    toward COGS. For senior living ``beverage_cogs`` holds care COGS and
    ``other_revenue`` holds care plus other revenue.
    """

    room_revenue: float = 0.0
    food_revenue: float = 0.0
    beverage_revenue: float = 0.0
    other_revenue: float = 0.0

    food_cogs: float = 0.0
    beverage_cogs: float = 0.0
    commissions: float = 0.0

    payroll: float = 0.0
    utilities: float = 0.0
    marketing: float = 0.0
    maintenance_opex: float = 0.0
    other_opex: float = 0.0

    gross_operating_profit: float = 0.0  # Revenue - (COGS + commissions)
    ebitda: float = 0.0  # GOP - opex
    noi: float = 0.0  # EBITDA - maintenance capex
    maintenance_capex: float = 0.0
    cash_flow: float = 0.0

    @property
    def revenue_total(self) -> float:
        return self.room_revenue + self.food_revenue + self.beverage_revenue + self.other_revenue

    @property
    def cogs_total(self) -> float:
        return self.food_cogs + self.beverage_cogs + self.commissions

    @property
    def opex_total(self) -> float:
        return (
            self.payroll
            + self.utilities
            + self.marketing
            + self.maintenance_opex
            + self.other_opex
        )

    def scaled(self: P, factor: float) -> P:
        """Copy with every line item multiplied by ``factor``."""
        return replace(self, **{name: getattr(self, name) * factor for name in PNL_LINES})

    def zeroed(self: P) -> P:
        """Copy with every line item set to zero."""
        return replace(self, **{name: 0.0 for name in PNL_LINES})


@dataclass
class MonthlyPnl(PnlLines):
    """P&L for one month of one operation."""

    year_index: int = 0
    month_index: int = 0  # 0..11
    operation_id: str = ""

    @property
    def month_number(self) -> int:
        return self.year_index * 12 + self.month_index


@dataclass
class AnnualPnl(PnlLines):
    """P&L for one year of one operation: the sum of its 12 months."""

    year_index: int = 0
    operation_id: str = ""


@dataclass
class ConsolidatedMonthlyPnl(PnlLines):
    """Portfolio P&L for one absolute month, summed across operations."""

    year_index: int = 0
    month_index: int = 0
    month_number: int = 0

    @property
    def departmental_expenses(self) -> float:
        return self.cogs_total

    @property
    def gop(self) -> float:
        return self.gross_operating_profit

    @property
    def undistributed_expenses(self) -> float:
        return self.opex_total


@dataclass
class ConsolidatedAnnualPnl(PnlLines):
    """Portfolio P&L for one year, summed across operations."""

    year_index: int = 0

    @property
    def departmental_expenses(self) -> float:
        return self.cogs_total

    @property
    def gop(self) -> float:
        return self.gross_operating_profit

    @property
    def undistributed_expenses(self) -> float:
        return self.opex_total


def sum_lines(records: Iterable[PnlLines]) -> dict:
    """Sum every line item across ``records`` in iteration order.

    The summation is a plain left-to-right ``sum`` so that callers can
    re-derive any aggregate and compare it exactly.
    """
    records = list(records)
    return {name: sum((getattr(r, name) for r in records), 0.0) for name in PNL_LINES}


def aggregate_annual(
    monthly: Sequence[MonthlyPnl],
    horizon_years: int,
    operation_id: str,
) -> List[AnnualPnl]:
    """Roll monthly P&L up to one record per year."""
    annual = []
    for year_index in range(horizon_years):
        months = [m for m in monthly if m.year_index == year_index]
        annual.append(AnnualPnl(year_index=year_index, operation_id=operation_id, **sum_lines(months)))
    return annual
