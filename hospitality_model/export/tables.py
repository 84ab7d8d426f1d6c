"""pandas views of model output for notebooks and downstream reporting.

Rows are periods and columns are line items; each table is built from the
result dataclasses and never feeds back into the engines.
"""

from typing import List, Optional, Sequence

import pandas as pd

from ..analysis.sensitivity import SensitivityResult
from ..analysis.variance import BridgeStep
from ..calculations.capital import CapitalEngineResult
from ..calculations.covenants import CovenantStatus
from ..calculations.waterfall import WaterfallResult
from ..models.pnl import PNL_LINES, ConsolidatedAnnualPnl, ConsolidatedMonthlyPnl
from ..pipeline.orchestrator import FullModelOutput


def annual_pnl_table(annual: Sequence[ConsolidatedAnnualPnl], start_year: Optional[int] = None) -> pd.DataFrame:
    """Consolidated annual P&L, one row per year.

    With ``start_year`` the index holds calendar years instead of year indexes.
    """
    data = {name: [getattr(p, name) for p in annual] for name in PNL_LINES}
    index = [p.year_index + (start_year or 0) for p in annual]
    df = pd.DataFrame(data, index=pd.Index(index, name="year" if start_year is not None else "year_index"))
    df["revenue_total"] = [p.revenue_total for p in annual]
    return df


def monthly_pnl_table(monthly: Sequence[ConsolidatedMonthlyPnl]) -> pd.DataFrame:
    data = {
        "year_index": [m.year_index for m in monthly],
        "month_index": [m.month_index for m in monthly],
    }
    data.update({name: [getattr(m, name) for m in monthly] for name in PNL_LINES})
    return pd.DataFrame(data, index=pd.Index([m.month_number for m in monthly], name="month_number"))


def debt_schedule_table(capital: CapitalEngineResult, by_tranche: bool = False) -> pd.DataFrame:
    """Annual debt schedule with DSCR and LTV.

    With ``by_tranche`` the rows are (tranche_id, year_index) pairs and no
    KPI columns are added.
    """
    columns = ["beginning_balance", "interest", "principal", "exit_fee", "ending_balance"]
    if by_tranche:
        rows = [
            {"tranche_id": schedule.tranche_id, "year_index": e.year_index,
             **{c: getattr(e, c) for c in columns}, "debt_service": e.debt_service}
            for schedule in capital.tranche_schedules
            for e in schedule.entries
        ]
        return pd.DataFrame(rows, columns=["tranche_id", "year_index"] + columns + ["debt_service"]).set_index(
            ["tranche_id", "year_index"]
        )

    df = pd.DataFrame(
        {c: [getattr(e, c) for e in capital.debt_schedule] for c in columns},
        index=pd.Index([e.year_index for e in capital.debt_schedule], name="year_index"),
    )
    df["debt_service"] = [e.debt_service for e in capital.debt_schedule]
    kpis = {k.year_index: k for k in capital.debt_kpis}
    # None stays None so undefined ratios are not mistaken for zero
    df["dscr"] = pd.Series([kpis[i].dscr if i in kpis else None for i in df.index], index=df.index, dtype=object)
    df["ltv"] = pd.Series([kpis[i].ltv if i in kpis else None for i in df.index], index=df.index, dtype=object)
    df["levered_fcf"] = [l.levered_fcf for l in capital.levered_fcf]
    return df


def waterfall_table(waterfall: WaterfallResult) -> pd.DataFrame:
    """Owner cash flow and each partner's distribution per period. Escrow rows are left out."""
    rows = [row for row in waterfall.rows if not row.is_escrow]
    partner_ids = [p.partner_id for p in waterfall.partners]
    data = {"owner_cash_flow": [row.owner_cash_flow for row in rows]}
    for partner_id in partner_ids:
        data[partner_id] = [row.partner_distributions.get(partner_id, 0.0) for row in rows]
    return pd.DataFrame(data, index=pd.Index([row.year_index for row in rows], name="year_index"))


def partner_summary_table(waterfall: WaterfallResult) -> pd.DataFrame:
    rows = [
        {
            "partner_id": p.partner_id,
            "name": p.name,
            "total_contributed": -sum((cf for cf in p.cash_flows if cf < 0), 0.0),
            "total_distributed": sum((cf for cf in p.cash_flows if cf > 0), 0.0),
            "irr": p.irr,
            "moic": p.moic,
        }
        for p in waterfall.partners
    ]
    columns = ["partner_id", "name", "total_contributed", "total_distributed", "irr", "moic"]
    return pd.DataFrame(rows, columns=columns).set_index("partner_id")


def sensitivity_table(result: SensitivityResult, kpi: str = "npv") -> pd.DataFrame:
    """One KPI over the sensitivity grid.

    Two-variable results give an x-by-y matrix; one-variable results give a
    single column indexed by the x values.
    """
    x_name = result.config.x.variable.value
    if result.matrix is None:
        return pd.DataFrame(
            {kpi: result.kpi_series(kpi)},
            index=pd.Index([run.x_value for run in result.runs], name=x_name),
        )
    y_name = result.config.y.variable.value
    return pd.DataFrame(
        result.kpi_matrix(kpi),
        index=pd.Index(result.x_values, name=x_name),
        columns=pd.Index(result.y_values, name=y_name),
    )


def covenant_table(statuses: Sequence[CovenantStatus]) -> pd.DataFrame:
    columns = [
        "covenant_id", "covenant_type", "month_number", "year_index", "month_index",
        "threshold", "actual_value", "passed", "consecutive_breaches", "severity",
    ]
    rows: List[dict] = [
        {**{c: getattr(s, c) for c in columns}, "covenant_type": s.covenant_type.value}
        for s in statuses
    ]
    return pd.DataFrame(rows, columns=columns)


def variance_bridge_table(steps: Sequence[BridgeStep]) -> pd.DataFrame:
    return pd.DataFrame(
        {"value": [s.value for s in steps], "cumulative_value": [s.cumulative_value for s in steps]},
        index=pd.Index([s.label for s in steps], name="step"),
    )


def output_tables(output: FullModelOutput) -> dict:
    """Every per-run table for one model output, keyed by name."""
    return {
        "annual_pnl": annual_pnl_table(output.consolidated_annual_pnl, output.model_input.scenario.start_year),
        "monthly_pnl": monthly_pnl_table(output.scenario.consolidated_monthly_pnl),
        "debt_schedule": debt_schedule_table(output.capital),
        "tranches": debt_schedule_table(output.capital, by_tranche=True),
        "waterfall": waterfall_table(output.waterfall),
        "partners": partner_summary_table(output.waterfall),
        "covenants": covenant_table(output.capital.covenant_statuses),
    }
