"""Tabular exports of model output."""

from .tables import (
    annual_pnl_table,
    monthly_pnl_table,
    debt_schedule_table,
    waterfall_table,
    partner_summary_table,
    sensitivity_table,
    covenant_table,
    variance_bridge_table,
    output_tables,
)

__all__ = [
    "annual_pnl_table",
    "monthly_pnl_table",
    "debt_schedule_table",
    "waterfall_table",
    "partner_summary_table",
    "sensitivity_table",
    "covenant_table",
    "variance_bridge_table",
    "output_tables",
]
