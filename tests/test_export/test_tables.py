"""Tests for the pandas table exports."""

import pandas as pd
import pytest

from hospitality_model.analysis import (
    SensitivityConfig,
    SensitivityRange,
    SensitivityVariable,
    calculate_variance_bridge,
    run_sensitivity,
)
from hospitality_model.analysis.overrides import scale_adr
from hospitality_model.calculations.waterfall import run_waterfall_engine
from hospitality_model.export import (
    annual_pnl_table,
    debt_schedule_table,
    output_tables,
    partner_summary_table,
    sensitivity_table,
    variance_bridge_table,
    waterfall_table,
)
from hospitality_model.models import ClawbackMethod, EquityClass, TierType, WaterfallConfig, WaterfallTier
from hospitality_model.pipeline import run_full_model
from tests.fixtures.test_inputs import unlevered_input


@pytest.fixture
def output(model_input):
    return run_full_model(model_input)


class TestPnlTables:
    """Tests for the P&L tables."""

    def test_annual_calendar_index(self, output):
        """With a start year the index holds calendar years."""
        df = annual_pnl_table(output.consolidated_annual_pnl, start_year=2026)
        assert list(df.index) == [2026, 2027, 2028, 2029, 2030]
        assert df.index.name == "year"
        assert df.loc[2026, "noi"] == pytest.approx(output.consolidated_annual_pnl[0].noi)
        assert df.loc[2026, "revenue_total"] == pytest.approx(9_765_000)

    def test_annual_year_index(self, output):
        """Without a start year the index is the year index."""
        df = annual_pnl_table(output.consolidated_annual_pnl)
        assert df.index.name == "year_index"
        assert list(df.index) == [0, 1, 2, 3, 4]

    def test_output_tables_keys(self, output):
        """Every per-run table is produced."""
        tables = output_tables(output)
        assert set(tables) == {"annual_pnl", "monthly_pnl", "debt_schedule", "tranches",
                               "waterfall", "partners", "covenants"}
        assert len(tables["monthly_pnl"]) == 60
        assert tables["covenants"].empty


class TestDebtTables:
    """Tests for debt_schedule_table."""

    def test_columns_and_ratios(self, output):
        """Aggregate schedule carries debt service, DSCR, LTV and levered FCF."""
        df = debt_schedule_table(output.capital)
        assert df.loc[0, "debt_service"] == pytest.approx(9_750_000)
        assert df.loc[0, "ltv"] == pytest.approx(0.65)
        assert "levered_fcf" in df.columns

    def test_undefined_ratios_stay_none(self, model_input):
        """No debt leaves DSCR as None rather than zero."""
        df = debt_schedule_table(run_full_model(unlevered_input(model_input)).capital)
        assert df["dscr"].tolist() == [None] * 5

    def test_by_tranche(self, output):
        """Per-tranche rows are indexed by tranche and year."""
        df = debt_schedule_table(output.capital, by_tranche=True)
        assert df.index.names == ["tranche_id", "year_index"]
        assert df.loc[("senior-loan", 0), "principal"] == pytest.approx(6_500_000)


class TestWaterfallTables:
    """Tests for the waterfall tables."""

    def test_partner_columns_sum_to_owner(self, output):
        """Partner columns add up to the owner flow."""
        df = waterfall_table(output.waterfall)
        assert list(df.columns) == ["owner_cash_flow", "lp", "gp"]
        pd.testing.assert_series_equal(
            df["lp"] + df["gp"], df["owner_cash_flow"], check_names=False
        )

    def test_escrow_rows_left_out(self):
        """Escrow clawback rows do not appear as periods."""
        config = WaterfallConfig(
            equity_classes=(
                EquityClass(id="lp", name="LP", contribution_pct=0.9, distribution_pct=0.9),
                EquityClass(id="gp", name="GP", contribution_pct=0.1, distribution_pct=0.1),
            ),
            tiers=(
                WaterfallTier(id="roc", tier_type=TierType.RETURN_OF_CAPITAL),
                WaterfallTier(id="promote", tier_type=TierType.PROMOTE, distribution_splits={"lp": 0.5, "gp": 0.5},
                              enable_clawback=True, clawback_method=ClawbackMethod.ESCROW),
            ),
        )
        result = run_waterfall_engine([-1000, 1500, -400, 100], config)
        assert result.rows[-1].is_escrow
        df = waterfall_table(result)
        assert list(df.index) == [0, 1, 2, 3]
        assert df.loc[3, "lp"] == pytest.approx(90)

    def test_partner_summary(self, output):
        """Contributions are reported as positive totals."""
        df = partner_summary_table(output.waterfall)
        assert df.loc["lp", "total_contributed"] == pytest.approx(17_500_000 * 0.7)
        assert df.loc["gp", "name"] == "General Partner"


class TestAnalysisTables:
    """Tests for sensitivity and variance tables."""

    def test_sensitivity_matrix(self, model_input):
        """Two-variable results become an x-by-y frame."""
        config = SensitivityConfig(
            x=SensitivityRange(SensitivityVariable.OCCUPANCY, 0.9, 1.1, steps=2),
            y=SensitivityRange(SensitivityVariable.DISCOUNT_RATE, 0.09, 0.11, steps=2),
        )
        df = sensitivity_table(run_sensitivity(model_input, config), "npv")
        assert df.shape == (2, 2)
        assert df.index.name == "occupancy"
        assert df.columns.name == "discount_rate"

    def test_sensitivity_single_column(self, model_input):
        """One-variable results become a single column."""
        config = SensitivityConfig(x=SensitivityRange(SensitivityVariable.ADR, 0.9, 1.1, steps=3))
        df = sensitivity_table(run_sensitivity(model_input, config), "npv")
        assert list(df.columns) == ["npv"]
        assert len(df) == 3

    def test_variance_bridge(self, model_input):
        """Bridge steps are indexed by label."""
        steps = calculate_variance_bridge(model_input, scale_adr(model_input, 1.1))
        df = variance_bridge_table(steps)
        assert list(df.index) == ["Operational Impact", "Capital Impact", "Development Impact"]
        assert df.loc["Operational Impact", "value"] > 0
