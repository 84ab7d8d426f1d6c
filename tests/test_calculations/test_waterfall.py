"""Tests for the equity waterfall."""

import pytest

from hospitality_model.calculations.waterfall import run_waterfall_engine
from hospitality_model.models import (
    ClawbackMethod,
    EquityClass,
    TierType,
    WaterfallConfig,
    WaterfallTier,
)

LP_GP = (
    EquityClass(id="lp", name="LP", contribution_pct=0.9, distribution_pct=0.9),
    EquityClass(id="gp", name="GP", contribution_pct=0.1, distribution_pct=0.1),
)


def _promote_only(enable_clawback=False, method=ClawbackMethod.IMMEDIATE):
    return WaterfallConfig(
        equity_classes=LP_GP,
        tiers=(
            WaterfallTier(id="roc", tier_type=TierType.RETURN_OF_CAPITAL),
            WaterfallTier(
                id="promote",
                tier_type=TierType.PROMOTE,
                distribution_splits={"lp": 0.5, "gp": 0.5},
                enable_clawback=enable_clawback,
                clawback_method=method,
            ),
        ),
    )


def _assert_sums_to_owner(result):
    for row in result.rows:
        assert sum(row.partner_distributions.values()) == pytest.approx(row.owner_cash_flow)


class TestSingleTier:
    """Tests for single-tier mode (no tiers)."""

    def test_pro_rata_split(self):
        """Calls split by contribution, distributions by distribution %."""
        config = WaterfallConfig(equity_classes=(
            EquityClass(id="lp", contribution_pct=0.7, distribution_pct=0.7),
            EquityClass(id="gp", contribution_pct=0.3, distribution_pct=0.3),
        ))
        result = run_waterfall_engine([-1000, 500, 700], config)
        assert result.partner("lp").cash_flows == pytest.approx([-700, 350, 490])
        assert result.partner("gp").cash_flows == pytest.approx([-300, 150, 210])
        _assert_sums_to_owner(result)

    def test_no_classes_defaults_to_owner(self):
        """With no classes a single owner takes everything."""
        result = run_waterfall_engine([-100, 60, 60], WaterfallConfig())
        assert result.partners[0].partner_id == "owner"
        assert result.partners[0].cash_flows == [-100.0, 60.0, 60.0]
        assert result.partners[0].moic == pytest.approx(1.2)

    def test_moic_none_without_contribution(self):
        """A class that never contributed has no MOIC."""
        config = WaterfallConfig(equity_classes=(
            EquityClass(id="lp", contribution_pct=1.0, distribution_pct=0.8),
            EquityClass(id="carry", contribution_pct=0.0, distribution_pct=0.2),
        ))
        result = run_waterfall_engine([-1000, 1500], config)
        assert result.partner("carry").moic is None
        assert result.partner("carry").irr is None
        assert result.partner("lp").moic == pytest.approx(1.2)

    def test_cumulative_flows(self):
        """Cumulative flows are running sums."""
        result = run_waterfall_engine([-100, 30, 80], WaterfallConfig())
        assert result.partners[0].cumulative_cash_flows == pytest.approx([-100, -70, 10])


class TestMultiTier:
    """Tests for the tiered state machine."""

    def test_return_of_capital_before_promote(self):
        """Distributions return capital before any promote is paid."""
        result = run_waterfall_engine([-1000, 500], _promote_only())
        assert result.rows[1].partner_distributions == pytest.approx({"lp": 450, "gp": 50})

    def test_full_tier_sequence(self, tiered_waterfall):
        """ROC, accrued pref, catch-up and promote in one distribution."""
        result = run_waterfall_engine([-1000, 500, 2000], tiered_waterfall)
        assert result.rows[1].partner_distributions == pytest.approx({"lp": 450, "gp": 50})
        # ROC 450/50, pref 108/12, catch-up 0/15, promote 1092/273
        assert result.rows[2].partner_distributions == pytest.approx({"lp": 1650, "gp": 350})
        _assert_sums_to_owner(result)

    def test_catch_up_reaches_target_share(self, tiered_waterfall):
        """After catch-up the GP holds 20% of total profit."""
        result = run_waterfall_engine([-1000, 0, 1500], tiered_waterfall)
        gp = result.partner("gp").cash_flows
        lp = result.partner("lp").cash_flows
        assert gp[2] == pytest.approx(100 + 16 + 20 + 64)
        assert lp[2] == pytest.approx(900 + 144 + 256)
        gp_profit = sum(gp)
        total_profit = sum(gp) + sum(lp)
        assert gp_profit / total_profit == pytest.approx(0.2)

    def test_compounding_pref(self):
        """Compounded pref accrues on unpaid pref as well as capital."""
        config = WaterfallConfig(
            equity_classes=LP_GP,
            tiers=(
                WaterfallTier(id="roc", tier_type=TierType.RETURN_OF_CAPITAL),
                WaterfallTier(id="pref", tier_type=TierType.PREFERRED_RETURN, hurdle_irr=0.10, compound_pref=True),
                WaterfallTier(id="promote", tier_type=TierType.PROMOTE, distribution_splits={"lp": 0.5, "gp": 0.5}),
            ),
        )
        result = run_waterfall_engine([-1000, 0, 0, 2000], config)
        pref = 1000 * 1.1 ** 3 - 1000
        promote = (2000 - 1000 - pref) / 2
        assert result.partner("gp").cash_flows[3] == pytest.approx(100 + pref * 0.1 + promote)
        assert result.partner("lp").cash_flows[3] == pytest.approx(900 + pref * 0.9 + promote)

    def test_residual_without_promote_tier(self):
        """Cash left after the last tier goes by distribution %."""
        config = WaterfallConfig(
            equity_classes=LP_GP,
            tiers=(WaterfallTier(id="roc", tier_type=TierType.RETURN_OF_CAPITAL),),
        )
        result = run_waterfall_engine([-1000, 1500], config)
        assert result.rows[1].partner_distributions == pytest.approx({"lp": 1350, "gp": 150})

    def test_pref_without_hurdle_raises(self):
        """A preferred return tier needs a hurdle."""
        config = WaterfallConfig(
            equity_classes=LP_GP,
            tiers=(WaterfallTier(id="pref", tier_type=TierType.PREFERRED_RETURN),),
        )
        with pytest.raises(ValueError):
            run_waterfall_engine([-1000, 1500], config)

    def test_partner_irr_and_moic(self, tiered_waterfall):
        """Partner KPIs come from each partner's own series."""
        result = run_waterfall_engine([-1000, 500, 2000], tiered_waterfall)
        gp = result.partner("gp")
        assert gp.moic == pytest.approx(400 / 100)
        assert gp.irr is not None and gp.irr > result.partner("lp").irr

    def test_unknown_partner_raises(self, tiered_waterfall):
        """Looking up a missing partner raises KeyError."""
        with pytest.raises(KeyError):
            run_waterfall_engine([-1000, 1500], tiered_waterfall).partner("nobody")


class TestClawback:
    """Tests for the final-period clawback."""

    FLOWS = [-1000, 1500, -400, 100]

    def test_immediate_adjusts_final_period(self):
        """Excess promote is returned to the LP in the final period."""
        result = run_waterfall_engine(self.FLOWS, _promote_only(enable_clawback=True))
        assert len(result.clawbacks) == 1
        clawback = result.clawbacks[0]
        assert clawback.amount == pytest.approx(120)
        assert clawback.adjustments == pytest.approx({"lp": 120, "gp": -120})
        assert clawback.year_index == 3
        assert result.rows[3].partner_distributions == pytest.approx({"lp": 210, "gp": -110})
        _assert_sums_to_owner(result)

    def test_escrow_keeps_periods_and_adds_row(self):
        """The escrow method leaves period flows intact and books a separate escrow row."""
        result = run_waterfall_engine(self.FLOWS, _promote_only(enable_clawback=True, method=ClawbackMethod.ESCROW))
        assert result.clawbacks[0].method == ClawbackMethod.ESCROW
        assert result.rows[3].partner_distributions == pytest.approx({"lp": 90, "gp": 10})
        assert len(result.rows) == len(self.FLOWS) + 1
        escrow = result.rows[-1]
        assert escrow.is_escrow
        assert escrow.year_index == 3
        assert escrow.owner_cash_flow == 0.0
        assert escrow.partner_distributions == pytest.approx({"lp": 120, "gp": -120})
        assert not any(row.is_escrow for row in result.rows[:-1])
        _assert_sums_to_owner(result)

    def test_applied_once_with_several_enabling_tiers(self):
        """Clawback runs once even when more than one tier enables it."""
        config = WaterfallConfig(
            equity_classes=LP_GP,
            tiers=(
                WaterfallTier(id="roc", tier_type=TierType.RETURN_OF_CAPITAL, enable_clawback=True),
                WaterfallTier(
                    id="promote",
                    tier_type=TierType.PROMOTE,
                    distribution_splits={"lp": 0.5, "gp": 0.5},
                    enable_clawback=True,
                ),
            ),
        )
        result = run_waterfall_engine(self.FLOWS, config)
        assert len(result.clawbacks) == 1
        assert result.clawbacks[0].amount == pytest.approx(120)
        assert result.rows[3].partner_distributions == pytest.approx({"lp": 210, "gp": -110})
        _assert_sums_to_owner(result)

    def test_no_clawback_when_not_over_distributed(self):
        """A monotone series leaves nothing to claw back."""
        result = run_waterfall_engine([-1000, 500, 1500], _promote_only(enable_clawback=True))
        assert result.clawbacks == []


class TestWaterfallInvariant:
    """Partner flows always sum to the owner flow."""

    @pytest.mark.parametrize("flows", [
        [-1000, 200, 300, 2500],
        [-500, -500, 100, 3000],
        [-1000, 0, 0, 0],
        [-1000, 1200, -300, 800],
    ])
    def test_sums(self, flows, tiered_waterfall):
        """Every row reconciles for a range of flow shapes."""
        _assert_sums_to_owner(run_waterfall_engine(flows, tiered_waterfall))
