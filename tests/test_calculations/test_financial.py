"""Tests for NPV, IRR, equity multiple and payback."""

import math

import numpy_financial as npf
import pytest

from hospitality_model.calculations.financial import equity_multiple, irr, npv, payback_period


class TestNPV:
    """Tests for npv."""

    def test_first_flow_undiscounted(self):
        """Cash flow 0 is not discounted."""
        assert npv(0.10, [-1000, 500, 600]) == pytest.approx(-1000 + 500 / 1.1 + 600 / 1.21)

    def test_zero_rate_is_sum(self):
        """At a 0% rate NPV is the plain sum."""
        assert npv(0.0, [-100, 30, 40, 50]) == pytest.approx(20.0)

    def test_empty(self):
        """An empty series is worth nothing."""
        assert npv(0.10, []) == 0.0


class TestIRR:
    """Tests for irr."""

    def test_simple_one_period(self):
        """-100 then 110 is a 10% return."""
        assert irr([-100, 110]) == pytest.approx(0.10, abs=1e-6)

    def test_matches_numpy_financial(self):
        """Agrees with numpy_financial on a conventional series."""
        flows = [-50_000, 8_000, 9_000, 10_000, 11_000, 60_000]
        assert irr(flows) == pytest.approx(npf.irr(flows), abs=1e-6)

    def test_npv_at_irr_is_zero(self):
        """The returned rate zeroes the NPV."""
        flows = [-1000, 300, 400, 500]
        rate = irr(flows)
        assert npv(rate, flows) == pytest.approx(0.0, abs=1e-3)

    def test_no_sign_change_is_none(self):
        """All-positive or all-negative flows have no IRR."""
        assert irr([100, 200, 300]) is None
        assert irr([-100, -200]) is None

    def test_empty_and_zero_are_none(self):
        """Empty and all-zero series have no IRR."""
        assert irr([]) is None
        assert irr([0.0, 0.0, 0.0]) is None

    def test_total_loss_floor(self):
        """Tiny recoveries still resolve inside the bracket."""
        rate = irr([-1000, 50])
        assert rate == pytest.approx(-0.95, abs=1e-4)


class TestEquityMultiple:
    """Tests for equity_multiple."""

    def test_inflows_over_outflows(self):
        """Multiple = inflows / |outflows|."""
        assert equity_multiple([-1000, 500, 1000]) == pytest.approx(1.5)

    def test_no_outflows(self):
        """Inflows with no outflows are an infinite multiple."""
        assert math.isinf(equity_multiple([100, 200]))

    def test_empty(self):
        """An empty series has a multiple of zero."""
        assert equity_multiple([]) == 0.0


class TestPaybackPeriod:
    """Tests for payback_period."""

    def test_interpolated(self):
        """Payback is interpolated inside the crossing year."""
        assert payback_period([-1000, 500, 600, 700]) == pytest.approx(1 + 500 / 600)

    def test_exact_year(self):
        """Recovering exactly at a year end gives a whole number."""
        assert payback_period([-1000, 500, 500]) == pytest.approx(2.0)

    def test_never_recovered(self):
        """No payback within the horizon is None."""
        assert payback_period([-1000, 100, 100]) is None

    def test_non_negative_start(self):
        """A non-negative first flow pays back immediately."""
        assert payback_period([0, 100]) == 0.0
