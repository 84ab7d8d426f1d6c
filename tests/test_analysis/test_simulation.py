"""Tests for the Monte Carlo simulation."""

import math

import numpy as np
import pytest

from hospitality_model.analysis.simulation import (
    PERT_SPREAD,
    DistributionType,
    SimulationConfig,
    calculate_risk_metrics,
    kpi_statistics,
    run_simulation,
    sample_multipliers,
)
from hospitality_model.errors import ConfigurationError


class TestSampling:
    """Tests for multiplier sampling (no model runs)."""

    def test_normal_centered_on_one(self):
        """Normal multipliers average close to 1.0."""
        config = SimulationConfig(occupancy_variation=0.05)
        rng = np.random.default_rng(7)
        draws = [sample_multipliers(config, rng)["occupancy"] for _ in range(4000)]
        assert np.mean(draws) == pytest.approx(1.0, abs=0.005)
        assert np.std(draws) == pytest.approx(0.05, rel=0.1)

    def test_lognormal_positive(self):
        """Lognormal multipliers are always positive."""
        config = SimulationConfig(adr_variation=0.8, adr_distribution=DistributionType.LOGNORMAL)
        rng = np.random.default_rng(3)
        assert all(sample_multipliers(config, rng)["adr"] > 0 for _ in range(500))

    def test_pert_bounded(self):
        """PERT multipliers stay within three deviations of 1.0."""
        variation = 0.1
        config = SimulationConfig(occupancy_variation=variation, occupancy_distribution=DistributionType.PERT)
        rng = np.random.default_rng(11)
        draws = [sample_multipliers(config, rng)["occupancy"] for _ in range(1000)]
        assert min(draws) >= 1 - PERT_SPREAD * variation
        assert max(draws) <= 1 + PERT_SPREAD * variation

    def test_correlation_applied(self):
        """Correlated shocks move together."""
        correlation = ((1.0, 0.9, 0.0), (0.9, 1.0, 0.0), (0.0, 0.0, 1.0))
        config = SimulationConfig(correlation_matrix=correlation)
        from hospitality_model.analysis.simulation import _cholesky

        cholesky = _cholesky(config)
        rng = np.random.default_rng(5)
        draws = [sample_multipliers(config, rng, cholesky) for _ in range(3000)]
        occupancy = [d["occupancy"] for d in draws]
        adr = [d["adr"] for d in draws]
        assert np.corrcoef(occupancy, adr)[0, 1] == pytest.approx(0.9, abs=0.05)


class TestKpiStatistics:
    """Tests for kpi_statistics."""

    def test_percentiles(self):
        """Mean and percentiles of a simple series."""
        stats = kpi_statistics(list(range(1, 101)))
        assert stats.mean == pytest.approx(50.5)
        assert stats.p50 == pytest.approx(50.5)
        assert stats.p10 < stats.p50 < stats.p90
        assert stats.count == 100

    def test_ignores_undefined(self):
        """None and non-finite values are skipped."""
        stats = kpi_statistics([1.0, None, math.inf, 3.0])
        assert stats.mean == pytest.approx(2.0)
        assert stats.count == 2

    def test_all_undefined(self):
        """No defined values gives empty statistics."""
        stats = kpi_statistics([None, None])
        assert stats.mean is None and stats.count == 0


class TestRiskMetrics:
    """Tests for calculate_risk_metrics."""

    NPVS = [-30.0, -20.0, -10.0, 10.0, 20.0, 30.0, 40.0, 50.0, 60.0, 70.0]

    def test_probability_of_loss(self):
        """Three negative NPVs out of ten is a 30% chance of loss."""
        assert calculate_risk_metrics(self.NPVS).probability_of_loss == pytest.approx(0.3)

    def test_var_and_upside_interpolate(self):
        """VaR95 and the P90 upside interpolate between ranked NPVs."""
        metrics = calculate_risk_metrics(self.NPVS)
        assert metrics.var95 == pytest.approx(-25.5)
        assert metrics.upside_npv == pytest.approx(61.0)

    def test_upside_irr_skips_undefined(self):
        """Undefined IRRs are dropped before the percentile."""
        metrics = calculate_risk_metrics(self.NPVS, [0.05, 0.10, None, 0.15])
        assert metrics.upside_irr == pytest.approx(0.14)
        assert calculate_risk_metrics(self.NPVS, [None, None]).upside_irr is None

    def test_no_losses(self):
        """All-positive NPVs give zero probability of loss."""
        assert calculate_risk_metrics([5.0, 6.0]).probability_of_loss == 0.0

    def test_empty_rejected(self):
        """Risk metrics need at least one defined NPV."""
        with pytest.raises(ValueError):
            calculate_risk_metrics([None, None])


class TestRunSimulation:
    """Tests for run_simulation."""

    def test_seed_reproducible(self, model_input):
        """The same seed gives the same results."""
        config = SimulationConfig(iterations=8, seed=42)
        first = run_simulation(model_input, config)
        second = run_simulation(model_input, config)
        assert np.array_equal(first.values("npv"), second.values("npv"))
        assert first.iterations[3].multipliers == second.iterations[3].multipliers

    def test_different_seeds_differ(self, model_input):
        """Different seeds give different draws."""
        a = run_simulation(model_input, SimulationConfig(iterations=5, seed=1))
        b = run_simulation(model_input, SimulationConfig(iterations=5, seed=2))
        assert not np.array_equal(a.values("npv"), b.values("npv"))

    def test_statistics_and_progress(self, model_input):
        """Every iteration is reported and summarized."""
        calls = []
        result = run_simulation(
            model_input,
            SimulationConfig(iterations=10, seed=0),
            progress_callback=lambda done, total: calls.append((done, total)),
        )
        assert len(result.iterations) == 10
        assert calls[-1] == (10, 10)
        stats = result.statistics["npv"]
        assert stats.count == 10
        assert stats.p10 <= stats.p50 <= stats.p90
        assert "MONTE CARLO SIMULATION RESULTS" in result.summary()

    def test_risk_metrics_from_result(self, model_input):
        """Result risk metrics agree with the NPV statistics."""
        result = run_simulation(model_input, SimulationConfig(iterations=10, seed=0))
        metrics = result.risk_metrics()
        assert 0.0 <= metrics.probability_of_loss <= 1.0
        assert metrics.var95 <= metrics.upside_npv
        assert metrics.upside_npv == pytest.approx(result.statistics["npv"].p90)
        assert metrics.upside_irr == pytest.approx(result.statistics["unlevered_irr"].p90)

    def test_zero_variation_matches_base(self, model_input):
        """With no variation every iteration reproduces the base case."""
        config = SimulationConfig(iterations=3, occupancy_variation=0.0, adr_variation=0.0,
                                  interest_rate_variation=0.0, seed=9)
        result = run_simulation(model_input, config)
        assert result.values("npv") == pytest.approx([result.base_case_kpis["npv"]] * 3)

    @pytest.mark.parametrize("matrix", [
        ((1.0, 0.5), (0.5, 1.0)),
        ((1.0, 0.5, 0.0), (0.2, 1.0, 0.0), (0.0, 0.0, 1.0)),
        ((1.0, 0.9, 0.9), (0.9, 1.0, -0.9), (0.9, -0.9, 1.0)),
    ])
    def test_invalid_correlation_rejected(self, model_input, matrix):
        """Wrong shape, asymmetric and non-positive-definite matrices are rejected."""
        with pytest.raises(ConfigurationError):
            run_simulation(model_input, SimulationConfig(iterations=2, correlation_matrix=matrix))
