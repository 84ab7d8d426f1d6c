"""Monte Carlo simulation over occupancy, ADR and interest-rate shocks.

Each iteration draws one multiplier per variable, derives a shocked
``FullModelInput`` and runs the full pipeline. Only the KPIs are kept.

Typical usage:
    config = SimulationConfig(iterations=500, seed=42)
    result = run_simulation(model_input, config)
    print(result.summary())
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..errors import ConfigurationError, ModelError, ValidationIssue
from ..models.model import FullModelInput
from ..pipeline.orchestrator import run_full_model
from . import overrides

logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 1000
DEFAULT_OCCUPANCY_VARIATION = 0.05
DEFAULT_ADR_VARIATION = 0.10
DEFAULT_INTEREST_RATE_VARIATION = 0.01

SIMULATION_KPIS = ("npv", "unlevered_irr", "levered_irr", "moic", "equity_multiple", "wacc")

# Order of rows and columns in the correlation matrix
SIMULATION_VARIABLES = ("occupancy", "adr", "interest_rate")

# PERT shocks span this many standard deviations either side of 1.0
PERT_SPREAD = 3.0


class DistributionType(str, Enum):
    NORMAL = "normal"         # 1 + N(0, variation)
    LOGNORMAL = "lognormal"   # exp(N(0, variation)), always positive
    PERT = "pert"             # Beta on [1 - 3v, 1 + 3v] with mode 1


@dataclass(frozen=True)
class SimulationConfig:
    """Monte Carlo settings.

    Attributes:
        iterations: Number of model runs
        occupancy_variation: Standard deviation of the occupancy multiplier
        adr_variation: Standard deviation of the ADR multiplier
        interest_rate_variation: Standard deviation of the interest-rate multiplier
        occupancy_distribution: Distribution of the occupancy multiplier
        adr_distribution: Distribution of the ADR multiplier
        interest_rate_distribution: Distribution of the interest-rate multiplier
        correlation_matrix: Optional 3x3 correlation of (occupancy, adr,
            interest_rate). Applies to normal and lognormal shocks; PERT
            shocks are drawn independently.
        seed: Random seed for reproducibility
    """

    iterations: int = DEFAULT_ITERATIONS
    occupancy_variation: float = DEFAULT_OCCUPANCY_VARIATION
    adr_variation: float = DEFAULT_ADR_VARIATION
    interest_rate_variation: float = DEFAULT_INTEREST_RATE_VARIATION
    occupancy_distribution: DistributionType = DistributionType.NORMAL
    adr_distribution: DistributionType = DistributionType.NORMAL
    interest_rate_distribution: DistributionType = DistributionType.NORMAL
    correlation_matrix: Optional[Tuple[Tuple[float, ...], ...]] = None
    seed: Optional[int] = None

    @property
    def variations(self) -> Tuple[float, float, float]:
        return (self.occupancy_variation, self.adr_variation, self.interest_rate_variation)

    @property
    def distributions(self) -> Tuple[DistributionType, DistributionType, DistributionType]:
        return (self.occupancy_distribution, self.adr_distribution, self.interest_rate_distribution)


@dataclass(frozen=True)
class KpiStatistics:
    mean: Optional[float]
    p10: Optional[float]
    p50: Optional[float]
    p90: Optional[float]
    count: int = 0  # Iterations where the KPI was defined


@dataclass(frozen=True)
class RiskMetrics:
    """Downside and upside figures over the simulated NPV and unlevered IRR.

    Attributes:
        probability_of_loss: Share of runs with a negative NPV (0..1)
        var95: NPV at the 5th percentile
        upside_npv: NPV at the 90th percentile
        upside_irr: Unlevered IRR at the 90th percentile; None when no run
            had a defined IRR
    """

    probability_of_loss: float
    var95: float
    upside_npv: float
    upside_irr: Optional[float]


@dataclass
class SimulationIteration:
    iteration: int
    multipliers: Dict[str, float]
    kpis: Dict[str, Optional[float]]


@dataclass
class SimulationResult:
    config: SimulationConfig
    base_case_kpis: Dict[str, Optional[float]]
    iterations: List[SimulationIteration] = field(default_factory=list)
    statistics: Dict[str, KpiStatistics] = field(default_factory=dict)

    def values(self, kpi: str) -> np.ndarray:
        """Defined values of one KPI across iterations."""
        return np.array([it.kpis[kpi] for it in self.iterations if it.kpis.get(kpi) is not None], dtype=float)

    def risk_metrics(self) -> RiskMetrics:
        return calculate_risk_metrics(
            [it.kpis.get("npv") for it in self.iterations],
            [it.kpis.get("unlevered_irr") for it in self.iterations],
        )

    def summary(self) -> str:
        lines = [
            "=" * 60,
            "MONTE CARLO SIMULATION RESULTS",
            "=" * 60,
            f"Iterations: {len(self.iterations):,}",
            "",
            f"  {'KPI':<18}{'Mean':>12}{'P10':>12}{'P50':>12}{'P90':>12}",
        ]
        for kpi in SIMULATION_KPIS:
            stats = self.statistics[kpi]
            cells = [_format_stat(v) for v in (stats.mean, stats.p10, stats.p50, stats.p90)]
            lines.append(f"  {kpi:<18}" + "".join(f"{c:>12}" for c in cells))
        lines.append("=" * 60)
        return "\n".join(lines)


def _format_stat(value: Optional[float]) -> str:
    if value is None:
        return "n/a"
    if abs(value) >= 1000:
        return f"{value:,.0f}"
    return f"{value:.4f}"


def _cholesky(config: SimulationConfig) -> Optional[np.ndarray]:
    if config.correlation_matrix is None:
        return None
    matrix = np.asarray(config.correlation_matrix, dtype=float)
    issues = []
    if matrix.shape != (3, 3):
        issues.append(ValidationIssue("correlation_matrix", f"expected 3x3, got {matrix.shape}", "invalid_shape"))
    elif not np.allclose(matrix, matrix.T) or not np.allclose(np.diag(matrix), 1.0):
        issues.append(ValidationIssue(
            "correlation_matrix", "must be symmetric with a unit diagonal", "invalid_correlation"
        ))
    if not issues:
        try:
            return np.linalg.cholesky(matrix)
        except np.linalg.LinAlgError:
            issues.append(ValidationIssue(
                "correlation_matrix", "must be positive definite", "invalid_correlation"
            ))
    raise ConfigurationError(issues)


def _multiplier(distribution: DistributionType, variation: float, z: float, rng: np.random.Generator) -> float:
    if distribution == DistributionType.NORMAL:
        return 1.0 + variation * z
    if distribution == DistributionType.LOGNORMAL:
        return float(np.exp(variation * z))
    if distribution == DistributionType.PERT:
        a = 1.0 - PERT_SPREAD * variation
        b = 1.0
        c = 1.0 + PERT_SPREAD * variation
        if c == a:
            return b
        alpha = 1 + 4 * (b - a) / (c - a)
        beta = 1 + 4 * (c - b) / (c - a)
        return a + rng.beta(alpha, beta) * (c - a)
    raise ValueError(f"Unknown distribution type: {distribution}")


def sample_multipliers(
    config: SimulationConfig,
    rng: np.random.Generator,
    cholesky: Optional[np.ndarray] = None,
) -> Dict[str, float]:
    """Draw one (occupancy, adr, interest_rate) multiplier set."""
    z = rng.standard_normal(3)
    if cholesky is not None:
        z = cholesky @ z
    return {
        name: _multiplier(distribution, variation, float(zi), rng)
        for name, distribution, variation, zi in zip(SIMULATION_VARIABLES, config.distributions, config.variations, z)
    }


def apply_multipliers(model_input: FullModelInput, multipliers: Dict[str, float]) -> FullModelInput:
    shocked = overrides.scale_occupancy(model_input, multipliers["occupancy"])
    shocked = overrides.scale_adr(shocked, multipliers["adr"])
    return overrides.scale_interest(shocked, multipliers["interest_rate"])


def kpi_statistics(values: Sequence[Optional[float]]) -> KpiStatistics:
    """Mean and 10/50/90th percentiles, ignoring undefined and non-finite values."""
    finite = np.array([v for v in values if v is not None], dtype=float)
    finite = finite[np.isfinite(finite)]
    if finite.size == 0:
        return KpiStatistics(None, None, None, None, 0)
    p10, p50, p90 = np.percentile(finite, [10, 50, 90])
    return KpiStatistics(float(finite.mean()), float(p10), float(p50), float(p90), int(finite.size))


def calculate_risk_metrics(
    npv_values: Sequence[Optional[float]],
    irr_values: Sequence[Optional[float]] = (),
) -> RiskMetrics:
    """Probability of loss, 95% VaR and P90 upside from simulated KPIs.

    Runs whose NPV is undefined (failed iterations) are left out of every
    figure. Percentiles interpolate linearly between ranked values.

    Raises:
        ValueError: If no run has a defined NPV.
    """
    npv = np.array([v for v in npv_values if v is not None], dtype=float)
    if npv.size == 0:
        raise ValueError("Cannot calculate risk metrics without any simulated NPV")
    irr = np.array([v for v in irr_values if v is not None], dtype=float)
    var95, upside_npv = np.percentile(npv, [5, 90])
    return RiskMetrics(
        probability_of_loss=float(np.count_nonzero(npv < 0)) / npv.size,
        var95=float(var95),
        upside_npv=float(upside_npv),
        upside_irr=float(np.percentile(irr, 90)) if irr.size else None,
    )


def _kpis(model_input: FullModelInput) -> Dict[str, Optional[float]]:
    kpis = run_full_model(model_input).kpis()
    return {name: kpis.get(name) for name in SIMULATION_KPIS}


def run_simulation(
    base: FullModelInput,
    config: SimulationConfig = SimulationConfig(),
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> SimulationResult:
    """Run the Monte Carlo simulation.

    Args:
        base: Unshocked model input.
        config: Simulation configuration.
        progress_callback: Optional callback(completed, total) for progress updates.

    Returns:
        SimulationResult with every iteration's KPIs and per-KPI statistics.

    Raises:
        ConfigurationError: If the base input or the correlation matrix is
            invalid.
    """
    cholesky = _cholesky(config)
    base_case_kpis = _kpis(base)
    logger.info("Running Monte Carlo simulation: %d iterations", config.iterations)

    master_rng = np.random.default_rng(config.seed)
    iteration_seeds = master_rng.integers(0, 2**31, size=config.iterations)

    result = SimulationResult(config=config, base_case_kpis=base_case_kpis)
    for i, seed in enumerate(iteration_seeds):
        rng = np.random.default_rng(int(seed))
        multipliers = sample_multipliers(config, rng, cholesky)
        try:
            kpis = _kpis(apply_multipliers(base, multipliers))
        except ModelError as e:
            logger.warning("Simulation iteration %d failed: %s", i, e)
            kpis = {name: None for name in SIMULATION_KPIS}
        result.iterations.append(SimulationIteration(i, multipliers, kpis))
        if progress_callback is not None:
            progress_callback(i + 1, config.iterations)

    result.statistics = {
        kpi: kpi_statistics([it.kpis[kpi] for it in result.iterations])
        for kpi in SIMULATION_KPIS
    }
    return result
