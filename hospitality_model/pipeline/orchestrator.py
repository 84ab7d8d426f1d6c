"""Full model pipeline: scenario -> project -> capital -> waterfall.

``run_full_model`` runs every stage from scratch. ``ModelPipeline`` does the
same through a ``StageCache`` so unchanged stages are reused between runs.
Both validate the stage contracts and halt on the first failure.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..calculations.capital import CapitalEngineResult, run_capital_engine
from ..calculations.project import (
    BreakevenMetrics,
    ProjectEngineResult,
    calculate_breakeven_occupancy,
    run_project_engine,
)
from ..calculations.scenario import ScenarioEngineOutput, run_scenario_engine
from ..calculations.waterfall import WaterfallResult, run_waterfall_engine
from ..errors import ConfigurationError, ScenarioEngineError
from ..models.model import FullModelInput
from ..models.pnl import ConsolidatedAnnualPnl
from ..models.serialization import stable_hash
from ..models.validation import capital_issues, investment_issues, project_issues, waterfall_issues
from .cache import StageCache
from .contracts import check_capital_to_waterfall, check_project_to_capital, check_scenario_to_project
from .telemetry import StageTelemetry, StageTimer

logger = logging.getLogger(__name__)


@dataclass
class FullModelOutput:
    """Every stage result for one ``FullModelInput``. Consumers treat it as read-only."""

    model_input: FullModelInput
    scenario: ScenarioEngineOutput
    project: ProjectEngineResult
    capital: CapitalEngineResult
    waterfall: WaterfallResult
    breakeven: BreakevenMetrics
    telemetry: List[StageTelemetry] = field(default_factory=list)

    @property
    def consolidated_annual_pnl(self) -> List[ConsolidatedAnnualPnl]:
        return self.scenario.consolidated_annual_pnl

    def kpis(self) -> Dict[str, Optional[float]]:
        """Headline KPIs. The levered figures are the first partner's."""
        project = self.project.project_kpis
        first = self.waterfall.partners[0] if self.waterfall.partners else None
        return {
            "npv": project.npv,
            "unlevered_irr": project.unlevered_irr,
            "equity_multiple": project.equity_multiple,
            "payback_period": project.payback_period,
            "wacc": project.wacc,
            "enterprise_value": self.project.dcf_valuation.enterprise_value,
            "levered_irr": first.irr if first else None,
            "moic": first.moic if first else None,
        }


def _check_configs(model_input: FullModelInput) -> None:
    issues = (
        project_issues(model_input.project_config)
        + capital_issues(model_input.capital_config)
        + waterfall_issues(model_input.waterfall_config)
        + investment_issues(model_input.project_config, model_input.capital_config)
    )
    if issues:
        raise ConfigurationError(issues)


class ModelPipeline:
    """Runs the full model, memoizing each stage in a ``StageCache``.

    Each stage key hashes the upstream stage key together with the configs
    that stage reads, so a change anywhere upstream changes every key below
    it.

    Cached stage results are returned by identity: two runs served from the
    same entry share the same objects. Treat every ``FullModelOutput`` as
    read-only; mutating one mutates the cache and every other output built
    from that entry.

    Example:
        >>> pipeline = ModelPipeline()
        >>> first = pipeline.run(model_input)
        >>> second = pipeline.run(model_input)
        >>> pipeline.cache.hits[-4:]
        ['scenario', 'project', 'capital', 'waterfall']
    """

    def __init__(self, cache: Optional[StageCache] = None):
        self.cache = cache if cache is not None else StageCache()

    def _stage(self, stage: str, stage_hash: str, timer: StageTimer, compute: Callable[[], Any]) -> Any:
        cached = self.cache.get(stage, stage_hash)
        if cached is not None:
            with timer.measure(stage, stage_hash, from_cache=True):
                return cached
        with timer.measure(stage, stage_hash, from_cache=False):
            value = compute()
        self.cache.set(stage, stage_hash, value)
        return value

    def run(self, model_input: FullModelInput) -> FullModelOutput:
        """Run every stage, reusing cached results whose inputs are unchanged.

        Raises:
            ConfigurationError: If the project, capital or waterfall configs
                are invalid.
            ScenarioEngineError: If the scenario engine returns an error.
            ContractViolationError: If a stage breaks the next stage's
                contract.
        """
        _check_configs(model_input)
        timer = StageTimer()
        scenario = model_input.scenario
        horizon = scenario.horizon_years

        scenario_hash = stable_hash({"scenario": scenario})
        logger.info("Running model for scenario %s (%d years)", scenario.id, horizon)

        def compute_scenario() -> ScenarioEngineOutput:
            result = run_scenario_engine(scenario)
            if not result.ok:
                raise ScenarioEngineError(result.error)
            check_scenario_to_project(horizon, result.data)
            return result.data

        scenario_output = self._stage("scenario", scenario_hash, timer, compute_scenario)
        annual = scenario_output.consolidated_annual_pnl

        project_hash = stable_hash({
            "upstream": scenario_hash,
            "project_config": model_input.project_config,
            "capital_config": model_input.capital_config,
        })

        def compute_project() -> ProjectEngineResult:
            result = run_project_engine(annual, model_input.project_config, model_input.capital_config)
            check_project_to_capital(annual, result)
            return result

        project = self._stage("project", project_hash, timer, compute_project)

        capital_hash = stable_hash({"upstream": project_hash, "capital_config": model_input.capital_config})

        def compute_capital() -> CapitalEngineResult:
            result = run_capital_engine(
                annual,
                project.unlevered_fcf,
                model_input.capital_config,
                scenario_output.consolidated_monthly_pnl,
            )
            check_capital_to_waterfall(horizon, result)
            return result

        capital = self._stage("capital", capital_hash, timer, compute_capital)

        waterfall_hash = stable_hash({"upstream": capital_hash, "waterfall_config": model_input.waterfall_config})
        waterfall = self._stage(
            "waterfall",
            waterfall_hash,
            timer,
            lambda: run_waterfall_engine(capital.owner_levered_cash_flows, model_input.waterfall_config),
        )

        first_year_service = capital.debt_schedule[0].debt_service if capital.debt_schedule else 0.0
        logger.info("Model run complete: NPV %.2f", project.project_kpis.npv)
        return FullModelOutput(
            model_input=model_input,
            scenario=scenario_output,
            project=project,
            capital=capital,
            waterfall=waterfall,
            breakeven=calculate_breakeven_occupancy(annual, first_year_service),
            telemetry=timer.records,
        )


def run_full_model(model_input: FullModelInput) -> FullModelOutput:
    """Run the whole pipeline with no cache."""
    return ModelPipeline(StageCache()).run(model_input)
