"""Side-by-side scenario comparison helpers."""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from ..calculations.project import ProjectKpis
from ..models.model import FullModelInput, NamedScenario
from ..pipeline.orchestrator import FullModelOutput, run_full_model
from . import overrides

logger = logging.getLogger(__name__)


@dataclass
class ScenarioTriadResult:
    base: ProjectKpis
    stress: ProjectKpis
    upside: ProjectKpis


@dataclass
class ScenarioComparison:
    id: str
    name: str
    kpis: ProjectKpis


@dataclass
class CapitalSummary:
    avg_dscr: Optional[float]  # None with no defined DSCR
    final_ltv: Optional[float]
    total_debt_service: float
    total_debt_principal: float


@dataclass
class PartnerSummary:
    partner_id: str
    partner_name: str
    irr: Optional[float]
    moic: Optional[float]


@dataclass
class ScenarioSummary:
    scenario_id: str
    scenario_name: str
    project_kpis: ProjectKpis
    capital_kpis: CapitalSummary
    waterfall_kpis: List[PartnerSummary] = field(default_factory=list)


def stressed(model_input: FullModelInput, multiplier: float) -> FullModelInput:
    """Scale occupancy/utilization and room rates together."""
    return overrides.scale_adr(overrides.scale_occupancy(model_input, multiplier), multiplier)


def run_scenario_triad(base: FullModelInput, stress_pct: float) -> ScenarioTriadResult:
    """Project KPIs for the base case and for occupancy+ADR moved down and up by ``stress_pct``.

    Example:
        >>> triad = run_scenario_triad(model_input, 0.10)
        >>> triad.stress.npv < triad.base.npv < triad.upside.npv
        True
    """
    return ScenarioTriadResult(
        base=run_full_model(base).project.project_kpis,
        stress=run_full_model(stressed(base, 1.0 - stress_pct)).project.project_kpis,
        upside=run_full_model(stressed(base, 1.0 + stress_pct)).project.project_kpis,
    )


def compare_scenarios(scenarios: Iterable[NamedScenario]) -> List[ScenarioComparison]:
    """Run each named scenario independently and collect its project KPIs."""
    results = []
    for named in scenarios:
        output = run_full_model(named.model_input)
        results.append(ScenarioComparison(named.id, named.name, output.project.project_kpis))
    logger.info("Compared %d scenarios", len(results))
    return results


def build_scenario_summary(output: FullModelOutput) -> ScenarioSummary:
    capital = output.capital
    dscrs = [kpi.dscr for kpi in capital.debt_kpis if kpi.dscr is not None]
    avg_dscr = sum(dscrs) / len(dscrs) if dscrs else None
    final_ltv = capital.debt_kpis[-1].ltv if capital.debt_kpis else None

    partners = [
        PartnerSummary(p.partner_id, p.name or p.partner_id, p.irr, p.moic)
        for p in output.waterfall.partners
    ]
    scenario = output.model_input.scenario
    return ScenarioSummary(
        scenario_id=scenario.id,
        scenario_name=scenario.name,
        project_kpis=output.project.project_kpis,
        capital_kpis=CapitalSummary(
            avg_dscr=avg_dscr,
            final_ltv=final_ltv,
            total_debt_service=sum((e.debt_service for e in capital.debt_schedule), 0.0),
            total_debt_principal=sum((e.principal for e in capital.debt_schedule), 0.0),
        ),
        waterfall_kpis=partners,
    )
