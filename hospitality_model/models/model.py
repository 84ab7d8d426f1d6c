"""The single input object consumed by the pipeline."""

from dataclasses import dataclass

from pydantic import with_config

from .capital import CapitalStructureConfig
from .operations import INPUT_CONFIG
from .project import ProjectConfig, ProjectScenario
from .waterfall import WaterfallConfig


@with_config(INPUT_CONFIG)
@dataclass(frozen=True)
class FullModelInput:
    """Scenario, valuation, capital and waterfall inputs for one model run."""

    scenario: ProjectScenario
    project_config: ProjectConfig
    capital_config: CapitalStructureConfig
    waterfall_config: WaterfallConfig


@with_config(INPUT_CONFIG)
@dataclass(frozen=True)
class NamedScenario:
    """A labelled model input, as kept by scenario libraries."""

    id: str
    name: str
    model_input: FullModelInput
    description: str = ""
