"""Pipeline orchestration, stage caching and request sequencing."""

from .cache import DOWNSTREAM, STAGE_SEQUENCE, CacheEntry, StageCache
from .contracts import check_capital_to_waterfall, check_project_to_capital, check_scenario_to_project
from .orchestrator import FullModelOutput, ModelPipeline, run_full_model
from .requests import RequestSequencer
from .telemetry import StageTelemetry, StageTimer

__all__ = [
    "DOWNSTREAM",
    "STAGE_SEQUENCE",
    "CacheEntry",
    "StageCache",
    "check_capital_to_waterfall",
    "check_project_to_capital",
    "check_scenario_to_project",
    "FullModelOutput",
    "ModelPipeline",
    "run_full_model",
    "RequestSequencer",
    "StageTelemetry",
    "StageTimer",
]
