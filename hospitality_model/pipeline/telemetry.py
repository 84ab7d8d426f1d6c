"""Per-stage timing and cache provenance."""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List

logger = logging.getLogger(__name__)


@dataclass
class StageTelemetry:
    stage: str
    hash: str
    from_cache: bool
    duration_ms: float


class StageTimer:
    """Collects one ``StageTelemetry`` record per stage of a run."""

    def __init__(self):
        self.records: List[StageTelemetry] = []

    @contextmanager
    def measure(self, stage: str, stage_hash: str, from_cache: bool) -> Iterator[None]:
        started = time.perf_counter()
        yield
        duration_ms = (time.perf_counter() - started) * 1000.0
        self.records.append(StageTelemetry(stage, stage_hash, from_cache, duration_ms))
        logger.debug("Stage %s took %.2f ms (cached=%s)", stage, duration_ms, from_cache)
