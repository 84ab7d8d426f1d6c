"""Stage cache keyed by content hash, with downstream invalidation."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

STAGE_SEQUENCE: Tuple[str, ...] = ("scenario", "project", "capital", "waterfall")

# Stages that consume each stage's output directly
DOWNSTREAM: Dict[str, Tuple[str, ...]] = {
    "scenario": ("project",),
    "project": ("capital",),
    "capital": ("waterfall",),
    "waterfall": (),
}


@dataclass
class CacheEntry:
    hash: str
    value: Any


@dataclass
class StageCache:
    """One entry per stage; a stage never serves output from stale upstream data.

    A lookup miss for a stage drops every entry downstream of it, walking
    ``DOWNSTREAM`` recursively.
    """

    entries: Dict[str, CacheEntry] = field(default_factory=dict)
    hits: List[str] = field(default_factory=list)
    misses: List[str] = field(default_factory=list)

    def get(self, stage: str, stage_hash: str) -> Optional[Any]:
        entry = self.entries.get(stage)
        if entry is not None and entry.hash == stage_hash:
            self.hits.append(stage)
            logger.debug("Cache hit for %s (%s)", stage, stage_hash[:12])
            return entry.value
        self.misses.append(stage)
        logger.debug("Cache miss for %s (%s)", stage, stage_hash[:12])
        self._invalidate_downstream(stage)
        return None

    def set(self, stage: str, stage_hash: str, value: Any) -> None:
        previous = self.entries.get(stage)
        self.entries[stage] = CacheEntry(hash=stage_hash, value=value)
        if previous is None or previous.hash != stage_hash:
            self._invalidate_downstream(stage)

    def invalidate(self, stage: Optional[str] = None) -> None:
        """Drop ``stage`` and everything downstream, or the whole cache."""
        if stage is None:
            self.entries.clear()
            return
        self.entries.pop(stage, None)
        self._invalidate_downstream(stage)

    def has(self, stage: str) -> bool:
        return stage in self.entries

    def reset_stats(self) -> None:
        self.hits = []
        self.misses = []

    def _invalidate_downstream(self, stage: str) -> None:
        for dependent in DOWNSTREAM[stage]:
            if self.entries.pop(dependent, None) is not None:
                logger.debug("Invalidated %s after change in %s", dependent, stage)
            self._invalidate_downstream(dependent)
