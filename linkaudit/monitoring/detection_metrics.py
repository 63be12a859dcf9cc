import time
from enum import Enum
from dataclasses import dataclass
from collections import Counter
from typing import Dict, Any


class ValidationOutcome(Enum):
    """How a single candidate link was resolved"""
    OUT_OF_SCOPE = "out-of-scope"
    CACHE_HIT_BROKEN = "cache-hit-broken"
    CACHE_HIT_WORKING = "cache-hit-working"
    API_BROKEN = "api-broken"
    API_WORKING = "api-working"

    @property
    def is_broken(self) -> bool:
        return self in (ValidationOutcome.CACHE_HIT_BROKEN, ValidationOutcome.API_BROKEN)


@dataclass
class DetectionStats:
    """Link-check statistics for one run or batch"""
    total_links_analyzed: int = 0
    links_checked_via_api: int = 0
    cache_hits_broken: int = 0
    cache_hits_working: int = 0
    cache_hit_rate: float = 0.0
    processing_time_seconds: float = 0.0

    @property
    def total_cache_hits(self) -> int:
        return self.cache_hits_broken + self.cache_hits_working

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalLinksAnalyzed': self.total_links_analyzed,
            'linksCheckedViaAPI': self.links_checked_via_api,
            'cacheHitsBroken': self.cache_hits_broken,
            'cacheHitsWorking': self.cache_hits_working,
            'cacheHitRate': self.cache_hit_rate,
            'processingTimeSeconds': self.processing_time_seconds,
        }


class ValidationTally:
    """Counts validation outcomes and turns them into DetectionStats"""

    def __init__(self):
        self.start_time = time.time()
        self.outcomes: Counter = Counter()

    def record(self, outcome: ValidationOutcome):
        self.outcomes[outcome] += 1

    def elapsed(self) -> float:
        return time.time() - self.start_time

    def format_elapsed(self) -> str:
        return f"[{self.elapsed():.1f}s]"

    def build_stats(self) -> DetectionStats:
        """Derive stats; out-of-scope links are not counted as analyzed"""
        total = sum(count for outcome, count in self.outcomes.items()
                    if outcome is not ValidationOutcome.OUT_OF_SCOPE)
        cache_hits_broken = self.outcomes[ValidationOutcome.CACHE_HIT_BROKEN]
        cache_hits_working = self.outcomes[ValidationOutcome.CACHE_HIT_WORKING]
        via_api = self.outcomes[ValidationOutcome.API_BROKEN] + self.outcomes[ValidationOutcome.API_WORKING]

        cache_hit_rate = 0.0
        if total > 0:
            cache_hit_rate = round((cache_hits_broken + cache_hits_working) / total * 100, 1)

        return DetectionStats(
            total_links_analyzed=total,
            links_checked_via_api=via_api,
            cache_hits_broken=cache_hits_broken,
            cache_hits_working=cache_hits_working,
            cache_hit_rate=cache_hit_rate,
            processing_time_seconds=round(self.elapsed(), 1),
        )
