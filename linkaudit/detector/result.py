"""
Batch Result - Data structure returned by one resumable detection batch
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..records import BrokenLinkRecord
from ..monitoring.detection_metrics import DetectionStats
from ..storage.batch_state import BatchState


@dataclass
class BatchResult:
    """Outcome of processing one slice of the page set"""
    results: List[BrokenLinkRecord] = field(default_factory=list)
    broken_urls_cache: List[str] = field(default_factory=list)
    working_urls_cache: List[str] = field(default_factory=list)
    pages_processed: int = 0
    pages_skipped: int = 0
    has_more_pages: bool = False
    next_batch_start_index: int = 0
    total_pages: int = 0
    stats: DetectionStats = field(default_factory=DetectionStats)

    def to_batch_state(self) -> BatchState:
        """State to pass into the next batch call"""
        return BatchState(
            batch_start_index=self.next_batch_start_index,
            broken_urls_cache=list(self.broken_urls_cache),
            working_urls_cache=list(self.working_urls_cache),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'results': [record.to_dict() for record in self.results],
            'brokenUrlsCache': list(self.broken_urls_cache),
            'workingUrlsCache': list(self.working_urls_cache),
            'pagesProcessed': self.pages_processed,
            'pagesSkipped': self.pages_skipped,
            'hasMorePages': self.has_more_pages,
            'nextBatchStartIndex': self.next_batch_start_index,
            'totalPages': self.total_pages,
            'stats': self.stats.to_dict(),
        }
