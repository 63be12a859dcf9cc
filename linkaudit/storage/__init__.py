"""
Snapshot access and batch state carry-over
"""

from .snapshot_store import SnapshotStore, ScrapedPage
from .file_storage import FileSnapshotStore
from .batch_state import BatchState, estimate_cache_size, CACHE_SIZE_LIMIT

__all__ = [
    'SnapshotStore',
    'ScrapedPage',
    'FileSnapshotStore',
    'BatchState',
    'estimate_cache_size',
    'CACHE_SIZE_LIMIT'
]
