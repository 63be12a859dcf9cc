"""
Deduplication: probe cache, per-run pair dedup and merging with traffic data
"""

from .probe_cache import ProbeCache
from .link_accumulator import BrokenLinkAccumulator
from .merge import merge_and_deduplicate
from .url_canonicalizer import URLCanonicalizer

__all__ = [
    'ProbeCache',
    'BrokenLinkAccumulator',
    'merge_and_deduplicate',
    'URLCanonicalizer'
]
