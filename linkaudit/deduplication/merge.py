import logging
from typing import Iterable, List

from ..records import BrokenLinkRecord, as_record
from .link_accumulator import BrokenLinkAccumulator

logger = logging.getLogger(__name__)


def merge_and_deduplicate(crawl_links: Iterable, traffic_links: Iterable) -> List[BrokenLinkRecord]:
    """
    Merge crawl-detected and traffic-analytics broken links

    Traffic records win for a shared (url_from, url_to) pair since they carry
    real trafficDomain values; crawl-only pairs pass through unchanged. A pair
    repeated in the traffic input keeps its first position and its last record.

    Args:
        crawl_links: Records (or dicts) found by crawl detection, trafficDomain 0
        traffic_links: Records (or dicts) reported by traffic analytics

    Returns:
        Merged list, traffic records first
    """
    accumulator = BrokenLinkAccumulator()

    traffic_count = 0
    for link in traffic_links or ():
        accumulator.add(as_record(link), replace=True)
        traffic_count += 1

    crawl_only_count = 0
    for link in crawl_links or ():
        if accumulator.add(as_record(link)):
            crawl_only_count += 1

    merged = accumulator.results()
    logger.info(f"Merged: {traffic_count} RUM + {crawl_only_count} crawl-only = {len(merged)} total")
    return merged
