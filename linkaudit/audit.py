"""
Audit runner - combines crawl detection with traffic-analytics broken links
into a prioritized report
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import aiohttp

from .config import AuditConfig
from .records import BrokenLinkRecord, KPIResult, as_record
from .prioritizer import calculate_kpi_deltas_for_audit, calculate_priority
from .deduplication import BrokenLinkAccumulator, ProbeCache, merge_and_deduplicate
from .detector import BrokenLinkDetector, DetectorBuilder
from .storage import BatchState, SnapshotStore
from .utils.prober import AccessibilityProber
from .monitoring import create_context_logger

logger = logging.getLogger(__name__)


@dataclass
class AuditReport:
    """Prioritized broken internal links with projected impact"""
    broken_internal_links: List[BrokenLinkRecord] = field(default_factory=list)
    kpi_deltas: KPIResult = field(default_factory=KPIResult)
    success: bool = True
    error: Optional[str] = None
    pages_total: int = 0
    pages_skipped: int = 0

    def to_dict(self) -> Dict[str, Any]:
        report = {
            'brokenInternalLinks': [link.to_dict() for link in self.broken_internal_links],
            'kpiDeltas': self.kpi_deltas.to_dict(),
            'success': self.success,
            'pagesTotal': self.pages_total,
            'pagesSkipped': self.pages_skipped,
        }
        if self.error:
            report['error'] = self.error
        return report


async def check_traffic_links(traffic_links: Iterable, prober: AccessibilityProber,
                              config: Optional[AuditConfig] = None) -> List[BrokenLinkRecord]:
    """
    Re-probe broken links reported by traffic analytics

    Analytics data lags behind fixes, so only targets that are still
    inaccessible are kept. Each distinct target is probed once, in groups of
    config.link_check_batch_size with config.link_check_delay between groups.
    """
    config = config or AuditConfig()
    records = [as_record(link) for link in traffic_links or ()]
    targets = list(dict.fromkeys(record.url_to for record in records))
    group_size = config.link_check_batch_size

    cache = ProbeCache()
    for start in range(0, len(targets), group_size):
        group = targets[start:start + group_size]
        verdicts = await asyncio.gather(*(prober.is_link_inaccessible(url) for url in group))
        for url, inaccessible in zip(group, verdicts):
            cache.record(url, inaccessible)

        if start + group_size < len(targets) and config.link_check_delay:
            await asyncio.sleep(config.link_check_delay)

    return [record for record in records if cache.is_broken(record.url_to)]


async def run_crawl_batches(detector: BrokenLinkDetector, page_mapping: Mapping[str, str],
                            batch_size: Optional[int] = None,
                            state: Optional[BatchState] = None) -> Tuple[List[BrokenLinkRecord], BatchState, int]:
    """
    Drive the batch entry point until every page is processed

    Returns:
        (broken links, final batch state, pages skipped)
    """
    state = state or BatchState()
    accumulator = BrokenLinkAccumulator()
    pages_skipped = 0

    while True:
        result = await detector.detect_broken_links_from_crawl_batch(
            page_mapping,
            batch_start_index=state.batch_start_index,
            batch_size=batch_size,
            initial_broken_urls=state.broken_urls_cache,
            initial_working_urls=state.working_urls_cache,
        )
        accumulator.extend(result.results)
        pages_skipped += result.pages_skipped
        state = result.to_batch_state()

        if state.exceeds_size_limit():
            logger.warning(f"Probe cache is {state.estimate_cache_size()} bytes, above the hand-off limit")

        if not result.has_more_pages:
            break

    return accumulator.results(), state, pages_skipped


def build_audit_report(crawl_links: Iterable, traffic_links: Iterable,
                       cpc_value: Optional[float] = None) -> AuditReport:
    """Merge both sources, rank by traffic and project KPIs"""
    merged = merge_and_deduplicate(crawl_links, traffic_links)
    prioritized = calculate_priority(merged)
    return AuditReport(
        broken_internal_links=prioritized,
        kpi_deltas=calculate_kpi_deltas_for_audit(prioritized, cpc_value),
    )


async def run_audit(snapshot_store: SnapshotStore, page_mapping: Mapping[str, str],
                    traffic_links: Iterable = (), base_url: Optional[str] = None,
                    site_id: Optional[str] = None, config: Optional[AuditConfig] = None,
                    session: Optional[aiohttp.ClientSession] = None) -> AuditReport:
    """Full audit: crawl detection in batches, traffic link re-check, merge and ranking"""
    config = config or AuditConfig()
    log = create_context_logger(logger, site_id)

    if session is None:
        async with aiohttp.ClientSession() as own_session:
            return await run_audit(snapshot_store, page_mapping, traffic_links, base_url,
                                   site_id, config, own_session)

    builder = DetectorBuilder(snapshot_store, config.snapshot_bucket).with_config(config)
    if site_id:
        builder.with_site_id(site_id)
    if base_url:
        builder.with_audit_scope(base_url)
    detector = builder.build(session)

    try:
        crawl_links, _, pages_skipped = await run_crawl_batches(detector, page_mapping)
        confirmed_traffic_links = await check_traffic_links(traffic_links, detector.prober, config)
    except Exception as e:
        log.error(f"audit failed with error: {e}")
        return AuditReport(success=False, error=str(e), pages_total=len(page_mapping))

    report = build_audit_report(crawl_links, confirmed_traffic_links, config.cpc_value)
    report.pages_total = len(page_mapping)
    report.pages_skipped = pages_skipped
    log.info(f"found: {len(report.broken_internal_links)} broken internal links")
    return report
