"""
Broken Link Detector - checks internal links found in stored page snapshots
"""

import asyncio
import logging
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from .result import BatchResult
from ..config import AuditConfig
from ..parser import ExtractedLink, LinkExtractor
from ..records import BrokenLinkRecord
from ..scope import ScopePredicate, always_in_scope
from ..storage import SnapshotStore, ScrapedPage
from ..deduplication import ProbeCache, BrokenLinkAccumulator
from ..monitoring import ValidationOutcome, ValidationTally, create_context_logger
from ..utils.prober import AccessibilityProber

logger = logging.getLogger(__name__)


class BrokenLinkDetector:
    """
    Finds broken internal links across a set of scraped pages
    Pages are read one at a time; links on a page are probed in small
    concurrent groups with a pause between groups. The probe cache is passed
    in and returned so large page sets can be split over several calls.
    """

    def __init__(self, snapshot_store: SnapshotStore, prober: AccessibilityProber,
                 bucket: Optional[str] = None, scope: Optional[ScopePredicate] = None,
                 config: Optional[AuditConfig] = None, site_id: Optional[str] = None):
        self.snapshot_store = snapshot_store
        self.prober = prober
        self.config = config or AuditConfig()
        self.bucket = bucket or self.config.snapshot_bucket
        self.scope = scope or always_in_scope
        self.site_id = site_id
        self.log = create_context_logger(logger, site_id)

    async def detect_broken_links_from_crawl(self, page_url_to_snapshot_key: Mapping[str, str]) -> List[BrokenLinkRecord]:
        """Process every page in one call, in the mapping's order"""
        pages = list(page_url_to_snapshot_key.items())
        cache = ProbeCache()
        accumulator = BrokenLinkAccumulator()
        tally = ValidationTally()

        self.log.info(f"{tally.format_elapsed()} Starting crawl detection for {len(pages)} pages")

        pages_processed, pages_skipped = await self._process_pages(
            pages, cache, accumulator, tally, offset=0, total_pages=len(pages)
        )

        results = accumulator.results()
        stats = tally.build_stats()
        self.log.info(f"[{stats.processing_time_seconds}s] ========== CRAWL DETECTION SUMMARY ==========")
        self.log.info(f"Pages: {pages_processed} processed, {pages_skipped} skipped")
        self.log.info(f"Links: {stats.total_links_analyzed} analyzed, {stats.links_checked_via_api} probed")
        self.log.info(
            f"Cache hits: {stats.total_cache_hits} ({stats.cache_hit_rate}%) - "
            f"{stats.cache_hits_broken} broken, {stats.cache_hits_working} working"
        )
        self.log.info(f"Results: {len(cache.broken_urls)} unique broken URLs, {len(results)} total instances")
        self.log.info(
            f"Settings: group size {self.config.link_check_batch_size}, "
            f"delays {self.config.link_check_delay}s/{self.config.page_delay}s"
        )

        return results

    async def detect_broken_links_from_crawl_batch(self, page_mapping: Mapping[str, str],
                                                   batch_start_index: int = 0,
                                                   batch_size: Optional[int] = None,
                                                   initial_broken_urls: Iterable[str] = (),
                                                   initial_working_urls: Iterable[str] = ()) -> BatchResult:
        """
        Process one slice of the page set

        Args:
            page_mapping: Page URL -> snapshot key
            batch_start_index: Position in the URL-sorted page list to start from
            batch_size: Pages to process in this call
            initial_broken_urls: Broken URLs known from earlier batches
            initial_working_urls: Working URLs known from earlier batches

        Returns:
            BatchResult with this batch's broken links and the updated caches
        """
        if batch_size is None:
            batch_size = self.config.pages_per_batch
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        batch_start_index = max(0, batch_start_index)

        # Sorted so every call sees the same order regardless of mapping order
        all_pages = sorted(page_mapping.items(), key=lambda item: item[0])
        total_pages = len(all_pages)
        batch_end_index = min(batch_start_index + batch_size, total_pages)
        batch_pages = all_pages[batch_start_index:batch_end_index]

        cache = ProbeCache(initial_broken_urls, initial_working_urls)
        accumulator = BrokenLinkAccumulator()
        tally = ValidationTally()

        self.log.info(f"{tally.format_elapsed()} ====== BATCH PROCESSING START ======")
        self.log.info(
            f"{tally.format_elapsed()} Processing pages {batch_start_index + 1}-{batch_end_index} of {total_pages}"
        )
        self.log.info(
            f"{tally.format_elapsed()} Initial cache: {len(cache.broken_urls)} broken, "
            f"{len(cache.working_urls)} working URLs"
        )

        pages_processed, pages_skipped = await self._process_pages(
            batch_pages, cache, accumulator, tally, offset=batch_start_index, total_pages=total_pages
        )

        broken_urls, working_urls = cache.snapshot()
        has_more_pages = batch_start_index + batch_size < total_pages
        result = BatchResult(
            results=accumulator.results(),
            broken_urls_cache=broken_urls,
            working_urls_cache=working_urls,
            pages_processed=pages_processed,
            pages_skipped=pages_skipped,
            has_more_pages=has_more_pages,
            next_batch_start_index=batch_end_index,
            total_pages=total_pages,
            stats=tally.build_stats(),
        )

        stats = result.stats
        self.log.info(f"{tally.format_elapsed()} ====== BATCH SUMMARY ======")
        self.log.info(f"{tally.format_elapsed()} Links: {stats.total_links_analyzed} analyzed, "
                      f"{stats.links_checked_via_api} probed")
        self.log.info(f"{tally.format_elapsed()} Cache: {stats.total_cache_hits} hits ({stats.cache_hit_rate}%) - "
                      f"{stats.cache_hits_broken} broken, {stats.cache_hits_working} working")
        self.log.info(f"{tally.format_elapsed()} Results: {len(result.results)} broken links found in this batch")
        remaining = total_pages - batch_end_index
        self.log.info(f"{tally.format_elapsed()} Progress: "
                      f"{f'{remaining} pages remaining' if has_more_pages else 'ALL PAGES COMPLETE'}")

        return result

    async def _process_pages(self, pages: Sequence[Tuple[str, str]], cache: ProbeCache,
                             accumulator: BrokenLinkAccumulator, tally: ValidationTally,
                             offset: int, total_pages: int) -> Tuple[int, int]:
        """Returns (pages_processed, pages_skipped)"""
        pages_processed = 0
        pages_skipped = 0

        for index, (url, snapshot_key) in enumerate(pages):
            pages_processed += 1
            if pages_processed % 5 == 1 or pages_processed == len(pages):
                self.log.info(
                    f"{tally.format_elapsed()} Progress: {offset + pages_processed}/{total_pages} pages "
                    f"(batch {pages_processed}/{len(pages)})"
                )

            try:
                if not await self._process_page(url, snapshot_key, cache, accumulator, tally):
                    pages_skipped += 1
            except Exception as e:
                self.log.error(f"Error processing {url}: {e}")
                pages_skipped += 1

            if index + 1 < len(pages) and self.config.page_delay:
                await asyncio.sleep(self.config.page_delay)

        return pages_processed, pages_skipped

    async def _process_page(self, url: str, snapshot_key: str, cache: ProbeCache,
                            accumulator: BrokenLinkAccumulator, tally: ValidationTally) -> bool:
        """Check one page's links; returns False when the page was skipped"""
        try:
            snapshot = await self.snapshot_store.get_object(self.bucket, snapshot_key)
        except Exception as e:
            self.log.error(f"Failed to fetch snapshot for {url} ({snapshot_key}): {e}")
            return False

        page = ScrapedPage.from_snapshot(url, snapshot)
        if page is None:
            self.log.warning(f"No raw HTML in snapshot for {url}, skipping")
            return False

        if not self.scope(page.base_url):
            self.log.debug(f"Skipping page outside audit scope: {page.base_url}")
            return False

        links = LinkExtractor(page.base_url).extract(page.raw_html)
        if links:
            self.log.debug(f"Checking {len(links)} links on {page.base_url}")
        await self._check_links(page.base_url, links, cache, accumulator, tally)
        return True

    async def _check_links(self, page_url: str, links: List[ExtractedLink], cache: ProbeCache,
                           accumulator: BrokenLinkAccumulator, tally: ValidationTally):
        group_size = self.config.link_check_batch_size

        for start in range(0, len(links), group_size):
            group = links[start:start + group_size]
            # Links are unique per page, so no URL is probed twice within a group
            outcomes = await asyncio.gather(*(self._validate_link(link, cache) for link in group))

            for link, outcome in zip(group, outcomes):
                tally.record(outcome)
                if outcome.is_broken:
                    accumulator.add(BrokenLinkRecord(
                        url_from=page_url,
                        url_to=link.resolved_url,
                        anchor_text=link.anchor_text,
                        traffic_domain=0,
                    ))

            if start + group_size < len(links) and self.config.link_check_delay:
                await asyncio.sleep(self.config.link_check_delay)

    async def _validate_link(self, link: ExtractedLink, cache: ProbeCache) -> ValidationOutcome:
        url = link.resolved_url
        if not self.scope(url):
            return ValidationOutcome.OUT_OF_SCOPE

        cached = cache.lookup(url)
        if cached is True:
            return ValidationOutcome.CACHE_HIT_BROKEN
        if cached is False:
            return ValidationOutcome.CACHE_HIT_WORKING

        inaccessible = await self.prober.is_link_inaccessible(url)
        cache.record(url, inaccessible)
        return ValidationOutcome.API_BROKEN if inaccessible else ValidationOutcome.API_WORKING
