import pytest

from linkaudit.audit import run_crawl_batches
from linkaudit.detector import BrokenLinkDetector, DetectorBuilder
from linkaudit.scope import AuditScope

from conftest import MemorySnapshotStore, StubProber, make_html, make_snapshot

BROKEN = "https://example.com/broken"


def make_detector(objects, broken=(), config=None, scope=None):
    store = MemorySnapshotStore(objects)
    prober = StubProber(broken)
    detector = BrokenLinkDetector(store, prober, bucket="test-bucket", scope=scope, config=config)
    return detector, prober, store


class TestDetectBrokenLinksFromCrawl:
    @pytest.mark.asyncio
    async def test_repeated_link_on_a_page_is_reported_once(self, fast_config):
        html = make_html([("/broken", "Broken Link")] * 3)
        detector, prober, store = make_detector(
            {"key-page": make_snapshot(html)}, broken=[BROKEN], config=fast_config
        )

        results = await detector.detect_broken_links_from_crawl({"https://example.com/page": "key-page"})

        assert len(results) == 1
        assert results[0].url_from == "https://example.com/page"
        assert results[0].url_to == BROKEN
        assert results[0].anchor_text == "Broken Link"
        assert results[0].traffic_domain == 0
        assert prober.calls == [BROKEN]
        assert store.requests == [("test-bucket", "key-page")]

    @pytest.mark.asyncio
    async def test_cache_prevents_reprobing_across_pages(self, fast_config):
        html = make_html([("/broken", "Broken"), ("/ok", "OK")])
        detector, prober, _ = make_detector(
            {"k1": make_snapshot(html), "k2": make_snapshot(html)}, broken=[BROKEN], config=fast_config
        )

        results = await detector.detect_broken_links_from_crawl({
            "https://example.com/p1": "k1",
            "https://example.com/p2": "k2",
        })

        assert sorted(prober.calls) == [BROKEN, "https://example.com/ok"]
        assert [(r.url_from, r.url_to) for r in results] == [
            ("https://example.com/p1", BROKEN),
            ("https://example.com/p2", BROKEN),
        ]

    @pytest.mark.asyncio
    async def test_navigation_and_fragment_links_are_never_probed(self, fast_config):
        html = make_html(
            [("#section", "Jump"), ("/content", "Content")],
            header_links=[("/broken", "Nav")],
            footer_links=[("/broken", "Footer")],
        )
        detector, prober, _ = make_detector({"k": make_snapshot(html)}, broken=[BROKEN], config=fast_config)

        results = await detector.detect_broken_links_from_crawl({"https://example.com/page": "k"})

        assert results == []
        assert prober.calls == ["https://example.com/content"]

    @pytest.mark.asyncio
    async def test_unreadable_pages_are_skipped(self, fast_config):
        html = make_html([("/broken", "Broken")])
        detector, _, _ = make_detector({
            "good": make_snapshot(html),
            "no-body": {"finalUrl": "https://example.com/b", "scrapeResult": {}},
            "boom": RuntimeError("S3 unavailable"),
        }, broken=[BROKEN], config=fast_config)

        result = await detector.detect_broken_links_from_crawl_batch({
            "https://example.com/a": "good",
            "https://example.com/b": "no-body",
            "https://example.com/c": "boom",
            "https://example.com/d": "missing",
        }, batch_size=10)

        assert result.pages_processed == 4
        assert result.pages_skipped == 3
        assert [r.url_to for r in result.results] == [BROKEN]

    @pytest.mark.asyncio
    async def test_final_url_is_used_as_page_url(self, fast_config):
        html = make_html([("child", "Child")])
        detector, _, _ = make_detector(
            {"k": make_snapshot(html, final_url="https://example.com/new/")},
            broken=["https://example.com/new/child"],
            config=fast_config,
        )

        results = await detector.detect_broken_links_from_crawl({"https://example.com/old": "k"})

        assert [(r.url_from, r.url_to) for r in results] == [
            ("https://example.com/new/", "https://example.com/new/child"),
        ]

    @pytest.mark.asyncio
    async def test_audit_scope_limits_pages_and_links(self, fast_config):
        html = make_html([("/uk/broken", "In scope"), ("/fr/broken", "Out of scope")])
        detector, prober, _ = make_detector(
            {"uk": make_snapshot(html), "fr": make_snapshot(html)},
            broken=["https://example.com/uk/broken", "https://example.com/fr/broken"],
            config=fast_config,
            scope=AuditScope("https://example.com/uk"),
        )

        result = await detector.detect_broken_links_from_crawl_batch({
            "https://example.com/uk/page": "uk",
            "https://example.com/fr/page": "fr",
        })

        assert prober.calls == ["https://example.com/uk/broken"]
        assert [r.url_to for r in result.results] == ["https://example.com/uk/broken"]
        assert result.pages_skipped == 1
        assert result.stats.total_links_analyzed == 1


class TestDetectBrokenLinksFromCrawlBatch:
    @pytest.fixture
    def pages(self):
        html = make_html([("/broken", "Broken"), ("/ok", "OK")])
        objects = {key: make_snapshot(html) for key in ("ka", "kb", "kc")}
        mapping = {
            "https://example.com/c": "kc",
            "https://example.com/a": "ka",
            "https://example.com/b": "kb",
        }
        return objects, mapping

    @pytest.mark.asyncio
    async def test_pages_are_processed_in_sorted_order(self, fast_config, pages):
        objects, mapping = pages
        detector, _, store = make_detector(objects, broken=[BROKEN], config=fast_config)

        first = await detector.detect_broken_links_from_crawl_batch(mapping, batch_start_index=0, batch_size=2)

        assert [key for _, key in store.requests] == ["ka", "kb"]
        assert first.has_more_pages is True
        assert first.next_batch_start_index == 2
        assert first.total_pages == 3
        assert first.broken_urls_cache == [BROKEN]
        assert first.working_urls_cache == ["https://example.com/ok"]

        second = await detector.detect_broken_links_from_crawl_batch(
            mapping,
            batch_start_index=first.next_batch_start_index,
            batch_size=2,
            initial_broken_urls=first.broken_urls_cache,
            initial_working_urls=first.working_urls_cache,
        )

        assert [key for _, key in store.requests] == ["ka", "kb", "kc"]
        assert second.has_more_pages is False
        assert second.pages_processed == 1
        assert second.stats.links_checked_via_api == 0
        assert second.stats.cache_hits_broken == 1
        assert second.stats.cache_hits_working == 1
        assert second.stats.cache_hit_rate == 100.0

    @pytest.mark.asyncio
    async def test_start_beyond_end_processes_nothing(self, fast_config, pages):
        objects, mapping = pages
        detector, prober, _ = make_detector(objects, config=fast_config)

        result = await detector.detect_broken_links_from_crawl_batch(mapping, batch_start_index=10, batch_size=2)

        assert result.pages_processed == 0
        assert result.results == []
        assert result.has_more_pages is False
        assert prober.calls == []

    @pytest.mark.asyncio
    async def test_batch_result_serializes_to_camel_case(self, fast_config, pages):
        objects, mapping = pages
        detector, _, _ = make_detector(objects, broken=[BROKEN], config=fast_config)

        result = await detector.detect_broken_links_from_crawl_batch(mapping, batch_size=1)
        data = result.to_dict()

        assert data["hasMorePages"] is True
        assert data["nextBatchStartIndex"] == 1
        assert data["results"] == [{
            "urlFrom": "https://example.com/a",
            "urlTo": BROKEN,
            "anchorText": "Broken",
            "trafficDomain": 0,
        }]
        assert data["stats"]["linksCheckedViaAPI"] == 2

        state = result.to_batch_state()
        assert state.batch_start_index == 1
        assert state.broken_urls_cache == [BROKEN]

    @pytest.mark.asyncio
    async def test_batched_run_matches_single_run(self, fast_config, pages):
        objects, mapping = pages
        detector, _, _ = make_detector(objects, broken=[BROKEN], config=fast_config)
        single = await detector.detect_broken_links_from_crawl(mapping)

        batch_detector, batch_prober, _ = make_detector(objects, broken=[BROKEN], config=fast_config)
        batched, state, skipped = await run_crawl_batches(batch_detector, mapping, batch_size=1)

        assert sorted(r.key for r in batched) == sorted(r.key for r in single)
        assert sorted(batch_prober.calls) == [BROKEN, "https://example.com/ok"]
        assert state.batch_start_index == 3
        assert skipped == 0

    @pytest.mark.asyncio
    async def test_invalid_batch_size(self, fast_config, pages):
        objects, mapping = pages
        detector, _, _ = make_detector(objects, config=fast_config)

        with pytest.raises(ValueError):
            await detector.detect_broken_links_from_crawl_batch(mapping, batch_size=0)


class TestDetectorBuilder:
    def test_requires_session_or_prober(self):
        with pytest.raises(ValueError):
            DetectorBuilder(MemorySnapshotStore()).build()

    def test_wires_scope_site_and_prober(self, fast_config):
        prober = StubProber()
        detector = (DetectorBuilder(MemorySnapshotStore(), bucket="bucket")
                    .with_config(fast_config)
                    .with_audit_scope("https://example.com/uk")
                    .with_site_id("site-1")
                    .with_prober(prober)
                    .build())

        assert detector.prober is prober
        assert detector.bucket == "bucket"
        assert detector.site_id == "site-1"
        assert detector.scope("https://example.com/uk/a") is True
        assert detector.scope("https://example.com/de/a") is False

    def test_bucket_defaults_to_config(self):
        detector = DetectorBuilder(MemorySnapshotStore()).with_prober(StubProber()).build()
        assert detector.bucket == "scraper-bucket"
