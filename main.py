#!/usr/bin/env python3
"""
Link Audit
Finds broken internal links in scraped page snapshots stored on disk
"""

import asyncio
import json
import sys
from linkaudit import AuditConfig, run_audit
from linkaudit.storage import FileSnapshotStore
from linkaudit.monitoring import LogManager

async def main():
    """Main entry point for the audit"""
    config = AuditConfig.from_env()
    log_manager = LogManager(log_dir="audit_data/logs", log_level="INFO")

    # Page URL -> snapshot key, as written by the scraper
    store = FileSnapshotStore(base_path="audit_data/snapshots")
    mapping_file = store.base_path / config.snapshot_bucket / "pages.json"
    if not mapping_file.exists():
        print(f"No page mapping found at {mapping_file}")
        sys.exit(1)
    page_mapping = json.loads(mapping_file.read_text())

    base_url = sys.argv[1] if len(sys.argv) > 1 else None
    report = await run_audit(store, page_mapping, base_url=base_url, config=config)

    print("\nBroken internal links:")
    for link in report.broken_internal_links:
        print(f"  [{link.priority}] {link.url_from} -> {link.url_to} ({link.anchor_text})")
    print(f"\nProjected traffic lost: {report.kpi_deltas.projected_traffic_lost}")
    print(f"Pages: {report.pages_total} total, {report.pages_skipped} skipped")

    log_manager.export_report_json(report.to_dict())
    return report

if __name__ == "__main__":
    print("🔗 Link Audit Starting...")
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n🛑 Audit stopped by user")
    except Exception as e:
        print(f"❌ Error: {e}")
        sys.exit(1)
    print("✅ Audit completed!")
