"""
Broken internal link detection over scraped page snapshots
"""

from .config import AuditConfig
from .records import BrokenLinkRecord, KPIResult
from .parser import LinkExtractor, ExtractedLink
from .scope import AuditScope, is_within_audit_scope, filter_by_audit_scope, extract_path_prefix
from .deduplication import ProbeCache, merge_and_deduplicate
from .detector import BrokenLinkDetector, DetectorBuilder, BatchResult
from .prioritizer import calculate_kpi_deltas_for_audit, calculate_priority
from .utils import AccessibilityProber, is_link_inaccessible
from .audit import AuditReport, run_audit

__all__ = [
    'AuditConfig',
    'BrokenLinkRecord',
    'KPIResult',
    'LinkExtractor',
    'ExtractedLink',
    'AuditScope',
    'is_within_audit_scope',
    'filter_by_audit_scope',
    'extract_path_prefix',
    'ProbeCache',
    'merge_and_deduplicate',
    'BrokenLinkDetector',
    'DetectorBuilder',
    'BatchResult',
    'calculate_kpi_deltas_for_audit',
    'calculate_priority',
    'AccessibilityProber',
    'is_link_inaccessible',
    'AuditReport',
    'run_audit'
]
