"""
Detector Builder - Fluent API for wiring a broken link detector
"""

from typing import Optional

import aiohttp

from .base import BrokenLinkDetector
from ..config import AuditConfig
from ..scope import AuditScope, ScopePredicate
from ..storage import SnapshotStore
from ..utils.prober import AccessibilityProber


class DetectorBuilder:
    """Builder for creating detectors with optional scope, config and prober"""

    def __init__(self, snapshot_store: SnapshotStore, bucket: Optional[str] = None):
        self.snapshot_store = snapshot_store
        self.bucket = bucket
        self._config = None
        self._scope = None
        self._site_id = None
        self._prober = None

    def with_config(self, config: AuditConfig):
        self._config = config
        return self

    def with_scope(self, predicate: ScopePredicate):
        """Restrict pages and links with a custom predicate"""
        self._scope = predicate
        return self

    def with_audit_scope(self, base_url: str):
        """Restrict pages and links to the subpath of base_url"""
        self._scope = AuditScope(base_url)
        return self

    def with_site_id(self, site_id: str):
        self._site_id = site_id
        return self

    def with_prober(self, prober: AccessibilityProber):
        self._prober = prober
        return self

    def build(self, session: Optional[aiohttp.ClientSession] = None) -> BrokenLinkDetector:
        """Build the detector; a session is needed unless a prober was supplied"""
        config = self._config or AuditConfig()

        prober = self._prober
        if prober is None:
            if session is None:
                raise ValueError("DetectorBuilder.build() needs a ClientSession when no prober is set")
            prober = AccessibilityProber(session, config, self._site_id)

        return BrokenLinkDetector(
            self.snapshot_store,
            prober,
            bucket=self.bucket,
            scope=self._scope,
            config=config,
            site_id=self._site_id,
        )
