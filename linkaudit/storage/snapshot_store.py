"""
Snapshot Store - read interface for previously scraped pages
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ScrapedPage:
    """A stored page snapshot"""
    url: str
    final_url: Optional[str]
    raw_html: str

    @property
    def base_url(self) -> str:
        """URL links are resolved against (the redirect target when known)"""
        return self.final_url or self.url

    @classmethod
    def from_snapshot(cls, url: str, snapshot: Optional[Dict[str, Any]]) -> Optional["ScrapedPage"]:
        """Build a page from a stored object; None when it has no raw body"""
        if not snapshot:
            return None
        raw_html = (snapshot.get('scrapeResult') or {}).get('rawBody')
        if not raw_html:
            return None
        return cls(url=url, final_url=snapshot.get('finalUrl') or None, raw_html=raw_html)


class SnapshotStore(ABC):
    """Object storage holding scrape results keyed by bucket and key"""

    @abstractmethod
    async def get_object(self, bucket: str, key: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a stored scrape result

        Returns:
            {'finalUrl': str, 'scrapeResult': {'rawBody': str}} or None when absent
        """
        pass
