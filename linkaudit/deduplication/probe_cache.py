from typing import Iterable, List, Optional, Set, Tuple


class ProbeCache:
    """Known-broken and known-working URLs; a URL lives in at most one set"""

    def __init__(self, initial_broken: Iterable[str] = (), initial_working: Iterable[str] = ()):
        self.broken_urls: Set[str] = set()
        self.working_urls: Set[str] = set()

        for url in initial_working or ():
            self.mark_working(url)
        # Broken wins when a caller hands over a URL in both lists
        for url in initial_broken or ():
            self.mark_broken(url)

    def lookup(self, url: str) -> Optional[bool]:
        """
        Check the cache for a URL

        Returns:
            True if known broken, False if known working, None on a miss
        """
        if url in self.broken_urls:
            return True
        if url in self.working_urls:
            return False
        return None

    def is_broken(self, url: str) -> bool:
        return url in self.broken_urls

    def is_working(self, url: str) -> bool:
        return url in self.working_urls

    def mark_broken(self, url: str):
        self.working_urls.discard(url)
        self.broken_urls.add(url)

    def mark_working(self, url: str):
        self.broken_urls.discard(url)
        self.working_urls.add(url)

    def record(self, url: str, inaccessible: bool):
        """Store a probe verdict"""
        if inaccessible:
            self.mark_broken(url)
        else:
            self.mark_working(url)

    def snapshot(self) -> Tuple[List[str], List[str]]:
        """Sorted copies of (broken, working) for serialization"""
        return sorted(self.broken_urls), sorted(self.working_urls)

    def __contains__(self, url: str) -> bool:
        return url in self.broken_urls or url in self.working_urls

    def __len__(self) -> int:
        return len(self.broken_urls) + len(self.working_urls)

    def __repr__(self) -> str:
        return f"ProbeCache(broken={len(self.broken_urls)}, working={len(self.working_urls)})"
