import logging
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from .deduplication.url_canonicalizer import URLCanonicalizer

logger = logging.getLogger(__name__)

NO_TEXT_SENTINEL = '[no text]'

# Landmarks holding navigation boilerplate; links inside them are not audited
EXCLUDED_LANDMARKS = ['header', 'footer']


@dataclass(frozen=True)
class ExtractedLink:
    """An internal link candidate found in page content"""
    resolved_url: str
    anchor_text: str = NO_TEXT_SENTINEL


class LinkExtractor:
    def __init__(self, base_url: str, canonicalizer: Optional[URLCanonicalizer] = None):
        self.base_url = base_url
        self.canonicalizer = canonicalizer or URLCanonicalizer()
        self.hostname = self.canonicalizer.normalize_hostname(base_url)

    def extract(self, html_content: str) -> List[ExtractedLink]:
        """Extract internal links from main content, one entry per resolved URL"""
        soup = BeautifulSoup(html_content, 'html.parser')

        links = []
        seen = set()
        for anchor in soup.select('a[href]'):
            if anchor.find_parent(EXCLUDED_LANDMARKS) is not None:
                continue

            href = anchor.get('href')
            if not href or href.startswith('#'):
                continue

            absolute_url = self.resolve(href)
            if absolute_url is None or absolute_url in seen:
                continue
            if not self.is_internal(absolute_url):
                continue

            seen.add(absolute_url)
            anchor_text = anchor.get_text().strip() or NO_TEXT_SENTINEL
            links.append(ExtractedLink(resolved_url=absolute_url, anchor_text=anchor_text))

        return links

    def resolve(self, href: str) -> Optional[str]:
        """Resolve an href against the base URL; None when it is malformed"""
        try:
            # Raises on a malformed host or an out of range port
            absolute_url = self.canonicalizer.normalize_url(urljoin(self.base_url, href.strip()))
        except ValueError:
            logger.debug(f"Skipping invalid href on {self.base_url}: {href}")
            return None
        return absolute_url

    def is_internal(self, url: str) -> bool:
        if self.hostname is None:
            return False
        if urlparse(url).scheme not in ('http', 'https'):
            return False
        return self.canonicalizer.normalize_hostname(url) == self.hostname
