"""
Audit scope - restricts an audit to the subpath of the site's base URL
(e.g. a base URL of bulk.com/uk audits /uk/... pages and links only)
"""

import re
import logging
from typing import Any, Callable, Iterable, List, Optional
from urllib.parse import urljoin, urlparse

from .deduplication.url_canonicalizer import URLCanonicalizer

logger = logging.getLogger(__name__)

ScopePredicate = Callable[[str], bool]

_SCHEME_RE = re.compile(r'^[a-z][a-z0-9+.\-]*://', re.IGNORECASE)

_URL_KEYS = ('url', 'urlFrom', 'url_from', 'urlTo', 'url_to')


def always_in_scope(url: str) -> bool:
    """Default predicate when no scope is configured"""
    return True


def prepend_schema(url: str) -> str:
    if _SCHEME_RE.match(url):
        return url
    return f"https://{url}"


def extract_path_prefix(url: Optional[str]) -> str:
    """First path segment of a URL ('bulk.com/uk/page' -> '/uk'), or '' if none"""
    if not url:
        return ''
    try:
        parsed = urlparse(prepend_schema(url))
        if not parsed.hostname or not parsed.path or parsed.path == '/':
            return ''
        segments = [segment for segment in parsed.path.split('/') if segment]
    except ValueError:
        return ''
    return f"/{segments[0]}" if segments else ''


class AuditScope:
    """Callable scope predicate bound to a base URL"""

    def __init__(self, base_url: str, canonicalizer: Optional[URLCanonicalizer] = None):
        self.base_url = base_url
        self.canonicalizer = canonicalizer or URLCanonicalizer()

        self.valid = False
        self.origin = ''
        self.base_path = ''
        self.hostname = None
        self.port = None

        if not base_url:
            return
        try:
            parsed = urlparse(prepend_schema(base_url))
            self.port = parsed.port
        except ValueError:
            logger.debug(f"Invalid audit base URL: {base_url}")
            return

        self.origin = f"{parsed.scheme}://{parsed.netloc}"
        self.hostname = self.canonicalizer.normalize_hostname(self.origin)
        self.base_path = parsed.path.rstrip('/')
        self.valid = self.hostname is not None

    @property
    def has_subpath(self) -> bool:
        return bool(self.base_path)

    def __call__(self, url: Optional[str]) -> bool:
        if not url or not self.valid:
            return False
        if not self.has_subpath:
            return True

        try:
            if url.startswith('/') and not url.startswith('//'):
                absolute_url = urljoin(self.origin + '/', url)
            else:
                absolute_url = prepend_schema(url)
            parsed = urlparse(absolute_url)
            port = parsed.port
        except ValueError:
            return False

        if self.canonicalizer.normalize_hostname(absolute_url) != self.hostname or port != self.port:
            return False

        path = parsed.path
        return path == self.base_path or path.startswith(self.base_path + '/')

    def __repr__(self) -> str:
        return f"AuditScope({self.base_url!r})"


def is_within_audit_scope(url: Optional[str], base_url: Optional[str]) -> bool:
    """Check whether a URL falls within the subpath of base_url"""
    if not url or not base_url:
        return False
    return AuditScope(base_url)(url)


def _item_url(item: Any, url_property: Optional[str]) -> Optional[str]:
    if isinstance(item, str):
        return item
    if item is None or isinstance(item, (int, float, bool)):
        return None

    keys = ((url_property,) if url_property else ()) + _URL_KEYS + ('get_url',)
    for key in keys:
        if isinstance(item, dict):
            value = item.get(key)
        else:
            value = getattr(item, key, None)
        if callable(value):
            value = value()
        if isinstance(value, str) and value:
            return value
    return None


def filter_by_audit_scope(items: Optional[Iterable], base_url: str,
                          url_property: Optional[str] = None) -> Optional[List]:
    """
    Keep the items whose URL is within the audit scope

    Args:
        items: URL strings, dicts or objects exposing a URL
        base_url: Site base URL, possibly with a subpath
        url_property: Preferred key/attribute holding the URL

    Returns:
        Filtered list; the input unchanged when empty or when base_url is unusable
    """
    if not items:
        return items

    items = list(items)
    scope = AuditScope(base_url)
    if not scope.valid:
        logger.warning(f"[subpath-filter] Cannot parse baseURL {base_url}, returning all {len(items)} items")
        return items

    if not scope.has_subpath:
        logger.debug(f"[subpath-filter] No subpath in baseURL {base_url}, returning all {len(items)} items")
        return items

    filtered = [item for item in items if scope(_item_url(item, url_property))]
    logger.debug(
        f"[subpath-filter] Filtered {len(items)} items to {len(filtered)} "
        f"based on audit scope: {extract_path_prefix(base_url)}"
    )
    return filtered
