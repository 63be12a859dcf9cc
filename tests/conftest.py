"""Shared test doubles: an aiohttp-like session, a stub prober and an in-memory snapshot store."""

import errno
from types import SimpleNamespace

import aiohttp
import pytest

from linkaudit.config import AuditConfig
from linkaudit.storage import SnapshotStore


class FakeResponse:
    def __init__(self, status):
        self.status = status


class _FakeRequestContext:
    def __init__(self, outcome):
        self.outcome = outcome

    async def __aenter__(self):
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return FakeResponse(self.outcome)

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Mimics aiohttp.ClientSession.head/get; routes map (method, url) to a status or an exception"""

    def __init__(self, routes=None, default_status=200):
        self.routes = routes or {}
        self.default_status = default_status
        self.calls = []

    def head(self, url, **kwargs):
        return self._request('HEAD', url, kwargs)

    def get(self, url, **kwargs):
        return self._request('GET', url, kwargs)

    def _request(self, method, url, kwargs):
        self.calls.append((method, url))
        return _FakeRequestContext(self.routes.get((method, url), self.default_status))

    def methods_for(self, url):
        return [method for method, called_url in self.calls if called_url == url]


class StubProber:
    """Prober double that reports URLs in `broken` as inaccessible"""

    def __init__(self, broken=()):
        self.broken = set(broken)
        self.calls = []

    async def is_link_inaccessible(self, url):
        self.calls.append(url)
        return url in self.broken


class MemorySnapshotStore(SnapshotStore):
    """Snapshots keyed by key; values may be dicts, None or exceptions to raise"""

    def __init__(self, objects=None):
        self.objects = objects or {}
        self.requests = []

    async def get_object(self, bucket, key):
        self.requests.append((bucket, key))
        value = self.objects.get(key)
        if isinstance(value, BaseException):
            raise value
        return value


def make_html(links, header_links=(), footer_links=()):
    """Page body with main-content anchors plus optional header/footer anchors"""
    def anchors(items):
        return "\n".join(f'<a href="{href}">{text}</a>' for href, text in items)

    return f"""
    <html>
      <head><title>Test Page</title></head>
      <body>
        <header><nav>{anchors(header_links)}</nav></header>
        <main>{anchors(links)}</main>
        <footer>{anchors(footer_links)}</footer>
      </body>
    </html>
    """


def make_snapshot(html, final_url=None):
    snapshot = {'scrapeResult': {'rawBody': html}}
    if final_url:
        snapshot['finalUrl'] = final_url
    return snapshot


class AttrError(Exception):
    """Exception carrying the ad hoc fields HTTP stacks attach"""

    def __init__(self, message="", code=None, type=None, errno=None):
        super().__init__(message)
        if code is not None:
            self.code = code
        if type is not None:
            self.type = type
        if errno is not None:
            self.errno = errno


@pytest.fixture
def fast_config():
    """Config without pauses so tests run instantly"""
    return AuditConfig(link_check_delay=0, page_delay=0)


def connect_timeout_error(host="example.com", port=443):
    """aiohttp's error for a TCP connect that ran out of time at the OS level"""
    key = SimpleNamespace(host=host, port=port, is_ssl=True, ssl=True, proxy=None,
                          proxy_auth=None, proxy_headers_hash=None)
    return aiohttp.ClientConnectorError(key, OSError(errno.ETIMEDOUT, "Connection timed out"))
