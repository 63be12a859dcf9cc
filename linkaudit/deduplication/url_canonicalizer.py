import logging
from typing import Optional
from urllib.parse import urlparse, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {'http': 80, 'https': 443}


class URLCanonicalizer:
    """Host normalization used to decide whether two URLs share an origin"""

    def __init__(self, strip_www: bool = True):
        self.strip_www = strip_www

    def normalize_hostname(self, url: str) -> Optional[str]:
        """
        Lowercased hostname with a leading 'www.' removed

        Args:
            url: Absolute URL

        Returns:
            Normalized hostname, or None when the URL has no usable host
        """
        try:
            hostname = urlparse(url).hostname
        except ValueError as e:
            logger.debug(f"Failed to parse hostname of {url}: {e}")
            return None

        if not hostname:
            return None

        hostname = hostname.lower()
        if self.strip_www and hostname.startswith('www.'):
            hostname = hostname[4:]
        return hostname

    def is_same_site(self, url1: str, url2: str) -> bool:
        """Check whether two URLs point at the same host (www and bare domain are equal)"""
        host1 = self.normalize_hostname(url1)
        return host1 is not None and host1 == self.normalize_hostname(url2)

    def normalize_url(self, url: str) -> str:
        """
        Serialize an absolute URL with a lowercase scheme and host

        The default port for the scheme is dropped and an empty http(s) path
        becomes '/'. Path, query and fragment are left as written.

        Raises:
            ValueError: when the host or port is malformed
        """
        parts = urlsplit(url)
        scheme = parts.scheme.lower()
        hostname = parts.hostname
        port = parts.port
        if hostname is None:
            return urlunsplit((scheme, parts.netloc, parts.path, parts.query, parts.fragment))

        userinfo, _, _ = parts.netloc.rpartition('@')
        netloc = f"[{hostname}]" if ':' in hostname else hostname
        if port is not None and port != DEFAULT_PORTS.get(scheme):
            netloc = f"{netloc}:{port}"
        if userinfo:
            netloc = f"{userinfo}@{netloc}"

        path = parts.path
        if not path and scheme in DEFAULT_PORTS:
            path = '/'
        return urlunsplit((scheme, netloc, path, parts.query, parts.fragment))
