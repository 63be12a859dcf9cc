import logging
from typing import Optional

import aiohttp

from ..config import AuditConfig
from ..error_handler import ErrorClassifier, ErrorInfo, ErrorType
from ..monitoring.log_manager import create_context_logger

logger = logging.getLogger(__name__)


class AccessibilityProber:
    """
    Decides whether a URL is reachable with a HEAD request and a GET fallback

    Timeouts count as accessible: a slow page is not proof of a broken one.
    """

    def __init__(self, session: aiohttp.ClientSession, config: Optional[AuditConfig] = None,
                 site_id: Optional[str] = None, log: Optional[logging.Logger] = None):
        self.session = session
        self.config = config or AuditConfig()
        self.classifier = ErrorClassifier()
        self.log = create_context_logger(log or logger, site_id)
        self.headers = {'User-Agent': self.config.user_agent}

    async def is_link_inaccessible(self, url: str) -> bool:
        outcome = await self.check(url)
        return outcome.inaccessible

    async def check(self, url: str) -> ErrorInfo:
        """Probe a URL and return the classified outcome"""
        try:
            status = await self._request_status('HEAD', url, self.config.head_timeout)
        except Exception as error:
            error_type = self.classifier.classify(error)
            if error_type == ErrorType.TIMEOUT:
                self.log.info(f"⏱ TIMEOUT: {url} - HEAD request timed out, treating as accessible")
                return ErrorInfo(url, False, error_type, description=self.classifier.describe(error))

            self.log.debug(f"HEAD request failed for {url} ({self.classifier.describe(error)}), retrying with GET")
            return await self._check_with_get(url)

        if status < 400:
            return ErrorInfo(url, False, status_code=status)

        if status == 404:
            return ErrorInfo(url, True, ErrorType.NOT_FOUND, status_code=status)

        # Some servers reject HEAD; only a GET decides the verdict
        warned = False
        if status < 500:
            self.log.warning(f"⚠ WARNING: {url} returned client error {status}")
            warned = True
        return await self._check_with_get(url, warned=warned)

    async def _check_with_get(self, url: str, warned: bool = False) -> ErrorInfo:
        try:
            status = await self._request_status('GET', url, self.config.get_timeout)
        except Exception as error:
            error_type = self.classifier.classify(error)
            description = self.classifier.describe(error)
            if error_type == ErrorType.TIMEOUT:
                self.log.info(f"⏱ TIMEOUT: {url} - GET request timed out, treating as accessible")
                return ErrorInfo(url, False, error_type, description=description)

            self.log.error(f"✗ ERROR: {url} - {description}")
            return ErrorInfo(url, True, error_type, description=description)

        if status < 400:
            return ErrorInfo(url, False, status_code=status)

        error_type = self.classifier.classify(status_code=status)
        if error_type == ErrorType.CLIENT_ERROR and not warned:
            self.log.warning(f"⚠ WARNING: {url} returned client error {status}")
        elif error_type == ErrorType.SERVER_ERROR:
            self.log.error(f"✗ ERROR: {url} returned server error {status}")

        return ErrorInfo(url, True, error_type, status_code=status)

    async def _request_status(self, method: str, url: str, timeout: float) -> int:
        """Issue a request and return only its status code"""
        client_timeout = aiohttp.ClientTimeout(total=timeout)
        request = self.session.head if method == 'HEAD' else self.session.get

        async with request(url, headers=self.headers, timeout=client_timeout,
                           allow_redirects=True) as response:
            return response.status


async def is_link_inaccessible(url: str, log: Optional[logging.Logger] = None,
                               site_id: Optional[str] = None,
                               session: Optional[aiohttp.ClientSession] = None,
                               config: Optional[AuditConfig] = None) -> bool:
    """
    Check a single URL, opening a client session when none is given

    Returns:
        True if the link is broken, False if it is (or may be) reachable
    """
    if session is not None:
        return await AccessibilityProber(session, config, site_id, log).is_link_inaccessible(url)

    async with aiohttp.ClientSession() as own_session:
        return await AccessibilityProber(own_session, config, site_id, log).is_link_inaccessible(url)
