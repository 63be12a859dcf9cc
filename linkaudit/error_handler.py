import asyncio
import errno
import socket
from enum import Enum
from dataclasses import dataclass
from typing import Optional
import aiohttp


class ErrorType(Enum):
    """Classification of probe failures"""
    TIMEOUT = "timeout"
    NOT_FOUND = "not_found"            # 404
    CLIENT_ERROR = "client_error"      # other 4xx
    SERVER_ERROR = "server_error"      # 5xx
    NETWORK_ERROR = "network_error"
    UNKNOWN = "unknown"


# Error codes reported by HTTP stacks for requests that ran out of time
TIMEOUT_CODES = frozenset({'ETIMEDOUT', 'ESOCKETTIMEDOUT', 'ECONNABORTED'})

UNKNOWN_ERROR_DESCRIPTION = "Unknown error"


@dataclass
class ErrorInfo:
    """Outcome of a single link check"""
    url: str
    inaccessible: bool
    error_type: Optional[ErrorType] = None
    status_code: Optional[int] = None
    description: str = ""


class ErrorClassifier:
    """Maps exceptions and HTTP status codes onto an ErrorType"""

    def classify(self, error: Optional[BaseException] = None, status_code: Optional[int] = None) -> ErrorType:
        """Classify an error or a non-2xx status code"""
        if error is not None:
            if self.is_timeout(error):
                return ErrorType.TIMEOUT
            if isinstance(error, aiohttp.ClientResponseError) and error.status:
                status_code = error.status
            elif isinstance(error, (aiohttp.ClientError, OSError)):
                return ErrorType.NETWORK_ERROR

        if status_code:
            if status_code == 404:
                return ErrorType.NOT_FOUND
            elif 400 <= status_code < 500:
                return ErrorType.CLIENT_ERROR
            elif 500 <= status_code < 600:
                return ErrorType.SERVER_ERROR

        return ErrorType.UNKNOWN

    @staticmethod
    def is_timeout(error: BaseException) -> bool:
        """True when the error signals an exhausted time budget"""
        if isinstance(error, (asyncio.TimeoutError, aiohttp.ServerTimeoutError, socket.timeout, TimeoutError)):
            return True

        code = getattr(error, 'code', None)
        if code is not None:
            code_text = str(code)
            if code_text.upper() in TIMEOUT_CODES or 'timeout' in code_text.lower():
                return True

        # OS-level connect timeouts (aiohttp.ClientConnectorError) carry only an errno
        if getattr(error, 'errno', None) == errno.ETIMEDOUT:
            return True
        if isinstance(getattr(error, 'os_error', None), TimeoutError):
            return True

        return 'timeout' in str(error).lower()

    @staticmethod
    def describe(error: Optional[BaseException]) -> str:
        """Best-effort identification built from code, type, errno and message"""
        if error is None:
            return UNKNOWN_ERROR_DESCRIPTION

        parts = []
        for attr in ('code', 'type', 'errno'):
            value = getattr(error, attr, None)
            if value is not None and not callable(value):
                parts.append(str(value))

        message = str(error)
        if message:
            parts.append(message)

        return ": ".join(parts) if parts else UNKNOWN_ERROR_DESCRIPTION
