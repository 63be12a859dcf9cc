"""
Broken link detection over stored page snapshots
"""

from .base import BrokenLinkDetector
from .builder import DetectorBuilder
from .result import BatchResult

__all__ = ['BrokenLinkDetector', 'DetectorBuilder', 'BatchResult']
