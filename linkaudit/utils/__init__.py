"""
Network utilities for link checking
"""

from .prober import AccessibilityProber, is_link_inaccessible

__all__ = [
    'AccessibilityProber',
    'is_link_inaccessible'
]
