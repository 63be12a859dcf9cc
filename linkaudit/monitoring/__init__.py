"""
Logging and link-check statistics
"""

from .log_manager import LogManager, SiteContextAdapter, create_context_logger
from .detection_metrics import DetectionStats, ValidationOutcome, ValidationTally

__all__ = [
    'LogManager',
    'SiteContextAdapter',
    'create_context_logger',
    'DetectionStats',
    'ValidationOutcome',
    'ValidationTally'
]
