import json
import logging
from pathlib import Path
from datetime import datetime
from typing import Dict, Any, Optional

AUDIT_LOG_PREFIX = "[broken-internal-links]"


class SiteContextAdapter(logging.LoggerAdapter):
    """Prefixes every message with the audit tag and the site id"""

    def process(self, msg, kwargs):
        site_id = self.extra.get('site_id')
        if site_id:
            return f"{AUDIT_LOG_PREFIX} [siteId={site_id}] {msg}", kwargs
        return f"{AUDIT_LOG_PREFIX} {msg}", kwargs


def create_context_logger(logger: logging.Logger, site_id: Optional[str] = None) -> SiteContextAdapter:
    """Wrap a logger so its messages carry the site being audited"""
    if isinstance(logger, SiteContextAdapter):
        logger = logger.logger
    return SiteContextAdapter(logger, {'site_id': site_id})


class LogManager:
    """Logging setup with console, daily file and error-only handlers"""

    def __init__(self, log_dir: str = "audit_data/logs", log_level: str = "INFO"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.setup_logging(log_level)

    def setup_logging(self, log_level: str):
        """Set up structured logging with multiple handlers"""
        detailed_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
        )
        simple_formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s'
        )

        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, log_level.upper()))
        root_logger.handlers.clear()

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(simple_formatter)
        root_logger.addHandler(console_handler)

        audit_log_file = self.log_dir / f"audit_{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = logging.FileHandler(audit_log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(file_handler)

        # Warnings and above also go to a separate file (4xx probes, skipped pages)
        error_file = self.log_dir / f"errors_{datetime.now().strftime('%Y%m%d')}.log"
        error_handler = logging.FileHandler(error_file)
        error_handler.setLevel(logging.WARNING)
        error_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(error_handler)

    def export_report_json(self, report: Dict[str, Any], filename: str = None) -> Path:
        """Export an audit report to a JSON file in the log directory"""
        if filename is None:
            filename = f"audit_report_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"

        export_path = self.log_dir / filename
        with open(export_path, 'w') as f:
            json.dump(report, f, indent=2, default=str)

        logging.info(f"Audit report exported to {export_path}")
        return export_path
