import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass
class AuditConfig:
    """Tunables for broken internal link detection"""
    link_check_batch_size: int = 5      # links probed concurrently per group
    link_check_delay: float = 0.3       # seconds between link groups
    page_delay: float = 0.05            # seconds between pages
    pages_per_batch: int = 10
    head_timeout: float = 10.0
    get_timeout: float = 10.0
    user_agent: str = "LinkAuditBot/1.0"
    cpc_value: float = 1.0
    snapshot_bucket: str = "scraper-bucket"

    def __post_init__(self):
        if self.link_check_batch_size < 1:
            raise ValueError(f"link_check_batch_size must be >= 1, got {self.link_check_batch_size}")
        if self.pages_per_batch < 1:
            raise ValueError(f"pages_per_batch must be >= 1, got {self.pages_per_batch}")
        if self.link_check_delay < 0 or self.page_delay < 0:
            raise ValueError("delays must not be negative")
        if self.head_timeout <= 0 or self.get_timeout <= 0:
            raise ValueError("timeouts must be positive")

    @classmethod
    def from_env(cls, env_file: str = None) -> "AuditConfig":
        """Build a config from environment variables (and an optional .env file)"""
        load_dotenv(env_file, override=False)

        defaults = cls()
        return cls(
            link_check_batch_size=int(os.environ.get("LINK_CHECK_BATCH_SIZE", defaults.link_check_batch_size)),
            link_check_delay=float(os.environ.get("LINK_CHECK_DELAY", defaults.link_check_delay)),
            page_delay=float(os.environ.get("PAGE_DELAY", defaults.page_delay)),
            pages_per_batch=int(os.environ.get("PAGES_PER_BATCH", defaults.pages_per_batch)),
            head_timeout=float(os.environ.get("HEAD_TIMEOUT", defaults.head_timeout)),
            get_timeout=float(os.environ.get("GET_TIMEOUT", defaults.get_timeout)),
            user_agent=os.environ.get("LINK_AUDIT_USER_AGENT", defaults.user_agent),
            cpc_value=float(os.environ.get("CPC_VALUE", defaults.cpc_value)),
            snapshot_bucket=os.environ.get("S3_SCRAPER_BUCKET_NAME", defaults.snapshot_bucket),
        )
