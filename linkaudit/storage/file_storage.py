import json
import gzip
import logging
import aiofiles
from pathlib import Path
from datetime import datetime
from typing import Any, Dict, Optional
from .snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


class FileSnapshotStore(SnapshotStore):
    """Snapshot store backed by JSON files under base_path/bucket/key"""

    def __init__(self, base_path='audit_data/snapshots', compress=False):
        self.base_path = Path(base_path)
        self.compress = compress
        self.base_path.mkdir(parents=True, exist_ok=True)

    def get_file_path(self, bucket: str, key: str) -> Path:
        """Map a bucket/key pair onto a file, refusing keys that escape the bucket"""
        bucket_dir = (self.base_path / bucket).resolve()
        file_path = (bucket_dir / key.lstrip('/')).resolve()
        if bucket_dir not in file_path.parents:
            raise ValueError(f"Snapshot key escapes bucket {bucket}: {key}")
        return file_path

    async def get_object(self, bucket: str, key: str) -> Optional[Dict[str, Any]]:
        file_path = self.get_file_path(bucket, key)
        if not file_path.exists():
            logger.debug(f"No snapshot at {file_path}")
            return None

        async with aiofiles.open(file_path, 'rb') as f:
            data = await f.read()

        if self.compress or file_path.suffix == '.gz':
            data = gzip.decompress(data)

        return json.loads(data.decode('utf-8'))

    async def save_snapshot(self, bucket: str, key: str, url: str, raw_html: str,
                            final_url: Optional[str] = None) -> str:
        """Store a page snapshot in the layout get_object reads

        Returns:
            File path as string
        """
        file_path = self.get_file_path(bucket, key)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        snapshot = {
            'url': url,
            'finalUrl': final_url or url,
            'scrapedAt': datetime.now().isoformat(),
            'scrapeResult': {'rawBody': raw_html},
        }
        content = json.dumps(snapshot, ensure_ascii=False).encode('utf-8')
        if self.compress:
            content = gzip.compress(content)

        async with aiofiles.open(file_path, 'wb') as f:
            await f.write(content)

        return str(file_path)
