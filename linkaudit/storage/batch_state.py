import json
from dataclasses import dataclass, field
from typing import Any, Dict, List

# Largest cache payload that fits in a queue message alongside the batch cursor
CACHE_SIZE_LIMIT = 200 * 1024


def estimate_cache_size(broken_urls: List[str], working_urls: List[str]) -> int:
    """Serialized size of both cache arrays, in characters"""
    return len(json.dumps(list(broken_urls), separators=(',', ':'))) + \
        len(json.dumps(list(working_urls), separators=(',', ':')))


@dataclass
class BatchState:
    """Cursor and probe cache handed from one batch invocation to the next"""
    batch_start_index: int = 0
    broken_urls_cache: List[str] = field(default_factory=list)
    working_urls_cache: List[str] = field(default_factory=list)

    def estimate_cache_size(self) -> int:
        return estimate_cache_size(self.broken_urls_cache, self.working_urls_cache)

    def exceeds_size_limit(self, limit: int = CACHE_SIZE_LIMIT) -> bool:
        return self.estimate_cache_size() > limit

    def to_dict(self) -> Dict[str, Any]:
        return {
            'batchStartIndex': self.batch_start_index,
            'brokenUrlsCache': list(self.broken_urls_cache),
            'workingUrlsCache': list(self.working_urls_cache),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BatchState":
        """Missing or null fields fall back to an empty state"""
        data = data or {}
        return cls(
            batch_start_index=int(data.get('batchStartIndex') or 0),
            broken_urls_cache=list(data.get('brokenUrlsCache') or []),
            working_urls_cache=list(data.get('workingUrlsCache') or []),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, payload: str) -> "BatchState":
        return cls.from_dict(json.loads(payload))
