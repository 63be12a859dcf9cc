from typing import Dict, List, Tuple

from ..records import BrokenLinkRecord


class BrokenLinkAccumulator:
    """Collects broken links, one record per (url_from, url_to)"""

    def __init__(self):
        self._records: Dict[Tuple[str, str], BrokenLinkRecord] = {}
        self.duplicates_skipped = 0

    def add(self, record: BrokenLinkRecord, replace: bool = False) -> bool:
        """
        Add a record

        Args:
            record: Broken link to store
            replace: Overwrite an existing record for the pair, keeping its position

        Returns:
            True when the pair was not present before
        """
        if record.key in self._records:
            if replace:
                self._records[record.key] = record
            else:
                self.duplicates_skipped += 1
            return False
        self._records[record.key] = record
        return True

    def extend(self, records) -> int:
        return sum(1 for record in records if self.add(record))

    def results(self) -> List[BrokenLinkRecord]:
        return list(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: Tuple[str, str]) -> bool:
        return key in self._records
