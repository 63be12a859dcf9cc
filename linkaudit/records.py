"""
Broken link records and KPI results shared across the audit pipeline
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Tuple

# Accepted spellings for each record field: camelCase (audit output) and
# snake_case (traffic analytics export)
_FIELD_ALIASES = {
    'url_from': ('urlFrom', 'url_from'),
    'url_to': ('urlTo', 'url_to'),
    'anchor_text': ('anchorText', 'anchor_text'),
    'traffic_domain': ('trafficDomain', 'traffic_domain'),
    'priority': ('priority',),
}


@dataclass(frozen=True)
class BrokenLinkRecord:
    """A link from url_from to an inaccessible url_to"""
    url_from: str
    url_to: str
    anchor_text: Optional[str] = None
    traffic_domain: float = 0
    priority: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def key(self) -> Tuple[str, str]:
        return self.url_from, self.url_to

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data['urlFrom'] = self.url_from
        data['urlTo'] = self.url_to
        if self.anchor_text is not None:
            data['anchorText'] = self.anchor_text
        data['trafficDomain'] = self.traffic_domain
        if self.priority is not None:
            data['priority'] = self.priority
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BrokenLinkRecord":
        """Build a record from either key spelling; unknown keys are kept in extra"""
        known = set()
        values = {}
        for name, aliases in _FIELD_ALIASES.items():
            for alias in aliases:
                if alias in data:
                    known.add(alias)
                    if name not in values:
                        values[name] = data[alias]

        if 'url_from' not in values or 'url_to' not in values:
            raise ValueError(f"Broken link record needs urlFrom and urlTo: {data!r}")

        if values.get('traffic_domain') is None:
            values['traffic_domain'] = 0

        extra = {k: v for k, v in data.items() if k not in known}
        return cls(extra=extra, **values)


def as_record(link) -> BrokenLinkRecord:
    """Accept a record or a plain mapping"""
    if isinstance(link, BrokenLinkRecord):
        return link
    return BrokenLinkRecord.from_dict(link)


@dataclass(frozen=True)
class KPIResult:
    """Projected impact of the top broken links"""
    projected_traffic_lost: float = 0
    projected_traffic_value: float = 0

    def to_dict(self) -> Dict[str, float]:
        return {
            'projectedTrafficLost': self.projected_traffic_lost,
            'projectedTrafficValue': self.projected_traffic_value,
        }
