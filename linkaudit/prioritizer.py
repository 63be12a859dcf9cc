"""
Traffic-based prioritization and KPI projection for broken links
"""

import dataclasses
from typing import Any, Iterable, List, Optional

from .records import BrokenLinkRecord, KPIResult

MAX_LINKS_TO_CONSIDER = 10
TRAFFIC_MULTIPLIER = 0.01   # share of traffic assumed lost to a broken link
CPC_DEFAULT_VALUE = 1

HIGH_PRIORITY = 'high'
MEDIUM_PRIORITY = 'medium'
LOW_PRIORITY = 'low'


def traffic_of(link: Any) -> float:
    """trafficDomain of a record or dict, 0 when missing"""
    if isinstance(link, BrokenLinkRecord):
        return link.traffic_domain or 0
    if isinstance(link, dict):
        value = link.get('trafficDomain', link.get('traffic_domain'))
        return value or 0
    return getattr(link, 'traffic_domain', 0) or 0


def resolve_cpc_value(cpc_value: Optional[float] = None) -> float:
    """Cost per click used to value lost traffic"""
    return CPC_DEFAULT_VALUE if cpc_value is None else cpc_value


def calculate_kpi_deltas_for_audit(broken_links: Iterable, cpc_value: Optional[float] = None) -> KPIResult:
    """Project traffic lost (and its value) from the top broken links by traffic"""
    top_links = sorted(broken_links or (), key=traffic_of, reverse=True)[:MAX_LINKS_TO_CONSIDER]
    if not top_links:
        return KPIResult(projected_traffic_lost=0, projected_traffic_value=0)

    projected_traffic_lost = sum(traffic_of(link) * TRAFFIC_MULTIPLIER for link in top_links)
    projected_traffic_value = projected_traffic_lost * resolve_cpc_value(cpc_value)

    return KPIResult(
        projected_traffic_lost=round(projected_traffic_lost),
        projected_traffic_value=round(projected_traffic_value),
    )


def _with_priority(link: Any, priority: str) -> Any:
    if isinstance(link, BrokenLinkRecord):
        return dataclasses.replace(link, priority=priority)
    if isinstance(link, dict):
        return {**link, 'priority': priority}
    raise TypeError(f"Cannot assign priority to {type(link).__name__}")


def calculate_priority(links: Iterable) -> List:
    """
    Rank links by trafficDomain and label them high / medium / low

    The top quarter (at least one link) is high, the rest of the top half is
    medium and the bottom half is low. The input is left untouched.

    Args:
        links: BrokenLinkRecord instances or dicts

    Returns:
        New list sorted by traffic, each item carrying a priority
    """
    ranked = sorted(links or (), key=traffic_of, reverse=True)
    count = len(ranked)
    quarter_index = max(1, count // 4)
    half_index = count // 2

    prioritized = []
    for index, link in enumerate(ranked):
        if index < quarter_index:
            priority = HIGH_PRIORITY
        elif index < half_index:
            priority = MEDIUM_PRIORITY
        else:
            priority = LOW_PRIORITY
        prioritized.append(_with_priority(link, priority))

    return prioritized
