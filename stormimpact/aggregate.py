"""
Aggregation by event type
=========================

Two views over the filtered, normalized events:

- health: fatalities and injuries per event type
- economy: property and crop damage (USD) per event type

Both follow the same steps: keep rows with a positive figure, group by
event type (first-seen order), sum, rank by the total with a stable
descending sort, and keep the first `top_n` groups.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Tuple
import logging

from .dsa import merge_sort
from .models import EconomicImpact, HealthImpact, StormEvent

logger = logging.getLogger(__name__)

TOP_N = 5


def _rank(rows: list, top_n: Optional[int]) -> list:
    ranked = merge_sort(rows, key=lambda r: r.total, reverse=True)
    return ranked if top_n is None else ranked[:top_n]


def aggregate_health(events: Iterable[StormEvent], top_n: Optional[int] = TOP_N) -> List[HealthImpact]:
    """Event types ranked by fatalities + injuries.

    Only events with at least one fatality or injury contribute. `top_n=None`
    returns the complete ranking.
    """
    # dicts keep insertion order, i.e. first appearance of each event type
    sums: Dict[str, Tuple[int, int]] = {}
    for e in events:
        if e.fatalities > 0 or e.injuries > 0:
            fat, inj = sums.get(e.event_type, (0, 0))
            sums[e.event_type] = (fat + e.fatalities, inj + e.injuries)

    rows = [HealthImpact(event_type=t, fatalities=f, injuries=i) for t, (f, i) in sums.items()]
    logger.info("Health view: %d event types with casualties", len(rows))
    return _rank(rows, top_n)


def aggregate_economy(events: Iterable[StormEvent], top_n: Optional[int] = TOP_N) -> List[EconomicImpact]:
    """Event types ranked by property + crop damage (USD)."""
    sums: Dict[str, Tuple[float, float]] = {}
    for e in events:
        if e.prop_dmg > 0 or e.crop_dmg > 0:
            prop, crop = sums.get(e.event_type, (0.0, 0.0))
            sums[e.event_type] = (prop + e.prop_dmg, crop + e.crop_dmg)

    rows = [EconomicImpact(event_type=t, property_damage=p, crop_damage=c) for t, (p, c) in sums.items()]
    logger.info("Economy view: %d event types with damage", len(rows))
    return _rank(rows, top_n)
