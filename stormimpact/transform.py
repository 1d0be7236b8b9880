"""
Transform stages (year filter, damage normalization)
====================================================

Both stages are pure: they take a list of `StormEvent` records and return
new records, leaving the input untouched.

- Year filter: events before `START_YEAR` are sparsely recorded, so only
  events that began in `START_YEAR` or later are analysed.
- Damage normalization: `PROPDMG`/`CROPDMG` come with an exponent code
  (K, M, B). Recognised codes are applied and cleared; anything else
  (blank, digits, "+", "?") is passed through unchanged.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple
import logging

from .models import StormEvent

logger = logging.getLogger(__name__)

START_YEAR = 2002

EXPONENT_MULTIPLIERS: Dict[str, float] = {"K": 1e3, "M": 1e6, "B": 1e9}

_DATE_FORMAT = "%m/%d/%Y"


# ---------------- Year filter ----------------
def parse_event_year(begin_date: str) -> Optional[int]:
    """Return the year of a BGN_DATE value like "4/18/1950 0:00:00".

    Only the date part is parsed; the time of day is ignored. Returns None
    when the value does not match `M/D/YYYY`.
    """
    if not begin_date:
        return None
    date_part = begin_date.strip().split(" ", 1)[0]
    try:
        return datetime.strptime(date_part, _DATE_FORMAT).year
    except ValueError:
        return None


def filter_by_year(events: Iterable[StormEvent], start_year: int = START_YEAR) -> List[StormEvent]:
    """Keep events that began in `start_year` or later (undated events are dropped)."""
    kept: List[StormEvent] = []
    undated = 0
    for e in events:
        year = parse_event_year(e.begin_date)
        if year is None:
            undated += 1
        elif year >= start_year:
            kept.append(e)
    if undated:
        logger.warning("Dropped %d events with an unparseable begin date", undated)
    logger.info("Year filter (>= %d) kept %d events", start_year, len(kept))
    return kept


def year_counts(events: Iterable[StormEvent]) -> Dict[int, int]:
    """Number of events per begin year, sorted by year."""
    c = Counter(parse_event_year(e.begin_date) for e in events)
    c.pop(None, None)
    return dict(sorted(c.items()))


# ---------------- Damage normalization ----------------
def exponent_multiplier(code: str) -> Optional[float]:
    """Multiplier for an exponent code (case-insensitive), or None if unknown."""
    return EXPONENT_MULTIPLIERS.get((code or "").upper())


def normalize_amount(magnitude: float, code: str) -> Tuple[float, str]:
    """Scale one damage figure to USD.

    Returns `(magnitude * multiplier, "")` for K/M/B, otherwise the input
    pair unchanged.
    """
    mult = exponent_multiplier(code)
    if mult is None:
        return magnitude, code
    return magnitude * mult, ""


def normalize_damage(event: StormEvent) -> StormEvent:
    """Return a copy of `event` with property and crop damage scaled independently."""
    prop, prop_exp = normalize_amount(event.prop_dmg, event.prop_dmg_exp)
    crop, crop_exp = normalize_amount(event.crop_dmg, event.crop_dmg_exp)
    if (prop_exp, crop_exp) == (event.prop_dmg_exp, event.crop_dmg_exp):
        return event
    return replace(event, prop_dmg=prop, prop_dmg_exp=prop_exp,
                   crop_dmg=crop, crop_dmg_exp=crop_exp)


def normalize_events(events: Iterable[StormEvent]) -> List[StormEvent]:
    out = [normalize_damage(e) for e in events]
    # unrecognised codes stay on the record
    leftover = sum(1 for e in out if e.prop_dmg_exp or e.crop_dmg_exp)
    if leftover:
        logger.info("%d events kept an unrecognised damage exponent code", leftover)
    return out
