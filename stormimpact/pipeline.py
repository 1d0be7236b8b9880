"""
Analysis pipeline
=================

Wires the stages together:

1) Load dataset -> list of StormEvent records (immutable)
2) Year filter  -> events from START_YEAR onward
3) Normalize    -> damage figures in USD
4) Aggregate    -> top-N health and economy tables

The run is single-pass and all-or-nothing: any error from a stage
propagates to the caller.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .aggregate import TOP_N, aggregate_economy, aggregate_health
from .loader import DATASET_URL, DEFAULT_CACHE_PATH, load_events
from .models import EconomicImpact, HealthImpact, StormEvent
from .transform import START_YEAR, filter_by_year, normalize_events, year_counts


@dataclass
class AnalysisConfig:
    """Where the data comes from and how the tables are cut."""
    # None means: use the local file only, never download
    url: Optional[str] = DATASET_URL
    cache_path: Path = DEFAULT_CACHE_PATH
    start_year: int = START_YEAR
    top_n: int = TOP_N


@dataclass
class AnalysisResult:
    """Everything the report needs from one run."""
    start_year: int
    total_events: int
    # events per year over the whole dataset (for the coverage histogram)
    events_per_year: Dict[int, int]
    events: List[StormEvent]
    health: List[HealthImpact]
    economy: List[EconomicImpact]
    source: Optional[str] = None


def analyse_events(events: Sequence[StormEvent], start_year: int = START_YEAR,
                   top_n: int = TOP_N) -> AnalysisResult:
    """Run stages 2-4 on already loaded records."""
    filtered = filter_by_year(events, start_year)
    normalized = normalize_events(filtered)
    return AnalysisResult(
        start_year=start_year,
        total_events=len(events),
        events_per_year=year_counts(events),
        events=normalized,
        health=aggregate_health(normalized, top_n),
        economy=aggregate_economy(normalized, top_n),
    )


def run_analysis(config: Optional[AnalysisConfig] = None) -> AnalysisResult:
    """Load the dataset described by `config` and analyse it."""
    config = config or AnalysisConfig()
    events = load_events(config.url, config.cache_path)
    result = analyse_events(events, config.start_year, config.top_n)
    result.source = str(config.cache_path)
    return result
