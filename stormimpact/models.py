"""
Data model (StormEvent and impact records)
=========================================

Each row of the NOAA storm CSV is converted into a `StormEvent` object.
Records are immutable (`frozen=True`): the transform stages build new
records instead of editing the loaded ones, so every stage can be checked
on its own.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class StormEvent:
    """One storm database row (only the columns the analysis uses)."""
    row_id: int
    event_type: str
    # raw BGN_DATE text, e.g. "4/18/1950 0:00:00"
    begin_date: str
    fatalities: int
    injuries: int
    prop_dmg: float
    # "" once the magnitude has been scaled to USD
    prop_dmg_exp: str
    crop_dmg: float
    crop_dmg_exp: str


@dataclass(frozen=True)
class HealthImpact:
    """Casualties summed over one event type."""
    event_type: str
    fatalities: int
    injuries: int

    @property
    def total(self) -> int:
        return self.fatalities + self.injuries


@dataclass(frozen=True)
class EconomicImpact:
    """Damage (USD) summed over one event type."""
    event_type: str
    property_damage: float
    crop_damage: float

    @property
    def total(self) -> float:
        return self.property_damage + self.crop_damage
