import bz2

import pytest

from stormimpact.models import StormEvent

HEADER = "STATE__,BGN_DATE,COUNTY,EVTYPE,FATALITIES,INJURIES,PROPDMG,PROPDMGEXP,CROPDMG,CROPDMGEXP\n"


def make_event(event_type="TORNADO", begin_date="1/1/2005 0:00:00", fatalities=0, injuries=0,
               prop_dmg=0.0, prop_dmg_exp="", crop_dmg=0.0, crop_dmg_exp="", row_id=0):
    return StormEvent(row_id=row_id, event_type=event_type, begin_date=begin_date,
                      fatalities=fatalities, injuries=injuries,
                      prop_dmg=prop_dmg, prop_dmg_exp=prop_dmg_exp,
                      crop_dmg=crop_dmg, crop_dmg_exp=crop_dmg_exp)


@pytest.fixture
def write_storm_csv(tmp_path):
    """Write CSV body lines (without header) to a bz2 file and return its path."""
    def _write(lines, name="StormData.csv.bz2"):
        path = tmp_path / name
        text = HEADER + "".join(line + "\n" for line in lines)
        path.write_bytes(bz2.compress(text.encode("latin-1")))
        return path
    return _write
