"""
Dataset loader (bz2 CSV -> StormEvent list)
===========================================

This module fetches the NOAA storm database export once, keeps it in a local
cache under `data/`, and converts each CSV row into a `StormEvent` object.

Key ideas:
- The compressed file is downloaded only if no cached copy exists.
- Only the fixed column schema in `COLUMNS` is kept after parsing.
- Numeric columns are coerced column-wise; the first bad cell raises
  `ParseError` instead of being silently turned into a missing value.
"""

from __future__ import annotations
from pathlib import Path
from typing import List, Optional, Union
import logging

import pandas as pd
import requests

from .models import StormEvent

logger = logging.getLogger(__name__)

DATASET_URL = "https://d396qusza40orc.cloudfront.net/repdata%2Fdata%2FStormData.csv.bz2"
DEFAULT_CACHE_PATH = Path("data") / "StormData.csv.bz2"

COLUMNS = ["EVTYPE", "BGN_DATE", "FATALITIES", "INJURIES",
           "PROPDMG", "PROPDMGEXP", "CROPDMG", "CROPDMGEXP"]
_INT_COLUMNS = ("FATALITIES", "INJURIES")
_FLOAT_COLUMNS = ("PROPDMG", "CROPDMG")

PathLike = Union[str, Path]


class DownloadError(IOError):
    """The dataset could not be fetched and no cached copy exists."""


class ParseError(ValueError):
    """The CSV is malformed or a cell cannot be coerced to its column type."""


def download_dataset(url: str = DATASET_URL, cache_path: PathLike = DEFAULT_CACHE_PATH,
                     *, timeout: float = 120.0) -> Path:
    """Make sure the compressed dataset exists at `cache_path`.

    A cached file is reused as-is. Otherwise a single download is attempted;
    the body is written to a `.part` file first and moved into place only
    when complete, so an interrupted download never looks like a cache hit.
    """
    path = Path(cache_path)
    if path.exists():
        logger.info("Using cached dataset %s", path)
        return path

    path.parent.mkdir(parents=True, exist_ok=True)
    part = path.with_name(path.name + ".part")
    logger.info("Downloading %s -> %s", url, path)
    try:
        with requests.get(url, stream=True, timeout=timeout) as resp:
            resp.raise_for_status()
            with open(part, "wb") as fh:
                for chunk in resp.iter_content(chunk_size=1 << 20):
                    fh.write(chunk)
    except requests.RequestException as e:
        part.unlink(missing_ok=True)
        raise DownloadError(f"Could not download {url}: {e}") from e
    part.replace(path)
    logger.info("Saved %d bytes to %s", path.stat().st_size, path)
    return path


def _check_numeric(df: pd.DataFrame, col: str, integer: bool) -> pd.Series:
    """Coerce one column; raise ParseError on the first missing/invalid cell."""
    values = pd.to_numeric(df[col], errors="coerce")
    bad = values.isna() | (values < 0)
    if integer:
        bad |= (values % 1 != 0)
    if bad.any():
        pos = int(bad.to_numpy().argmax())
        raw = df[col].iloc[pos]
        raise ParseError(f"Column {col}: cannot read {raw!r} as a non-negative "
                         f"{'integer' if integer else 'number'} (data row {pos + 1})")
    return values.astype("int64") if integer else values.astype("float64")


def _to_str(col: pd.Series) -> pd.Series:
    return col.fillna("").astype(str)


def load_storm_csv(path: PathLike) -> List[StormEvent]:
    """Parse the (bz2-compressed) storm CSV into StormEvent records.

    Compression is inferred from the file extension, so a plain `.csv`
    works too. Exponent codes and dates are kept as text; they are
    interpreted later by `transform`.

    Raises IOError when the compressed stream is cut off, and ParseError
    when the CSV itself is malformed (unclosed quote, rows with more
    fields than the header).
    """
    # all columns are read: `usecols` would disable pandas' field-count check
    try:
        df = pd.read_csv(
            path,
            dtype=str,
            encoding="latin-1",
            compression="infer",
        )
    except EOFError as e:
        raise IOError(f"Compressed dataset {path} is truncated: {e}") from e
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise ParseError(f"Malformed CSV in {path}: {e}") from e

    # pandas turns the first column into the index when every data row has
    # one field more than the header
    if not isinstance(df.index, pd.RangeIndex):
        raise ParseError(f"Malformed CSV in {path}: data rows have more fields than the header")

    df.rename(columns={c: str(c).strip() for c in df.columns}, inplace=True)

    missing = [c for c in COLUMNS if c not in df.columns]
    if missing:
        raise ParseError(f"Missing required column(s) {missing}. Available={list(df.columns)}")

    numbers = {c: _check_numeric(df, c, integer=True) for c in _INT_COLUMNS}
    numbers.update({c: _check_numeric(df, c, integer=False) for c in _FLOAT_COLUMNS})

    events = [
        StormEvent(
            row_id=i,
            event_type=evtype,
            begin_date=bgn,
            fatalities=int(fat),
            injuries=int(inj),
            prop_dmg=float(prop),
            prop_dmg_exp=prop_exp,
            crop_dmg=float(crop),
            crop_dmg_exp=crop_exp,
        )
        for i, (evtype, bgn, fat, inj, prop, prop_exp, crop, crop_exp) in enumerate(zip(
            _to_str(df["EVTYPE"]),
            _to_str(df["BGN_DATE"]),
            numbers["FATALITIES"],
            numbers["INJURIES"],
            numbers["PROPDMG"],
            _to_str(df["PROPDMGEXP"]),
            numbers["CROPDMG"],
            _to_str(df["CROPDMGEXP"]),
        ))
    ]
    logger.info("Parsed %d events from %s", len(events), path)
    return events


def load_events(url: Optional[str] = DATASET_URL,
                cache_path: PathLike = DEFAULT_CACHE_PATH) -> List[StormEvent]:
    """Download (if needed) and parse the dataset.

    With `url=None` only the local file is used; a missing file then raises
    FileNotFoundError.
    """
    if url is None:
        path = Path(cache_path)
        if not path.exists():
            raise FileNotFoundError(f"Dataset not found: {path}")
    else:
        path = download_dataset(url, cache_path)
    return load_storm_csv(path)
