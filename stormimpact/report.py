"""
Storm impact report
-------------------
Tables, charts and a DOCX document built from an `AnalysisResult`.

- `health_table` / `economy_table` turn the top-N records into DataFrames
  with display headers (used by the CLI and by the document).
- `plot_*` functions write PNG charts with matplotlib (Agg backend).
- `generate_docx_report` assembles everything into one document.

Any failure of the rendering backends is raised as `RenderError`.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union
import logging
import os
import tempfile

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from .models import EconomicImpact, HealthImpact

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

HEALTH_COLUMNS = ["Type of event", "Fatalities", "Injuries", "Total casualties"]
ECONOMY_COLUMNS = ["Type of event", "Property damage [USD]", "Crop damage [USD]", "Total damage [USD]"]


class RenderError(RuntimeError):
    """A chart or the report document could not be written."""


# -----------------------------
# Configuration / citation types
# -----------------------------

@dataclass
class DatasetCitation:
    """Minimal dataset citation metadata for the DOCX report."""
    database_name: str = "Storm Events Database"
    institutional_author: str = "U.S. National Oceanic and Atmospheric Administration (NOAA)"
    website: str = "https://www.ncdc.noaa.gov/stormevents/"
    file_name: Optional[str] = None
    file_note: Optional[str] = "Events recorded 1950 to November 2011."


@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "Health and Economic Impact of Severe Weather Events"
    subtitle: str = "U.S. NOAA storm database"
    citation: DatasetCitation = field(default_factory=DatasetCitation)
    # chart image width in the document
    chart_width_in: float = 6.0


# -----------------------------
# Tables
# -----------------------------

def health_table(rows: Sequence[HealthImpact]) -> pd.DataFrame:
    return pd.DataFrame(
        [(r.event_type, r.fatalities, r.injuries, r.total) for r in rows],
        columns=HEALTH_COLUMNS,
    )


def economy_table(rows: Sequence[EconomicImpact]) -> pd.DataFrame:
    return pd.DataFrame(
        [(r.event_type, r.property_damage, r.crop_damage, r.total) for r in rows],
        columns=ECONOMY_COLUMNS,
    )


def _fmt_cell(v) -> str:
    if isinstance(v, (float, np.floating)):
        return f"{v:,.0f}"
    if isinstance(v, (int, np.integer)):
        return f"{int(v):,}"
    return str(v)


# -----------------------------
# Charts
# -----------------------------

def _save(fig, path: PathLike) -> str:
    try:
        fig.tight_layout()
        fig.savefig(path, dpi=150)
    except (OSError, ValueError, RuntimeError) as e:
        raise RenderError(f"Could not write chart {path}: {e}") from e
    finally:
        plt.close(fig)
    return str(path)


def _stacked_bar(labels: List[str], lower: List[float], upper: List[float],
                 names: Sequence[str], title: str, ylabel: str, path: PathLike) -> str:
    x = np.arange(len(labels))
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.bar(x, lower, label=names[0])
    ax.bar(x, upper, bottom=lower, label=names[1])
    ax.set_xticks(x)
    ax.set_xticklabels(labels, rotation=30, ha="right")
    ax.set_title(title)
    ax.set_xlabel("Type of event")
    ax.set_ylabel(ylabel)
    ax.legend()
    return _save(fig, path)


def plot_health(rows: Sequence[HealthImpact], path: PathLike) -> str:
    """Stacked bars of fatalities and injuries per event type, in ranking order."""
    return _stacked_bar(
        [r.event_type for r in rows],
        [r.fatalities for r in rows],
        [r.injuries for r in rows],
        ("Fatalities", "Injuries"),
        "Casualties by type of event",
        "Number of people",
        path,
    )


def plot_economy(rows: Sequence[EconomicImpact], path: PathLike) -> str:
    """Stacked bars of property and crop damage per event type, in billions of USD."""
    return _stacked_bar(
        [r.event_type for r in rows],
        [r.property_damage / 1e9 for r in rows],
        [r.crop_damage / 1e9 for r in rows],
        ("Property damage", "Crop damage"),
        "Damage by type of event",
        "Damage [billion USD]",
        path,
    )


def plot_year_histogram(counts: Dict[int, int], start_year: int, path: PathLike) -> str:
    """Events recorded per year, with a marker at the first analysed year."""
    fig, ax = plt.subplots(figsize=(8, 4))
    ax.bar(list(counts.keys()), list(counts.values()), width=1.0, edgecolor="black", linewidth=0.5)
    ax.axvline(start_year - 0.5, color="red", linestyle="--", label=f"{start_year}")
    ax.set_title("Number of recorded events per year")
    ax.set_xlabel("Year")
    ax.set_ylabel("Events")
    ax.legend()
    return _save(fig, path)


# -----------------------------
# Main entry point used by CLI
# -----------------------------

def generate_docx_report(result, out_path: PathLike, *, config: Optional[ReportConfig] = None) -> str:
    """
    Write a DOCX report (tables + charts) for an `AnalysisResult`.

    Returns the output path.
    """
    # Lazy import: python-docx is only needed when a document is written.
    try:
        from docx import Document
        from docx.enum.text import WD_ALIGN_PARAGRAPH
        from docx.shared import Inches, Pt
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    config = config or ReportConfig()
    # add_picture copies each PNG into the document
    with tempfile.TemporaryDirectory(prefix="stormimpact_report_") as tmpdir:
        doc = Document()
        style = doc.styles["Normal"]
        style.font.name = "Calibri"
        style.font.size = Pt(11)

        def _center_title(text: str, size: int, bold: bool = False, italic: bool = False) -> None:
            p = doc.add_paragraph()
            r = p.add_run(text)
            r.bold = bold
            r.italic = italic
            r.font.size = Pt(size)
            p.alignment = WD_ALIGN_PARAGRAPH.CENTER

        def _kv(key: str, value: str) -> None:
            p = doc.add_paragraph()
            r = p.add_run(f"{key}: ")
            r.bold = True
            p.add_run(value)

        def _table(df: pd.DataFrame) -> None:
            t = doc.add_table(rows=1, cols=len(df.columns))
            t.style = "Table Grid"
            for cell, name in zip(t.rows[0].cells, df.columns):
                cell.text = name
            for values in df.itertuples(index=False):
                cells = t.add_row().cells
                for cell, v in zip(cells, values):
                    cell.text = _fmt_cell(v)

        def _chart(path: str) -> None:
            doc.add_picture(path, width=Inches(config.chart_width_in))

        _center_title(config.title, 20, bold=True)
        _center_title(config.subtitle, 12, italic=True)

        doc.add_paragraph("")
        _kv("Events in dataset", f"{result.total_events:,}")
        _kv("Events analysed", f"{len(result.events):,} (from {result.start_year} onward)")

        # Dataset citation section
        doc.add_heading("Data", level=1)
        cit = config.citation
        doc.add_paragraph(f"{cit.institutional_author}. {cit.database_name}. {cit.website}")
        if cit.file_name:
            doc.add_paragraph(f"Data file used: {cit.file_name}")
        if cit.file_note:
            doc.add_paragraph(cit.file_note)

        doc.add_heading("Data processing", level=1)
        doc.add_paragraph(
            f"Recording of events is sparse in the early years of the database, so only "
            f"events that began in {result.start_year} or later are analysed."
        )
        if result.events_per_year:
            _chart(plot_year_histogram(result.events_per_year, result.start_year,
                                       os.path.join(tmpdir, "events_per_year.png")))
        doc.add_paragraph(
            "Property and crop damage figures are scaled by their exponent code "
            "(K = thousand, M = million, B = billion USD). Other codes are left as recorded."
        )

        doc.add_heading("Population health", level=1)
        doc.add_paragraph(f"Top {len(result.health)} types of event by total casualties:")
        _table(health_table(result.health))
        if result.health:
            _chart(plot_health(result.health, os.path.join(tmpdir, "health.png")))

        doc.add_heading("Economic consequences", level=1)
        doc.add_paragraph(f"Top {len(result.economy)} types of event by total damage:")
        _table(economy_table(result.economy))
        if result.economy:
            _chart(plot_economy(result.economy, os.path.join(tmpdir, "economy.png")))

        # -----------------------------
        # Reproducibility footer
        # -----------------------------
        from datetime import datetime as _dt
        from . import __version__

        doc.add_heading("Reproducibility", level=1)
        doc.add_paragraph(f"stormimpact version: {__version__}")
        doc.add_paragraph(f"Report generated at: {_dt.now().isoformat(timespec='seconds')}")
        if result.source:
            doc.add_paragraph(f"Dataset file: {result.source}")

    os.makedirs(os.path.dirname(os.fspath(out_path)) or ".", exist_ok=True)
    try:
        doc.save(os.fspath(out_path))
    except OSError as e:
        raise RenderError(f"Could not write report {out_path}: {e}") from e
    logger.info("Report written to %s", out_path)
    return str(out_path)
