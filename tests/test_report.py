import tempfile

import pytest
from docx import Document

from stormimpact.models import EconomicImpact, HealthImpact
from stormimpact.pipeline import AnalysisResult
from stormimpact.report import (
    ECONOMY_COLUMNS,
    HEALTH_COLUMNS,
    RenderError,
    economy_table,
    generate_docx_report,
    health_table,
    plot_economy,
    plot_health,
    plot_year_histogram,
)

HEALTH = [HealthImpact("TORNADO", 1000, 12000), HealthImpact("HEAT", 900, 3000)]
ECONOMY = [EconomicImpact("FLOOD", 1.4e11, 1.2e9), EconomicImpact("DROUGHT", 1e6, 8e9)]


def _result(health=HEALTH, economy=ECONOMY):
    return AnalysisResult(start_year=2002, total_events=100, events_per_year={2001: 40, 2002: 60},
                          events=[], health=list(health), economy=list(economy))


def test_health_table_headers_and_values():
    df = health_table(HEALTH)
    assert list(df.columns) == HEALTH_COLUMNS
    assert df.iloc[0].tolist() == ["TORNADO", 1000, 12000, 13000]


def test_economy_table_headers_and_values():
    df = economy_table(ECONOMY)
    assert list(df.columns) == ECONOMY_COLUMNS
    assert df["Total damage [USD]"].tolist() == [1.412e11, 8.001e9]


def test_empty_tables_keep_headers():
    assert list(health_table([]).columns) == HEALTH_COLUMNS
    assert economy_table([]).empty


def test_plots_write_png(tmp_path):
    for fn, rows in ((plot_health, HEALTH), (plot_economy, ECONOMY)):
        path = tmp_path / f"{fn.__name__}.png"
        assert fn(rows, path) == str(path)
        assert path.read_bytes()[:4] == b"\x89PNG"
    hist = tmp_path / "years.png"
    plot_year_histogram({2000: 5, 2001: 7, 2002: 30}, 2002, hist)
    assert hist.exists()


def test_plot_into_missing_directory_raises_render_error(tmp_path):
    with pytest.raises(RenderError):
        plot_health(HEALTH, tmp_path / "no" / "such" / "dir" / "h.png")


def test_generate_docx_report(tmp_path):
    out = tmp_path / "out" / "report.docx"
    assert generate_docx_report(_result(), out) == str(out)

    doc = Document(str(out))
    assert len(doc.tables) == 2
    health, economy = doc.tables
    assert [c.text for c in health.rows[0].cells] == HEALTH_COLUMNS
    assert [c.text for c in health.rows[1].cells] == ["TORNADO", "1,000", "12,000", "13,000"]
    assert [c.text for c in economy.rows[0].cells] == ECONOMY_COLUMNS
    assert economy.rows[2].cells[0].text == "DROUGHT"
    # histogram + two bar charts
    assert len(doc.inline_shapes) == 3


def test_generate_docx_report_with_empty_views(tmp_path):
    out = tmp_path / "empty.docx"
    generate_docx_report(_result(health=[], economy=[]), out)
    doc = Document(str(out))
    assert len(doc.tables) == 2
    assert len(doc.inline_shapes) == 1


def test_report_save_failure_raises_render_error(tmp_path):
    # a directory cannot be opened as the output file
    target = tmp_path / "taken"
    target.mkdir()
    with pytest.raises(RenderError, match="Could not write report"):
        generate_docx_report(_result(), target)


def test_report_removes_chart_scratch_files(tmp_path, monkeypatch):
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    generate_docx_report(_result(), tmp_path / "report.docx")
    assert list(scratch.iterdir()) == []


def test_report_module_docstring():
    import stormimpact.report

    assert stormimpact.report.__doc__.strip().startswith("Storm impact report")
