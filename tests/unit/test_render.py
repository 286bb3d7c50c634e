"""Unit tests for report rendering."""

from __future__ import annotations

import pandas as pd
import pytest

from labour_reports.clean import clean_table
from labour_reports.errors import RenderError
from labour_reports.models import ParameterCombination
from labour_reports.render import ReportRenderer, build_chart, compute_axis_bounds

FULL_TIME_MALES = ParameterCombination((("measure", "Full-time"), ("sex", "Males")))
PART_TIME_FEMALES = ParameterCombination((("measure", "Part-time"), ("sex", "Females")))


def _two_group_table() -> pd.DataFrame:
    dates = pd.to_datetime(["2024-01-01", "2024-02-01", "2024-01-01", "2024-02-01"])
    return pd.DataFrame({
        "date": dates,
        "measure": ["Full-time", "Full-time", "Part-time", "Part-time"],
        "sex": ["Males", "Males", "Males", "Males"],
        "value": [100.0, 102.0, 50.0, 0.0],
        "previous_value": [None, 100.0, None, 50.0],
        "delta": [0.0, 2.0, 0.0, -50.0],
    })


def test_axis_bounds_cover_whole_table_and_zero() -> None:
    """Bounds come from every row and always include zero."""
    assert compute_axis_bounds(_two_group_table()) == (-50.0, 2.0)
    assert compute_axis_bounds(pd.DataFrame({"delta": [3.0, 4.0]})) == (0.0, 4.0)
    assert compute_axis_bounds(pd.DataFrame({"delta": [0.0]})) == (-1.0, 1.0)


def test_reports_share_axis_scale() -> None:
    """Every rendered report should print the same axis range."""
    renderer = ReportRenderer(_two_group_table())
    part_time = ParameterCombination((("measure", "Part-time"), ("sex", "Males")))

    first = renderer.render(FULL_TIME_MALES)
    second = renderer.render(part_time)

    for document in (first, second):
        assert ">2.0</text>" in document
        assert ">-50.0</text>" in document


def test_chart_uses_given_bounds() -> None:
    """A small subset should be scaled against the shared bounds."""
    table = _two_group_table()
    subset = table[table["measure"] == "Full-time"]

    chart = build_chart(subset, (-50.0, 2.0))

    assert chart["y_min"] == -50.0
    assert len(chart["bars"]) == 2
    assert chart["bars"][1]["height"] == pytest.approx(240 * 2 / 52, abs=0.01)


def test_render_filters_to_combination(make_raw) -> None:
    """The packaged template should receive only the matching rows."""
    renderer = ReportRenderer(clean_table(make_raw()))

    document = renderer.render(FULL_TIME_MALES)

    assert 'data-rows="6"' in document
    assert "Full-time employment, Males" in document
    assert len(renderer.select(FULL_TIME_MALES)) == 6


def test_empty_combination_renders_empty_state(make_raw) -> None:
    """No matching rows should still produce a document."""
    renderer = ReportRenderer(clean_table(make_raw(skip=[("M4", "2")])))

    document = renderer.render(PART_TIME_FEMALES)

    assert 'class="empty-state"' in document
    assert 'data-rows="0"' in document
    assert "<svg" not in document


def test_malformed_template_raises_render_error(tmp_path, make_raw) -> None:
    """Template syntax errors should surface as RenderError."""
    template = tmp_path / "broken.html.j2"
    template.write_text("{% for row in %}{{ row }}{% endfor %}")
    renderer = ReportRenderer(clean_table(make_raw()), template_path=template)

    with pytest.raises(RenderError):
        renderer.render(FULL_TIME_MALES)


def test_missing_template_raises_render_error(tmp_path, make_raw) -> None:
    """A template path that does not exist should raise RenderError."""
    renderer = ReportRenderer(clean_table(make_raw()), template_path=tmp_path / "nope.html.j2")

    with pytest.raises(RenderError):
        renderer.render(FULL_TIME_MALES)


def test_undefined_template_variable_raises_render_error(tmp_path, make_raw) -> None:
    """Templates referencing unknown names should fail loudly."""
    template = tmp_path / "strict.html.j2"
    template.write_text("{{ measure }} {{ region }}")
    renderer = ReportRenderer(clean_table(make_raw()), template_path=template)

    with pytest.raises(RenderError):
        renderer.render(FULL_TIME_MALES)


def test_missing_required_column_raises_render_error(make_raw) -> None:
    """A clean table without the charted column is a structural failure."""
    renderer = ReportRenderer(clean_table(make_raw()).drop(columns=["delta"]))

    with pytest.raises(RenderError):
        renderer.render(FULL_TIME_MALES)


def test_all_null_required_column_raises_render_error(make_raw) -> None:
    """A required column that is null in every row is a structural failure."""
    clean = clean_table(make_raw())
    clean["value"] = None
    renderer = ReportRenderer(clean)

    with pytest.raises(RenderError):
        renderer.render(FULL_TIME_MALES)
