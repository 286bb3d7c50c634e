"""
Report rendering.
Renders the report template for one parameter combination from the
clean table. The chart's value axis is fixed once from the whole table,
so every report in a batch is drawn on the same scale.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, TemplateError

from .config import CHART_COLUMN, DIMENSIONS, REPORT_TEMPLATE_FILE
from .errors import RenderError
from .models import ParameterCombination

logger = logging.getLogger(__name__)

CHART_WIDTH = 640
CHART_HEIGHT = 320
CHART_PADDING = 40


def compute_axis_bounds(clean: pd.DataFrame, column: str = CHART_COLUMN) -> Tuple[float, float]:
    """Value range of a column over the whole table, always including zero."""
    if column not in clean.columns:
        return (-1.0, 1.0)
    values = pd.to_numeric(clean[column], errors="coerce").to_numpy(dtype=float)
    values = values[np.isfinite(values)]
    if values.size == 0:
        return (-1.0, 1.0)

    lo = min(float(values.min()), 0.0)
    hi = max(float(values.max()), 0.0)
    if lo == hi:
        lo, hi = lo - 1.0, hi + 1.0
    return (lo, hi)


def build_chart(subset: pd.DataFrame, bounds: Tuple[float, float],
                column: str = CHART_COLUMN) -> Optional[dict]:
    """Bar geometry for the template's SVG, or None when there is nothing to draw."""
    if subset.empty:
        return None

    lo, hi = bounds
    y_range = [CHART_HEIGHT - CHART_PADDING, CHART_PADDING]
    values = subset[column].to_numpy(dtype=float)
    ys = np.interp(values, [lo, hi], y_range)
    zero_y = float(np.interp(0.0, [lo, hi], y_range))

    plot_width = CHART_WIDTH - 2 * CHART_PADDING
    slot = plot_width / len(values)
    bar_width = max(slot * 0.8, 1.0)

    bars = []
    for i, (date, value, y) in enumerate(zip(subset["date"], values, ys)):
        top = min(float(y), zero_y)
        bars.append({
            "x": round(CHART_PADDING + i * slot + (slot - bar_width) / 2, 2),
            "y": round(top, 2),
            "width": round(bar_width, 2),
            "height": round(abs(float(y) - zero_y), 2),
            "positive": bool(value >= 0),
            "label": pd.Timestamp(date).strftime("%b %Y"),
            "value": float(value),
        })

    return {
        "width": CHART_WIDTH,
        "height": CHART_HEIGHT,
        "padding": CHART_PADDING,
        "zero_y": round(zero_y, 2),
        "bars": bars,
        "y_min": lo,
        "y_max": hi,
        "first_label": bars[0]["label"],
        "last_label": bars[-1]["label"],
    }


def _row_dicts(subset: pd.DataFrame) -> List[Dict]:
    rows = []
    for rec in subset.itertuples(index=False):
        previous = getattr(rec, "previous_value", None)
        rows.append({
            "date": pd.Timestamp(rec.date).strftime("%Y-%m"),
            "value": float(rec.value),
            "previous_value": None if previous is None or pd.isna(previous) else float(previous),
            "delta": float(rec.delta),
        })
    return rows


class ReportRenderer:
    """Renders one report per combination from a fixed clean table."""

    def __init__(self, clean: pd.DataFrame, template_path: Optional[Path] = None,
                 dimensions: Optional[Sequence[str]] = None, chart_column: str = CHART_COLUMN):
        self.clean = clean
        self.template_path = Path(template_path or REPORT_TEMPLATE_FILE)
        self.dimensions = list(DIMENSIONS) if dimensions is None else list(dimensions)
        self.chart_column = chart_column
        self.axis_bounds = compute_axis_bounds(clean, chart_column)
        self._env = Environment(
            loader=FileSystemLoader(str(self.template_path.parent)),
            autoescape=True,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        self._template: Optional[Template] = None

    @property
    def required_columns(self) -> List[str]:
        return ["date", "value", self.chart_column, *self.dimensions]

    def _load_template(self) -> Template:
        if self._template is None:
            try:
                self._template = self._env.get_template(self.template_path.name)
            except TemplateError as e:
                raise RenderError(f"Template {self.template_path} is invalid: {e}") from e
        return self._template

    def _check_structure(self):
        for column in self.required_columns:
            if column not in self.clean.columns:
                raise RenderError(f"Clean table has no '{column}' column")
            if len(self.clean) and self.clean[column].isna().all():
                raise RenderError(f"Column '{column}' is empty in every row")

    def select(self, combination: ParameterCombination) -> pd.DataFrame:
        """Rows matching every label of the combination, oldest first."""
        mask = pd.Series(True, index=self.clean.index)
        for dim, label in combination.items:
            mask &= self.clean[dim].astype(str) == label
        return self.clean[mask].sort_values("date", kind="mergesort")

    def render(self, combination: ParameterCombination) -> str:
        """Render the report document for one combination.

        An empty selection still produces a document (with an empty-state
        chart). Raises RenderError for template or table structure problems.
        """
        self._check_structure()
        template = self._load_template()
        subset = self.select(combination)

        lo, hi = self.axis_bounds
        context = {
            **combination.params,
            "params": combination.params,
            "title": " / ".join(combination.labels),
            "rows": _row_dicts(subset),
            "row_count": len(subset),
            "chart": build_chart(subset, self.axis_bounds, self.chart_column),
            "axis": {"min": lo, "max": hi},
            "chart_column": self.chart_column,
        }
        try:
            return template.render(**context)
        except TemplateError as e:
            raise RenderError(f"Rendering {combination} failed: {e}") from e
