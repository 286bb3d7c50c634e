"""Pytest configuration and shared sample data."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Iterable

import pandas as pd
import pytest


def pytest_sessionstart() -> None:
    """Add the project root to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))


MEASURE_CODES = ("M3", "M4")
SEX_CODES = ("1", "2", "3")


def build_raw_frame(
    measures: Iterable[str] = MEASURE_CODES,
    sexes: Iterable[str] = SEX_CODES,
    months: int = 6,
    skip: Iterable[tuple[str, str]] = (),
) -> pd.DataFrame:
    """Raw table shaped like the source CSV, with original and adjusted series.

    Seasonally adjusted values grow by k**2, so deltas are 0, 1, 3, 5, 7, 9.
    """
    skipped = set(skip)
    rows = []
    for m_index, measure in enumerate(measures):
        for s_index, sex in enumerate(sexes):
            if (measure, sex) in skipped:
                continue
            for tsest in ("10", "20"):
                for k in range(months):
                    base = 1000 + 100 * m_index + 10 * s_index
                    value = base + k * k if tsest == "20" else base - k
                    rows.append({
                        "DATAFLOW": "ABS:LF(1.0.0)",
                        "MEASURE": measure,
                        "SEX": sex,
                        "AGE": "1599",
                        "TSEST": tsest,
                        "REGION": "AUS",
                        "FREQ": "M",
                        "TIME_PERIOD": f"2024-{k + 1:02d}",
                        "OBS_VALUE": f"{value:.1f}",
                        "UNIT_MEASURE": "NUM",
                    })
    return pd.DataFrame(rows)


@pytest.fixture
def make_raw() -> Callable[..., pd.DataFrame]:
    """Factory for raw tables."""
    return build_raw_frame


@pytest.fixture
def raw_csv(tmp_path) -> Path:
    """Full 2 x 3 x 6-month raw snapshot written to disk."""
    path = tmp_path / "raw" / "labour_force_raw.csv"
    path.parent.mkdir(parents=True)
    build_raw_frame().to_csv(path, index=False)
    return path
