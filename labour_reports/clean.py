"""
Cleaning stage: raw snapshot -> analysis-ready table.

Four stages, applied in order:
  1. Filter  - keep rows matching the selection criterion (seasonally adjusted)
  2. Project - keep period, dimension codes and observed value
  3. Decode  - map codes to labels through the closed vocabularies
  4. Derive  - parse dates, then previous value and delta per label group

The clean table is rebuilt from scratch on every run and only replaces
the previous one once every stage has succeeded.

Usage:
    python -m labour_reports.clean
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from .config import (
    CLEAN_TABLE_FILE,
    DECODE_TABLES,
    DIMENSIONS,
    EXCLUDED_CODES,
    PERIOD_COLUMN,
    RAW_TABLE_FILE,
    SELECTION,
    VALUE_COLUMN,
)
from .errors import PipelineError, SourceFormatError, UnmappedCodeError
from .storage import read_raw_table, write_table

logger = logging.getLogger(__name__)


def _require_columns(df: pd.DataFrame, columns: List[str], stage: str):
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise SourceFormatError(f"{stage}: raw table has no column(s) {missing}")


# ============================================================================
# Stages
# ============================================================================

def filter_rows(raw: pd.DataFrame, selection: Optional[Dict[str, str]] = None) -> pd.DataFrame:
    """Keep only rows where every selection column equals its value."""
    selection = SELECTION if selection is None else selection
    _require_columns(raw, list(selection), "filter")

    mask = pd.Series(True, index=raw.index)
    for column, wanted in selection.items():
        mask &= raw[column].astype(str).str.strip() == str(wanted)

    kept = raw[mask]
    logger.info(f"Filter {selection}: kept {len(kept)} of {len(raw)} rows")
    return kept


def project_columns(df: pd.DataFrame, dimensions: Optional[Dict[str, str]] = None) -> pd.DataFrame:
    """Drop every field not needed downstream."""
    dimensions = DIMENSIONS if dimensions is None else dimensions
    columns = [PERIOD_COLUMN, *dimensions.values(), VALUE_COLUMN]
    _require_columns(df, columns, "project")
    return df[columns].copy()


def decode_codes(df: pd.DataFrame,
                 dimensions: Optional[Dict[str, str]] = None,
                 decode_tables: Optional[Dict[str, Dict[str, str]]] = None,
                 excluded: Optional[Dict[str, List[str]]] = None) -> pd.DataFrame:
    """Replace each code column with its label column.

    Codes listed as excluded are dropped. Any other code without a label
    raises UnmappedCodeError rather than being silently discarded.
    """
    dimensions = DIMENSIONS if dimensions is None else dimensions
    decode_tables = DECODE_TABLES if decode_tables is None else decode_tables
    excluded = EXCLUDED_CODES if excluded is None else excluded

    out = df.copy()
    for label_col, code_col in dimensions.items():
        codes = out[code_col].astype(str).str.strip()
        table = decode_tables.get(code_col, {})
        skip = set(excluded.get(code_col, []))

        unknown = set(codes.unique()) - set(table) - skip
        if unknown:
            raise UnmappedCodeError(code_col, unknown)

        keep = ~codes.isin(skip)
        if not keep.all():
            logger.info(f"Decode {code_col}: dropped {(~keep).sum()} rows with excluded codes")
        out = out[keep].copy()
        out[label_col] = codes[keep].map(table)
        out = out.drop(columns=[code_col])

    return out


def parse_period(period: pd.Series) -> pd.Series:
    """Parse 'YYYY-MM' (or 'YYYY-MM-DD') tokens to first-of-month dates."""
    text = period.astype(str).str.strip().str.slice(0, 7)
    dates = pd.to_datetime(text, format="%Y-%m", errors="coerce")
    bad = period[dates.isna()]
    if not bad.empty:
        raise SourceFormatError(f"Unparseable time period(s): {sorted(bad.unique())[:5]}")
    return dates


def parse_values(values: pd.Series) -> pd.Series:
    numbers = pd.to_numeric(values, errors="coerce")
    bad = values[numbers.isna()]
    if not bad.empty:
        raise SourceFormatError(f"Non-numeric observation value(s): {sorted(bad.unique())[:5]}")
    return numbers.astype(float)


def derive_fields(df: pd.DataFrame, label_columns: Optional[List[str]] = None) -> pd.DataFrame:
    """Parse dates and compute previous_value / delta within each label group."""
    label_columns = list(DIMENSIONS) if label_columns is None else label_columns

    blank = df[VALUE_COLUMN].astype(str).str.strip() == ""
    if blank.any():
        logger.warning(f"Derive: dropped {blank.sum()} rows without an observation value")
        df = df[~blank]

    out = pd.DataFrame({
        "date": parse_period(df[PERIOD_COLUMN]),
        **{label: df[label].astype(str) for label in label_columns},
        "value": parse_values(df[VALUE_COLUMN]),
    })

    keys = label_columns + ["date"]
    duplicated = out.duplicated(subset=keys, keep=False)
    if duplicated.any():
        sample = out.loc[duplicated, keys].head(3).to_dict("records")
        raise SourceFormatError(f"Duplicate observations for the same group and date: {sample}")

    out = out.sort_values(keys, kind="mergesort").reset_index(drop=True)
    if label_columns:
        out["previous_value"] = out.groupby(label_columns, sort=False)["value"].shift(1)
    else:
        out["previous_value"] = out["value"].shift(1)
    out["delta"] = (out["value"] - out["previous_value"]).fillna(0.0)
    return out


def clean_table(raw: pd.DataFrame,
                selection: Optional[Dict[str, str]] = None,
                dimensions: Optional[Dict[str, str]] = None,
                decode_tables: Optional[Dict[str, Dict[str, str]]] = None,
                excluded: Optional[Dict[str, List[str]]] = None) -> pd.DataFrame:
    """Run all four stages on a raw table. No I/O."""
    dimensions = DIMENSIONS if dimensions is None else dimensions
    df = filter_rows(raw, selection)
    df = project_columns(df, dimensions)
    df = decode_codes(df, dimensions, decode_tables, excluded)
    return derive_fields(df, list(dimensions))


# ============================================================================
# I/O
# ============================================================================

def run_cleaning(raw_path: Optional[Path] = None,
                 clean_path: Optional[Path] = None) -> pd.DataFrame:
    """Read the raw snapshot, clean it and replace the clean table."""
    raw_path = Path(raw_path or RAW_TABLE_FILE)
    clean_path = Path(clean_path or CLEAN_TABLE_FILE)

    if not raw_path.exists():
        raise PipelineError(f"No raw snapshot at {raw_path}; run ingestion first")

    raw = read_raw_table(raw_path)
    logger.info(f"Raw snapshot loaded: {raw_path} ({len(raw)} rows)")

    clean = clean_table(raw)
    write_table(clean.assign(date=clean["date"].dt.strftime("%Y-%m-%d")), clean_path)
    return clean


def load_clean_table(clean_path: Optional[Path] = None,
                     dimensions: Optional[Dict[str, str]] = None) -> pd.DataFrame:
    """Read the clean table back with parsed dates and string labels."""
    clean_path = Path(clean_path or CLEAN_TABLE_FILE)
    dimensions = DIMENSIONS if dimensions is None else dimensions

    if not clean_path.exists():
        raise PipelineError(f"No clean table at {clean_path}; run cleaning first")

    # Labels such as "NA" or "None" are values, not missing data; only the
    # numeric columns treat an empty cell as missing.
    df = pd.read_csv(
        clean_path,
        dtype={label: str for label in dimensions},
        keep_default_na=False,
        na_values={column: [""] for column in ("value", "previous_value", "delta")},
    )
    if "date" in df.columns:
        df["date"] = pd.to_datetime(df["date"], format="%Y-%m-%d")
    return df


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    run_cleaning()


if __name__ == "__main__":
    main()
