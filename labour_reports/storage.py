"""
Table persistence for the raw and clean storage areas.

Writes go to a temporary file in the target directory and are then
renamed over the destination, so a table is either fully replaced or
left untouched.
"""

import hashlib
import json
import logging
import os
import tempfile
from pathlib import Path

import pandas as pd

logger = logging.getLogger(__name__)


def compute_sha256(file_path: Path) -> str:
    h = hashlib.sha256()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def _atomic_write(path: Path, write) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", newline="", encoding="utf-8") as f:
            write(f)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def write_table(df: pd.DataFrame, path: Path) -> None:
    """Write a table as CSV (header row, no index), replacing any previous file."""
    _atomic_write(path, lambda f: df.to_csv(f, index=False, lineterminator="\n"))
    logger.info(f"Table saved: {path} ({len(df)} rows)")


def write_json(data: dict, path: Path) -> None:
    _atomic_write(path, lambda f: json.dump(data, f, indent=2))


def read_raw_table(path: Path) -> pd.DataFrame:
    """Read a raw snapshot with every value kept as a string."""
    return pd.read_csv(path, dtype=str, keep_default_na=False)
