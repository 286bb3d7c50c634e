"""
Raw snapshot ingestion.
Fetches the complete current dataset in one request and stores it
unmodified, with a manifest recording where it came from.
"""

import io
import logging
import time
from pathlib import Path
from typing import Optional

import pandas as pd
import requests

from .config import (
    RAW_MANIFEST_FILE,
    RAW_TABLE_FILE,
    REQUEST_HEADERS,
    REQUEST_TIMEOUT,
    SOURCE_REQUIRED_COLUMNS,
    SOURCE_URL,
)
from .errors import SourceFormatError, SourceUnavailableError
from .models import SnapshotInfo
from .storage import compute_sha256, write_json, write_table

logger = logging.getLogger(__name__)


def download_source(url: str) -> requests.Response:
    """Issue the single GET for the dataset. No retries."""
    logger.info(f"Downloading: {url}")
    try:
        resp = requests.get(url, headers=REQUEST_HEADERS, timeout=REQUEST_TIMEOUT,
                            allow_redirects=True)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise SourceUnavailableError(f"Failed to download {url}: {e}") from e
    return resp


def decode_body(resp: requests.Response) -> str:
    """Decode the body as UTF-8 whatever charset the headers claim."""
    try:
        return resp.content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise SourceFormatError(f"Response is not UTF-8 text: {e}") from e


def parse_source(text: str) -> pd.DataFrame:
    """Parse the response body into a table of string values."""
    try:
        df = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise SourceFormatError(f"Response is not a CSV table: {e}") from e

    missing = [c for c in SOURCE_REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise SourceFormatError(
            f"Response is missing column(s) {missing}; got {list(df.columns)[:10]}"
        )
    return df


def fetch_raw_snapshot(url: Optional[str] = None,
                       raw_path: Optional[Path] = None,
                       manifest_path: Optional[Path] = None) -> SnapshotInfo:
    """Fetch the full dataset and overwrite the raw snapshot."""
    url = url or SOURCE_URL
    raw_path = Path(raw_path or RAW_TABLE_FILE)
    manifest_path = Path(manifest_path or RAW_MANIFEST_FILE)

    resp = download_source(url)
    df = parse_source(decode_body(resp))
    write_table(df, raw_path)

    info = SnapshotInfo(
        url=url,
        raw_path=str(raw_path),
        sha256=compute_sha256(raw_path),
        rows=len(df),
        columns=list(df.columns),
        fetched_at=time.strftime("%Y-%m-%d %H:%M:%S"),
        file_size_bytes=raw_path.stat().st_size,
        content_type=resp.headers.get("Content-Type"),
    )
    write_json(info.to_dict(), manifest_path)

    logger.info(f"Downloaded {info.rows} records ({info.file_size_bytes / 1024:.1f} KB) -> {raw_path.name}")
    return info
