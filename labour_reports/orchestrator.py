"""
Orchestrator - end-to-end pipeline runner.
Downloads the raw snapshot, cleans it, and renders one report per
parameter combination with a per-combination status report.

Usage:
    python -m labour_reports.orchestrator [--skip-ingest] [--url URL]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from .clean import load_clean_table, run_cleaning
from .config import (
    ARTIFACT_SUFFIX,
    CLEAN_TABLE_FILE,
    DIMENSIONS,
    RAW_TABLE_FILE,
    RENDER_REPORT_FILE,
    REPORT_TEMPLATE_FILE,
    REPORTS_DIR,
)
from .errors import ArtifactNameError, PipelineError, RenderError
from .ingest import fetch_raw_snapshot
from .models import BatchSummary, ParameterCombination, RenderedArtifact
from .parameters import enumerate_combinations
from .render import ReportRenderer

logger = logging.getLogger(__name__)


def artifact_path(combination: ParameterCombination, output_dir: Path) -> Path:
    """Deterministic output path, e.g. reports/full_time_males_report.html."""
    return Path(output_dir) / f"{combination.slug()}{ARTIFACT_SUFFIX}"


def plan_artifact_paths(combinations: List[ParameterCombination],
                        output_dir: Path) -> Dict[ParameterCombination, Path]:
    """Map each combination to its output path.

    Raises ArtifactNameError when distinct labels slugify to the same file.
    """
    paths = {}
    claimed: Dict[Path, ParameterCombination] = {}
    for combination in combinations:
        path = artifact_path(combination, output_dir)
        if path in claimed:
            raise ArtifactNameError(
                f"{claimed[path]} and {combination} both map to {path.name}"
            )
        claimed[path] = combination
        paths[combination] = path
    return paths


def run_batch(clean_path: Optional[Path] = None,
              template_path: Optional[Path] = None,
              output_dir: Optional[Path] = None,
              report_path: Optional[Path] = None) -> BatchSummary:
    """Render every combination in the clean table.

    A RenderError or write failure on one combination is recorded and the
    batch moves on.
    """
    output_dir = Path(output_dir or REPORTS_DIR)
    template_path = Path(template_path or REPORT_TEMPLATE_FILE)

    clean = load_clean_table(clean_path)
    logger.info(f"Clean table loaded: {len(clean)} rows")

    combinations = enumerate_combinations(clean)
    paths = plan_artifact_paths(combinations, output_dir)
    renderer = ReportRenderer(clean, template_path=template_path)
    logger.info(f"Shared axis bounds: {renderer.axis_bounds}")

    output_dir.mkdir(parents=True, exist_ok=True)
    summary = BatchSummary()

    for combination in combinations:
        path = paths[combination]
        try:
            document = renderer.render(combination)
            path.write_text(document, encoding="utf-8")
        except (RenderError, OSError) as e:
            logger.error(f"Render failed for {combination}: {e}")
            summary.artifacts.append(RenderedArtifact(
                combination=combination, path=path, status="failed", error=str(e),
            ))
            continue

        rows = len(renderer.select(combination))
        logger.info(f"  {path.name} ({rows} rows)")
        summary.artifacts.append(RenderedArtifact(
            combination=combination, path=path, status="success", rows=rows,
        ))

    _save_render_report(summary, report_path or RENDER_REPORT_FILE)
    _print_summary(summary)
    return summary


def _save_render_report(summary: BatchSummary, path: Path):
    """Save the per-combination status table, header only for an empty batch."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    columns = [*DIMENSIONS, "path", "status", "rows", "error"]
    report = pd.DataFrame([a.to_dict() for a in summary.artifacts], columns=columns)
    report.to_csv(path, index=False)
    logger.info(f"Render report saved: {path} ({len(report)} rows)")


def _print_summary(summary: BatchSummary):
    logger.info("=" * 60)
    logger.info("BATCH SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Total reports attempted: {summary.attempted}")
    logger.info(f"  Succeeded: {summary.succeeded}")
    logger.info(f"  Failed: {summary.failed}")
    for artifact in summary.failures():
        logger.info(f"  FAILED {artifact.combination}: {artifact.error}")
    logger.info("=" * 60)


def run_pipeline(url: Optional[str] = None,
                 skip_ingest: bool = False,
                 raw_path: Optional[Path] = None,
                 clean_path: Optional[Path] = None,
                 template_path: Optional[Path] = None,
                 output_dir: Optional[Path] = None,
                 report_path: Optional[Path] = None) -> BatchSummary:
    """Ingest -> clean -> render, strictly in sequence.

    Ingestion and cleaning errors propagate and stop the run.
    """
    raw_path = Path(raw_path or RAW_TABLE_FILE)
    clean_path = Path(clean_path or CLEAN_TABLE_FILE)

    logger.info("=" * 60)
    logger.info("LABOUR FORCE REPORTS - Ingest, Clean & Render")
    logger.info("=" * 60)

    logger.info("── Step 1: Ingest ──")
    if skip_ingest:
        logger.info(f"Skipping download, using stored snapshot {raw_path}")
    else:
        fetch_raw_snapshot(url=url, raw_path=raw_path,
                           manifest_path=raw_path.parent / "manifest.json")

    logger.info("── Step 2: Clean ──")
    run_cleaning(raw_path=raw_path, clean_path=clean_path)

    logger.info("── Step 3: Render ──")
    return run_batch(clean_path=clean_path, template_path=template_path,
                     output_dir=output_dir, report_path=report_path)


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="labour-reports",
        description="Download, clean and render the labour force reports.",
    )
    parser.add_argument("--skip-ingest", action="store_true",
                        help="Reuse the stored raw snapshot instead of downloading")
    parser.add_argument("--url", default=None, help="Override the source URL")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point. Returns 0 unless ingestion or cleaning failed."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    args = _parse_args(argv)

    try:
        run_pipeline(url=args.url, skip_ingest=args.skip_ingest)
    except PipelineError as e:
        logger.error(f"Pipeline aborted: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
