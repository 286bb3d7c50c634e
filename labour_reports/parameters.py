"""
Parameter domain for the batch: every combination of the labels present
in the clean table, one label per dimension.
"""

import itertools
import logging
from typing import List, Optional, Sequence

import pandas as pd

from .config import DIMENSIONS
from .models import ParameterCombination

logger = logging.getLogger(__name__)


def distinct_values(clean: pd.DataFrame, column: str) -> List[str]:
    """Sorted distinct non-null labels of one dimension column."""
    if column not in clean.columns:
        return []
    return sorted(str(v) for v in clean[column].dropna().unique())


def enumerate_combinations(clean: pd.DataFrame,
                           dimensions: Optional[Sequence[str]] = None) -> List[ParameterCombination]:
    """Full Cartesian product of distinct labels, in dimension then label order.

    Includes combinations that have no rows in the table. Returns an empty
    list when there are no dimensions or a dimension has no values.
    """
    dimensions = list(DIMENSIONS) if dimensions is None else list(dimensions)
    if not dimensions:
        return []

    domains = [distinct_values(clean, dim) for dim in dimensions]
    for dim, values in zip(dimensions, domains):
        logger.info(f"Dimension {dim}: {len(values)} values {values}")

    combinations = [
        ParameterCombination(items=tuple(zip(dimensions, labels)))
        for labels in itertools.product(*domains)
    ]
    logger.info(f"{len(combinations)} parameter combinations")
    return combinations
