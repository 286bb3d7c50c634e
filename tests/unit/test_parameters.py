"""Unit tests for parameter combination enumeration."""

from __future__ import annotations

import pandas as pd

from labour_reports.clean import clean_table
from labour_reports.models import ParameterCombination
from labour_reports.parameters import enumerate_combinations


def test_combination_count_is_product_of_distinct_values(make_raw) -> None:
    """Two measures and three sexes should give six combinations."""
    clean = clean_table(make_raw())

    combinations = enumerate_combinations(clean)

    assert len(combinations) == clean["measure"].nunique() * clean["sex"].nunique() == 6


def test_combinations_are_ordered_by_dimension_then_label(make_raw) -> None:
    """Ordering should be lexicographic within each dimension."""
    clean = clean_table(make_raw().sample(frac=1.0, random_state=3))

    combinations = enumerate_combinations(clean)

    assert [c.labels for c in combinations] == [
        ("Full-time", "Females"),
        ("Full-time", "Males"),
        ("Full-time", "Persons"),
        ("Part-time", "Females"),
        ("Part-time", "Males"),
        ("Part-time", "Persons"),
    ]


def test_combination_without_rows_is_still_enumerated(make_raw) -> None:
    """A gap in the data should not shrink the Cartesian product."""
    clean = clean_table(make_raw(skip=[("M4", "2")]))

    combinations = enumerate_combinations(clean)

    assert ParameterCombination((("measure", "Part-time"), ("sex", "Females"))) in combinations
    assert len(combinations) == 6


def test_empty_domain_yields_no_combinations() -> None:
    """No dimensions, or a dimension without values, gives an empty set."""
    empty = pd.DataFrame({"measure": pd.Series(dtype=str), "sex": pd.Series(dtype=str)})
    one_sided = pd.DataFrame({"measure": ["Full-time"], "sex": [None]})

    assert enumerate_combinations(empty) == []
    assert enumerate_combinations(one_sided) == []
    assert enumerate_combinations(one_sided, dimensions=[]) == []


def test_combination_slug_is_filename_safe() -> None:
    """Slugs should be lowercase with underscores only."""
    combination = ParameterCombination((("measure", "Full-time"), ("sex", "All persons")))

    assert combination.slug() == "full_time_all_persons"
    assert combination.params == {"measure": "Full-time", "sex": "All persons"}
