"""
Data models for the report pipeline.
"""

import re
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Dict, List, Optional, Tuple


def slugify(name: str) -> str:
    """Lowercase a label and collapse anything non-alphanumeric to underscores."""
    return re.sub(r"[^a-z0-9]+", "_", str(name).lower()).strip("_")


@dataclass(frozen=True)
class ParameterCombination:
    """One label per dimension, in dimension order."""
    items: Tuple[Tuple[str, str], ...]

    @property
    def params(self) -> Dict[str, str]:
        return dict(self.items)

    @property
    def labels(self) -> Tuple[str, ...]:
        return tuple(label for _, label in self.items)

    def slug(self) -> str:
        return "_".join(slugify(label) for label in self.labels)

    def __str__(self) -> str:
        return ", ".join(f"{dim}={label}" for dim, label in self.items)


@dataclass
class RenderedArtifact:
    """Outcome of rendering one combination."""
    combination: ParameterCombination
    path: Path
    status: str  # "success", "failed"
    rows: int = 0
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def to_dict(self) -> dict:
        row = dict(self.combination.params)
        row.update({
            "path": str(self.path),
            "status": self.status,
            "rows": self.rows,
            "error": self.error,
        })
        return row


@dataclass
class BatchSummary:
    """All artifacts of one batch run plus the tally."""
    artifacts: List[RenderedArtifact] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.artifacts)

    @property
    def succeeded(self) -> int:
        return sum(1 for a in self.artifacts if a.ok)

    @property
    def failed(self) -> int:
        return self.attempted - self.succeeded

    def failures(self) -> List[RenderedArtifact]:
        return [a for a in self.artifacts if not a.ok]


@dataclass
class SnapshotInfo:
    """Provenance information for a raw snapshot."""
    url: str
    raw_path: str
    sha256: str = ""
    rows: int = 0
    columns: List[str] = field(default_factory=list)
    fetched_at: str = ""
    file_size_bytes: int = 0
    content_type: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)
