"""
Exception taxonomy for the report pipeline.

Ingestion and cleaning errors are fatal and abort the run.
RenderError is raised per combination and never aborts a batch.
"""

from typing import Iterable


class PipelineError(Exception):
    """Base class for all pipeline failures."""


class SourceUnavailableError(PipelineError):
    """The source endpoint could not be reached or answered with an error status."""


class SourceFormatError(PipelineError):
    """Source data could not be parsed or reshaped into tabular records."""


class UnmappedCodeError(PipelineError):
    """A dimension code has no entry in its decode table and is not excluded."""

    def __init__(self, dimension: str, codes: Iterable[str]):
        self.dimension = dimension
        self.codes = sorted(str(c) for c in codes)
        super().__init__(
            f"Unmapped {dimension} code(s): {', '.join(self.codes)}. "
            f"Add them to DECODE_TABLES or EXCLUDED_CODES."
        )


class ArtifactNameError(PipelineError):
    """Two combinations would be written to the same output file."""


class RenderError(PipelineError):
    """A single report could not be rendered."""
