"""
Result models produced by the conversion pipeline.
"""

from enum import Enum
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field


class ConversionStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


class ConversionResult(BaseModel):
    """
    Outcome of rendering a single document.
    """

    source: Path = Field(
        ...,
        description="Markdown document that was rendered"
    )

    target: Path = Field(
        ...,
        description="PDF path the document renders to"
    )

    status: ConversionStatus = Field(
        ...,
        description="Whether the PDF was produced"
    )

    error: Optional[str] = Field(
        None,
        description="Failure reason for failed or skipped documents"
    )


class PipelineSummary(BaseModel):
    """
    Counts reported at the end of a conversion run.
    """

    results: List[ConversionResult] = Field(
        default_factory=list,
        description="Per-document outcomes in traversal order"
    )

    merged_path: Optional[Path] = Field(
        None,
        description="Combined PDF, absent when nothing was rendered"
    )

    @property
    def attempted(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return self._count(ConversionStatus.SUCCEEDED)

    @property
    def failed(self) -> int:
        return self._count(ConversionStatus.FAILED)

    @property
    def skipped(self) -> int:
        return self._count(ConversionStatus.SKIPPED)

    def _count(self, status: ConversionStatus) -> int:
        return sum(1 for result in self.results if result.status == status)
