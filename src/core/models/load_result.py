"""
LoadResult and RunReport models describing the outcome of a silver load (ephemeral).
"""

from datetime import datetime
from typing import List, Literal

from pydantic import BaseModel, Field, field_validator

from .raw_record import EntityKind


class LoadResult(BaseModel):
    """
    Outcome of loading one entity kind.

    Attributes:
        kind: Entity kind that was loaded
        status: "success" or "failed"
        rows_read: Raw rows read from the raw store
        rows_written: Cleaned rows written by the full replace
        rows_dropped: Raw rows absent from the output: rows without a usable
            identity key plus superseded customer versions
        loaded_at: Load timestamp stamped on every written row
        duration_seconds: Wall time for the load
        error: Error message when status is "failed"
    """

    kind: EntityKind
    status: Literal["success", "failed"]
    rows_read: int = Field(0, ge=0)
    rows_written: int = Field(0, ge=0)
    rows_dropped: int = Field(0, ge=0)
    loaded_at: datetime | None = None
    duration_seconds: float = Field(0.0, ge=0.0)
    error: str | None = None

    @field_validator("error")
    @classmethod
    def check_error_consistency(cls, v, info):
        """Validate that a failed load carries an error message."""
        if info.data.get("status") == "failed" and not v:
            raise ValueError("status='failed' requires an error message")
        return v


class RunReport(BaseModel):
    """
    Outcome of one pipeline run across entity kinds.

    Attributes:
        started_at: When the run started
        results: Per-kind load results, in requested kind order
    """

    started_at: datetime
    results: List[LoadResult] = Field(default_factory=list)

    @property
    def failed_kinds(self) -> list[EntityKind]:
        return [r.kind for r in self.results if r.status == "failed"]

    @property
    def succeeded(self) -> bool:
        return not self.failed_kinds

    def result_for(self, kind: EntityKind) -> LoadResult | None:
        for result in self.results:
            if result.kind == kind:
                return result
        return None
