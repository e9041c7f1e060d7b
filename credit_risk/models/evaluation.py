from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from credit_risk.models.enumerations import EvaluationStatus


class EvaluationSnapshot(BaseModel):
    """
    One saved version of a project's scoring evaluation.

    Snapshots are append-only: editing an evaluation produces a new snapshot
    with a higher version, the previous one is never changed.
    """

    model_config = ConfigDict(from_attributes=True)

    version: int = Field(
        ...,
        ge=1,
        description="Monotonic version within the project's evaluation set"
    )

    status: EvaluationStatus = Field(
        default=EvaluationStatus.DRAFT,
        description="Current status of the evaluation"
    )

    answers: Dict[str, Any] = Field(
        default_factory=dict,
        description="Persisted answer payload keyed by criterion id"
    )

    results: Dict[str, Any] = Field(
        default_factory=dict,
        description="Computed scores (total, domainScores, criterionScores, subScores)"
    )

    total_score: float = Field(
        default=0.0,
        ge=0,
        le=1,
        description="Total risk score"
    )

    grade: Optional[str] = Field(default=None, max_length=20)

    pd: Optional[float] = Field(
        default=None,
        ge=0,
        le=1,
        description="Probability of default of the resolved grade"
    )

    editing_from: Optional[int] = Field(
        default=None,
        description="Version this snapshot was edited from, if any"
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Snapshot creation timestamp (UTC)"
    )

    validated_at: Optional[datetime] = Field(default=None)

    @model_validator(mode="after")
    def validate_validation_timestamp(self):
        """Only validated snapshots carry a validated_at timestamp."""
        if self.status == EvaluationStatus.VALIDATED and self.validated_at is None:
            raise ValueError("validated_at is required when status is 'validated'")
        if self.status == EvaluationStatus.DRAFT and self.validated_at is not None:
            raise ValueError("validated_at must be empty for a draft evaluation")
        return self
