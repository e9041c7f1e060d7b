"""
Evaluation Snapshots
credit_risk/scoring/evaluation.py

Packs a computed result into the next immutable EvaluationSnapshot of a
project. Storage is the caller's concern; this only produces the value.
"""

from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Sequence

import structlog

from credit_risk.models.enumerations import EvaluationStatus
from credit_risk.models.evaluation import EvaluationSnapshot
from credit_risk.scoring.answers import answers_to_json, parse_answers
from credit_risk.scoring.evaluator import ComputeResult
from credit_risk.scoring.grades import GradeResult

logger = structlog.get_logger(__name__)


def next_version(history: Sequence[EvaluationSnapshot]) -> int:
    """Highest existing version + 1 (1 for an empty history)."""
    return max((s.version for s in history), default=0) + 1


def next_snapshot(
    history: Sequence[EvaluationSnapshot],
    result: ComputeResult,
    grade: GradeResult,
    answers: Optional[Mapping[Any, Any]] = None,
    *,
    validate: bool = False,
    editing_from: Optional[int] = None,
) -> EvaluationSnapshot:
    """
    Build the snapshot that supersedes every snapshot in history.

    Args:
        history: Existing snapshots of the project, any order.
        result: Scores computed from `answers`.
        grade: Grade resolved from result.total.
        answers: Answers the result was computed from.
        validate: Save as validated rather than draft.
        editing_from: Version the analyst loaded before editing.

    Returns:
        A new EvaluationSnapshot; history is left untouched.
    """
    version = next_version(history)
    results = result.to_dict()
    results["editing_from"] = editing_from

    snapshot = EvaluationSnapshot(
        version=version,
        status=EvaluationStatus.VALIDATED if validate else EvaluationStatus.DRAFT,
        answers=answers_to_json(parse_answers(answers)),
        results=results,
        total_score=float(result.total),
        grade=grade.grade,
        pd=grade.pd,
        editing_from=editing_from,
        validated_at=datetime.now(timezone.utc) if validate else None,
    )

    logger.info(
        "evaluation_snapshot_created",
        version=version,
        status=snapshot.status.value,
        total_score=snapshot.total_score,
        grade=snapshot.grade,
        editing_from=editing_from,
    )
    return snapshot
