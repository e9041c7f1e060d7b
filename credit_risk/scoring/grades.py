"""
Grade Resolver
credit_risk/scoring/grades.py

Maps a total score on [0, 1] to a grade label and probability of default.

Policy: ordered first match. The total is clamped to [0, 1] and the first
bucket, in the order supplied, whose inclusive [min, max] range contains it
wins. Buckets are neither sorted nor checked for overlap here; if none
matches the result is ("N/A", None).
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import structlog

from credit_risk.models.rows import GradeBucketRow
from credit_risk.scoring.utils import clamp01, to_decimal

logger = structlog.get_logger(__name__)

NO_GRADE = "N/A"


@dataclass(frozen=True)
class GradeBucket:
    """One row of the lookup table; inclusive on both ends."""
    grade: str
    min: float
    max: float
    pd: Optional[float] = None

    def contains(self, score: Decimal) -> bool:
        lo = to_decimal(self.min)
        hi = to_decimal(self.max)
        if lo is None or hi is None:
            return False
        return lo <= score <= hi


@dataclass(frozen=True)
class GradeResult:
    """Output of resolve_grade()."""
    grade: str
    pd: Optional[float] = None

    def to_dict(self) -> dict:
        return {"grade": self.grade, "pd": self.pd}


def resolve_grade(
    total: Any,
    buckets: Sequence[GradeBucket],
    default_grade: str = NO_GRADE,
) -> GradeResult:
    """
    Resolve a total score against an ordered bucket table.

    Args:
        total: Total score; clamped to [0, 1], unusable values count as 0.
        buckets: Ordered buckets; the first containing the score wins.
        default_grade: Label returned when no bucket matches.

    Returns:
        GradeResult(grade, pd); pd is None when no bucket matches.

    Examples:
        >>> table = [GradeBucket("A", 0.8, 1.0, 0.01), GradeBucket("B", 0.5, 0.7999, 0.05)]
        >>> resolve_grade(0.85, table)
        GradeResult(grade='A', pd=0.01)
        >>> resolve_grade(0.4, table)
        GradeResult(grade='N/A', pd=None)
    """
    score = clamp01(total)
    for bucket in buckets:
        if bucket.contains(score):
            return GradeResult(grade=bucket.grade, pd=bucket.pd)

    logger.debug("grade_unresolved", total=float(score), buckets=len(buckets))
    return GradeResult(grade=default_grade, pd=None)


def build_grade_buckets(rows: Optional[Iterable[Any]]) -> Tuple[GradeBucket, ...]:
    """
    Turn stored bucket rows into the ordered table resolve_grade() expects.

    Rows are stable-sorted on sort_order (None sorts as 0); rows without a
    sort_order keep their stored relative order.
    """
    parsed: List[GradeBucketRow] = [
        r if isinstance(r, GradeBucketRow) else GradeBucketRow.model_validate(r)
        for r in (rows or [])
    ]
    parsed.sort(key=lambda r: r.sort_order if r.sort_order is not None else 0)
    return tuple(
        GradeBucket(grade=r.grade, min=r.min_score, max=r.max_score, pd=r.pd)
        for r in parsed
    )
