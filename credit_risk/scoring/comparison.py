"""
A/B Comparison
credit_risk/scoring/comparison.py

Value-wise diff of two evaluations' domain scores. Either side may be a
ComputeResult or a persisted results payload; payloads are read leniently
(missing or non-numeric entries are ignored, missing domains count as 0).
"""

import math
from dataclasses import dataclass, field
from decimal import InvalidOperation
from typing import Any, Dict, List, Mapping, Optional

from credit_risk.scoring.evaluator import ComputeResult
from credit_risk.scoring.utils import ZERO, quantize_score, to_decimal


@dataclass(frozen=True)
class DomainDelta:
    code: str
    a: float
    b: float
    delta: float        # b − a


@dataclass(frozen=True)
class ScoreComparison:
    rows: List[DomainDelta] = field(default_factory=list)
    total_a: float = 0.0
    total_b: float = 0.0
    total_delta: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows": [
                {"code": r.code, "a": r.a, "b": r.b, "delta": r.delta}
                for r in self.rows
            ],
            "total_a": self.total_a,
            "total_b": self.total_b,
            "total_delta": self.total_delta,
        }


def _as_float(v: Any) -> Optional[float]:
    """Finite float value of a JSON number; None for anything else."""
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return None
    try:
        f = float(v)
    except OverflowError:
        return None
    return f if math.isfinite(f) else None


def _payload(results: Any) -> Any:
    return results.to_dict() if isinstance(results, ComputeResult) else results


def extract_domain_scores(results: Any) -> Dict[str, float]:
    """Read domainScores out of a results payload; never raises."""
    results = _payload(results)
    if not isinstance(results, Mapping):
        return {}
    ds = results.get("domainScores")
    if not isinstance(ds, Mapping):
        return {}
    scores = {str(k): _as_float(v) for k, v in ds.items()}
    return {k: v for k, v in scores.items() if v is not None}


def extract_total(results: Any) -> float:
    results = _payload(results)
    if not isinstance(results, Mapping):
        return 0.0
    total = _as_float(results.get("total"))
    return total if total is not None else 0.0


def _delta(a: float, b: float) -> float:
    da = to_decimal(a) or ZERO
    db = to_decimal(b) or ZERO
    try:
        return float(quantize_score(db - da))
    except InvalidOperation:
        # too many digits to quantize; out-of-range payload values only
        return float(db - da)


def compare_domain_scores(a_results: Any, b_results: Any) -> ScoreComparison:
    """
    Compare two evaluations domain by domain.

    Rows cover the union of domain codes, sorted by code.
    """
    da = extract_domain_scores(a_results)
    db = extract_domain_scores(b_results)
    rows = [
        DomainDelta(code=code, a=da.get(code, 0.0), b=db.get(code, 0.0),
                    delta=_delta(da.get(code, 0.0), db.get(code, 0.0)))
        for code in sorted(set(da) | set(db))
    ]
    total_a = extract_total(a_results)
    total_b = extract_total(b_results)
    return ScoreComparison(
        rows=rows,
        total_a=total_a,
        total_b=total_b,
        total_delta=_delta(total_a, total_b),
    )
