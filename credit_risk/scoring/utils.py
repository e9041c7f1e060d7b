"""
Decimal Utilities
credit_risk/scoring/utils.py

Precision-safe decimal math shared by the model builder, the evaluator and
the grade resolver. Every score in the engine lives on the [0, 1] axis.
"""

import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, List, Optional, Sequence

ZERO = Decimal("0")
ONE = Decimal("1")


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Convert a stored or typed value to a finite Decimal.

    Accepts int, float, Decimal and numeric strings. Strings may use a comma
    as decimal separator ("0,35"). Returns None for anything unparsable or
    non-finite (NaN, ±inf). Booleans are not numbers here.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Decimal):
        return value if value.is_finite() else None

    if isinstance(value, int):
        return Decimal(value)

    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return Decimal(str(value))

    if isinstance(value, str):
        text = value.strip().replace(",", ".")
        if not text:
            return None
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            return None
        return parsed if parsed.is_finite() else None

    return None


def clamp(
    value: Decimal,
    min_val: Decimal = ZERO,
    max_val: Decimal = ONE,
) -> Decimal:
    """Clamp value to range [min_val, max_val]."""
    return max(min_val, min(max_val, value))


def clamp01(value: Any) -> Decimal:
    """Coerce to Decimal and clamp to [0, 1]; unusable values become 0."""
    d = to_decimal(value)
    if d is None:
        return ZERO
    return clamp(d)


def safe_weight(value: Any) -> Decimal:
    """A sibling weight: negative, non-finite or unparsable weights count as 0."""
    d = to_decimal(value)
    if d is None or d < 0:
        return ZERO
    return d


def normalize_weights(weights: Sequence[Any]) -> List[Decimal]:
    """
    Normalize sibling weights so they sum to one.

    Formula: w_i / Σ w_j
    Negative and unusable weights count as 0. When Σ w_j is zero all
    normalized weights are zero, so the aggregate at that level collapses
    to zero.
    """
    cleaned = [safe_weight(w) for w in weights]
    total = sum(cleaned, ZERO)
    if total <= 0:
        return [ZERO for _ in cleaned]
    return [w / total for w in cleaned]


def weighted_sum(values: Sequence[Decimal], weights: Sequence[Decimal]) -> Decimal:
    """
    Σ(value_i × weight_i) over pre-normalized weights.

    Returns Decimal("0") for empty input.
    """
    if len(values) != len(weights):
        raise ValueError("values and weights must have same length")
    return sum((v * w for v, w in zip(values, weights)), ZERO)


def quantize_score(value: Decimal, places: int = 4) -> Decimal:
    """Round a score for reporting (ROUND_HALF_UP)."""
    return value.quantize(Decimal(10) ** -places, rounding=ROUND_HALF_UP)
