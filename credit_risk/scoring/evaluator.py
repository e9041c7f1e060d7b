"""
Score Evaluator
credit_risk/scoring/evaluator.py

Turns a scoring tree plus an answer set into a total risk score.

Formula (every level clamped to [0, 1]):
    leaf       = score_leaf(input_type, answer, options)
    criterion  = leaf                                   (leaf criterion)
               = Σ sub_i × ŵ_i                          (sum / avg)
               = max(sub_i) | min(sub_i)                (max / min, unweighted)
    domain     = Σ criterion_j × ŵ_j
    total      = Σ domain_k × ŵ_k

    ŵ_i = w_i / Σ w    (negative w counts as 0; all ŵ = 0 when Σ w is 0)

Leaf rule:
    select / yesno   option matched on id (numeric), then on exact label
    number / range   parsed value, comma or dot decimal separator
    text             always 0

Missing or unusable answers score 0; nothing here raises on bad answers or
weights. The evaluator is a pure function of its arguments.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import structlog

from credit_risk.models.enumerations import Aggregation, InputType
from credit_risk.scoring.answers import Answer, AnswerValue, parse_answers
from credit_risk.scoring.tree import Criterion, Domain, Option
from credit_risk.scoring.utils import (
    ZERO,
    clamp,
    clamp01,
    normalize_weights,
    quantize_score,
    weighted_sum,
)

logger = structlog.get_logger(__name__)

_OPTION_INPUTS = (InputType.SELECT, InputType.YESNO)
_NUMERIC_INPUTS = (InputType.NUMBER, InputType.RANGE)


@dataclass(frozen=True)
class CriterionScore:
    """Score of one criterion plus its unweighted sub-criterion scores."""
    criterion_id: int
    score: Decimal
    sub_scores: Dict[int, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class DomainScore:
    """Score of one domain with the criterion breakdown behind it."""
    code: str
    score: Decimal
    criteria: List[CriterionScore] = field(default_factory=list)


@dataclass(frozen=True)
class ComputeResult:
    """
    Output of compute_scores(). Fresh on every call, never mutated.

    total and the score mappings are rounded for reporting; exact_total is
    the clamped, unrounded total that grades are resolved from.
    """
    total: Decimal
    domain_scores: Mapping[str, Decimal]
    criterion_scores: Mapping[int, Decimal] = field(default_factory=dict)
    sub_scores: Mapping[int, Decimal] = field(default_factory=dict)
    exact_total: Optional[Decimal] = None

    def __post_init__(self):
        for name in ("domain_scores", "criterion_scores", "sub_scores"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))
        if self.exact_total is None:
            object.__setattr__(self, "exact_total", self.total)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready payload, shaped like persisted evaluation results."""
        return {
            "total": float(self.total),
            "domainScores": {k: float(v) for k, v in self.domain_scores.items()},
            "criterionScores": {str(k): float(v) for k, v in self.criterion_scores.items()},
            "subScores": {str(k): float(v) for k, v in self.sub_scores.items()},
        }


def _match_option(value: AnswerValue, options: Sequence[Option]) -> Optional[Option]:
    number = value.as_number()
    if number is not None:
        for opt in options:
            if Decimal(opt.id) == number:
                return opt
    text = value.as_text()
    if text is not None:
        for opt in options:
            if opt.label == text:
                return opt
    return None


def score_leaf(
    input_type: Any,
    value: Any,
    options: Optional[Iterable[Option]] = None,
) -> Decimal:
    """
    Score a single leaf answer on [0, 1].

    Args:
        input_type: InputType (or its string value) of the leaf.
        value: AnswerValue or a raw answer (option id, label, number, text, None).
        options: Options of the leaf, used by select / yesno.

    Returns:
        Decimal in [0, 1]; 0 for unmatched, unparsable, empty or text answers.
    """
    answer = AnswerValue.from_raw(value)
    if answer.is_empty:
        return ZERO

    if input_type in _OPTION_INPUTS:
        opt = _match_option(answer, tuple(options or ()))
        return clamp01(opt.score) if opt is not None else ZERO

    if input_type in _NUMERIC_INPUTS:
        return clamp01(answer.as_number())

    return ZERO


def score_criterion(criterion: Criterion, answer: Optional[Answer] = None) -> CriterionScore:
    """
    Score one criterion.

    Leaf criteria score their own answer. Composite criteria score each
    sub-criterion from answer.sub and combine them per criterion.aggregation.
    Sub-criterion scores are always reported unweighted.
    """
    answer = answer or Answer()

    if not criterion.is_composite:
        score = score_leaf(criterion.input_type, answer.value, criterion.options)
        return CriterionScore(criterion_id=criterion.id, score=score)

    subs = criterion.subcriteria
    weights = normalize_weights([s.weight for s in subs])
    scores = [score_leaf(s.input_type, answer.sub_value(s.id), s.options) for s in subs]
    sub_scores = {s.id: sc for s, sc in zip(subs, scores)}

    if not any(weights):
        agg = ZERO
    elif criterion.aggregation == Aggregation.MAX:
        agg = max(scores)
    elif criterion.aggregation == Aggregation.MIN:
        agg = min(scores)
    else:
        # sum and avg coincide once weights are normalized
        agg = weighted_sum(scores, weights)

    return CriterionScore(criterion_id=criterion.id, score=clamp(agg), sub_scores=sub_scores)


def score_domain(domain: Domain, answers: Mapping[int, Answer]) -> DomainScore:
    """Weighted sum of the domain's criterion scores, clamped to [0, 1]."""
    crit_scores = [score_criterion(c, answers.get(c.id)) for c in domain.criteria]
    weights = normalize_weights([c.weight for c in domain.criteria])
    score = clamp(weighted_sum([cs.score for cs in crit_scores], weights))

    logger.debug(
        "domain_scored",
        domain=domain.code,
        score=float(score),
        criteria={cs.criterion_id: float(cs.score) for cs in crit_scores},
    )
    return DomainScore(code=domain.code, score=score, criteria=crit_scores)


def compute_scores(
    domains: Sequence[Domain],
    answers: Optional[Mapping[Any, Any]] = None,
    places: int = 4,
) -> ComputeResult:
    """
    Compute total, per-domain, per-criterion and per-sub-criterion scores.

    Args:
        domains: Scoring tree from build_model().
        answers: AnswerSet keyed by criterion id, or a persisted answer payload
                 (string keys, {"value": ..., "sub": {...}} entries).
        places: Decimal places of the reported scores. The total is computed
                from unrounded domain scores and kept unrounded in exact_total.

    Returns:
        ComputeResult with every score in [0, 1].

    Examples:
        >>> compute_scores([], {}).total
        Decimal('0.0000')
    """
    answer_set = parse_answers(answers)

    domain_results = [score_domain(d, answer_set) for d in domains]
    weights = normalize_weights([d.weight for d in domains])
    total = clamp(weighted_sum([dr.score for dr in domain_results], weights))

    domain_scores: Dict[str, Decimal] = {}
    criterion_scores: Dict[int, Decimal] = {}
    sub_scores: Dict[int, Decimal] = {}
    for dr in domain_results:
        domain_scores[dr.code] = quantize_score(dr.score, places)
        for cs in dr.criteria:
            criterion_scores[cs.criterion_id] = quantize_score(cs.score, places)
            for sub_id, sc in cs.sub_scores.items():
                sub_scores[sub_id] = quantize_score(sc, places)

    result = ComputeResult(
        total=quantize_score(total, places),
        exact_total=total,
        domain_scores=domain_scores,
        criterion_scores=criterion_scores,
        sub_scores=sub_scores,
    )

    logger.info(
        "scores_computed",
        domains=len(domains),
        answered=len(answer_set),
        total=float(result.total),
        domain_scores={k: float(v) for k, v in domain_scores.items()},
    )
    return result
