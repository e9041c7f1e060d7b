"""
scoring/ - Credit-Risk Scoring Engine

Modules:
    utils.py          - Decimal utilities (clamping, weight normalization)
    tree.py           - Immutable scoring tree (Domain → Criterion → SubCriterion)
    answers.py        - Tagged answer values and answer payload parsing
    model_builder.py  - Flat rows → scoring tree
    evaluator.py      - Scoring tree + answers → total / domain / criterion scores
    grades.py         - Ordered first-match grade / PD lookup
    evaluation.py     - Next immutable evaluation snapshot
    comparison.py     - A/B diff of two evaluations' domain scores
"""

from credit_risk.scoring.answers import Answer, AnswerKind, AnswerValue, parse_answers
from credit_risk.scoring.evaluator import (
    ComputeResult,
    compute_scores,
    score_criterion,
    score_leaf,
)
from credit_risk.scoring.grades import (
    GradeBucket,
    GradeResult,
    build_grade_buckets,
    resolve_grade,
)
from credit_risk.scoring.model_builder import build_model, inspect_rows
from credit_risk.scoring.tree import Criterion, Domain, Option, SubCriterion

__all__ = [
    "Answer",
    "AnswerKind",
    "AnswerValue",
    "ComputeResult",
    "Criterion",
    "Domain",
    "GradeBucket",
    "GradeResult",
    "Option",
    "SubCriterion",
    "build_grade_buckets",
    "build_model",
    "compute_scores",
    "inspect_rows",
    "parse_answers",
    "resolve_grade",
    "score_criterion",
    "score_leaf",
]
