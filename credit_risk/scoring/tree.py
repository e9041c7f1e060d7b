"""
Scoring Tree
credit_risk/scoring/tree.py

The nested, immutable model the evaluator walks:

    Domain ──► Criterion ──► SubCriterion
                  │               │
                  └─ Option       └─ Option

A Criterion with sub-criteria is composite: its own input type and options
are ignored and its aggregation mode combines the children. Sub-criteria
never nest further.
"""

from dataclasses import dataclass, field
from typing import Tuple

from credit_risk.models.enumerations import Aggregation, InputType


@dataclass(frozen=True)
class Option:
    id: int
    label: str
    score: float                 # Stored score, clamped when used


@dataclass(frozen=True)
class SubCriterion:
    id: int
    code: str
    weight: float                # Relative to sibling sub-criteria
    input_type: InputType
    options: Tuple[Option, ...] = ()


@dataclass(frozen=True)
class Criterion:
    id: int
    code: str
    weight: float                # Relative to sibling criteria in the domain
    input_type: InputType
    aggregation: Aggregation = Aggregation.SUM
    options: Tuple[Option, ...] = ()
    subcriteria: Tuple[SubCriterion, ...] = ()

    @property
    def is_composite(self) -> bool:
        return len(self.subcriteria) > 0


@dataclass(frozen=True)
class Domain:
    id: int
    code: str
    weight: float                # Relative to the other domains of the model
    criteria: Tuple[Criterion, ...] = field(default_factory=tuple)
