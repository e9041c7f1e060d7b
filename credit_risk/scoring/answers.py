"""
Analyst Answers
credit_risk/scoring/answers.py

Answers arrive as loosely typed JSON: option ids as numbers or strings,
numeric inputs as "0,35" or 0.35, untouched fields as null. AnswerValue pins
each raw value to one of three tags so coercion happens in exactly one place:

    EMPTY   absent, null, "" or a non-finite number
    NUMBER  int / float / Decimal
    TEXT    any other string (may still parse as a number, comma or dot)

Persisted payload shape:
    {"<criterion_id>": {"value": ..., "sub": {"<sub_id>": {"value": ...}}}}
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Mapping, Optional

import structlog

from credit_risk.scoring.utils import to_decimal

logger = structlog.get_logger(__name__)

_ID_PATTERN = re.compile(r"-?[0-9]+")


class AnswerKind(str, Enum):
    EMPTY = "empty"
    NUMBER = "number"
    TEXT = "text"


@dataclass(frozen=True)
class AnswerValue:
    """One leaf answer, tagged by kind."""
    kind: AnswerKind = AnswerKind.EMPTY
    number: Optional[Decimal] = None
    text: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "AnswerValue":
        if isinstance(raw, AnswerValue):
            return raw
        if raw is None:
            return EMPTY_VALUE
        if isinstance(raw, bool):
            return cls(AnswerKind.TEXT, text=str(raw).lower())
        if isinstance(raw, (int, float, Decimal)):
            d = to_decimal(raw)
            if d is None:
                return EMPTY_VALUE
            return cls(AnswerKind.NUMBER, number=d, text=str(raw))
        if isinstance(raw, str):
            if not raw.strip():
                return EMPTY_VALUE
            return cls(AnswerKind.TEXT, text=raw)
        return EMPTY_VALUE

    @property
    def is_empty(self) -> bool:
        return self.kind == AnswerKind.EMPTY

    def as_number(self) -> Optional[Decimal]:
        """Numeric reading: numbers as-is, text parsed with comma or dot."""
        if self.kind == AnswerKind.NUMBER:
            return self.number
        if self.kind == AnswerKind.TEXT:
            return to_decimal(self.text)
        return None

    def as_text(self) -> Optional[str]:
        """Exact textual form of the raw value, for label matching."""
        return self.text

    def to_json(self) -> Any:
        if self.kind == AnswerKind.NUMBER:
            return float(self.number)
        return self.text


EMPTY_VALUE = AnswerValue()


@dataclass(frozen=True)
class Answer:
    """Answer to one criterion; `sub` is keyed by sub-criterion id."""
    value: AnswerValue = EMPTY_VALUE
    sub: Mapping[int, AnswerValue] = field(default_factory=dict)

    @classmethod
    def of(cls, value: Any = None, sub: Optional[Mapping[Any, Any]] = None) -> "Answer":
        subs: Dict[int, AnswerValue] = {}
        for key, raw in (sub or {}).items():
            sub_id = _to_id(key)
            if sub_id is not None:
                subs[sub_id] = AnswerValue.from_raw(raw)
        return cls(value=AnswerValue.from_raw(value), sub=subs)

    def sub_value(self, sub_id: int) -> AnswerValue:
        return self.sub.get(sub_id, EMPTY_VALUE)

    def to_json(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"value": self.value.to_json()}
        if self.sub:
            payload["sub"] = {
                str(k): {"value": v.to_json()} for k, v in self.sub.items()
            }
        return payload


AnswerSet = Mapping[int, Answer]


def _to_id(key: Any) -> Optional[int]:
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key
    if isinstance(key, str) and _ID_PATTERN.fullmatch(key.strip()):
        return int(key.strip())
    return None


def _unwrap(entry: Any) -> Any:
    """Sub entries may be {"value": x} or a bare x."""
    if isinstance(entry, Mapping):
        return entry.get("value")
    return entry


def parse_answers(payload: Optional[Mapping[Any, Any]]) -> Dict[int, Answer]:
    """
    Parse a persisted answer payload into an AnswerSet.

    Never raises: entries with unusable keys are dropped, unusable values
    become EMPTY and later score as 0.
    """
    answers: Dict[int, Answer] = {}
    if not isinstance(payload, Mapping):
        return answers

    dropped = 0
    for key, entry in payload.items():
        criterion_id = _to_id(key)
        if criterion_id is None:
            dropped += 1
            continue

        if isinstance(entry, Answer):
            answers[criterion_id] = entry
            continue

        if isinstance(entry, Mapping):
            raw_sub = entry.get("sub")
            sub = (
                {k: _unwrap(v) for k, v in raw_sub.items()}
                if isinstance(raw_sub, Mapping)
                else None
            )
            answers[criterion_id] = Answer.of(entry.get("value"), sub)
        else:
            answers[criterion_id] = Answer.of(entry)

    if dropped:
        logger.debug("answers_dropped", dropped=dropped, kept=len(answers))
    return answers


def answers_to_json(answers: AnswerSet) -> Dict[str, Any]:
    """Inverse of parse_answers, for persistence."""
    return {str(k): a.to_json() for k, a in answers.items()}
