"""
Custom Exceptions - Credit-Risk Scoring Engine
credit_risk/core/exceptions.py

Structural problems in the scoring model are the only failures the engine
reports. Anomalies in answers or weights degrade to a score of 0 instead.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Sequence


class StructuralIssueKind(str, Enum):
    DUPLICATE_ID = "duplicate_id"
    DUPLICATE_CODE = "duplicate_code"
    ORPHAN_ROOT = "orphan_root"            # Root criterion, unknown dimension
    ORPHAN_CRITERION = "orphan_criterion"  # Child criterion, unknown parent
    ORPHAN_OPTION = "orphan_option"        # Option, unknown criterion
    NESTED_TOO_DEEP = "nested_too_deep"    # Child of a child


@dataclass(frozen=True)
class StructuralIssue:
    """One inconsistency found in the flat model rows."""
    kind: StructuralIssueKind
    row_type: str                # "dimension", "criterion" or "option"
    row_id: Any
    detail: str

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "row_type": self.row_type,
            "row_id": self.row_id,
            "detail": self.detail,
        }


class ScoringException(Exception):
    """Base exception for scoring engine operations."""

    pass


class ModelStructureError(ScoringException):
    """The scoring model itself is inconsistent."""

    def __init__(self, issues: Sequence[StructuralIssue]):
        self.issues: List[StructuralIssue] = list(issues)
        kinds = sorted({i.kind.value for i in self.issues})
        super().__init__(
            f"Scoring model has {len(self.issues)} structural issue(s): {', '.join(kinds)}"
        )


DEFAULT_ERROR_MESSAGE = "Unexpected error."


def format_error(err: Any) -> str:
    """
    Turn anything raised or returned as an error into a user-facing message.

    Handles plain strings, exceptions, and backend error payloads shaped like
    {"message": ..., "details": ..., "error_description": ...}.
    """
    if not err:
        return DEFAULT_ERROR_MESSAGE

    if isinstance(err, str):
        return err

    if isinstance(err, BaseException):
        return str(err) or DEFAULT_ERROR_MESSAGE

    if isinstance(err, dict):
        msg: Optional[str] = err.get("message") or err.get("error_description")
        details = err.get("details")
        suffix = f" ({details})" if details else ""
        return f"{msg or DEFAULT_ERROR_MESSAGE}{suffix}"

    return DEFAULT_ERROR_MESSAGE
