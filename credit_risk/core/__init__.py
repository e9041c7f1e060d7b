"""
Core Package - Credit-Risk Scoring Engine
credit_risk/core/__init__.py

Core infrastructure: exceptions.
"""

from credit_risk.core.exceptions import (
    ModelStructureError,
    ScoringException,
    StructuralIssue,
    StructuralIssueKind,
    format_error,
)

__all__ = [
    "ModelStructureError",
    "ScoringException",
    "StructuralIssue",
    "StructuralIssueKind",
    "format_error",
]
