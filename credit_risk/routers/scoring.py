"""
routers/scoring.py - Scoring Engine Endpoints

Endpoints (mounted under API_V1_PREFIX):
  POST /scoring/compute        - Build the model, score the answers, resolve the grade
  POST /scoring/model/inspect  - Report structural issues in model rows
  POST /scoring/compare        - A/B diff of two evaluation results

The engine is stateless: every request carries the model rows it is scored
against.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from credit_risk.config import Settings, get_settings
from credit_risk.core.exceptions import ModelStructureError
from credit_risk.models.rows import CriterionRow, DimensionRow, GradeBucketRow, OptionRow
from credit_risk.scoring.comparison import compare_domain_scores
from credit_risk.scoring.evaluator import compute_scores
from credit_risk.scoring.grades import build_grade_buckets, resolve_grade
from credit_risk.scoring.model_builder import build_model, inspect_rows

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scoring", tags=["Scoring"])


# =====================================================================
# Request / Response Models
# =====================================================================

class ModelRows(BaseModel):
    dimensions: List[DimensionRow] = Field(default_factory=list)
    criteria: List[CriterionRow] = Field(default_factory=list)
    options: List[OptionRow] = Field(default_factory=list)


class ComputeRequest(ModelRows):
    grade_buckets: List[GradeBucketRow] = Field(default_factory=list)
    answers: Dict[str, Any] = Field(
        default_factory=dict,
        description="Answers keyed by criterion id: {value, sub: {sub_id: {value}}}"
    )


class ComputeResponse(BaseModel):
    total: float
    domain_scores: Dict[str, float]
    criterion_scores: Dict[str, float]
    sub_scores: Dict[str, float]
    grade: str
    pd: Optional[float] = None
    issues: List[Dict[str, Any]] = Field(default_factory=list)
    duration_ms: float


class InspectResponse(BaseModel):
    is_valid: bool
    issue_count: int
    issues: List[Dict[str, Any]]


class CompareRequest(BaseModel):
    a: Dict[str, Any] = Field(..., description="Results payload of evaluation A")
    b: Dict[str, Any] = Field(..., description="Results payload of evaluation B")


class DomainDeltaResponse(BaseModel):
    code: str
    a: float
    b: float
    delta: float


class CompareResponse(BaseModel):
    rows: List[DomainDeltaResponse]
    total_a: float
    total_b: float
    total_delta: float


class ErrorResponse(BaseModel):
    """
    Standard error response model.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[dict] = Field(default=None, description="Additional error details")
    timestamp: datetime = Field(..., description="Error occurrence timestamp")


# =====================================================================
# Exception handler (registered in main.py)
# =====================================================================

async def model_structure_exception_handler(request: Request, exc: ModelStructureError):
    logger.warning(f"Rejected inconsistent scoring model: {exc}")
    body = ErrorResponse(
        error_code="MODEL_STRUCTURE_INVALID",
        message=str(exc),
        details={"issues": [i.to_dict() for i in exc.issues]},
        timestamp=datetime.now(timezone.utc),
    )
    return JSONResponse(
        status_code=422,
        content=body.model_dump(mode="json"),
    )


# =====================================================================
# Endpoints
# =====================================================================

@router.post("/compute", response_model=ComputeResponse, summary="Score answers against a model")
async def compute(payload: ComputeRequest, settings: Settings = Depends(get_settings)):
    start = time.time()

    issues = inspect_rows(payload.dimensions, payload.criteria, payload.options)
    domains = build_model(
        payload.dimensions,
        payload.criteria,
        payload.options,
        strict=settings.STRICT_MODEL_VALIDATION,
    )
    result = compute_scores(domains, payload.answers, places=settings.SCORE_DECIMAL_PLACES)
    grade = resolve_grade(
        result.exact_total,
        build_grade_buckets(payload.grade_buckets),
        default_grade=settings.DEFAULT_GRADE_LABEL,
    )

    body = result.to_dict()
    duration_ms = round((time.time() - start) * 1000, 2)
    logger.info(f"Scored {len(domains)} domain(s): total={body['total']} grade={grade.grade}")

    return ComputeResponse(
        total=body["total"],
        domain_scores=body["domainScores"],
        criterion_scores=body["criterionScores"],
        sub_scores=body["subScores"],
        grade=grade.grade,
        pd=grade.pd,
        issues=[i.to_dict() for i in issues],
        duration_ms=duration_ms,
    )


@router.post("/model/inspect", response_model=InspectResponse, summary="Check model rows")
async def inspect_model(payload: ModelRows):
    issues = inspect_rows(payload.dimensions, payload.criteria, payload.options)
    return InspectResponse(
        is_valid=not issues,
        issue_count=len(issues),
        issues=[i.to_dict() for i in issues],
    )


@router.post("/compare", response_model=CompareResponse, summary="Compare two evaluations")
async def compare(payload: CompareRequest):
    comparison = compare_domain_scores(payload.a, payload.b)
    return CompareResponse(**comparison.to_dict())
