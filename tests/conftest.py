# tests/conftest.py

"""
Pytest Fixtures - Shared scoring models, answers and grade tables

SAMPLE MODEL ID REFERENCE:
- Dimensions: 1 (FIN, weight 0.6), 2 (GOV, weight 0.4)
- Criteria:   10 LEVERAGE (select), 11 LIQUIDITY (number)  -> FIN
              12 MANAGEMENT (composite, avg)               -> GOV
              120 EXPERIENCE (select), 121 TRACK_RECORD (range) -> children of 12
- Options:    100/101 -> criterion 10, 200/201 -> sub-criterion 120
"""

import pytest
from fastapi.testclient import TestClient

from credit_risk.main import app
from credit_risk.scoring.grades import GradeBucket
from credit_risk.scoring.tree import Criterion, Domain, Option, SubCriterion


# =============================================================================
# FASTAPI TEST CLIENT FIXTURE
# =============================================================================

@pytest.fixture(scope="module")
def client():
    """Create a TestClient for FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


# =============================================================================
# FLAT MODEL ROW FIXTURES (as loaded from storage)
# =============================================================================

@pytest.fixture
def dimension_rows():
    """Two domains, deliberately listed out of id order."""
    return [
        {"id": 2, "code": "GOV", "weight": 0.4},
        {"id": 1, "code": "FIN", "weight": 0.6},
    ]


@pytest.fixture
def criterion_rows():
    """Two leaf roots in FIN, one composite root in GOV with two children."""
    return [
        {"id": 10, "dimension_id": 1, "parent_criterion_id": None, "code": "LEVERAGE",
         "weight": 2, "input_type": "select", "aggregation": "sum", "sort_order": 2},
        {"id": 11, "dimension_id": 1, "parent_criterion_id": None, "code": "LIQUIDITY",
         "weight": 1, "input_type": "number", "aggregation": "sum", "sort_order": 1},
        {"id": 12, "dimension_id": 2, "parent_criterion_id": None, "code": "MANAGEMENT",
         "weight": 1, "input_type": "select", "aggregation": "avg", "sort_order": None},
        {"id": 121, "dimension_id": 2, "parent_criterion_id": 12, "code": "TRACK_RECORD",
         "weight": 0.7, "input_type": "range", "aggregation": "sum", "sort_order": 2},
        {"id": 120, "dimension_id": 2, "parent_criterion_id": 12, "code": "EXPERIENCE",
         "weight": 0.3, "input_type": "select", "aggregation": "sum", "sort_order": 1},
    ]


@pytest.fixture
def option_rows():
    """Options for leaf criterion 10 and sub-criterion 120."""
    return [
        {"id": 101, "criterion_id": 10, "value_label": "High", "score": 0.2, "sort_order": 2},
        {"id": 100, "criterion_id": 10, "value_label": "Low", "score": 1.0, "sort_order": 1},
        {"id": 200, "criterion_id": 120, "value_label": "Senior", "score": 0.8, "sort_order": 1},
        {"id": 201, "criterion_id": 120, "value_label": "Junior", "score": 0.2, "sort_order": 2},
    ]


@pytest.fixture
def sample_answers():
    """Persisted answer payload for the sample model.

    Expected scores:
      FIN  = 1/3 × 0.5 + 2/3 × 1.0         = 0.8333
      GOV  = 0.3 × 0.8 + 0.7 × 0.6         = 0.66
      total = 0.6 × 0.8333.. + 0.4 × 0.66  = 0.764
    """
    return {
        "10": {"value": 100},
        "11": {"value": "0,5"},
        "12": {"sub": {"120": {"value": "200"}, "121": {"value": 0.6}}},
    }


@pytest.fixture
def grade_bucket_rows():
    """Stored grade table, listed out of sort order."""
    return [
        {"grade": "C", "min_score": 0.0, "max_score": 0.5999, "pd": 0.10, "sort_order": 3},
        {"grade": "A", "min_score": 0.8, "max_score": 1.0, "pd": 0.01, "sort_order": 1},
        {"grade": "B", "min_score": 0.6, "max_score": 0.7999, "pd": 0.03, "sort_order": 2},
    ]


# =============================================================================
# SCORING TREE FIXTURES
# =============================================================================

@pytest.fixture
def composite_domain():
    """Factory: one domain, one composite criterion with `range` sub-criteria."""
    def make(aggregation, weights=(0.3, 0.7), scores=(0.2, 0.8)):
        subs = tuple(
            SubCriterion(id=500 + i, code=f"S{i}", weight=w, input_type="range")
            for i, w in enumerate(weights)
        )
        criterion = Criterion(
            id=50, code="COMPOSITE", weight=1.0, input_type="select",
            aggregation=aggregation, subcriteria=subs,
        )
        answers = {50: {"sub": {500 + i: s for i, s in enumerate(scores)}}}
        return Domain(id=5, code="D", weight=1.0, criteria=(criterion,)), answers

    return make


@pytest.fixture
def binary_select_domain():
    """One domain / one avg composite / two equal-weight select subs scored 0 and 1."""
    def subcriterion(sub_id):
        return SubCriterion(
            id=sub_id,
            code=f"S{sub_id}",
            weight=1.0,
            input_type="select",
            options=(
                Option(id=sub_id * 10 + 1, label="first", score=0.0),
                Option(id=sub_id * 10 + 2, label="second", score=1.0),
            ),
        )

    criterion = Criterion(
        id=7, code="BINARY", weight=1.0, input_type="select",
        aggregation="avg", subcriteria=(subcriterion(71), subcriterion(72)),
    )
    return Domain(id=1, code="RISK", weight=1.0, criteria=(criterion,))


@pytest.fixture
def ab_buckets():
    return [
        GradeBucket(grade="A", min=0.8, max=1.0, pd=0.01),
        GradeBucket(grade="B", min=0.5, max=0.7999, pd=0.05),
    ]
