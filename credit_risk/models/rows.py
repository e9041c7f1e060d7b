"""
Scoring Model Rows
credit_risk/models/rows.py

Flat rows as loaded from storage. Each row carries a foreign key to its
parent; the model builder assembles them into the scoring tree.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from credit_risk.models.enumerations import Aggregation, InputType


class DimensionRow(BaseModel):
    """
    A top-level risk domain (e.g. "Financial strength").
    """

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Dimension identifier")

    code: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Lookup key and display label of the domain"
    )

    weight: float = Field(
        default=0.0,
        description="Relative weight across domains"
    )

    sort_order: Optional[int] = Field(default=None)
    active: bool = Field(default=True)


class CriterionRow(BaseModel):
    """
    A scored factor. Rows with a parent_criterion_id are sub-criteria.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Criterion identifier")

    dimension_id: int = Field(
        ...,
        description="Foreign key reference to the owning dimension"
    )

    parent_criterion_id: Optional[int] = Field(
        default=None,
        description="Owning composite criterion, None for root criteria"
    )

    code: str = Field(..., min_length=1, max_length=100)

    label: Optional[str] = Field(default=None, max_length=500)

    weight: float = Field(
        default=0.0,
        description="Relative weight among siblings"
    )

    input_type: InputType = Field(default=InputType.SELECT)

    aggregation: Aggregation = Field(
        default=Aggregation.SUM,
        description="How a composite criterion combines its sub-criteria"
    )

    sort_order: Optional[int] = Field(default=None)
    active: bool = Field(default=True)


class OptionRow(BaseModel):
    """
    One selectable, scored choice for a select/yesno leaf.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Option identifier")

    criterion_id: int = Field(
        ...,
        description="Owning leaf criterion or sub-criterion"
    )

    value_label: str = Field(..., description="Display label")

    score: float = Field(
        default=0.0,
        description="Score of the option, expected in [0, 1]"
    )

    sort_order: Optional[int] = Field(default=None)
    active: bool = Field(default=True)


class GradeBucketRow(BaseModel):
    """
    One row of the score-to-grade lookup table.
    """

    model_config = ConfigDict(from_attributes=True)

    grade: str = Field(..., min_length=1, max_length=20)

    min_score: float = Field(
        ...,
        validation_alias=AliasChoices("min_score", "min"),
        description="Inclusive lower bound"
    )

    max_score: float = Field(
        ...,
        validation_alias=AliasChoices("max_score", "max"),
        description="Inclusive upper bound"
    )

    pd: Optional[float] = Field(
        default=None,
        ge=0,
        le=1,
        description="Probability of default attached to the grade"
    )

    sort_order: Optional[int] = Field(default=None)
