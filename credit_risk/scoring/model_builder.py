"""
Model Builder
credit_risk/scoring/model_builder.py

Assembles flat storage rows into the nested scoring tree.

    dimension rows ─┐
    criterion rows ─┼──► partition + stable sort ──► Domain[] (sorted by id)
    option rows ────┘

Partitioning:
  - criterion rows with parent_criterion_id None are roots, grouped by dimension
  - other criterion rows are children, grouped by parent criterion id
  - option rows are grouped by owning criterion id
  - every sibling group is stable-sorted on sort_order (None sorts as 0)

Inconsistent rows (orphans, duplicates, children of children) are reported as
StructuralIssues and dropped; the model still builds unless strict=True.
Inactive rows are skipped without being reported.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

import structlog
from pydantic import BaseModel

from credit_risk.core.exceptions import (
    ModelStructureError,
    StructuralIssue,
    StructuralIssueKind,
)
from credit_risk.models.rows import CriterionRow, DimensionRow, OptionRow
from credit_risk.scoring.tree import Criterion, Domain, Option, SubCriterion

logger = structlog.get_logger(__name__)

RowT = TypeVar("RowT", bound=BaseModel)


@dataclass
class _Partition:
    """Intermediate grouping shared by inspect_rows() and build_model()."""
    issues: List[StructuralIssue] = field(default_factory=list)
    dimensions: List[DimensionRow] = field(default_factory=list)
    roots_by_dim: Dict[int, List[CriterionRow]] = field(default_factory=dict)
    children_by_parent: Dict[int, List[CriterionRow]] = field(default_factory=dict)
    options_by_owner: Dict[int, List[OptionRow]] = field(default_factory=dict)


def _coerce(model: Type[RowT], rows: Optional[Iterable[Any]]) -> List[RowT]:
    """Accept row models or plain mappings as loaded from storage."""
    return [r if isinstance(r, model) else model.model_validate(r) for r in (rows or [])]


def _sort_key(row: Any) -> int:
    return row.sort_order if row.sort_order is not None else 0


def _dedupe(rows: List[RowT], row_type: str, issues: List[StructuralIssue]) -> List[RowT]:
    """Keep the first row per id; report the rest."""
    seen = set()
    kept: List[RowT] = []
    for row in rows:
        if row.id in seen:
            issues.append(StructuralIssue(
                kind=StructuralIssueKind.DUPLICATE_ID,
                row_type=row_type,
                row_id=row.id,
                detail=f"{row_type} id {row.id} appears more than once",
            ))
            continue
        seen.add(row.id)
        kept.append(row)
    return kept


def _partition(
    dimension_rows: Optional[Iterable[Any]],
    criterion_rows: Optional[Iterable[Any]],
    option_rows: Optional[Iterable[Any]],
) -> _Partition:
    part = _Partition()
    issues = part.issues

    dims = _dedupe(_coerce(DimensionRow, dimension_rows), "dimension", issues)
    crits = _dedupe(_coerce(CriterionRow, criterion_rows), "criterion", issues)
    opts = _dedupe(_coerce(OptionRow, option_rows), "option", issues)

    # Domain scores are keyed by code, so active codes must be unique
    codes_seen = set()
    for d in dims:
        if not d.active:
            continue
        if d.code in codes_seen:
            issues.append(StructuralIssue(
                kind=StructuralIssueKind.DUPLICATE_CODE,
                row_type="dimension",
                row_id=d.id,
                detail=f"dimension code '{d.code}' is used by more than one dimension",
            ))
            continue
        codes_seen.add(d.code)
        part.dimensions.append(d)

    dim_ids = {d.id for d in dims}
    active_dim_ids = {d.id for d in part.dimensions}
    roots = {c.id: c for c in crits if c.parent_criterion_id is None}
    child_ids = {c.id for c in crits if c.parent_criterion_id is not None}

    roots_by_dim: Dict[int, List[CriterionRow]] = defaultdict(list)
    children_by_parent: Dict[int, List[CriterionRow]] = defaultdict(list)

    for c in crits:
        if c.parent_criterion_id is None:
            if c.dimension_id not in dim_ids:
                issues.append(StructuralIssue(
                    kind=StructuralIssueKind.ORPHAN_ROOT,
                    row_type="criterion",
                    row_id=c.id,
                    detail=f"criterion {c.id} references missing dimension {c.dimension_id}",
                ))
                continue
            if c.active and c.dimension_id in active_dim_ids:
                roots_by_dim[c.dimension_id].append(c)
            continue

        parent_id = c.parent_criterion_id
        if parent_id in child_ids:
            issues.append(StructuralIssue(
                kind=StructuralIssueKind.NESTED_TOO_DEEP,
                row_type="criterion",
                row_id=c.id,
                detail=f"criterion {c.id} has parent {parent_id}, which is itself a sub-criterion",
            ))
            continue
        parent = roots.get(parent_id)
        if parent is None:
            issues.append(StructuralIssue(
                kind=StructuralIssueKind.ORPHAN_CRITERION,
                row_type="criterion",
                row_id=c.id,
                detail=f"criterion {c.id} references missing parent criterion {parent_id}",
            ))
            continue
        if c.active and parent.active:
            children_by_parent[parent_id].append(c)

    crit_ids = {c.id for c in crits}
    options_by_owner: Dict[int, List[OptionRow]] = defaultdict(list)
    for o in opts:
        if o.criterion_id not in crit_ids:
            issues.append(StructuralIssue(
                kind=StructuralIssueKind.ORPHAN_OPTION,
                row_type="option",
                row_id=o.id,
                detail=f"option {o.id} references missing criterion {o.criterion_id}",
            ))
            continue
        if o.active:
            options_by_owner[o.criterion_id].append(o)

    for group in (roots_by_dim, children_by_parent, options_by_owner):
        for siblings in group.values():
            siblings.sort(key=_sort_key)

    part.dimensions.sort(key=lambda d: d.id)
    part.roots_by_dim = dict(roots_by_dim)
    part.children_by_parent = dict(children_by_parent)
    part.options_by_owner = dict(options_by_owner)
    return part


def inspect_rows(
    dimension_rows: Optional[Iterable[Any]],
    criterion_rows: Optional[Iterable[Any]],
    option_rows: Optional[Iterable[Any]],
) -> List[StructuralIssue]:
    """Report structural issues in the rows without building the model."""
    return _partition(dimension_rows, criterion_rows, option_rows).issues


def _options(part: _Partition, owner_id: int) -> tuple:
    return tuple(
        Option(id=o.id, label=o.value_label, score=o.score)
        for o in part.options_by_owner.get(owner_id, [])
    )


def build_model(
    dimension_rows: Optional[Iterable[Any]],
    criterion_rows: Optional[Iterable[Any]],
    option_rows: Optional[Iterable[Any]],
    *,
    strict: bool = False,
) -> List[Domain]:
    """
    Build the scoring tree from flat rows.

    Args:
        dimension_rows: DimensionRow models or mappings {id, code, weight, ...}.
        criterion_rows: CriterionRow models or mappings; parent_criterion_id
                        set for sub-criteria.
        option_rows: OptionRow models or mappings keyed by criterion_id.
        strict: Raise ModelStructureError on any structural issue instead of
                dropping the offending rows.

    Returns:
        Domains sorted by id, each with its criteria in sort order.

    Raises:
        ModelStructureError: only when strict=True and issues were found.
        pydantic.ValidationError: a mapping row is missing required fields.
    """
    part = _partition(dimension_rows, criterion_rows, option_rows)

    if part.issues:
        if strict:
            raise ModelStructureError(part.issues)
        for issue in part.issues:
            logger.warning(
                "model_row_dropped",
                kind=issue.kind.value,
                row_type=issue.row_type,
                row_id=issue.row_id,
                detail=issue.detail,
            )

    domains: List[Domain] = []
    criteria_count = 0
    for d in part.dimensions:
        criteria = []
        for r in part.roots_by_dim.get(d.id, []):
            children = part.children_by_parent.get(r.id, [])
            if children:
                subs = tuple(
                    SubCriterion(
                        id=s.id,
                        code=s.code,
                        weight=s.weight,
                        input_type=s.input_type,
                        options=_options(part, s.id),
                    )
                    for s in children
                )
                criteria.append(Criterion(
                    id=r.id,
                    code=r.code,
                    weight=r.weight,
                    input_type=r.input_type,
                    aggregation=r.aggregation,
                    subcriteria=subs,
                ))
            else:
                criteria.append(Criterion(
                    id=r.id,
                    code=r.code,
                    weight=r.weight,
                    input_type=r.input_type,
                    aggregation=r.aggregation,
                    options=_options(part, r.id),
                ))
        criteria_count += len(criteria)
        domains.append(Domain(id=d.id, code=d.code, weight=d.weight, criteria=tuple(criteria)))

    logger.info(
        "model_built",
        domains=len(domains),
        criteria=criteria_count,
        issues=len(part.issues),
    )
    return domains
