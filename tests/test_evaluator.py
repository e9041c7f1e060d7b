# tests/test_evaluator.py
"""
Score Evaluator Tests - leaf rules, aggregation modes, weighting and clamping
"""

from decimal import Decimal

import pytest

from credit_risk.models.enumerations import Aggregation, InputType
from credit_risk.scoring.answers import Answer
from credit_risk.scoring.evaluator import (
    ComputeResult,
    compute_scores,
    score_criterion,
    score_leaf,
)
from credit_risk.scoring.grades import GradeResult, resolve_grade
from credit_risk.scoring.model_builder import build_model
from credit_risk.scoring.tree import Criterion, Domain, Option


OPTIONS = (
    Option(id=1, label="Strong", score=0.9),
    Option(id=2, label="Weak", score=0.1),
    Option(id=3, label="2", score=0.5),
    Option(id=4, label="Broken", score=1.7),
    Option(id=5, label="Negative", score=-0.4),
)


# ---------------------------------------------------------------------------
# Leaf scoring
# ---------------------------------------------------------------------------

class TestScoreLeaf:
    """Tests for score_leaf()."""

    @pytest.mark.parametrize("raw", [1, "1", 1.0, " 1 ", Decimal("1")])
    def test_select_matches_option_id(self, raw):
        """Option ids match numerically whatever the raw answer type."""
        assert score_leaf(InputType.SELECT, raw, OPTIONS) == Decimal("0.9")

    def test_select_falls_back_to_label(self):
        """An answer that is not an option id matches on exact label."""
        assert score_leaf(InputType.SELECT, "Weak", OPTIONS) == Decimal("0.1")

    def test_select_id_takes_precedence_over_label(self):
        """'2' is option 2's id and option 3's label; the id match wins."""
        assert score_leaf(InputType.SELECT, "2", OPTIONS) == Decimal("0.1")

    def test_label_match_is_exact(self):
        """Label matching is case- and whitespace-sensitive."""
        assert score_leaf(InputType.SELECT, "weak", OPTIONS) == Decimal("0")
        assert score_leaf(InputType.SELECT, "Weak ", OPTIONS) == Decimal("0")

    def test_select_no_match_scores_zero(self):
        assert score_leaf(InputType.SELECT, 99, OPTIONS) == Decimal("0")

    def test_yesno_behaves_like_select(self):
        assert score_leaf(InputType.YESNO, 2, OPTIONS) == Decimal("0.1")

    def test_option_scores_are_clamped(self):
        """Out-of-range stored option scores are clamped to [0, 1]."""
        assert score_leaf(InputType.SELECT, 4, OPTIONS) == Decimal("1")
        assert score_leaf(InputType.SELECT, 5, OPTIONS) == Decimal("0")

    def test_non_finite_option_score_is_zero(self):
        options = (Option(id=1, label="nan", score=float("nan")),)
        assert score_leaf(InputType.SELECT, 1, options) == Decimal("0")

    def test_select_without_options(self):
        assert score_leaf(InputType.SELECT, 1, None) == Decimal("0")

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (0.35, Decimal("0.35")),
            ("0.35", Decimal("0.35")),
            ("0,35", Decimal("0.35")),
            (1, Decimal("1")),
            (7.5, Decimal("1")),
            (-2, Decimal("0")),
            ("abc", Decimal("0")),
            ("", Decimal("0")),
            (None, Decimal("0")),
            (float("inf"), Decimal("0")),
            (float("nan"), Decimal("0")),
        ],
    )
    def test_number_parsing_and_clamping(self, raw, expected):
        """number inputs parse comma or dot decimals and clamp to [0, 1]."""
        assert score_leaf(InputType.NUMBER, raw, ()) == expected

    def test_range_behaves_like_number(self):
        assert score_leaf(InputType.RANGE, "0,8", ()) == Decimal("0.8")

    def test_text_always_zero(self):
        assert score_leaf(InputType.TEXT, "0.9", OPTIONS) == Decimal("0")
        assert score_leaf(InputType.TEXT, 1, OPTIONS) == Decimal("0")

    def test_string_input_type_accepted(self):
        assert score_leaf("range", 0.4, ()) == Decimal("0.4")


# ---------------------------------------------------------------------------
# Criterion scoring
# ---------------------------------------------------------------------------

class TestScoreCriterion:
    """Tests for score_criterion() on leaf and composite criteria."""

    def test_leaf_criterion_uses_own_answer(self):
        criterion = Criterion(id=1, code="C", weight=1, input_type=InputType.SELECT, options=OPTIONS)
        result = score_criterion(criterion, Answer.of(1))
        assert result.score == Decimal("0.9")
        assert result.sub_scores == {}

    def test_unanswered_leaf_scores_zero(self):
        criterion = Criterion(id=1, code="C", weight=1, input_type=InputType.NUMBER)
        assert score_criterion(criterion, None).score == Decimal("0")

    @pytest.mark.parametrize(
        "aggregation, expected",
        [
            (Aggregation.SUM, Decimal("0.62")),
            (Aggregation.AVG, Decimal("0.62")),
            (Aggregation.MAX, Decimal("0.8")),
            (Aggregation.MIN, Decimal("0.2")),
        ],
    )
    def test_aggregation_modes(self, composite_domain, aggregation, expected):
        """Weights 0.3/0.7, scores 0.2/0.8: sum=avg=0.62, max=0.8, min=0.2."""
        domain, answers = composite_domain(aggregation)
        criterion = domain.criteria[0]
        result = score_criterion(criterion, Answer.of(sub=answers[50]["sub"]))
        assert result.score == expected

    def test_sub_scores_recorded_unweighted(self, composite_domain):
        """Sub-criterion scores are reported raw regardless of aggregation."""
        domain, answers = composite_domain(Aggregation.MAX)
        result = score_criterion(domain.criteria[0], Answer.of(sub=answers[50]["sub"]))
        assert result.sub_scores == {500: Decimal("0.2"), 501: Decimal("0.8")}

    def test_composite_ignores_own_value(self, composite_domain):
        """A composite's own answer value does not contribute."""
        domain, _ = composite_domain(Aggregation.SUM)
        result = score_criterion(domain.criteria[0], Answer.of(value=1))
        assert result.score == Decimal("0")

    def test_zero_sub_weights_collapse_to_zero(self, composite_domain):
        """With all sub-criterion weights zero the aggregate is zero in every mode."""
        for aggregation in Aggregation:
            domain, answers = composite_domain(aggregation, weights=(0, 0))
            result = score_criterion(domain.criteria[0], Answer.of(sub=answers[50]["sub"]))
            assert result.score == Decimal("0")
            assert result.sub_scores == {500: Decimal("0.2"), 501: Decimal("0.8")}

    def test_non_finite_sub_weight_counts_as_zero(self, composite_domain):
        """inf weight is dropped; the other sub takes the whole weight."""
        domain, answers = composite_domain(Aggregation.SUM, weights=(float("inf"), 0.5))
        result = score_criterion(domain.criteria[0], Answer.of(sub=answers[50]["sub"]))
        assert result.score == Decimal("0.8")


# ---------------------------------------------------------------------------
# Domain and total scoring
# ---------------------------------------------------------------------------

class TestComputeScores:
    """Tests for compute_scores() over full models."""

    def test_sample_model_scores(self, dimension_rows, criterion_rows, option_rows, sample_answers):
        """Scores of the conftest sample model (see sample_answers docstring)."""
        domains = build_model(dimension_rows, criterion_rows, option_rows)
        result = compute_scores(domains, sample_answers)

        assert isinstance(result, ComputeResult)
        assert result.domain_scores == {"FIN": Decimal("0.8333"), "GOV": Decimal("0.66")}
        assert result.total == Decimal("0.764")
        assert result.criterion_scores == {
            10: Decimal("1"),
            11: Decimal("0.5"),
            12: Decimal("0.66"),
        }
        assert result.sub_scores == {120: Decimal("0.8"), 121: Decimal("0.6")}

    def test_places_controls_reported_precision(self, dimension_rows, criterion_rows, option_rows, sample_answers):
        domains = build_model(dimension_rows, criterion_rows, option_rows)
        result = compute_scores(domains, sample_answers, places=2)
        assert result.domain_scores["FIN"] == Decimal("0.83")
        assert str(result.total) == "0.76"

    def test_binary_select_first_options_score_zero(self, binary_select_domain):
        """Answering the 0-scored option on both subs yields 0 everywhere."""
        answers = {7: {"sub": {71: 711, 72: 721}}}
        result = compute_scores([binary_select_domain], answers)
        assert result.domain_scores["RISK"] == Decimal("0")
        assert result.total == Decimal("0")

    def test_binary_select_second_options_score_one(self, binary_select_domain):
        """Answering the 1-scored option on both subs yields a total of 1."""
        answers = {7: {"sub": {71: 712, 72: 722}}}
        result = compute_scores([binary_select_domain], answers)
        assert result.domain_scores["RISK"] == Decimal("1")
        assert result.total == Decimal("1")

    def test_binary_select_by_label(self, binary_select_domain):
        answers = {7: {"sub": {71: "second", 72: "first"}}}
        result = compute_scores([binary_select_domain], answers)
        assert result.total == Decimal("0.5")

    def test_empty_answers_score_zero(self, dimension_rows, criterion_rows, option_rows):
        """Building from rows and scoring with no answers yields all zeros."""
        domains = build_model(dimension_rows, criterion_rows, option_rows)
        result = compute_scores(domains, {})

        assert result.total == Decimal("0")
        assert set(result.domain_scores) == {"FIN", "GOV"}
        assert all(v == Decimal("0") for v in result.domain_scores.values())
        assert all(v == Decimal("0") for v in result.criterion_scores.values())

    def test_none_answers_accepted(self, binary_select_domain):
        assert compute_scores([binary_select_domain], None).total == Decimal("0")

    def test_empty_model(self):
        result = compute_scores([], {})
        assert result.total == Decimal("0")
        assert result.domain_scores == {}

    def test_zero_domain_weights_give_zero_total(self, binary_select_domain):
        """Domain weights summing to zero short-circuit the total to zero."""
        zero = Domain(id=1, code="RISK", weight=0.0, criteria=binary_select_domain.criteria)
        answers = {7: {"sub": {71: 712, 72: 722}}}
        result = compute_scores([zero], answers)
        assert result.domain_scores["RISK"] == Decimal("1")
        assert result.total == Decimal("0")

    def test_nan_domain_weight_ignored(self, binary_select_domain):
        answers = {7: {"sub": {71: 712, 72: 722}}}
        other = Domain(id=2, code="NAN", weight=float("nan"), criteria=())
        result = compute_scores([binary_select_domain, other], answers)
        assert result.total == Decimal("1")
        assert result.domain_scores["NAN"] == Decimal("0")

    def test_domain_weights_are_relative(self, binary_select_domain):
        """Weights 3 and 1 behave like 0.75 and 0.25."""
        answers = {7: {"sub": {71: 712, 72: 722}}}
        empty = Domain(id=2, code="EMPTY", weight=1, criteria=())
        full = Domain(id=1, code="RISK", weight=3, criteria=binary_select_domain.criteria)
        assert compute_scores([full, empty], answers).total == Decimal("0.75")

    def test_result_is_fresh_each_call(self, binary_select_domain):
        """Two calls never share result containers."""
        r1 = compute_scores([binary_select_domain], {})
        r2 = compute_scores([binary_select_domain], {})
        assert r1 == r2
        assert r1.domain_scores is not r2.domain_scores

    def test_exact_total_kept_unrounded(self):
        """0.79996 reports as 0.8000 but grades from its exact value."""
        leaf = Criterion(id=1, code="SCORE", weight=1, input_type=InputType.NUMBER)
        domain = Domain(id=1, code="D", weight=1, criteria=(leaf,))
        result = compute_scores([domain], {1: 0.79996})

        assert result.total == Decimal("0.8000")
        assert result.exact_total == Decimal("0.79996")

    def test_grade_resolved_from_exact_total(self, ab_buckets):
        """Rounding must not lift a score across a bucket boundary."""
        leaf = Criterion(id=1, code="SCORE", weight=1, input_type=InputType.NUMBER)
        domain = Domain(id=1, code="D", weight=1, criteria=(leaf,))
        result = compute_scores([domain], {1: 0.79996}, places=2)

        assert result.total == Decimal("0.80")
        assert resolve_grade(result.exact_total, ab_buckets) == GradeResult(grade="N/A", pd=None)

    def test_exact_total_defaults_to_total(self):
        result = ComputeResult(total=Decimal("0.5"), domain_scores={})
        assert result.exact_total == Decimal("0.5")

    def test_result_mappings_are_read_only(self, binary_select_domain):
        result = compute_scores([binary_select_domain], {7: {"sub": {71: 712}}})
        with pytest.raises(TypeError):
            result.domain_scores["RISK"] = Decimal("1")
        with pytest.raises(TypeError):
            result.criterion_scores[7] = Decimal("1")
        with pytest.raises(TypeError):
            result.sub_scores[71] = Decimal("0")

    def test_result_does_not_alias_caller_dict(self):
        scores = {"D": Decimal("0.5")}
        result = ComputeResult(total=Decimal("0.5"), domain_scores=scores)
        scores["D"] = Decimal("0.9")
        assert result.domain_scores["D"] == Decimal("0.5")

    def test_negative_criterion_weight_counts_as_zero(self, composite_domain):
        """A negative sibling weight neither subtracts nor rescales the others."""
        domain, answers = composite_domain(Aggregation.SUM, weights=(-1, 2))
        result = score_criterion(domain.criteria[0], Answer.of(sub=answers[50]["sub"]))
        assert result.score == Decimal("0.8")

    def test_to_dict_is_json_ready(self, dimension_rows, criterion_rows, option_rows, sample_answers):
        domains = build_model(dimension_rows, criterion_rows, option_rows)
        payload = compute_scores(domains, sample_answers).to_dict()

        assert payload["total"] == pytest.approx(0.764)
        assert payload["domainScores"] == {"FIN": pytest.approx(0.8333), "GOV": pytest.approx(0.66)}
        assert payload["criterionScores"]["12"] == pytest.approx(0.66)
        assert payload["subScores"]["121"] == pytest.approx(0.6)
