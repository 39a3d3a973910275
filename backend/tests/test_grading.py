import pytest

from quizlink.services.grading import (
    GradableQuestion,
    MultipleAnswer,
    QuestionKind,
    SingleAnswer,
    grade,
    grade_question,
    is_missing,
    normalize,
    parse_kind,
    percentage,
    resolve_answer_key,
    total_points,
)


def _q(qid, kind, key, points=1):
    return GradableQuestion.build(id=qid, kind=kind, answer_key=key, points=points)


@pytest.fixture()
def sample_quiz():
    return [
        _q("q1", "single-choice", "4", points=1),
        _q("q2", "multi-choice", ["A", "C"], points=2),
    ]


def test_full_marks_scenario(sample_quiz):
    result = grade(sample_quiz, {"q1": "4", "q2": ["C", "A"]})

    assert result.score == 3
    assert result.total_points == 3
    assert result.percentage == 100
    assert [v.is_correct for v in result.verdicts] == [True, True]
    assert [v.points_awarded for v in result.verdicts] == [1, 2]


def test_wrong_and_omitted_scenario(sample_quiz):
    result = grade(sample_quiz, {"q1": "5"})

    assert result.score == 0
    assert result.total_points == 3
    assert result.percentage == 0
    assert result.verdict_for("q1").is_correct is False
    assert result.verdict_for("q2").is_correct is False
    assert result.verdict_for("q2").points_awarded == 0


def test_multi_choice_is_order_independent():
    q = _q("q", "multi-choice", ["A", "B"])
    assert grade_question(q, ["A", "B"]) == grade_question(q, ["B", "A"])
    assert grade_question(q, ["B", "A"]).is_correct is True


@pytest.mark.parametrize(
    "submitted",
    [["A"], ["A", "B", "C"], ["a", "b"], ["A", "X"], "A"],
)
def test_multi_choice_requires_exact_set(submitted):
    q = _q("q", "multi-choice", ["A", "B"])
    assert grade_question(q, submitted).is_correct is False


def test_multi_choice_single_string_is_a_singleton_set():
    q = _q("q", "multi-choice", ["A"])
    assert grade_question(q, "A").is_correct is True


def test_multi_choice_repeated_choices_count_once():
    q = _q("q", "multi-choice", ["A", "C"])
    assert grade_question(q, ["A", "C", "C"]).is_correct is True


@pytest.mark.parametrize("kind", ["short-answer", "fill-in-blank", "single-choice", "true-false", "matching"])
def test_text_comparison_ignores_case_and_surrounding_whitespace(kind):
    q = _q("q", kind, "Paris")
    assert grade_question(q, " paris ").is_correct is True
    assert grade_question(q, "PARIS\n").is_correct is True
    assert grade_question(q, "Pa ris").is_correct is False


@pytest.mark.parametrize("missing", [None, "", [], {}, False, 0])
def test_missing_answers_score_zero_without_raising(missing):
    q = _q("q", "short-answer", "0", points=5)
    verdict = grade_question(q, missing)
    assert verdict.is_correct is False
    assert verdict.points_awarded == 0


def test_absent_keys_are_not_errors(sample_quiz):
    result = grade(sample_quiz, {})
    assert result.score == 0
    result = grade(sample_quiz, None)
    assert result.score == 0


def test_numbers_and_booleans_stringify_deterministically():
    assert grade_question(_q("q", "short-answer", "20"), 20).is_correct is True
    assert grade_question(_q("q", "short-answer", "20"), 20.0).is_correct is True
    assert grade_question(_q("q", "true-false", "True"), True).is_correct is True
    assert grade_question(_q("q", "true-false", "False"), "false").is_correct is True


@pytest.mark.parametrize("weird", [{"a": 1}, object(), ["x", {"y": 2}], 3.5, float("nan")])
def test_malformed_answers_degrade_to_incorrect(weird):
    q = _q("q", "single-choice", "4")
    verdict = grade_question(q, weird)
    assert verdict.is_correct is False
    assert verdict.points_awarded == 0


def test_grading_is_idempotent(sample_quiz):
    answers = {"q1": " 4", "q2": ["A"]}
    first = grade(sample_quiz, answers)
    second = grade(sample_quiz, answers)
    assert first == second


def test_total_points_counts_unanswered_questions():
    questions = [_q("a", "short-answer", "x", 3), _q("b", "short-answer", "y", 4), _q("c", "short-answer", "z")]
    assert total_points(questions) == 8
    assert grade(questions, {"a": "x"}).total_points == 8
    assert grade(questions, {"a": "x"}).score == 3


def test_zero_points_default_to_one():
    assert _q("q", "short-answer", "x", points=0).points == 1
    assert _q("q", "short-answer", "x", points=None).points == 1


def test_empty_quiz_percentage_falls_back_to_zero():
    result = grade([], {"anything": "x"})
    assert result.score == 0
    assert result.total_points == 0
    assert result.percentage == 0


@pytest.mark.parametrize(
    "score,total,expected",
    [(0, 3, 0), (1, 3, 33), (2, 3, 67), (1, 8, 13), (1, 2, 50), (3, 3, 100), (5, 0, 0)],
)
def test_percentage_rounds_halves_up(score, total, expected):
    assert percentage(score, total) == expected


def test_answer_keys_resolve_to_tagged_variants():
    assert resolve_answer_key(QuestionKind.multi_choice, ["B", "A"]) == MultipleAnswer(frozenset({"A", "B"}))
    assert resolve_answer_key(QuestionKind.multi_choice, "A") == MultipleAnswer(frozenset({"A"}))
    assert resolve_answer_key(QuestionKind.short_answer, "Paris") == SingleAnswer("Paris")
    assert resolve_answer_key(QuestionKind.matching, ["1-b", "2-a"]) == SingleAnswer("1-b,2-a")


def test_normalize():
    assert normalize("  Hello ") == "hello"
    assert normalize(None) == ""
    assert normalize(True) == "true"
    assert normalize(4.0) == "4"
    assert normalize(["A", "b"]) == "a,b"


def test_is_missing():
    assert is_missing(None)
    assert is_missing("")
    assert not is_missing(" ")
    assert not is_missing("0")
    assert not is_missing(True)


def test_legacy_kind_names():
    assert parse_kind("multiple-choice-single") == QuestionKind.single_choice
    assert parse_kind("multiple-choice-multi") == QuestionKind.multi_choice
    assert parse_kind("fill-in-blanks") == QuestionKind.fill_in_blank
    with pytest.raises(ValueError):
        parse_kind("essay")
