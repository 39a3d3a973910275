"""Answer grading.

Everything in this module is a pure function of its inputs: no database, no
clock, no configuration. Submitted answers of any shape degrade to an
"incorrect" verdict instead of raising, so a malformed request can never make
grading fail.

Comparison rules:

* ``multi-choice``: the submission is read as a set of strings (a lone string
  is a one-element set) and must equal the key set exactly. Order does not
  matter, case and whitespace do.
* every other kind: both sides go through :func:`normalize` and must be equal.
* a missing or empty answer is incorrect and awards nothing.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Union


class QuestionKind(str, enum.Enum):
    single_choice = "single-choice"
    multi_choice = "multi-choice"
    short_answer = "short-answer"
    true_false = "true-false"
    fill_in_blank = "fill-in-blank"
    matching = "matching"


# Names used by earlier versions of the quiz editor.
_LEGACY_KINDS = {
    "multiple-choice-single": QuestionKind.single_choice,
    "multiple-choice-multi": QuestionKind.multi_choice,
    "fill-in-blanks": QuestionKind.fill_in_blank,
}

CHOICE_KINDS = frozenset({QuestionKind.single_choice, QuestionKind.multi_choice, QuestionKind.true_false})
FREE_TEXT_KINDS = frozenset({QuestionKind.short_answer, QuestionKind.fill_in_blank})


def parse_kind(value: Any) -> QuestionKind:
    if isinstance(value, QuestionKind):
        return value
    raw = str(value or "").strip().lower()
    if raw in _LEGACY_KINDS:
        return _LEGACY_KINDS[raw]
    return QuestionKind(raw)


@dataclass(frozen=True)
class SingleAnswer:
    value: str


@dataclass(frozen=True)
class MultipleAnswer:
    values: frozenset[str]


AnswerKey = Union[SingleAnswer, MultipleAnswer]


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(_stringify(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return ",".join(sorted(_stringify(v) for v in value))
    return str(value)


def normalize(value: Any) -> str:
    """Canonical comparison form of a free-text or single-choice answer.

    ``None`` becomes ``""``, booleans become ``"true"``/``"false"``, integral
    floats lose their ``.0``, sequences are joined with ``","``. The result is
    lowercased and stripped of surrounding whitespace.
    """
    return _stringify(value).strip().lower()


def is_missing(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, (str, list, tuple, set, frozenset, dict)):
        return len(value) == 0
    if isinstance(value, (int, float)):
        return value == 0
    return False


def resolve_answer_key(kind: QuestionKind, raw: Any) -> AnswerKey:
    if kind == QuestionKind.multi_choice:
        if raw is None:
            return MultipleAnswer(frozenset())
        if isinstance(raw, (list, tuple, set, frozenset)):
            return MultipleAnswer(frozenset(_stringify(v) for v in raw))
        return MultipleAnswer(frozenset({_stringify(raw)}))
    return SingleAnswer(_stringify(raw))


def answer_key_to_wire(key: AnswerKey) -> str | list[str]:
    if isinstance(key, MultipleAnswer):
        return sorted(key.values)
    return key.value


@dataclass(frozen=True)
class GradableQuestion:
    id: str
    kind: QuestionKind
    answer_key: AnswerKey
    points: int = 1

    @classmethod
    def build(cls, *, id: Any, kind: Any, answer_key: Any, points: Any = 1) -> "GradableQuestion":
        k = parse_kind(kind)
        return cls(
            id=str(id),
            kind=k,
            answer_key=resolve_answer_key(k, answer_key),
            points=int(points) if points else 1,
        )


@dataclass(frozen=True)
class Verdict:
    question_id: str
    is_correct: bool
    points_awarded: int


@dataclass(frozen=True)
class GradeResult:
    score: int
    total_points: int
    verdicts: tuple[Verdict, ...]

    @property
    def percentage(self) -> int:
        return percentage(self.score, self.total_points)

    def verdict_for(self, question_id: str) -> Verdict | None:
        for v in self.verdicts:
            if v.question_id == question_id:
                return v
        return None


def _as_choice_set(value: Any) -> frozenset[str]:
    if isinstance(value, (list, tuple, set, frozenset)):
        return frozenset(_stringify(v) for v in value)
    return frozenset({_stringify(value)})


def _matches(question: GradableQuestion, submitted: Any) -> bool:
    key = question.answer_key
    if question.kind == QuestionKind.multi_choice:
        expected = key.values if isinstance(key, MultipleAnswer) else frozenset({key.value})
        got = _as_choice_set(submitted)
        return len(got) == len(expected) and expected <= got

    # matching has no rule of its own yet; it shares the normalized string rule.
    expected_text = key.value if isinstance(key, SingleAnswer) else _stringify(key.values)
    return normalize(submitted) == normalize(expected_text)


def grade_question(question: GradableQuestion, submitted: Any) -> Verdict:
    if is_missing(submitted):
        return Verdict(question_id=question.id, is_correct=False, points_awarded=0)
    try:
        ok = _matches(question, submitted)
    except (TypeError, ValueError):
        ok = False
    return Verdict(question_id=question.id, is_correct=ok, points_awarded=question.points if ok else 0)


def total_points(questions: Iterable[GradableQuestion]) -> int:
    return sum(q.points for q in questions)


def percentage(score: int, total: int) -> int:
    """``round(score / total * 100)`` with halves rounded up; 0 when total is 0."""
    if total <= 0:
        return 0
    return (int(score) * 200 + int(total)) // (2 * int(total))


def grade(questions: Iterable[GradableQuestion], answers: Mapping[str, Any] | None) -> GradeResult:
    qs = list(questions)
    answers = answers or {}
    verdicts = tuple(grade_question(q, answers.get(q.id)) for q in qs)
    return GradeResult(
        score=sum(v.points_awarded for v in verdicts),
        total_points=total_points(qs),
        verdicts=verdicts,
    )
