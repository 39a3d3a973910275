from __future__ import annotations

import logging
import secrets
import string
import uuid
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from quizlink.core.clock import as_utc, isoformat, utcnow
from quizlink.core.errors import InvalidRequest, NotFound
from quizlink.core.text import sanitize_input, sanitize_optional
from quizlink.db.session import commit_or_raise
from quizlink.models.quiz import BackgroundStyle, Question, Quiz
from quizlink.models.submission import Submission
from quizlink.schemas.quiz import QuestionIn, QuizCreateRequest, QuizUpdateRequest, ThemeIn
from quizlink.services.grading import (
    FREE_TEXT_KINDS,
    GradableQuestion,
    QuestionKind,
    answer_key_to_wire,
    parse_kind,
    percentage,
)

logger = logging.getLogger("quizlink.quizzes")

LINK_ID_LENGTH = 10
_LINK_ALPHABET = string.ascii_letters + string.digits + "_-"

TRUE_FALSE_OPTIONS = ["True", "False"]
DEFAULT_THANK_YOU_TEXT = "Thank you for completing this quiz!"
DEFAULT_THEME = {
    "primary_color": "#14b8a6",
    "accent_color": "#06b6d4",
    "font_family": "Inter",
    "background_style": BackgroundStyle.gradient,
    "custom_welcome_text": "Welcome to this quiz!",
    "custom_instructions": "Answer all questions to the best of your ability.",
    "custom_thank_you_text": DEFAULT_THANK_YOU_TEXT,
}
_THEME_TEXT_FIELDS = ("custom_welcome_text", "custom_instructions", "custom_thank_you_text")


def quiz_theme(quiz: Quiz) -> dict[str, Any]:
    style = quiz.background_style
    return {
        "primary_color": quiz.primary_color,
        "accent_color": quiz.accent_color,
        "font_family": quiz.font_family,
        "background_style": getattr(style, "value", str(style)),
        "custom_welcome_text": quiz.custom_welcome_text,
        "custom_instructions": quiz.custom_instructions,
        "custom_thank_you_text": quiz.custom_thank_you_text,
    }


def thank_you_message(quiz: Quiz) -> str:
    return quiz.custom_thank_you_text or DEFAULT_THANK_YOU_TEXT


def question_public(q: Question) -> dict[str, Any]:
    return {
        "id": str(q.id),
        "kind": q.kind.value,
        "text": q.text,
        "options": list(q.options or []),
        "points": int(q.points or 1),
        "image_url": q.image_url,
    }


def question_full(q: Question) -> dict[str, Any]:
    item = question_public(q)
    item["answer_key"] = answer_key_to_wire(gradable(q).answer_key)
    item["explanation"] = q.explanation
    return item


def gradable(q: Question) -> GradableQuestion:
    return GradableQuestion.build(id=q.id, kind=q.kind, answer_key=q.answer_key, points=q.points)


def load_questions(db: Session, quiz_id: uuid.UUID) -> list[Question]:
    return list(db.scalars(select(Question).where(Question.quiz_id == quiz_id).order_by(Question.position)))


def quiz_base(quiz: Quiz) -> dict[str, Any]:
    return {
        "id": str(quiz.id),
        "title": quiz.title,
        "description": quiz.description,
        "subject": quiz.subject,
        "start_date": isoformat(quiz.start_date),
        "end_date": isoformat(quiz.end_date),
        "time_limit": quiz.time_limit,
        "max_attempts": quiz.max_attempts,
        "theme": quiz_theme(quiz),
        "shareable_link_id": quiz.shareable_link_id,
        "is_published": bool(quiz.is_published),
        "created_at": isoformat(quiz.created_at),
        "updated_at": isoformat(quiz.updated_at),
    }


def _choice_value(value: Any, *, index: int) -> str:
    if not isinstance(value, str):
        raise InvalidRequest(f"question {index}: answer key entries must be strings")
    return sanitize_input(value)


def validate_question(item: QuestionIn, *, index: int) -> dict[str, Any]:
    """Check the kind-specific answer key invariants and return column values."""
    try:
        kind = parse_kind(item.kind)
    except ValueError as e:
        raise InvalidRequest(f"question {index}: unknown kind {item.kind!r}") from e

    if int(item.points) < 1:
        raise InvalidRequest(f"question {index}: points must be a positive integer")

    options = [sanitize_input(o) for o in (item.options or [])]
    raw_key = item.answer_key

    if kind == QuestionKind.true_false:
        if not options:
            options = list(TRUE_FALSE_OPTIONS)
        if sorted(options) != sorted(TRUE_FALSE_OPTIONS):
            raise InvalidRequest(f"question {index}: true-false options must be True and False")

    if kind in FREE_TEXT_KINDS:
        options = []

    if kind == QuestionKind.multi_choice:
        if isinstance(raw_key, str):
            raw_key = [raw_key]
        if not isinstance(raw_key, list) or not raw_key:
            raise InvalidRequest(f"question {index}: multi-choice needs a non-empty list of answers")
        key: Any = []
        for v in raw_key:
            value = _choice_value(v, index=index)
            if value not in options:
                raise InvalidRequest(f"question {index}: answer {value!r} is not one of the options")
            if value not in key:
                key.append(value)
    elif kind in (QuestionKind.single_choice, QuestionKind.true_false):
        key = _choice_value(raw_key, index=index)
        if key not in options:
            raise InvalidRequest(f"question {index}: answer {key!r} is not one of the options")
    else:
        if not isinstance(raw_key, str) or not raw_key.strip():
            raise InvalidRequest(f"question {index}: a reference answer is required")
        key = raw_key.strip()

    return {
        "kind": kind,
        "text": sanitize_input(item.text),
        "options": options,
        "answer_key": key,
        "points": int(item.points),
        "explanation": sanitize_optional(item.explanation),
        "image_url": (item.image_url or "").strip() or None,
    }


def _question_id(raw: str | None, *, keep: set[uuid.UUID], seen: set[uuid.UUID]) -> uuid.UUID:
    # Only ids already belonging to this quiz are reused.
    try:
        qid = uuid.UUID(str(raw)) if raw else None
    except ValueError:
        qid = None
    if qid is None or qid not in keep or qid in seen:
        qid = uuid.uuid4()
    seen.add(qid)
    return qid


def _check_window(quiz: Quiz) -> None:
    start, end = as_utc(quiz.start_date), as_utc(quiz.end_date)
    if start is not None and end is not None and end < start:
        raise InvalidRequest("end date must not be before start date")


class QuizService:
    """Owner-scoped quiz management. A quiz owned by someone else is reported as not found."""

    def __init__(self, db: Session):
        self.db = db

    def _owned(self, owner_id: str, quiz_id: str) -> Quiz:
        try:
            quiz_uuid = uuid.UUID(str(quiz_id))
        except ValueError as e:
            raise InvalidRequest("invalid quiz id") from e

        quiz = self.db.scalar(select(Quiz).where(Quiz.id == quiz_uuid, Quiz.creator_id == owner_id))
        if quiz is None:
            raise NotFound()
        return quiz

    def _new_link_id(self) -> str:
        while True:
            candidate = "".join(secrets.choice(_LINK_ALPHABET) for _ in range(LINK_ID_LENGTH))
            exists = self.db.scalar(select(Quiz.id).where(Quiz.shareable_link_id == candidate))
            if exists is None:
                return candidate

    def _replace_questions(self, quiz: Quiz, items: list[QuestionIn]) -> None:
        values = [validate_question(item, index=i) for i, item in enumerate(items, start=1)]

        keep = set(self.db.scalars(select(Question.id).where(Question.quiz_id == quiz.id)))
        self.db.execute(delete(Question).where(Question.quiz_id == quiz.id))
        seen: set[uuid.UUID] = set()
        for position, (item, v) in enumerate(zip(items, values)):
            self.db.add(Question(id=_question_id(item.id, keep=keep, seen=seen), quiz_id=quiz.id, position=position, **v))
        quiz.updated_at = utcnow()

    def _apply_theme(self, quiz: Quiz, theme: ThemeIn) -> None:
        for field in theme.model_fields_set:
            value = getattr(theme, field)
            if field in _THEME_TEXT_FIELDS:
                value = sanitize_optional(value)
            elif value is None:
                value = DEFAULT_THEME[field]
            setattr(quiz, field, value)

    def detail(self, quiz: Quiz) -> dict[str, Any]:
        data = quiz_base(quiz)
        data["questions"] = [question_full(q) for q in load_questions(self.db, quiz.id)]
        return data

    def list_quizzes(self, owner_id: str) -> list[dict[str, Any]]:
        quizzes = self.db.scalars(
            select(Quiz).where(Quiz.creator_id == owner_id).order_by(Quiz.updated_at.desc())
        ).all()
        if not quizzes:
            return []

        rows = self.db.scalars(
            select(Question).where(Question.quiz_id.in_([q.id for q in quizzes])).order_by(Question.position)
        ).all()
        by_quiz: dict[uuid.UUID, list[Question]] = {}
        for q in rows:
            by_quiz.setdefault(q.quiz_id, []).append(q)

        items = []
        for quiz in quizzes:
            data = quiz_base(quiz)
            data["questions"] = [question_public(q) for q in by_quiz.get(quiz.id, [])]
            items.append(data)
        return items

    def create_quiz(self, owner_id: str, body: QuizCreateRequest) -> dict[str, Any]:
        quiz = Quiz(
            creator_id=owner_id,
            title=sanitize_input(body.title or "") or "Untitled Quiz",
            description=sanitize_optional(body.description),
            subject=sanitize_optional(body.subject),
            start_date=as_utc(body.start_date),
            end_date=as_utc(body.end_date),
            time_limit=body.time_limit,
            max_attempts=body.max_attempts,
            shareable_link_id=self._new_link_id(),
            is_published=False,
            **DEFAULT_THEME,
        )
        _check_window(quiz)
        if body.theme is not None:
            self._apply_theme(quiz, body.theme)

        self.db.add(quiz)
        self.db.flush()
        self._replace_questions(quiz, body.questions)
        commit_or_raise(self.db, action="create quiz")
        self.db.refresh(quiz)

        logger.info("quiz created id=%s owner=%s link=%s", quiz.id, owner_id, quiz.shareable_link_id)
        return self.detail(quiz)

    def get_quiz(self, owner_id: str, quiz_id: str) -> dict[str, Any]:
        return self.detail(self._owned(owner_id, quiz_id))

    def update_quiz(self, owner_id: str, quiz_id: str, body: QuizUpdateRequest) -> dict[str, Any]:
        quiz = self._owned(owner_id, quiz_id)
        fields = body.model_fields_set

        if "title" in fields:
            quiz.title = sanitize_input(body.title or "") or "Untitled Quiz"
        if "description" in fields:
            quiz.description = sanitize_optional(body.description)
        if "subject" in fields:
            quiz.subject = sanitize_optional(body.subject)
        if "start_date" in fields:
            quiz.start_date = as_utc(body.start_date)
        if "end_date" in fields:
            quiz.end_date = as_utc(body.end_date)
        if "time_limit" in fields:
            quiz.time_limit = body.time_limit
        if "max_attempts" in fields:
            quiz.max_attempts = body.max_attempts
        if "theme" in fields and body.theme is not None:
            self._apply_theme(quiz, body.theme)
        if "is_published" in fields and body.is_published is not None:
            quiz.is_published = bool(body.is_published)
        _check_window(quiz)

        if "questions" in fields and body.questions is not None:
            self._replace_questions(quiz, body.questions)

        commit_or_raise(self.db, action="update quiz")
        self.db.refresh(quiz)
        return self.detail(quiz)

    def delete_quiz(self, owner_id: str, quiz_id: str) -> None:
        quiz = self._owned(owner_id, quiz_id)

        # Submissions never outlive their quiz.
        removed = self.db.execute(delete(Submission).where(Submission.quiz_id == quiz.id)).rowcount
        self.db.execute(delete(Question).where(Question.quiz_id == quiz.id))
        self.db.delete(quiz)
        commit_or_raise(self.db, action="delete quiz")

        logger.info("quiz deleted id=%s owner=%s submissions_removed=%s", quiz_id, owner_id, removed)

    def list_submissions(self, owner_id: str, quiz_id: str) -> dict[str, Any]:
        quiz = self._owned(owner_id, quiz_id)
        rows = self.db.scalars(
            select(Submission).where(Submission.quiz_id == quiz.id).order_by(Submission.completed_at.desc())
        ).all()
        return {
            "submissions": [submission_item(s) for s in rows],
            "quiz": {
                "title": quiz.title,
                "questions": [question_full(q) for q in load_questions(self.db, quiz.id)],
            },
        }

    def delete_submissions(self, owner_id: str, quiz_id: str) -> int:
        quiz = self._owned(owner_id, quiz_id)
        removed = self.db.execute(delete(Submission).where(Submission.quiz_id == quiz.id)).rowcount
        commit_or_raise(self.db, action="delete submissions")

        logger.info("submissions deleted quiz=%s owner=%s count=%s", quiz.id, owner_id, removed)
        return int(removed or 0)

    def dashboard_stats(self, owner_id: str) -> dict[str, Any]:
        quizzes = self.db.execute(select(Quiz.id, Quiz.title).where(Quiz.creator_id == owner_id)).all()
        titles = {qid: title for qid, title in quizzes}

        total_submissions = 0
        average_score = 0.0
        recent: list[dict[str, Any]] = []
        if titles:
            total_submissions = int(
                self.db.scalar(select(func.count(Submission.id)).where(Submission.quiz_id.in_(list(titles)))) or 0
            )
            if total_submissions > 0:
                pairs = self.db.execute(
                    select(Submission.score, Submission.total_points).where(Submission.quiz_id.in_(list(titles)))
                ).all()
                total_pct = sum((score / total) * 100 if total > 0 else 0 for score, total in pairs)
                average_score = total_pct / total_submissions

            rows = self.db.scalars(
                select(Submission)
                .where(Submission.quiz_id.in_(list(titles)))
                .order_by(Submission.completed_at.desc())
                .limit(10)
            ).all()
            recent = [
                {
                    "id": str(s.id),
                    "student_name": s.student_name,
                    "quiz_title": titles.get(s.quiz_id) or "Unknown Quiz",
                    "score": s.score,
                    "total_points": s.total_points,
                    "completed_at": isoformat(s.completed_at),
                }
                for s in rows
            ]

        return {
            "total_quizzes": len(titles),
            "total_submissions": total_submissions,
            "average_score": average_score,
            "recent_submissions": recent,
        }


def submission_item(s: Submission) -> dict[str, Any]:
    return {
        "id": str(s.id),
        "quiz_id": str(s.quiz_id),
        "student_name": s.student_name,
        "student_identifier": s.student_identifier,
        "answers": dict(s.answers or {}),
        "score": s.score,
        "total_points": s.total_points,
        "percentage": percentage(s.score, s.total_points),
        "completed_at": isoformat(s.completed_at),
        "time_taken": s.time_taken,
        "over_time_limit": bool(s.over_time_limit),
        "ip_hash": s.ip_hash,
    }
