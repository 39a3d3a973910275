"""Public quiz access and the grading pipeline behind a shareable link.

The read path (:func:`public_quiz_view`) and the write path
(:func:`submit_answers`) both go through :func:`resolve_public_quiz`, so a
quiz outside its availability window is refused the same way on both.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from quizlink.core.client import hash_ip
from quizlink.core.clock import as_utc, utcnow
from quizlink.core.errors import Expired, InvalidRequest, NotFound, NotYetAvailable
from quizlink.core.text import STUDENT_IDENTIFIER_MAX, STUDENT_NAME_MAX, sanitize_capped
from quizlink.db.session import commit_or_raise
from quizlink.models.quiz import Quiz
from quizlink.models.submission import Submission
from quizlink.schemas.submission import SubmissionRequest
from quizlink.services.grading import answer_key_to_wire, grade, grade_question
from quizlink.services.quizzes import gradable, load_questions, question_public, quiz_theme, thank_you_message

logger = logging.getLogger("quizlink.submissions")

# Upper bound of the submissions.time_taken INTEGER column.
TIME_TAKEN_MAX = 2**31 - 1


def ensure_available(quiz: Quiz, now: datetime | None = None) -> None:
    now = as_utc(now) or utcnow()
    start = as_utc(quiz.start_date)
    end = as_utc(quiz.end_date)
    if start is not None and start > now:
        raise NotYetAvailable()
    if end is not None and end < now:
        raise Expired()


def resolve_public_quiz(db: Session, link_id: str, now: datetime | None = None) -> Quiz:
    quiz = db.scalar(
        select(Quiz).where(Quiz.shareable_link_id == str(link_id or ""), Quiz.is_published == True)  # noqa: E712
    )
    if quiz is None:
        raise NotFound()
    ensure_available(quiz, now)
    return quiz


def public_quiz_view(db: Session, link_id: str, now: datetime | None = None) -> dict[str, Any]:
    quiz = resolve_public_quiz(db, link_id, now)
    return {
        "id": str(quiz.id),
        "title": quiz.title,
        "description": quiz.description,
        "subject": quiz.subject,
        "time_limit": quiz.time_limit,
        "theme": quiz_theme(quiz),
        # Answer keys and explanations stay server-side until the attempt is graded.
        "questions": [question_public(q) for q in load_questions(db, quiz.id)],
    }


def _validated(body: SubmissionRequest) -> tuple[str, str | None, Mapping[str, Any], int | None]:
    name = body.student_name
    if not isinstance(name, str) or not name.strip():
        raise InvalidRequest("student name is required")

    answers = body.answers
    if not isinstance(answers, Mapping):
        raise InvalidRequest("answers are required")

    identifier = body.student_identifier
    if identifier is not None and not isinstance(identifier, str):
        raise InvalidRequest("student identifier must be a string")

    time_taken = body.time_taken
    if time_taken is not None:
        if isinstance(time_taken, bool) or not isinstance(time_taken, (int, float)):
            raise InvalidRequest("time taken must be a non-negative number of seconds")
        if isinstance(time_taken, float) and not math.isfinite(time_taken):
            raise InvalidRequest("time taken must be a finite number of seconds")
        if not 0 <= time_taken <= TIME_TAKEN_MAX:
            raise InvalidRequest("time taken must be a non-negative number of seconds")
        time_taken = int(time_taken)

    return name, identifier, answers, time_taken


def submit_answers(
    db: Session,
    link_id: str,
    body: SubmissionRequest,
    *,
    client_ip: str,
    now: datetime | None = None,
) -> dict[str, Any]:
    quiz = resolve_public_quiz(db, link_id, now)
    name, identifier, answers, time_taken = _validated(body)

    questions = load_questions(db, quiz.id)
    gradables = [gradable(q) for q in questions]
    result = grade(gradables, answers)

    student_name = sanitize_capped(name, STUDENT_NAME_MAX)
    student_identifier = sanitize_capped(identifier, STUDENT_IDENTIFIER_MAX) if identifier else None

    # The time limit is a client-side countdown; late attempts are kept and flagged.
    over_time_limit = bool(quiz.time_limit and time_taken is not None and time_taken > quiz.time_limit * 60)

    submission = Submission(
        quiz_id=quiz.id,
        student_name=student_name,
        student_identifier=student_identifier or None,
        answers=dict(answers),
        score=result.score,
        total_points=result.total_points,
        completed_at=utcnow(),
        time_taken=time_taken,
        over_time_limit=over_time_limit,
        ip_hash=hash_ip(client_ip),
    )
    db.add(submission)
    commit_or_raise(db, action="submit quiz")

    logger.info(
        "submission stored id=%s quiz=%s score=%s/%s over_time_limit=%s",
        submission.id,
        quiz.id,
        result.score,
        result.total_points,
        over_time_limit,
    )

    items = []
    for q, g in zip(questions, gradables):
        submitted = answers.get(g.id)
        items.append(
            {
                "id": g.id,
                "text": q.text,
                "kind": g.kind.value,
                "correct_answer": answer_key_to_wire(g.answer_key),
                "user_answer": submitted,
                "is_correct": grade_question(g, submitted).is_correct,
                "points": g.points,
                "explanation": q.explanation,
            }
        )

    return {
        "submission_id": str(submission.id),
        "score": result.score,
        "total_points": result.total_points,
        "percentage": result.percentage,
        "thank_you_message": thank_you_message(quiz),
        "questions": items,
    }
