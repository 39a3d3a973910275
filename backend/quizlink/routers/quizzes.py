from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from quizlink.core.config import settings
from quizlink.core.rate_limit import rate_limit
from quizlink.core.security import Teacher, get_current_teacher
from quizlink.db.session import get_db
from quizlink.schemas.common import OkResponse
from quizlink.schemas.quiz import QuizCreateRequest, QuizDetail, QuizSummary, QuizUpdateRequest
from quizlink.schemas.submission import SubmissionListResponse
from quizlink.services.quizzes import QuizService

router = APIRouter(prefix="/quizzes", tags=["quizzes"])


def _limit():
    return rate_limit(key_prefix="teacher", limit=settings.teacher_rate_limit_per_minute, window_seconds=60)


@router.get("", response_model=list[QuizSummary])
def list_quizzes(
    db: Session = Depends(get_db),
    teacher: Teacher = Depends(get_current_teacher),
    _: object = _limit(),
):
    return QuizService(db).list_quizzes(teacher.id)


@router.post("", response_model=QuizDetail, status_code=201)
def create_quiz(
    body: QuizCreateRequest,
    db: Session = Depends(get_db),
    teacher: Teacher = Depends(get_current_teacher),
    _: object = _limit(),
):
    return QuizService(db).create_quiz(teacher.id, body)


@router.get("/{quiz_id}", response_model=QuizDetail)
def get_quiz(
    quiz_id: str,
    db: Session = Depends(get_db),
    teacher: Teacher = Depends(get_current_teacher),
    _: object = _limit(),
):
    return QuizService(db).get_quiz(teacher.id, quiz_id)


@router.put("/{quiz_id}", response_model=QuizDetail)
def update_quiz(
    quiz_id: str,
    body: QuizUpdateRequest,
    db: Session = Depends(get_db),
    teacher: Teacher = Depends(get_current_teacher),
    _: object = _limit(),
):
    return QuizService(db).update_quiz(teacher.id, quiz_id, body)


@router.delete("/{quiz_id}", response_model=OkResponse)
def delete_quiz(
    quiz_id: str,
    db: Session = Depends(get_db),
    teacher: Teacher = Depends(get_current_teacher),
    _: object = _limit(),
):
    QuizService(db).delete_quiz(teacher.id, quiz_id)
    return {"ok": True}


@router.get("/{quiz_id}/submissions", response_model=SubmissionListResponse)
def list_submissions(
    quiz_id: str,
    db: Session = Depends(get_db),
    teacher: Teacher = Depends(get_current_teacher),
    _: object = _limit(),
):
    return QuizService(db).list_submissions(teacher.id, quiz_id)


@router.delete("/{quiz_id}/submissions", response_model=OkResponse)
def delete_submissions(
    quiz_id: str,
    db: Session = Depends(get_db),
    teacher: Teacher = Depends(get_current_teacher),
    _: object = _limit(),
):
    QuizService(db).delete_submissions(teacher.id, quiz_id)
    return {"ok": True}
