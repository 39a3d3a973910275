from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from quizlink.core.config import settings
from quizlink.core.rate_limit import rate_limit
from quizlink.core.security import Teacher, get_current_teacher
from quizlink.db.session import get_db
from quizlink.schemas.submission import DashboardStats
from quizlink.services.quizzes import QuizService

router = APIRouter(tags=["stats"])


@router.get("/stats", response_model=DashboardStats)
def dashboard_stats(
    db: Session = Depends(get_db),
    teacher: Teacher = Depends(get_current_teacher),
    _: object = rate_limit(key_prefix="teacher", limit=settings.teacher_rate_limit_per_minute, window_seconds=60),
):
    return QuizService(db).dashboard_stats(teacher.id)
