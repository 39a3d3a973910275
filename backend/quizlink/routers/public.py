from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from quizlink.core.client import client_ip
from quizlink.core.config import settings
from quizlink.core.rate_limit import rate_limit
from quizlink.db.session import get_db
from quizlink.schemas.quiz import PublicQuiz
from quizlink.schemas.submission import SubmissionRequest, SubmissionResult
from quizlink.services.submissions import public_quiz_view, submit_answers

router = APIRouter(prefix="/public/quiz", tags=["public"])


@router.get("/{link_id}", response_model=PublicQuiz)
def get_public_quiz(
    link_id: str,
    db: Session = Depends(get_db),
    _: object = rate_limit(key_prefix="public_quiz", limit=settings.public_rate_limit_per_minute, window_seconds=60),
):
    return public_quiz_view(db, link_id)


@router.post("/{link_id}", response_model=SubmissionResult)
def submit_public_quiz(
    link_id: str,
    body: SubmissionRequest,
    request: Request,
    db: Session = Depends(get_db),
    _: object = rate_limit(key_prefix="public_quiz", limit=settings.public_rate_limit_per_minute, window_seconds=60),
):
    return submit_answers(db, link_id, body, client_ip=client_ip(request))
