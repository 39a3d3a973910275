from __future__ import annotations

from typing import Any

from quizlink.schemas.common import CamelModel
from quizlink.schemas.quiz import QuestionFull


class SubmissionRequest(CamelModel):
    # Shapes are validated by the submission pipeline, after the quiz is resolved.
    student_name: Any = None
    student_identifier: Any = None
    answers: Any = None
    time_taken: Any = None


class QuestionResult(CamelModel):
    id: str
    text: str
    kind: str
    correct_answer: str | list[str]
    user_answer: Any = None
    is_correct: bool
    points: int
    explanation: str | None = None


class SubmissionResult(CamelModel):
    submission_id: str
    score: int
    total_points: int
    percentage: int
    thank_you_message: str
    questions: list[QuestionResult]


class SubmissionItem(CamelModel):
    id: str
    quiz_id: str
    student_name: str
    student_identifier: str | None
    answers: dict[str, Any]
    score: int
    total_points: int
    percentage: int
    completed_at: str | None
    time_taken: int | None
    over_time_limit: bool
    ip_hash: str | None


class SubmissionQuizInfo(CamelModel):
    title: str
    questions: list[QuestionFull]


class SubmissionListResponse(CamelModel):
    submissions: list[SubmissionItem]
    quiz: SubmissionQuizInfo


class RecentSubmission(CamelModel):
    id: str
    student_name: str
    quiz_title: str
    score: int
    total_points: int
    completed_at: str | None


class DashboardStats(CamelModel):
    total_quizzes: int
    total_submissions: int
    average_score: float
    recent_submissions: list[RecentSubmission]
