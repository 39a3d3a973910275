import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from quizlink.db.base import Base


class Submission(Base):
    """One student's completed attempt. Rows are written once and never updated."""

    __tablename__ = "submissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    quiz_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("quizzes.id", ondelete="CASCADE"), index=True)

    student_name: Mapped[str] = mapped_column(String(200))
    student_identifier: Mapped[str | None] = mapped_column(String(100), nullable=True)

    answers: Mapped[dict] = mapped_column(JSON, default=dict)
    score: Mapped[int] = mapped_column(Integer)
    total_points: Mapped[int] = mapped_column(Integer)

    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    time_taken: Mapped[int | None] = mapped_column(Integer, nullable=True)
    over_time_limit: Mapped[bool] = mapped_column(Boolean, default=False)

    ip_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)

    __table_args__ = (Index("ix_submissions_quiz_completed", "quiz_id", "completed_at"),)
