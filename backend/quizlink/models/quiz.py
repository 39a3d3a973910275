import enum
import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from quizlink.db.base import Base
from quizlink.services.grading import QuestionKind


class BackgroundStyle(str, enum.Enum):
    solid = "solid"
    gradient = "gradient"
    pattern = "pattern"


class Quiz(Base):
    __tablename__ = "quizzes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    creator_id: Mapped[str] = mapped_column(String(200), index=True)

    title: Mapped[str] = mapped_column(String(300))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    subject: Mapped[str | None] = mapped_column(String(300), nullable=True)

    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    time_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    max_attempts: Mapped[int | None] = mapped_column(Integer, nullable=True)

    primary_color: Mapped[str] = mapped_column(String(32), default="#14b8a6")
    accent_color: Mapped[str] = mapped_column(String(32), default="#06b6d4")
    font_family: Mapped[str] = mapped_column(String(100), default="Inter")
    background_style: Mapped[BackgroundStyle] = mapped_column(Enum(BackgroundStyle), default=BackgroundStyle.gradient)
    custom_welcome_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    custom_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    custom_thank_you_text: Mapped[str | None] = mapped_column(Text, nullable=True)

    shareable_link_id: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    is_published: Mapped[bool] = mapped_column(Boolean, default=False, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)


class Question(Base):
    __tablename__ = "questions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    quiz_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("quizzes.id", ondelete="CASCADE"), index=True)
    position: Mapped[int] = mapped_column(Integer, default=0)

    kind: Mapped[QuestionKind] = mapped_column(
        Enum(QuestionKind, values_callable=lambda e: [m.value for m in e], name="questionkind"),
        index=True,
    )
    text: Mapped[str] = mapped_column(Text, default="")
    options: Mapped[list] = mapped_column(JSON, default=list)
    # A string, or a list of strings for multi-choice.
    answer_key: Mapped[object] = mapped_column(JSON)
    points: Mapped[int] = mapped_column(Integer, default=1)

    explanation: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)
