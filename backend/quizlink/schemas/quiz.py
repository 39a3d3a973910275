from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field

from quizlink.models.quiz import BackgroundStyle
from quizlink.schemas.common import CamelModel


class QuestionIn(CamelModel):
    id: str | None = None
    kind: str = Field(validation_alias=AliasChoices("kind", "type"))
    text: str = ""
    options: list[str] = Field(default_factory=list)
    answer_key: Any = Field(default=None, validation_alias=AliasChoices("answerKey", "correctAnswer", "answer_key"))
    points: int = 1
    explanation: str | None = None
    image_url: str | None = None


class ThemeIn(CamelModel):
    primary_color: str | None = None
    accent_color: str | None = None
    font_family: str | None = None
    background_style: BackgroundStyle | None = None
    custom_welcome_text: str | None = None
    custom_instructions: str | None = None
    custom_thank_you_text: str | None = None


class QuizCreateRequest(CamelModel):
    title: str | None = None
    description: str | None = None
    subject: str | None = None
    questions: list[QuestionIn] = Field(default_factory=list)
    start_date: datetime | None = None
    end_date: datetime | None = None
    time_limit: int | None = Field(default=None, ge=1)
    max_attempts: int | None = Field(default=None, ge=1)
    theme: ThemeIn | None = None


class QuizUpdateRequest(CamelModel):
    """Partial update; only fields present in the request body are applied."""

    title: str | None = None
    description: str | None = None
    subject: str | None = None
    questions: list[QuestionIn] | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    time_limit: int | None = Field(default=None, ge=1)
    max_attempts: int | None = Field(default=None, ge=1)
    theme: ThemeIn | None = None
    is_published: bool | None = None


class Theme(CamelModel):
    primary_color: str
    accent_color: str
    font_family: str
    background_style: str
    custom_welcome_text: str | None = None
    custom_instructions: str | None = None
    custom_thank_you_text: str | None = None


class QuestionPublic(CamelModel):
    id: str
    kind: str
    text: str
    options: list[str]
    points: int
    image_url: str | None = None


class QuestionFull(QuestionPublic):
    answer_key: str | list[str]
    explanation: str | None = None


class QuizBase(CamelModel):
    id: str
    title: str
    description: str | None
    subject: str | None
    start_date: str | None
    end_date: str | None
    time_limit: int | None
    max_attempts: int | None
    theme: Theme
    shareable_link_id: str
    is_published: bool
    created_at: str | None
    updated_at: str | None


class QuizSummary(QuizBase):
    questions: list[QuestionPublic]


class QuizDetail(QuizBase):
    questions: list[QuestionFull]


class PublicQuiz(CamelModel):
    id: str
    title: str
    description: str | None
    subject: str | None
    time_limit: int | None
    theme: Theme
    questions: list[QuestionPublic]
