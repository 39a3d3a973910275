"""create quizzes, questions and submissions

Revision ID: 0001
Revises: 
Create Date: 2026-10-18

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


background_style_enum = sa.Enum("solid", "gradient", "pattern", name="backgroundstyle")
question_kind_enum = sa.Enum(
    "single-choice",
    "multi-choice",
    "short-answer",
    "true-false",
    "fill-in-blank",
    "matching",
    name="questionkind",
)


def upgrade() -> None:
    op.create_table(
        "quizzes",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("creator_id", sa.String(length=200), nullable=False),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("subject", sa.String(length=300), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("time_limit", sa.Integer(), nullable=True),
        sa.Column("max_attempts", sa.Integer(), nullable=True),
        sa.Column("primary_color", sa.String(length=32), nullable=False, server_default="#14b8a6"),
        sa.Column("accent_color", sa.String(length=32), nullable=False, server_default="#06b6d4"),
        sa.Column("font_family", sa.String(length=100), nullable=False, server_default="Inter"),
        sa.Column("background_style", background_style_enum, nullable=False, server_default="gradient"),
        sa.Column("custom_welcome_text", sa.Text(), nullable=True),
        sa.Column("custom_instructions", sa.Text(), nullable=True),
        sa.Column("custom_thank_you_text", sa.Text(), nullable=True),
        sa.Column("shareable_link_id", sa.String(length=32), nullable=False),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_quizzes_creator_id", "quizzes", ["creator_id"], unique=False)
    op.create_index("ix_quizzes_shareable_link_id", "quizzes", ["shareable_link_id"], unique=True)
    op.create_index("ix_quizzes_is_published", "quizzes", ["is_published"], unique=False)

    op.create_table(
        "questions",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("quiz_id", sa.Uuid(), sa.ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("kind", question_kind_enum, nullable=False),
        sa.Column("text", sa.Text(), nullable=False, server_default=""),
        sa.Column("options", sa.JSON(), nullable=False),
        sa.Column("answer_key", sa.JSON(), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("explanation", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(length=2000), nullable=True),
    )
    op.create_index("ix_questions_quiz_id", "questions", ["quiz_id"], unique=False)
    op.create_index("ix_questions_kind", "questions", ["kind"], unique=False)

    op.create_table(
        "submissions",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("quiz_id", sa.Uuid(), sa.ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("student_name", sa.String(length=200), nullable=False),
        sa.Column("student_identifier", sa.String(length=100), nullable=True),
        sa.Column("answers", sa.JSON(), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("total_points", sa.Integer(), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("time_taken", sa.Integer(), nullable=True),
        sa.Column("over_time_limit", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("ip_hash", sa.String(length=64), nullable=True),
    )
    op.create_index("ix_submissions_quiz_id", "submissions", ["quiz_id"], unique=False)
    op.create_index("ix_submissions_quiz_completed", "submissions", ["quiz_id", "completed_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_submissions_quiz_completed", table_name="submissions")
    op.drop_index("ix_submissions_quiz_id", table_name="submissions")
    op.drop_table("submissions")

    op.drop_index("ix_questions_kind", table_name="questions")
    op.drop_index("ix_questions_quiz_id", table_name="questions")
    op.drop_table("questions")

    op.drop_index("ix_quizzes_is_published", table_name="quizzes")
    op.drop_index("ix_quizzes_shareable_link_id", table_name="quizzes")
    op.drop_index("ix_quizzes_creator_id", table_name="quizzes")
    op.drop_table("quizzes")

    question_kind_enum.drop(op.get_bind(), checkfirst=True)
    background_style_enum.drop(op.get_bind(), checkfirst=True)
