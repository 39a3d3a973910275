from __future__ import annotations

import argparse
import os
import sys

# Allow running from the repository root or from backend/.
sys.path.append(os.getcwd())
sys.path.append(os.path.join(os.getcwd(), "backend"))

from sqlalchemy import select

from quizlink.db.session import SessionLocal
from quizlink.models.quiz import Question, Quiz
from quizlink.services.grading import QuestionKind
from quizlink.services.quizzes import DEFAULT_THEME


SAMPLE_LINK_ID = "sample-math-quiz"

SAMPLE_QUESTIONS = [
    {
        "kind": QuestionKind.single_choice,
        "text": "What is 2 + 2?",
        "options": ["3", "4", "5", "6"],
        "answer_key": "4",
        "points": 1,
        "explanation": "2 + 2 equals 4",
    },
    {
        "kind": QuestionKind.single_choice,
        "text": "What is the square root of 16?",
        "options": ["2", "4", "8", "16"],
        "answer_key": "4",
        "points": 1,
        "explanation": "The square root of 16 is 4 because 4 × 4 = 16",
    },
    {
        "kind": QuestionKind.true_false,
        "text": "The sum of angles in a triangle is 180 degrees.",
        "options": ["True", "False"],
        "answer_key": "True",
        "points": 1,
        "explanation": "This is a fundamental property of triangles in Euclidean geometry.",
    },
    {
        "kind": QuestionKind.multi_choice,
        "text": "Which of these numbers are prime?",
        "options": ["2", "4", "7", "9"],
        "answer_key": ["2", "7"],
        "points": 2,
        "explanation": "4 and 9 have divisors other than 1 and themselves.",
    },
    {
        "kind": QuestionKind.short_answer,
        "text": "What is 100 divided by 5?",
        "options": [],
        "answer_key": "20",
        "points": 2,
        "explanation": "100 ÷ 5 = 20",
    },
]


def run(*, creator_id: str, link_id: str) -> None:
    db = SessionLocal()
    try:
        existing = db.scalar(select(Quiz).where(Quiz.shareable_link_id == link_id))
        if existing is not None:
            print(f"Sample quiz already exists: {existing.shareable_link_id}")
            return

        theme = dict(DEFAULT_THEME)
        theme["custom_welcome_text"] = "Welcome to this sample math quiz!"
        theme["custom_instructions"] = "Answer all questions to the best of your ability. Good luck!"

        quiz = Quiz(
            creator_id=creator_id,
            title="Sample Math Quiz",
            description="A sample quiz to try out QuizLink",
            subject="Mathematics",
            time_limit=10,
            shareable_link_id=link_id,
            is_published=True,
            **theme,
        )
        db.add(quiz)
        db.flush()

        for position, q in enumerate(SAMPLE_QUESTIONS):
            db.add(Question(quiz_id=quiz.id, position=position, **q))

        db.commit()
        print(f"OK: created sample quiz {quiz.id} at /public/quiz/{link_id}")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def main() -> None:
    p = argparse.ArgumentParser(description="Seed a published sample quiz")
    p.add_argument("--creator-id", default="sample-teacher-001", help="Owner identity (token subject)")
    p.add_argument("--link-id", default=SAMPLE_LINK_ID, help="Shareable link id")
    args = p.parse_args()

    run(creator_id=str(args.creator_id), link_id=str(args.link_id))


if __name__ == "__main__":
    main()
