from quizlink.models.quiz import Question, Quiz
from quizlink.models.submission import Submission

__all__ = [
    "Question",
    "Quiz",
    "Submission",
]
