from quizlink.routers import health, public, quizzes, stats

__all__ = [
    "health",
    "public",
    "quizzes",
    "stats",
]
