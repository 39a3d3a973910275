from __future__ import annotations

import logging
from collections.abc import Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from quizlink.core.config import settings
from quizlink.core.errors import StorageFailure


logger = logging.getLogger("quizlink.db")

engine = create_engine(settings.database_url, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_raise(db: Session, *, action: str) -> None:
    """Commit the unit of work or roll it back and raise StorageFailure."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("commit failed: %s", action)
        raise StorageFailure(f"failed to {action}") from e
