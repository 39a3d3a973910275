from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from quizlink.core.config import settings


# Tokens are minted by the identity provider; this service only verifies them.
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Teacher:
    id: str


def create_access_token(subject: str, *, minutes: int | None = None) -> str:
    now = datetime.now(timezone.utc)
    ttl = int(minutes if minutes is not None else settings.jwt_access_token_minutes)
    payload = {
        "sub": str(subject),
        "iss": str(settings.jwt_issuer),
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=ttl)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def get_current_teacher(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Teacher:
    token = credentials.credentials if credentials is not None else None
    if not token:
        raise HTTPException(status_code=401, detail="not authenticated")

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            issuer=str(settings.jwt_issuer),
        )
    except JWTError as e:
        raise HTTPException(status_code=401, detail="invalid token") from e

    subject = str(payload.get("sub") or "").strip()
    if not subject:
        raise HTTPException(status_code=401, detail="invalid token")

    request.state.user_id = subject
    return Teacher(id=subject)
