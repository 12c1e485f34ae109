# File: todo_api/api/deps.py

import uuid
from collections.abc import Generator

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from todo_api.core.exceptions import UnauthorizedError
from todo_api.core.security import decode_access_token
from todo_api.db.session import SessionLocal
from todo_api.models.user import User

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that provides a SQLAlchemy session.

    Usage in route functions:
        db: Session = Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the ``Authorization: Bearer <token>`` header to a User.

    Missing header, bad signature, expired token and deleted user all raise
    the same UnauthorizedError.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()

    subject = decode_access_token(credentials.credentials)
    try:
        user_id = uuid.UUID(subject)
    except ValueError:
        raise UnauthorizedError()

    user = db.get(User, user_id)
    if user is None:
        raise UnauthorizedError()
    return user
