# File: todo_api/services/auth_service.py

"""
Authentication service.

Covers the credential lifecycle:
  - Registration (input validation, uniqueness, password hashing)
  - Login by username or email
  - Token issuance
  - Password change and account deletion

Every failure is raised as one of the errors in ``todo_api.core.exceptions``.
"""

import logging
from functools import lru_cache
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from todo_api.core.exceptions import ConflictError, UnauthorizedError, ValidationError
from todo_api.core.security import create_access_token, hash_password, verify_password
from todo_api.models.todo import Todo
from todo_api.models.user import User
from todo_api.schemas.user import AuthResponse

logger = logging.getLogger(__name__)

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6
# bcrypt only looks at the first 72 bytes
PASSWORD_MAX_BYTES = 72

# Same message for unknown account and wrong password
INVALID_CREDENTIALS = "Invalid username/email or password"


@lru_cache
def _dummy_hash() -> str:
    return hash_password("not-a-real-password")


def _clean_username(username: Optional[str]) -> str:
    username = (username or "").strip()
    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        raise ValidationError(
            f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters"
        )
    if "@" in username:
        # "@" is reserved for email logins
        raise ValidationError("Username must not contain '@'")
    return username


def _clean_email(email: Optional[str]) -> str:
    try:
        result = validate_email((email or "").strip(), check_deliverability=False)
    except EmailNotValidError:
        raise ValidationError("Email must be a valid email address")
    return result.normalized.lower()


def _check_password(password: Optional[str]) -> str:
    if not password or len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValidationError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
    return password


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        token=create_access_token(str(user.id)),
        username=user.username,
        email=user.email,
    )


def register(
    db: Session,
    *,
    username: str,
    email: str,
    password: str,
) -> AuthResponse:
    """
    Create an account and return a token for it.

    Raises ValidationError on bad input and ConflictError when the username
    or email is already taken.
    """
    username = _clean_username(username)
    email = _clean_email(email)
    password = _check_password(password)

    if db.scalar(select(User.id).where(User.username == username)) is not None:
        raise ConflictError("Username is already taken")
    if db.scalar(select(User.id).where(User.email == email)) is not None:
        raise ConflictError("Email is already registered")

    user = User(username=username, email=email, password=hash_password(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race against a concurrent registration
        db.rollback()
        raise ConflictError("Username or email is already registered")
    db.refresh(user)

    logger.info("Registered user %s (%s)", user.username, user.id)
    return _auth_response(user)


def authenticate_user(
    db: Session,
    *,
    username_or_email: str,
    password: str,
) -> Optional[User]:
    """
    Look up a user by username, then by email, and check the password.

    Returns None when either step fails.
    """
    identifier = (username_or_email or "").strip()
    user = None
    if identifier:
        user = db.scalar(select(User).where(User.username == identifier))
        if user is None:
            user = db.scalar(select(User).where(User.email == identifier.lower()))

    if user is None:
        # keep the response time close to the wrong-password case
        verify_password(password or "", _dummy_hash())
        return None
    if not verify_password(password or "", user.password):
        return None
    return user


def login(
    db: Session,
    *,
    username_or_email: str,
    password: str,
) -> AuthResponse:
    user = authenticate_user(db, username_or_email=username_or_email, password=password)
    if user is None:
        logger.info("Failed login for %r", username_or_email)
        raise UnauthorizedError(INVALID_CREDENTIALS)

    logger.info("User %s logged in", user.username)
    return _auth_response(user)


def change_password(
    db: Session,
    user: User,
    *,
    current_password: str,
    new_password: str,
) -> None:
    """
    Replace the user's password hash.

    Tokens issued before the change stay valid until they expire.
    """
    if not verify_password(current_password or "", user.password):
        raise UnauthorizedError("Current password is incorrect")
    user.password = hash_password(_check_password(new_password))
    db.commit()
    logger.info("Password changed for user %s", user.username)


def delete_account(db: Session, user: User) -> int:
    """
    Delete the user's todos, then the user, in one transaction.

    Returns the number of todos removed.
    """
    username = user.username
    try:
        result = db.execute(delete(Todo).where(Todo.user_id == user.id))
        db.delete(user)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Deleted user %s and %d todo(s)", username, result.rowcount)
    return result.rowcount
