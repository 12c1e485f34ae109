# File: todo_api/api/routes_auth.py

"""
Auth API routes: register, login, and the current user's account.

Register and login are public; everything else goes through get_current_user.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from todo_api.api.deps import get_current_user, get_db
from todo_api.models.user import User
from todo_api.schemas.error import ErrorResponse
from todo_api.schemas.user import (
    AuthResponse,
    LoginRequest,
    PasswordChangeRequest,
    RegisterRequest,
    UserRead,
)
from todo_api.services import auth_service

router = APIRouter()


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    return auth_service.register(
        db,
        username=payload.username,
        email=payload.email,
        password=payload.password,
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Log in with username or email",
    responses={401: {"model": ErrorResponse}},
)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    return auth_service.login(
        db,
        username_or_email=payload.username_or_email,
        password=payload.password,
    )


@router.get("/me", response_model=UserRead, summary="Current user profile")
def read_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.put(
    "/password",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Change password",
)
def change_password(
    payload: PasswordChangeRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    auth_service.change_password(
        db,
        current_user,
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/me",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete account and all of its todos",
)
def delete_me(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    auth_service.delete_account(db, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
