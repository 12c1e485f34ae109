# File: todo_api/schemas/user.py

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase JSON keys (``usernameOrEmail``, ``createdAt``)."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class RegisterRequest(CamelModel):
    username: str
    email: str
    password: str


class LoginRequest(CamelModel):
    username_or_email: str
    password: str


class AuthResponse(CamelModel):
    token: str
    username: str
    email: str


class UserRead(CamelModel):
    id: UUID
    username: str
    email: EmailStr
    created_at: datetime


class PasswordChangeRequest(CamelModel):
    current_password: str
    new_password: str
