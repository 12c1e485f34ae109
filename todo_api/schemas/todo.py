# File: todo_api/schemas/todo.py

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from todo_api.models.todo import Priority
from todo_api.schemas.user import CamelModel


# -----------------------------
# Request bodies
# -----------------------------

class TodoCreate(CamelModel):
    title: str
    description: Optional[str] = None
    priority: Optional[Priority] = None
    due_date: Optional[date] = None


class TodoUpdate(TodoCreate):
    completed: Optional[bool] = None


# -----------------------------
# Responses
# -----------------------------

class TodoRead(CamelModel):
    id: UUID
    title: str
    description: Optional[str] = None
    completed: bool
    priority: Priority
    due_date: Optional[date] = None
    created_at: datetime
    updated_at: datetime


class TodoPage(CamelModel):
    content: List[TodoRead]
    page: int
    size: int
    total_elements: int
    total_pages: int
    first: bool
    last: bool
