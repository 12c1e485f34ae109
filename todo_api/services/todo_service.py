# File: todo_api/services/todo_service.py

"""
Todo operations scoped to a single owner.

Every lookup filters on both the todo id and the owner id, so a todo that
belongs to somebody else is reported exactly like one that does not exist.
"""

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Union

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from todo_api.core.exceptions import NotFoundError, ValidationError
from todo_api.models.todo import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH, Priority, Todo
from todo_api.models.user import utcnow

logger = logging.getLogger(__name__)

TodoId = Union[uuid.UUID, str]

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
SORT_DIRECTIONS = ("asc", "desc")

# priority is stored as text, so sort on its rank instead of the value
PRIORITY_RANK = case(
    *[(Todo.priority == p, p.rank) for p in Priority],
    else_=0,
)

SORT_COLUMNS = {
    "createdAt": Todo.created_at,
    "dueDate": Todo.due_date,
    "priority": PRIORITY_RANK,
    "title": Todo.title,
}

NOT_FOUND = "Todo not found"


@dataclass(frozen=True)
class TodoPageResult:
    items: List[Todo]
    total: int
    page: int
    size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.size) if self.size else 0

    @property
    def first(self) -> bool:
        return self.page == 0

    @property
    def last(self) -> bool:
        return self.page >= self.total_pages - 1


# -----------------------------
# Validation helpers
# -----------------------------

def _clean_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationError("Title is required")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title must be at most {TITLE_MAX_LENGTH} characters")
    return title


def _check_description(description: Optional[str]) -> Optional[str]:
    if description is not None and len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters")
    return description


def _coerce_priority(priority: Union[Priority, str, None]) -> Priority:
    if priority is None:
        return Priority.MEDIUM
    try:
        return Priority(priority)
    except ValueError:
        raise ValidationError("Priority must be one of LOW, MEDIUM, HIGH")


def _parse_id(todo_id: TodoId) -> uuid.UUID:
    if isinstance(todo_id, uuid.UUID):
        return todo_id
    try:
        return uuid.UUID(str(todo_id))
    except ValueError:
        raise NotFoundError(NOT_FOUND)


def _get_owned(db: Session, owner_id: uuid.UUID, todo_id: TodoId, *, for_update: bool = False) -> Todo:
    stmt = select(Todo).where(Todo.id == _parse_id(todo_id), Todo.user_id == owner_id)
    if for_update:
        stmt = stmt.with_for_update()
    todo = db.scalar(stmt)
    if todo is None:
        raise NotFoundError(NOT_FOUND)
    return todo


# -----------------------------
# Operations
# -----------------------------

def create_todo(
    db: Session,
    *,
    owner_id: uuid.UUID,
    title: str,
    description: Optional[str] = None,
    priority: Union[Priority, str, None] = None,
    due_date: Optional[date] = None,
) -> Todo:
    now = utcnow()
    todo = Todo(
        title=_clean_title(title),
        description=_check_description(description),
        priority=_coerce_priority(priority),
        due_date=due_date,
        completed=False,
        created_at=now,
        updated_at=now,
        user_id=owner_id,
    )
    db.add(todo)
    db.commit()
    db.refresh(todo)
    logger.info("User %s created todo %s", owner_id, todo.id)
    return todo


def get_todo(db: Session, *, owner_id: uuid.UUID, todo_id: TodoId) -> Todo:
    return _get_owned(db, owner_id, todo_id)


def update_todo(
    db: Session,
    *,
    owner_id: uuid.UUID,
    todo_id: TodoId,
    title: str,
    description: Optional[str] = None,
    priority: Union[Priority, str, None] = None,
    due_date: Optional[date] = None,
    completed: Optional[bool] = None,
) -> Todo:
    """
    Replace the editable fields of a todo.

    ``completed`` is left alone when not given.
    """
    title = _clean_title(title)
    description = _check_description(description)
    priority = _coerce_priority(priority)

    todo = _get_owned(db, owner_id, todo_id, for_update=True)
    todo.title = title
    todo.description = description
    todo.priority = priority
    todo.due_date = due_date
    if completed is not None:
        todo.completed = completed
    todo.updated_at = utcnow()
    db.commit()
    db.refresh(todo)
    logger.info("User %s updated todo %s", owner_id, todo.id)
    return todo


def delete_todo(db: Session, *, owner_id: uuid.UUID, todo_id: TodoId) -> None:
    todo = _get_owned(db, owner_id, todo_id, for_update=True)
    db.delete(todo)
    db.commit()
    logger.info("User %s deleted todo %s", owner_id, todo_id)


def toggle_todo(db: Session, *, owner_id: uuid.UUID, todo_id: TodoId) -> Todo:
    todo = _get_owned(db, owner_id, todo_id, for_update=True)
    todo.completed = not todo.completed
    todo.updated_at = utcnow()
    db.commit()
    db.refresh(todo)
    logger.info("User %s toggled todo %s -> completed=%s", owner_id, todo.id, todo.completed)
    return todo


def list_todos(
    db: Session,
    *,
    owner_id: uuid.UUID,
    page: int = 0,
    size: int = DEFAULT_PAGE_SIZE,
    sort_by: str = "createdAt",
    sort_dir: str = "desc",
    completed: Optional[bool] = None,
) -> TodoPageResult:
    """
    Return one page of the owner's todos.

    The completed filter is applied first, then the sort, then the
    page window (``page`` is 0-indexed). Priority sorts HIGH > MEDIUM > LOW,
    todos without a due date sort last.
    """
    if page < 0:
        raise ValidationError("Page must not be negative")
    if not 1 <= size <= MAX_PAGE_SIZE:
        raise ValidationError(f"Size must be between 1 and {MAX_PAGE_SIZE}")
    if sort_by not in SORT_COLUMNS:
        raise ValidationError(f"sortBy must be one of {', '.join(SORT_COLUMNS)}")
    direction = (sort_dir or "").lower()
    if direction not in SORT_DIRECTIONS:
        raise ValidationError("sortDir must be asc or desc")

    filters = [Todo.user_id == owner_id]
    if completed is not None:
        filters.append(Todo.completed == completed)

    column = SORT_COLUMNS[sort_by]
    primary = column.asc() if direction == "asc" else column.desc()
    if sort_by == "dueDate":
        primary = primary.nulls_last()
    # stable ordering across pages
    order_by = [primary]
    if sort_by != "createdAt":
        order_by.append(Todo.created_at.desc())
    order_by.append(Todo.id.asc())

    total = db.scalar(select(func.count()).select_from(Todo).where(*filters)) or 0
    offset = page * size
    if offset >= total:
        # past the last page; also keeps huge offsets away from the driver
        return TodoPageResult(items=[], total=total, page=page, size=size)

    items = db.scalars(
        select(Todo).where(*filters).order_by(*order_by).offset(offset).limit(size)
    ).all()

    return TodoPageResult(items=list(items), total=total, page=page, size=size)
