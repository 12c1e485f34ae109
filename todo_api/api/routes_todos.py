# File: todo_api/api/routes_todos.py

"""
Todo endpoints. Every route requires a bearer token and only ever sees the
caller's own todos.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from todo_api.api.deps import get_current_user, get_db
from todo_api.models.user import User
from todo_api.schemas.error import ErrorResponse
from todo_api.schemas.todo import TodoCreate, TodoPage, TodoRead, TodoUpdate
from todo_api.services import todo_service

router = APIRouter(responses={401: {"model": ErrorResponse}})

NOT_FOUND_RESPONSE = {404: {"model": ErrorResponse}}


@router.get("", response_model=TodoPage, summary="List todos (paged)")
def list_todos(
    page: int = Query(0, ge=0),
    size: int = Query(todo_service.DEFAULT_PAGE_SIZE, ge=1, le=todo_service.MAX_PAGE_SIZE),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_dir: str = Query("desc", alias="sortDir"),
    completed: Optional[bool] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = todo_service.list_todos(
        db,
        owner_id=current_user.id,
        page=page,
        size=size,
        sort_by=sort_by,
        sort_dir=sort_dir,
        completed=completed,
    )
    return TodoPage(
        content=[TodoRead.model_validate(t) for t in result.items],
        page=result.page,
        size=result.size,
        total_elements=result.total,
        total_pages=result.total_pages,
        first=result.first,
        last=result.last,
    )


@router.get("/{todo_id}", response_model=TodoRead, responses=NOT_FOUND_RESPONSE)
def get_todo(
    todo_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return todo_service.get_todo(db, owner_id=current_user.id, todo_id=todo_id)


@router.post(
    "",
    response_model=TodoRead,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
def create_todo(
    payload: TodoCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return todo_service.create_todo(
        db,
        owner_id=current_user.id,
        title=payload.title,
        description=payload.description,
        priority=payload.priority,
        due_date=payload.due_date,
    )


@router.put("/{todo_id}", response_model=TodoRead, responses=NOT_FOUND_RESPONSE)
def update_todo(
    todo_id: str,
    payload: TodoUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return todo_service.update_todo(
        db,
        owner_id=current_user.id,
        todo_id=todo_id,
        title=payload.title,
        description=payload.description,
        priority=payload.priority,
        due_date=payload.due_date,
        completed=payload.completed,
    )


@router.delete(
    "/{todo_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=NOT_FOUND_RESPONSE,
)
def delete_todo(
    todo_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    todo_service.delete_todo(db, owner_id=current_user.id, todo_id=todo_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{todo_id}/toggle", response_model=TodoRead, responses=NOT_FOUND_RESPONSE)
def toggle_todo(
    todo_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return todo_service.toggle_todo(db, owner_id=current_user.id, todo_id=todo_id)
