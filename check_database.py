"""
Print a quick overview of the todo database.

Run this from the project root (DATABASE_URL picks the database):

    (.venv) python check_database.py

It lists the tables, the most recent users and todos, and a few counts.
Password hashes are never printed.
"""

from sqlalchemy import func, inspect, select
from sqlalchemy.orm import Session

from todo_api.db.session import SessionLocal, engine
from todo_api.models.todo import Todo
from todo_api.models.user import User

RECENT_TODOS_LIMIT = 10


def summarize(db: Session, recent_limit: int = RECENT_TODOS_LIMIT) -> dict:
    """
    Collect the overview as plain data so it can be printed or checked.
    """
    users = db.execute(
        select(User.id, User.username, User.email, User.created_at).order_by(User.created_at.desc())
    ).all()
    recent_todos = db.execute(
        select(Todo.id, Todo.title, Todo.completed, Todo.priority, Todo.due_date, Todo.created_at)
        .order_by(Todo.created_at.desc())
        .limit(recent_limit)
    ).all()
    by_completed = dict(
        db.execute(select(Todo.completed, func.count()).group_by(Todo.completed)).all()
    )
    with_owner = db.execute(
        select(Todo.title, Todo.completed, Todo.priority, User.username)
        .join(User, Todo.user_id == User.id)
        .order_by(Todo.created_at.desc())
    ).all()

    return {
        "tables": sorted(inspect(db.get_bind()).get_table_names()),
        "users": [row._asdict() for row in users],
        "recent_todos": [row._asdict() for row in recent_todos],
        "total_users": len(users),
        "total_todos": db.scalar(select(func.count()).select_from(Todo)) or 0,
        "completed": by_completed.get(True, 0),
        "pending": by_completed.get(False, 0),
        "todos_with_owner": [row._asdict() for row in with_owner],
    }


def _print_rows(title: str, rows: list[dict]) -> None:
    print(f"=== {title} ===")
    if not rows:
        print("(none)")
    for row in rows:
        print("  " + " | ".join(f"{k}={v}" for k, v in row.items()))
    print()


def main() -> None:
    db = SessionLocal()
    try:
        print("==========================================")
        print("  Todo Application - Database Check")
        print(f"  {engine.url.render_as_string(hide_password=True)}")
        print("==========================================")
        print()

        report = summarize(db)

        print("=== Tables in Database ===")
        print("  " + ", ".join(report["tables"]))
        print()
        _print_rows("Users", report["users"])
        _print_rows(f"Todos (latest {RECENT_TODOS_LIMIT})", report["recent_todos"])

        print("=== Statistics ===")
        print(f"  total_users={report['total_users']}")
        print(f"  total_todos={report['total_todos']}")
        print(f"  completed={report['completed']} pending={report['pending']}")
        print()

        _print_rows("Todos with User Info", report["todos_with_owner"])
        print("==========================================")
    finally:
        db.close()


if __name__ == "__main__":
    main()
