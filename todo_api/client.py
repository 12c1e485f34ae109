# File: todo_api/client.py

"""
Python client for the Todo API.

The session (token plus the username/email returned at login) is kept in a
small JSON file so it survives restarts:

    store = SessionStore(Path("~/.todo_session.json").expanduser())
    client = TodoClient("http://localhost:8080", store=store)
    if not client.is_authenticated:
        client.login("alice", "secret1")
    client.create_todo({"title": "Buy milk", "priority": "HIGH"})

A 401 from any call clears the stored session and raises SessionExpired.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

SESSION_FILE_MODE = 0o600


class ApiError(Exception):
    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message
        super().__init__(f"{status}: {message}")


class SessionExpired(ApiError):
    """The server rejected the token; the local session has been cleared."""


class SessionStore:
    """JSON file holding ``{"token": ..., "user": {"username": ..., "email": ...}}``."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.token: Optional[str] = None
        self.user: Optional[dict] = None

    def load(self) -> bool:
        """Restore a saved session. Returns True if one was found."""
        if not self.path.exists():
            return False
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            token, user = data["token"], data["user"]
        except (json.JSONDecodeError, KeyError, TypeError):
            # corrupted file, drop it
            logger.warning("Discarding unreadable session file %s", self.path)
            self.clear()
            return False
        if not token or not isinstance(user, dict):
            self.clear()
            return False
        self.token, self.user = token, user
        return True

    def save(self, token: str, user: dict) -> None:
        self.token, self.user = token, user
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # owner-only, the file holds a live bearer token
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, SESSION_FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(json.dumps({"token": token, "user": user}))
        os.chmod(self.path, SESSION_FILE_MODE)

    def clear(self) -> None:
        self.token, self.user = None, None
        self.path.unlink(missing_ok=True)


class TodoClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        *,
        store: SessionStore,
        http: Optional[httpx.Client] = None,
        api_prefix: str = "/api",
    ):
        self.http = http or httpx.Client(base_url=base_url, timeout=10.0)
        self.api_prefix = api_prefix.rstrip("/")
        self.store = store
        self.store.load()

    @property
    def is_authenticated(self) -> bool:
        return self.store.token is not None

    @property
    def user(self) -> Optional[dict]:
        return self.store.user

    # -----------------------------
    # Transport
    # -----------------------------

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        headers = kwargs.pop("headers", {})
        if self.store.token:
            headers["Authorization"] = f"Bearer {self.store.token}"
        resp = self.http.request(method, f"{self.api_prefix}{path}", headers=headers, **kwargs)

        if resp.status_code == 401:
            had_session = self.is_authenticated
            self.store.clear()
            message = self._error_message(resp)
            if had_session:
                raise SessionExpired(401, message)
            raise ApiError(401, message)
        if resp.is_error:
            raise ApiError(resp.status_code, self._error_message(resp))
        return resp

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        try:
            return resp.json().get("message") or resp.reason_phrase
        except ValueError:
            return resp.text or resp.reason_phrase

    def _authenticate(self, path: str, body: dict) -> dict:
        data = self._request("POST", path, json=body).json()
        self.store.save(data["token"], {"username": data["username"], "email": data["email"]})
        return data

    # -----------------------------
    # Auth
    # -----------------------------

    def register(self, username: str, email: str, password: str) -> dict:
        return self._authenticate(
            "/auth/register",
            {"username": username, "email": email, "password": password},
        )

    def login(self, username_or_email: str, password: str) -> dict:
        return self._authenticate(
            "/auth/login",
            {"usernameOrEmail": username_or_email, "password": password},
        )

    def logout(self) -> None:
        # the token stays valid server-side until it expires
        self.store.clear()

    # -----------------------------
    # Todos
    # -----------------------------

    def list_todos(
        self,
        page: int = 0,
        size: int = 10,
        sort_by: str = "createdAt",
        sort_dir: str = "desc",
        completed: Optional[bool] = None,
    ) -> dict:
        params: dict[str, Any] = {"page": page, "size": size, "sortBy": sort_by, "sortDir": sort_dir}
        if completed is not None:
            params["completed"] = "true" if completed else "false"
        return self._request("GET", "/todos", params=params).json()

    def get_todo(self, todo_id: str) -> dict:
        return self._request("GET", f"/todos/{todo_id}").json()

    def create_todo(self, todo: dict) -> dict:
        return self._request("POST", "/todos", json=todo).json()

    def update_todo(self, todo_id: str, todo: dict) -> dict:
        return self._request("PUT", f"/todos/{todo_id}", json=todo).json()

    def delete_todo(self, todo_id: str) -> None:
        self._request("DELETE", f"/todos/{todo_id}")

    def toggle_todo(self, todo_id: str) -> dict:
        return self._request("PATCH", f"/todos/{todo_id}/toggle").json()
