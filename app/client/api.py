import itertools
import logging
import os
from datetime import datetime

import requests

from app.client.store import CacheStore
from app.projects.todo.core.preferences import DEFAULT_PREFERENCES
from app.projects.todo.core.visibility import VIEW_FRIENDS, build_task_views

# Configure logging
logger = logging.getLogger(__name__)

TODOS_KEY = "todos"
FRIENDS_KEY = "friends"


class ClientError(Exception):
    """A request failed. message is the server's error string when there is one."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class MeowTodoClient:
    """
    HTTP client for the MeowTODO API.

    Keeps the visible todo list in a TTL cache. Mutations are applied to the
    cache first, then replaced with the server's copy, or rolled back if the
    request fails.
    """

    def __init__(self, base_url=None, session=None, cache_ttl=60, store=None):
        self.base_url = (base_url or os.getenv("MEOWTODO_URL", "http://localhost:5000")).rstrip("/")
        self.session = session or requests.Session()
        self.store = store or CacheStore(ttl=cache_ttl)
        self.user = None
        self.preferences = dict(DEFAULT_PREFERENCES)
        self._temp_ids = itertools.count(-1, -1)

    def _request(self, method, endpoint, **kwargs):
        """Internal helper; returns the decoded JSON body or raises ClientError."""
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Error calling MeowTODO {method} {endpoint}: {str(e)}")
            raise ClientError(f"Network error: {e}")

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.ok:
            message = data.get("error") if isinstance(data, dict) else None
            logger.error(f"MeowTODO {method} {endpoint} failed with {response.status_code}: {message}")
            raise ClientError(message or f"Request failed ({response.status_code})", response.status_code)
        return data

    # --- Auth ---

    def sign_up(self, username, email, password):
        return self._request("POST", "auth/signup", json={"username": username, "email": email, "password": password})

    def sign_in(self, username, password):
        self.user = self._request("POST", "auth/signin", json={"identifier": username, "password": password})
        self.store.clear()
        return self.user

    def sign_in_demo(self):
        self.user = self._request("POST", "auth/demo")
        self.store.clear()
        return self.user

    def sign_out(self):
        result = self._request("POST", "auth/signout")
        self.user = None
        self.store.clear()
        return result

    # --- Todos ---

    def list_todos(self, refresh=False):
        """Visible todos (own and friends'), from cache while fresh."""
        if not refresh:
            cached = self.store.get(TODOS_KEY)
            if cached is not None:
                return cached
        todos = self._request("GET", "todos")
        self.store.set(TODOS_KEY, todos)
        return todos

    def _cached_todos(self):
        # Refetches once the cached list is past its TTL
        return self.list_todos()

    def add_todo(self, title, description=None, due_date=None):
        self._cached_todos()
        temp_id = next(self._temp_ids)
        now = datetime.utcnow().isoformat()
        placeholder = {
            "id": temp_id,
            "title": title,
            "description": description or "",
            "completed": False,
            "dueDate": due_date or None,
            "createdAt": now,
            "updatedAt": now,
            "user": {"id": self.user["id"], "username": self.user["username"]} if self.user else {},
        }
        with self.store.optimistic(TODOS_KEY, lambda todos: [placeholder] + (todos or [])) as update:
            created = self._request(
                "POST", "todos", json={"title": title, "description": description, "dueDate": due_date}
            )
            todos = self.store.peek(TODOS_KEY)
            update.confirm([created if t["id"] == temp_id else t for t in todos])
        return created

    def update_todo(self, todo_id, **fields):
        """Partial update; pass due_date=None to clear the due date."""
        if "due_date" in fields:
            fields["dueDate"] = fields.pop("due_date")
        self._cached_todos()

        def apply(todos):
            return [dict(t, **fields) if t["id"] == todo_id else t for t in (todos or [])]

        with self.store.optimistic(TODOS_KEY, apply) as update:
            updated = self._request("PATCH", f"todos/{todo_id}", json=fields)
            todos = self.store.peek(TODOS_KEY)
            update.confirm([updated if t["id"] == todo_id else t for t in todos])
        return updated

    def toggle_todo(self, todo_id, completed):
        return self.update_todo(todo_id, completed=completed)

    def delete_todo(self, todo_id):
        self._cached_todos()

        def apply(todos):
            return [t for t in (todos or []) if t["id"] != todo_id]

        with self.store.optimistic(TODOS_KEY, apply) as update:
            result = self._request("DELETE", f"todos/{todo_id}")
            update.confirm(self.store.peek(TODOS_KEY))
        return result

    def task_views(self, view=VIEW_FRIENDS):
        """My Tasks plus Friends' or Finished Tasks, computed from the cached todos."""
        if not self.user:
            raise ClientError("Not signed in")
        return build_task_views(
            self._cached_todos(),
            self.user["id"],
            sort_by_due_date=self.preferences["sortByDueDate"],
            hide_completed=self.preferences["hideCompletedUser"],
            view=view,
        )

    # --- Friends ---

    def list_friends(self, refresh=False):
        if not refresh:
            cached = self.store.get(FRIENDS_KEY)
            if cached is not None:
                return cached
        friends = self._request("GET", "friends")
        self.store.set(FRIENDS_KEY, friends)
        return friends

    def search_users(self, term=None):
        params = {"q": term} if term else None
        return self._request("GET", "users", params=params)

    def add_friend(self, username):
        result = self._request("POST", "friends", json={"username": username})
        # The visible todo set changes with the friend set
        self.store.invalidate(FRIENDS_KEY)
        self.store.invalidate(TODOS_KEY)
        return result

    def remove_friend(self, friend_id):
        result = self._request("DELETE", "friends", params={"friendId": friend_id})
        self.store.invalidate(FRIENDS_KEY)
        self.store.invalidate(TODOS_KEY)
        return result

    # --- Preferences ---

    def get_preferences(self):
        self.preferences = self._request("GET", "preferences")
        return self.preferences

    def set_preferences(self, **updates):
        """Persist the given flags (sortByDueDate, hideCompletedUser)."""
        previous = dict(self.preferences)
        self.preferences.update({k: v for k, v in updates.items() if k in DEFAULT_PREFERENCES})
        try:
            result = self._request("POST", "preferences", json=updates)
        except ClientError:
            self.preferences = previous
            raise
        self.preferences = result.get("preferences", self.preferences)
        return self.preferences
