from __future__ import annotations

from typing import Any, Optional

from app.repositories.data_store import DataStore


class UserRepository:
    """Credential store. Lookups are case-exact and return detached copies."""

    def __init__(self, store: DataStore) -> None:
        self.store = store

    def find_by_id(self, user_id: str) -> Optional[dict[str, Any]]:
        with self.store.lock:
            row = self.store.users.get(user_id)
            return dict(row) if row else None

    def find_by_username(self, username: str) -> Optional[dict[str, Any]]:
        return self._find_one("username", username)

    def find_by_email(self, email: str) -> Optional[dict[str, Any]]:
        return self._find_one("email", email)

    def find_by_reset_token_hash(self, token_hash: str) -> Optional[dict[str, Any]]:
        return self._find_one("reset_token_hash", token_hash)

    def find_by_employee_id(self, employee_id: str) -> list[dict[str, Any]]:
        with self.store.lock:
            return [dict(u) for u in self.store.users.values() if u.get("employee_id") == employee_id]

    def list(self) -> list[dict[str, Any]]:
        with self.store.lock:
            return [dict(u) for u in self.store.users.values()]

    def save(self, user: dict[str, Any]) -> dict[str, Any]:
        row = dict(user)
        row["roles"] = list(row.get("roles", []))
        with self.store.lock:
            self.store.users[row["user_id"]] = row
        return dict(row)

    def _find_one(self, key: str, value: Any) -> Optional[dict[str, Any]]:
        if value is None:
            return None
        with self.store.lock:
            row = next((u for u in self.store.users.values() if u.get(key) == value), None)
            return dict(row) if row else None
