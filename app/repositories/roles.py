from __future__ import annotations

from app.core.rbac import Role
from app.repositories.data_store import DataStore


class RoleRepository:
    def __init__(self, store: DataStore) -> None:
        self.store = store

    def names(self) -> set[str]:
        with self.store.lock:
            return set(self.store.roles)

    def create_if_absent(self, role: Role) -> bool:
        """Insert ``role`` unless present. Returns True when a row was created."""
        with self.store.lock:
            if role.value in self.store.roles:
                return False
            self.store.roles[role.value] = {
                "role_id": len(self.store.roles) + 1,
                "name": role.value,
            }
            return True
