from __future__ import annotations

from threading import RLock
from typing import Any


class DataStore:
    """Simple in-memory repository for demo-scale HR state.

    ``lock`` is re-entrant; holding it across a read-modify-write gives the
    row-level atomicity the services rely on.
    """

    def __init__(self) -> None:
        self.lock = RLock()
        self.users: dict[str, dict[str, Any]] = {}
        self.roles: dict[str, dict[str, Any]] = {}
        self.employees: dict[str, dict[str, Any]] = {}
        self.leave_requests: dict[str, dict[str, Any]] = {}
