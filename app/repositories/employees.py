from __future__ import annotations

from typing import Any, Optional

from app.repositories.data_store import DataStore


class EmployeeRepository:
    def __init__(self, store: DataStore) -> None:
        self.store = store

    def find_by_id(self, employee_id: str) -> Optional[dict[str, Any]]:
        with self.store.lock:
            row = self.store.employees.get(employee_id)
            return dict(row) if row else None

    def find_by_number(self, employee_number: str) -> Optional[dict[str, Any]]:
        with self.store.lock:
            row = next(
                (e for e in self.store.employees.values() if e["employee_number"] == employee_number),
                None,
            )
            return dict(row) if row else None

    def list(self) -> list[dict[str, Any]]:
        with self.store.lock:
            return [dict(e) for e in self.store.employees.values()]

    def save(self, employee: dict[str, Any]) -> dict[str, Any]:
        row = dict(employee)
        with self.store.lock:
            self.store.employees[row["id"]] = row
        return dict(row)

    def delete(self, employee_id: str) -> bool:
        with self.store.lock:
            return self.store.employees.pop(employee_id, None) is not None


class LeaveRequestRepository:
    def __init__(self, store: DataStore) -> None:
        self.store = store

    def find_by_id(self, request_id: str) -> Optional[dict[str, Any]]:
        with self.store.lock:
            row = self.store.leave_requests.get(request_id)
            return dict(row) if row else None

    def find_by_employee(self, employee_id: str) -> list[dict[str, Any]]:
        with self.store.lock:
            return [dict(r) for r in self.store.leave_requests.values() if r["employee_id"] == employee_id]

    def list(self) -> list[dict[str, Any]]:
        with self.store.lock:
            return [dict(r) for r in self.store.leave_requests.values()]

    def save(self, leave_request: dict[str, Any]) -> dict[str, Any]:
        row = dict(leave_request)
        with self.store.lock:
            self.store.leave_requests[row["request_id"]] = row
        return dict(row)

    def delete(self, request_id: str) -> bool:
        with self.store.lock:
            return self.store.leave_requests.pop(request_id, None) is not None

    def delete_for_employee(self, employee_id: str) -> int:
        with self.store.lock:
            doomed = [rid for rid, r in self.store.leave_requests.items() if r["employee_id"] == employee_id]
            for rid in doomed:
                del self.store.leave_requests[rid]
        return len(doomed)
