from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any
from uuid import uuid4

from app.core.access import Principal
from app.core.errors import Conflict, NotFound
from app.core.security import Clock, utcnow
from app.models.hr import EmployeePayload, EmployeeRecord
from app.repositories.data_store import DataStore
from app.repositories.employees import EmployeeRepository, LeaveRequestRepository
from app.repositories.users import UserRepository
from app.services.audit_service import EventLogger


logger = logging.getLogger(__name__)


class EmployeeService:
    def __init__(self, store: DataStore, event_logger: EventLogger, clock: Clock = utcnow) -> None:
        self.store = store
        self.clock = clock
        self.employees = EmployeeRepository(store)
        self.leave_requests = LeaveRequestRepository(store)
        self.users = UserRepository(store)
        self.event_logger = event_logger

    def _iso_now(self) -> str:
        return self.clock().isoformat()

    def list_employees(self) -> list[EmployeeRecord]:
        return [self._to_model(r) for r in self.employees.list()]

    def get_employee(self, employee_id: str) -> EmployeeRecord:
        row = self.employees.find_by_id(employee_id)
        if not row:
            raise NotFound("Employee not found")
        return self._to_model(row)

    def create_employee(self, actor: Principal, payload: EmployeePayload) -> EmployeeRecord:
        with self.store.lock:
            if self.employees.find_by_number(payload.employee_number):
                raise Conflict("Employee number already in use")
            row = self.employees.save(
                {
                    "id": f"emp-{uuid4().hex[:10]}",
                    **self._payload_fields(payload),
                    "created_at": self._iso_now(),
                }
            )

        self.event_logger.log_event(
            "employee_created",
            actor.username,
            {"employee_id": row["id"], "employee_number": row["employee_number"]},
        )
        return self._to_model(row)

    def update_employee(self, actor: Principal, employee_id: str, payload: EmployeePayload) -> EmployeeRecord:
        with self.store.lock:
            row = self.employees.find_by_id(employee_id)
            if not row:
                raise NotFound("Employee not found")
            clash = self.employees.find_by_number(payload.employee_number)
            if clash and clash["id"] != employee_id:
                raise Conflict("Employee number already in use")
            row.update(self._payload_fields(payload))
            row = self.employees.save(row)

        self.event_logger.log_event("employee_updated", actor.username, {"employee_id": employee_id})
        return self._to_model(row)

    def delete_employee(self, actor: Principal, employee_id: str) -> int:
        """Remove an employee, their leave requests, and any account links to them.

        Returns the number of leave requests removed with the employee.
        """
        with self.store.lock:
            if not self.employees.find_by_id(employee_id):
                raise NotFound("Employee not found")
            removed_leave = self.leave_requests.delete_for_employee(employee_id)
            for user in self.users.find_by_employee_id(employee_id):
                user["employee_id"] = None
                user["updated_at"] = self._iso_now()
                self.users.save(user)
            self.employees.delete(employee_id)

        logger.info("Employee %s deleted with %d leave request(s)", employee_id, removed_leave)
        self.event_logger.log_event(
            "employee_deleted",
            actor.username,
            {"employee_id": employee_id, "leave_requests_removed": removed_leave},
        )
        return removed_leave

    @staticmethod
    def _payload_fields(payload: EmployeePayload) -> dict[str, Any]:
        return {
            "name": payload.name,
            "employee_number": payload.employee_number,
            "department": payload.department,
            "position": payload.position,
            "contact_info": payload.contact_info,
            "start_date": payload.start_date.isoformat(),
        }

    @staticmethod
    def _to_model(row: dict[str, Any]) -> EmployeeRecord:
        start_date = row.get("start_date")
        return EmployeeRecord(
            id=row["id"],
            name=row["name"],
            employee_number=row["employee_number"],
            department=row.get("department"),
            position=row.get("position"),
            contact_info=row.get("contact_info"),
            start_date=date.fromisoformat(start_date) if start_date else None,
            created_at=datetime.fromisoformat(row["created_at"]),
        )
