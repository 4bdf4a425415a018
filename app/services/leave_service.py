from __future__ import annotations

from datetime import date, datetime
from typing import Any
from uuid import uuid4

from app.core.access import Principal
from app.core.errors import Conflict, Forbidden, NotFound
from app.core.rbac import Role
from app.core.security import Clock, utcnow
from app.models.hr import LeaveRequestCreate, LeaveRequestRecord, LeaveStatus
from app.repositories.data_store import DataStore
from app.repositories.employees import EmployeeRepository, LeaveRequestRepository
from app.services.audit_service import EventLogger


class LeaveService:
    def __init__(self, store: DataStore, event_logger: EventLogger, clock: Clock = utcnow) -> None:
        self.store = store
        self.clock = clock
        self.employees = EmployeeRepository(store)
        self.leave_requests = LeaveRequestRepository(store)
        self.event_logger = event_logger

    def _iso_now(self) -> str:
        return self.clock().isoformat()

    @staticmethod
    def _ensure_own_or_privileged(actor: Principal, employee_id: str) -> None:
        if actor.has_any(Role.ADMIN, Role.MANAGER):
            return
        if actor.employee_id != employee_id:
            raise Forbidden("Employees can only manage their own leave requests")

    def create_leave_request(self, actor: Principal, payload: LeaveRequestCreate) -> LeaveRequestRecord:
        if not self.employees.find_by_id(payload.employee_id):
            raise NotFound("Employee not found")
        self._ensure_own_or_privileged(actor, payload.employee_id)

        now = self._iso_now()
        row = self.leave_requests.save(
            {
                "request_id": f"leave-{uuid4().hex[:10]}",
                "employee_id": payload.employee_id,
                "leave_type": payload.leave_type.value,
                "start_date": payload.start_date.isoformat(),
                "end_date": payload.end_date.isoformat(),
                "reason": payload.reason,
                "status": LeaveStatus.PENDING.value,
                "created_at": now,
                "updated_at": now,
            }
        )

        self.event_logger.log_event(
            "leave_created",
            actor.username,
            {"request_id": row["request_id"], "employee_id": payload.employee_id},
        )
        return self._to_model(row)

    def list_leave_requests(self, status: LeaveStatus | None = None) -> list[LeaveRequestRecord]:
        rows = self.leave_requests.list()
        if status:
            rows = [r for r in rows if r["status"] == status.value]
        return [self._to_model(r) for r in rows]

    def list_for_employee(self, actor: Principal, employee_id: str) -> list[LeaveRequestRecord]:
        if not self.employees.find_by_id(employee_id):
            raise NotFound("Employee not found")
        self._ensure_own_or_privileged(actor, employee_id)
        return [self._to_model(r) for r in self.leave_requests.find_by_employee(employee_id)]

    def update_status(self, actor: Principal, request_id: str, status: LeaveStatus) -> LeaveRequestRecord:
        with self.store.lock:
            row = self.leave_requests.find_by_id(request_id)
            if not row:
                raise NotFound("Leave request not found")
            row["status"] = status.value
            row["updated_at"] = self._iso_now()
            row = self.leave_requests.save(row)

        self.event_logger.log_event(
            "leave_decision",
            actor.username,
            {"request_id": request_id, "decision": status.value},
        )
        return self._to_model(row)

    def delete_pending(self, actor: Principal, request_id: str) -> None:
        with self.store.lock:
            row = self.leave_requests.find_by_id(request_id)
            if not row:
                raise NotFound("Leave request not found")
            self._ensure_own_or_privileged(actor, row["employee_id"])
            if row["status"] != LeaveStatus.PENDING.value:
                raise Conflict("Only pending leave requests can be withdrawn")
            self.leave_requests.delete(request_id)

        self.event_logger.log_event("leave_withdrawn", actor.username, {"request_id": request_id})

    @staticmethod
    def _to_model(row: dict[str, Any]) -> LeaveRequestRecord:
        return LeaveRequestRecord(
            request_id=row["request_id"],
            employee_id=row["employee_id"],
            leave_type=row["leave_type"],
            start_date=date.fromisoformat(row["start_date"]),
            end_date=date.fromisoformat(row["end_date"]),
            reason=row["reason"],
            status=row["status"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
