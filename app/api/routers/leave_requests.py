from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from app.api.deps import get_container, require_roles
from app.core.access import Principal
from app.core.rbac import Role
from app.models.hr import LeaveRequestCreate, LeaveRequestRecord, LeaveStatus, LeaveStatusUpdate
from app.services.container import Container


router = APIRouter(prefix="/leave-requests", tags=["Leave Requests"])


@router.post("", response_model=LeaveRequestRecord, status_code=status.HTTP_201_CREATED)
def create_leave_request(
    payload: LeaveRequestCreate,
    current_user: Principal = Depends(require_roles([Role.ADMIN, Role.MANAGER, Role.EMPLOYEE])),
    container: Container = Depends(get_container),
) -> LeaveRequestRecord:
    return container.leave_service.create_leave_request(current_user, payload)


@router.get("", response_model=list[LeaveRequestRecord])
def list_leave_requests(
    status_filter: Optional[LeaveStatus] = Query(default=None, alias="status"),
    current_user: Principal = Depends(require_roles([Role.ADMIN, Role.MANAGER])),
    container: Container = Depends(get_container),
) -> list[LeaveRequestRecord]:
    _ = current_user
    return container.leave_service.list_leave_requests(status_filter)


@router.get("/employee/{employee_id}", response_model=list[LeaveRequestRecord])
def list_leave_requests_for_employee(
    employee_id: str,
    current_user: Principal = Depends(require_roles([Role.ADMIN, Role.MANAGER, Role.EMPLOYEE])),
    container: Container = Depends(get_container),
) -> list[LeaveRequestRecord]:
    return container.leave_service.list_for_employee(current_user, employee_id)


@router.put("/{request_id}/status", response_model=LeaveRequestRecord)
def update_leave_request_status(
    request_id: str,
    payload: LeaveStatusUpdate,
    current_user: Principal = Depends(require_roles([Role.ADMIN, Role.MANAGER])),
    container: Container = Depends(get_container),
) -> LeaveRequestRecord:
    return container.leave_service.update_status(current_user, request_id, payload.status)


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def withdraw_leave_request(
    request_id: str,
    current_user: Principal = Depends(require_roles([Role.ADMIN, Role.MANAGER, Role.EMPLOYEE])),
    container: Container = Depends(get_container),
) -> Response:
    container.leave_service.delete_pending(current_user, request_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
