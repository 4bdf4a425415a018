from fastapi import APIRouter, Depends, Response, status

from app.api.deps import get_container, require_roles
from app.core.access import Principal
from app.core.rbac import Role
from app.models.hr import EmployeePayload, EmployeeRecord
from app.services.container import Container


router = APIRouter(prefix="/employees", tags=["Employees"])

ALL_ROLES = [Role.ADMIN, Role.MANAGER, Role.EMPLOYEE]


@router.get("", response_model=list[EmployeeRecord])
def list_employees(
    current_user: Principal = Depends(require_roles(ALL_ROLES)),
    container: Container = Depends(get_container),
) -> list[EmployeeRecord]:
    _ = current_user
    return container.employee_service.list_employees()


@router.get("/{employee_id}", response_model=EmployeeRecord)
def get_employee(
    employee_id: str,
    current_user: Principal = Depends(require_roles(ALL_ROLES)),
    container: Container = Depends(get_container),
) -> EmployeeRecord:
    _ = current_user
    return container.employee_service.get_employee(employee_id)


@router.post("", response_model=EmployeeRecord, status_code=status.HTTP_201_CREATED)
def create_employee(
    payload: EmployeePayload,
    current_user: Principal = Depends(require_roles([Role.ADMIN, Role.MANAGER])),
    container: Container = Depends(get_container),
) -> EmployeeRecord:
    return container.employee_service.create_employee(current_user, payload)


@router.put("/{employee_id}", response_model=EmployeeRecord)
def update_employee(
    employee_id: str,
    payload: EmployeePayload,
    current_user: Principal = Depends(require_roles([Role.ADMIN, Role.MANAGER])),
    container: Container = Depends(get_container),
) -> EmployeeRecord:
    return container.employee_service.update_employee(current_user, employee_id, payload)


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_employee(
    employee_id: str,
    current_user: Principal = Depends(require_roles([Role.ADMIN])),
    container: Container = Depends(get_container),
) -> Response:
    container.employee_service.delete_employee(current_user, employee_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
