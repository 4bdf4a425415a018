from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_container, get_current_user, require_roles
from app.core.access import Principal
from app.core.rbac import Role
from app.models.auth import ProfileUpdateRequest, UserPublic
from app.services.container import Container


router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/profile", response_model=UserPublic)
def get_profile(
    current_user: Principal = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> UserPublic:
    user = container.auth_service.users.find_by_username(current_user.username)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return container.auth_service.as_public(user)


@router.put("/profile", response_model=UserPublic)
def update_profile(
    payload: ProfileUpdateRequest,
    current_user: Principal = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> UserPublic:
    updated = container.auth_service.update_profile(current_user.username, payload.email)
    return container.auth_service.as_public(updated)


@router.get("", response_model=list[UserPublic])
def list_users(
    current_user: Principal = Depends(require_roles([Role.ADMIN])),
    container: Container = Depends(get_container),
) -> list[UserPublic]:
    _ = current_user
    return container.auth_service.list_users()
