from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_container, get_current_user
from app.core.access import Principal
from app.models.auth import (
    AuthResponse,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    UserPublic,
)
from app.services.container import Container


router = APIRouter(prefix="/auth", tags=["Auth"])

RESET_REQUESTED_MESSAGE = "If an account exists for this address, a password reset link has been sent."


@router.get("/health", response_model=MessageResponse)
def health() -> MessageResponse:
    return MessageResponse(message="Auth service is running")


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, container: Container = Depends(get_container)) -> AuthResponse:
    result = container.auth_service.login(payload.identifier, payload.password)
    return container.auth_service.as_auth_response(result)


@router.post("/register", response_model=AuthResponse)
def register(payload: RegisterRequest, container: Container = Depends(get_container)) -> AuthResponse:
    result = container.auth_service.register(payload)
    return container.auth_service.as_auth_response(result)


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    payload: ForgotPasswordRequest,
    container: Container = Depends(get_container),
) -> MessageResponse:
    container.auth_service.initiate_reset(payload.email)
    return MessageResponse(message=RESET_REQUESTED_MESSAGE)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    payload: ResetPasswordRequest,
    container: Container = Depends(get_container),
) -> MessageResponse:
    if not container.auth_service.reset_password(payload.token, payload.new_password):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired reset token")
    return MessageResponse(message="Password changed successfully")


@router.put("/change-password", response_model=MessageResponse)
def change_password(
    payload: ChangePasswordRequest,
    current_user: Principal = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> MessageResponse:
    changed = container.auth_service.change_password(
        current_user.username, payload.current_password, payload.new_password
    )
    if not changed:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect or the new password is too short",
        )
    return MessageResponse(message="Password changed successfully")


@router.post("/logout", response_model=MessageResponse)
def logout(
    current_user: Principal = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> MessageResponse:
    container.auth_service.logout(current_user.token)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserPublic)
def read_me(
    current_user: Principal = Depends(get_current_user),
    container: Container = Depends(get_container),
) -> UserPublic:
    user = container.auth_service.users.find_by_id(current_user.user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return container.auth_service.as_public(user)
