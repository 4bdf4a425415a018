from datetime import date, datetime
import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.core.rbac import Role


EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$")


def is_valid_email(value: str | None) -> bool:
    return bool(value) and EMAIL_PATTERN.match(value) is not None


class LoginRequest(BaseModel):
    identifier: str = Field(min_length=1, max_length=150)
    password: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    identifier: str = Field(min_length=1, max_length=150)
    password: str = Field(min_length=1)
    email: Optional[str] = None
    roles: Optional[list[str]] = None

    # optional employee record created alongside the account
    name: Optional[str] = Field(default=None, max_length=200)
    employee_number: Optional[str] = Field(default=None, max_length=50)
    department: Optional[str] = Field(default=None, max_length=100)
    position: Optional[str] = Field(default=None, max_length=100)
    contact_info: Optional[str] = Field(default=None, max_length=200)
    start_date: Optional[date] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not is_valid_email(value):
            raise ValueError("email is not a valid address")
        return value

    def wants_employee(self) -> bool:
        return bool(self.name and self.employee_number)


class ForgotPasswordRequest(BaseModel):
    email: str = Field(max_length=254)


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    new_password: str


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str


class ProfileUpdateRequest(BaseModel):
    # empty string clears the address
    email: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: Optional[str]) -> Optional[str]:
        if value and not is_valid_email(value):
            raise ValueError("email is not a valid address")
        return value


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    username: str
    roles: list[Role]
    primary_role: Optional[Role] = None
    employee_id: Optional[str] = None
    employee_number: Optional[str] = None


class UserPublic(BaseModel):
    user_id: str
    username: str
    email: Optional[str] = None
    roles: list[Role] = Field(default_factory=list)
    primary_role: Optional[Role] = None
    employee_id: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
