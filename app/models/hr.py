from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator


class LeaveStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class LeaveType(str, Enum):
    ANNUAL = "ANNUAL"
    SICK = "SICK"
    UNPAID = "UNPAID"
    OTHER = "OTHER"


class EmployeePayload(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    employee_number: str = Field(min_length=1, max_length=50)
    department: str = Field(min_length=1, max_length=100)
    position: str = Field(min_length=1, max_length=100)
    contact_info: str = Field(min_length=1, max_length=200)
    start_date: date

    @field_validator("start_date")
    @classmethod
    def validate_start_date(cls, value: date) -> date:
        if value > date.today():
            raise ValueError("start_date cannot be in the future")
        return value


class EmployeeRecord(BaseModel):
    id: str
    name: str
    employee_number: str
    department: str | None = None
    position: str | None = None
    contact_info: str | None = None
    start_date: date | None = None
    created_at: datetime


class LeaveRequestCreate(BaseModel):
    employee_id: str
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str = Field(min_length=1, max_length=500)

    @model_validator(mode="after")
    def validate_date_range(self) -> "LeaveRequestCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class LeaveStatusUpdate(BaseModel):
    status: LeaveStatus


class LeaveRequestRecord(BaseModel):
    request_id: str
    employee_id: str
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str
    status: LeaveStatus
    created_at: datetime
    updated_at: datetime
