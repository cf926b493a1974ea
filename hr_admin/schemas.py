"""Pydantic models for request/response validation.

Bodies use camelCase keys on the wire; snake_case keys are accepted on input.
"""

from datetime import UTC, date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from hr_admin.models import EmployeeStatus, Role


class CamelModel(BaseModel):
    """Base for bodies exchanged with the frontend."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def of(cls, entity: BaseModel):
        return cls.model_validate(entity.model_dump())


# --- Auth Models ---

class LoginRequest(BaseModel):
    """Credentials for a login attempt."""
    username: str = Field(..., examples=["admin"])
    password: str = Field(..., examples=["admin123"])


class RegisterRequest(BaseModel):
    """Schema for registering an account."""
    username: str = Field(..., min_length=1, max_length=100, examples=["hr_alice"])
    password: str = Field(..., min_length=1, examples=["s3cret!"])
    email: EmailStr = Field(..., examples=["alice@techcorp.com"])
    role: Role = Field(..., examples=["hr"])


class UserSummary(BaseModel):
    id: int
    username: str
    email: str
    role: Role


class TokenResponse(BaseModel):
    """Issued access token and the account it belongs to."""
    access_token: str
    token_type: str = "bearer"
    user: UserSummary


class PrincipalResponse(CamelModel):
    """Identity carried by the presented token."""
    user_id: int
    username: str
    role: Role


# --- User Models ---

class UserUpdate(CamelModel):
    """Schema for updating a user (all fields optional)."""
    username: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    password: Optional[str] = None


class UserResponse(CamelModel):
    """Schema for user response. Never carries the password hash."""
    id: int
    username: str
    email: str
    role: Role
    created_at: datetime


# --- Department Models ---

class DepartmentCreate(CamelModel):
    """Schema for creating a department."""
    name: str = Field(..., max_length=100, examples=["Engineering"])
    description: str = Field(..., examples=["Product development and technical support"])
    budget: float = Field(..., examples=[500000])
    manager_id: Optional[int] = Field(None, examples=[1])


class DepartmentUpdate(CamelModel):
    """Schema for updating a department (all fields optional)."""
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    budget: Optional[float] = None
    manager_id: Optional[int] = None


class DepartmentResponse(CamelModel):
    """Schema for department response."""
    id: int
    name: str
    description: str
    budget: float
    manager_id: Optional[int] = None
    created_at: datetime


# --- Employee Models ---

class EmployeeBase(CamelModel):
    """Base employee fields."""
    employee_id: str = Field(..., max_length=50, examples=["EMP004"])
    name: str = Field(..., max_length=100, examples=["Chen Jing"])
    email: EmailStr = Field(..., examples=["chenjing@techcorp.com"])
    phone: str = Field("", max_length=50, examples=["13800138004"])
    position: str = Field(..., max_length=200, examples=["Backend Engineer"])
    department_id: int = Field(..., examples=[1])
    department_name: Optional[str] = Field(None, examples=["Engineering"])
    salary: float = Field(..., examples=[16000])
    hire_date: date = Field(..., examples=["2024-02-01"])
    status: EmployeeStatus = Field(default=EmployeeStatus.ACTIVE)
    address: str = ""
    emergency_contact: str = ""
    emergency_phone: str = ""


class EmployeeCreate(EmployeeBase):
    """Schema for creating an employee."""
    pass


class EmployeeUpdate(CamelModel):
    """Schema for updating an employee (all fields optional)."""
    employee_id: Optional[str] = Field(None, max_length=50)
    name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    position: Optional[str] = Field(None, max_length=200)
    department_id: Optional[int] = None
    department_name: Optional[str] = None
    salary: Optional[float] = None
    hire_date: Optional[date] = None
    status: Optional[EmployeeStatus] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None


class EmployeeResponse(EmployeeBase):
    """Schema for employee response."""
    id: int
    email: str
    created_at: datetime
    updated_at: datetime


class StatisticsResponse(CamelModel):
    """Headcount by status and by department name."""
    total: int
    active: int
    inactive: int
    terminated: int
    counts_by_status: dict[str, int]
    counts_by_department_name: dict[str, int]


# --- Health Check ---

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str = "1.0.0"
    timestamp: datetime


# --- Error Models ---

class ErrorResponse(BaseModel):
    """Standard error response."""
    detail: str
    status_code: int
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
