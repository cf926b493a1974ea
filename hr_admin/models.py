"""Domain entities held by the in-memory stores."""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Role(str, Enum):
    """User roles carried in access tokens."""
    ADMIN = "admin"
    HR = "hr"
    MANAGER = "manager"


class EmployeeStatus(str, Enum):
    """Employment status."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    TERMINATED = "terminated"


class Entity(BaseModel):
    """Base class for stored records.

    Records are immutable; stores replace them wholesale on update.
    """
    model_config = ConfigDict(frozen=True)

    id: int
    created_at: datetime


class User(Entity):
    """User account model."""
    username: str
    password_hash: str
    email: str
    role: Role


class Department(Entity):
    """Department model."""
    name: str
    description: str
    budget: float
    manager_id: Optional[int] = None


class Employee(Entity):
    """Employee model.

    ``department_id`` is a soft reference: it is never checked against the
    department store. ``department_name`` is a snapshot taken at write time.
    """
    employee_id: str
    name: str
    email: str
    phone: str = ""
    position: str
    department_id: int
    department_name: Optional[str] = None
    salary: float
    hire_date: date
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    address: str = ""
    emergency_contact: str = ""
    emergency_phone: str = ""
    updated_at: datetime


class PublicUser(BaseModel):
    """A user as seen outside the credential layer (no password hash)."""
    id: int
    username: str
    email: str
    role: Role
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "PublicUser":
        return cls.model_validate(user.model_dump(exclude={"password_hash"}))


class Principal(BaseModel):
    """Identity extracted from a verified access token."""
    model_config = ConfigDict(frozen=True)

    user_id: int
    username: str
    role: Role


class EmployeeStatistics(BaseModel):
    """Read-only aggregate over the employee collection."""
    total: int
    counts_by_status: dict[str, int]
    counts_by_department_name: dict[str, int]
