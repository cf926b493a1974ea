"""Per-entity stores: departments, employees and users."""

import logging
from collections import Counter
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from hr_admin.exceptions import ConflictError, ValidationError
from hr_admin.models import Department, Employee, EmployeeStatistics, EmployeeStatus, User
from hr_admin.security import PasswordHasher
from hr_admin.store import EntityStore
from hr_admin.validation import validate_department, validate_employee, validate_user

logger = logging.getLogger(__name__)

UNASSIGNED = "unassigned"


class DepartmentsService(EntityStore[Department]):
    entity_name = "Department"

    def __init__(self, seed: Iterable[Department] = ()):
        super().__init__(Department, validate_department, seed)


class EmployeesService(EntityStore[Employee]):
    """Employee store with department filtering and statistics.

    When a write sets ``department_id`` without a ``department_name``, the
    name is copied from the department store if that department exists.
    The copy is a snapshot and is not refreshed on department renames.
    """

    entity_name = "Employee"

    def __init__(
        self,
        seed: Iterable[Employee] = (),
        departments: Optional[DepartmentsService] = None,
    ):
        super().__init__(Employee, validate_employee, seed)
        self._departments = departments

    def _with_department_name(self, fields: Mapping[str, Any]) -> dict:
        fields = dict(fields)
        # resolved before taking our own lock; stores never nest locks
        if (
            self._departments is not None
            and fields.get("department_id") is not None
            and not fields.get("department_name")
        ):
            department = self._departments.find_by_id(fields["department_id"])
            fields["department_name"] = department.name if department else None
        return fields

    def create(self, fields: Mapping[str, Any]) -> Employee:
        return super().create(self._with_department_name(fields))

    def update(self, entity_id: int, changes: Mapping[str, Any]) -> Employee:
        return super().update(entity_id, self._with_department_name(changes))

    def find_by_department(self, department_id: int) -> list[Employee]:
        return self.find_where(lambda employee: employee.department_id == department_id)

    def statistics(self) -> EmployeeStatistics:
        employees = self.find_all()
        by_status = Counter(employee.status for employee in employees)
        by_department = Counter(employee.department_name or UNASSIGNED for employee in employees)
        return EmployeeStatistics(
            total=len(employees),
            counts_by_status={status.value: by_status[status] for status in EmployeeStatus},
            counts_by_department_name=dict(by_department),
        )


class UsersService(EntityStore[User]):
    """User store enforcing unique usernames.

    Plain ``password`` values in a write are hashed before they reach the
    record; ``password_hash`` cannot be written directly through ``update``.
    """

    entity_name = "User"

    def __init__(self, hasher: PasswordHasher, seed: Iterable[User] = ()):
        super().__init__(User, validate_user, seed)
        self._hasher = hasher

    def find_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            return next((u for u in self._rows.values() if u.username == username), None)

    def check_unique(self, record: dict, exclude_id: Optional[int]) -> None:
        existing = self.find_by_username(record["username"])
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(f"Username {record['username']} already exists")

    def _hash_password(self, fields: Mapping[str, Any]) -> dict:
        fields = dict(fields)
        if "password" in fields:
            password = fields.pop("password")
            if not password:
                raise ValidationError("password is required")
            fields["password_hash"] = self._hasher.hash(password)
        return fields

    def create(self, fields: Mapping[str, Any]) -> User:
        return super().create(self._hash_password(fields))

    def update(self, entity_id: int, changes: Mapping[str, Any]) -> User:
        if "password_hash" in changes:
            raise ValidationError("password_hash cannot be set directly; send password")
        # 404 before spending a bcrypt round
        self.get(entity_id)
        user = super().update(entity_id, self._hash_password(changes))
        if "password" in changes:
            logger.info("Password changed for user %s", entity_id)
        return user
