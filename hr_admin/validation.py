"""Field rules checked before any store mutation.

Each ``validate_*`` function takes the complete candidate record (for updates,
the stored record merged with the patch), raises ``ValidationError`` naming
the offending field, and returns the record with text fields trimmed.
"""

import math
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from hr_admin.exceptions import ValidationError
from hr_admin.models import EmployeeStatus, Role

ModelT = TypeVar("ModelT", bound=BaseModel)


def require_text(record: dict, field: str) -> None:
    """Non-empty string after trimming; stores the trimmed value."""
    value = record.get(field)
    if value is None:
        raise ValidationError(f"{field} is required")
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    value = value.strip()
    if not value:
        raise ValidationError(f"{field} is required")
    record[field] = value


def require_amount(record: dict, field: str) -> None:
    """Finite, non-negative number."""
    value = record.get(field)
    if value is None:
        raise ValidationError(f"{field} is required")
    # bool is an int subclass; True is not a budget
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field} must be a number")
    if not math.isfinite(value):
        raise ValidationError(f"{field} must be a finite number")
    if value < 0:
        raise ValidationError(f"{field} must be non-negative")


def require_choice(record: dict, field: str, choices: type) -> None:
    """Value of the ``choices`` enum; stores the enum member."""
    value = record.get(field)
    if value is None:
        raise ValidationError(f"{field} is required")
    try:
        record[field] = choices(value)
    except ValueError:
        allowed = ", ".join(c.value for c in choices)
        raise ValidationError(f"{field} must be one of: {allowed}") from None


def validate_department(record: Mapping[str, Any]) -> dict:
    record = dict(record)
    require_text(record, "name")
    require_text(record, "description")
    require_amount(record, "budget")
    return record


def validate_employee(record: Mapping[str, Any]) -> dict:
    record = dict(record)
    for field in ("employee_id", "name", "email", "position"):
        require_text(record, field)
    if record.get("department_id") is None:
        raise ValidationError("department_id is required")
    require_amount(record, "salary")
    if record.get("hire_date") is None:
        raise ValidationError("hire_date is required")
    if record.get("status") is None:
        record["status"] = EmployeeStatus.ACTIVE
    require_choice(record, "status", EmployeeStatus)
    return record


def validate_user(record: Mapping[str, Any]) -> dict:
    record = dict(record)
    require_text(record, "username")
    require_text(record, "email")
    require_choice(record, "role", Role)
    if not record.get("password_hash"):
        raise ValidationError("password is required")
    return record


def build_entity(model: type[ModelT], record: Mapping[str, Any]) -> ModelT:
    """Construct ``model`` from ``record``, reporting type errors by field."""
    try:
        return model.model_validate(dict(record))
    except PydanticValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or model.__name__
        raise ValidationError(f"{field}: {error['msg']}") from None
