"""Store, validation and statistics tests run directly against the services."""

import math
from datetime import date

import pytest

from hr_admin.database import seed_departments, seed_employees
from hr_admin.exceptions import ConflictError, NotFoundError, ValidationError
from hr_admin.models import EmployeeStatus, Role
from hr_admin.services import DepartmentsService, EmployeesService, UsersService


@pytest.fixture
def departments():
    return DepartmentsService(seed_departments())


@pytest.fixture
def employees(departments):
    return EmployeesService(seed_employees(), departments=departments)


@pytest.fixture
def users(hasher):
    store = UsersService(hasher)
    store.create({"username": "alice", "password": "wonderland", "email": "alice@techcorp.com", "role": "hr"})
    return store


def new_employee(**overrides):
    fields = {
        "employee_id": "EMP100",
        "name": "Chen Jing",
        "email": "chenjing@techcorp.com",
        "phone": "13800138100",
        "position": "Backend Engineer",
        "department_id": 1,
        "salary": 16000,
        "hire_date": date(2024, 2, 1),
    }
    fields.update(overrides)
    return fields


# ==========================================
# DEPARTMENT STORE
# ==========================================


class TestDepartmentStore:
    def test_seeded_in_insertion_order(self, departments):
        assert [d.id for d in departments.find_all()] == [1, 2, 3]
        assert [d.budget for d in departments.find_all()] == [500000, 300000, 400000]

    def test_create_round_trip(self, departments):
        fields = {"name": "Finance", "description": "Books and payroll", "budget": 250000}
        created = departments.create(fields)
        found = departments.find_by_id(created.id)
        assert found == created
        assert found.model_dump(include=set(fields)) == fields
        assert found.created_at is not None

    def test_create_appends_at_end(self, departments):
        created = departments.create({"name": "Legal", "description": "Contracts", "budget": 0})
        assert departments.find_all()[-1] == created

    def test_ids_increase_and_never_collide(self, departments):
        first = departments.create({"name": "A", "description": "a", "budget": 1})
        second = departments.create({"name": "B", "description": "b", "budget": 1})
        assert 3 < first.id < second.id

    def test_text_fields_are_trimmed(self, departments):
        created = departments.create({"name": "  Sales ", "description": " Deals\n", "budget": 10})
        assert created.name == "Sales"
        assert created.description == "Deals"

    @pytest.mark.parametrize(
        "fields, message",
        [
            ({"name": "", "description": "d", "budget": 1}, "name is required"),
            ({"name": "   ", "description": "d", "budget": 1}, "name is required"),
            ({"description": "d", "budget": 1}, "name is required"),
            ({"name": "n", "description": " ", "budget": 1}, "description is required"),
            ({"name": "n", "description": "d"}, "budget is required"),
            ({"name": "n", "description": "d", "budget": -1}, "budget must be non-negative"),
            ({"name": "n", "description": "d", "budget": math.inf}, "budget must be a finite number"),
            ({"name": "n", "description": "d", "budget": math.nan}, "budget must be a finite number"),
        ],
    )
    def test_invalid_create_is_rejected_without_mutation(self, departments, fields, message):
        before = departments.find_all()
        with pytest.raises(ValidationError, match=message):
            departments.create(fields)
        assert departments.find_all() == before

    def test_update_merges_partial_fields(self, departments):
        updated = departments.update(1, {"budget": 550000})
        assert updated.budget == 550000
        assert updated.name == "Engineering"
        assert departments.find_by_id(1) == updated

    def test_update_empty_patch_returns_record_unchanged(self, departments):
        before = departments.find_by_id(2)
        assert departments.update(2, {}) == before

    def test_update_cannot_change_id_or_created_at(self, departments):
        before = departments.find_by_id(1)
        updated = departments.update(1, {"id": 99, "created_at": None})
        assert updated.id == 1
        assert updated.created_at == before.created_at

    def test_invalid_update_leaves_record_unchanged(self, departments):
        before = departments.find_by_id(1)
        with pytest.raises(ValidationError, match="budget must be non-negative"):
            departments.update(1, {"budget": -5})
        with pytest.raises(ValidationError, match="name is required"):
            departments.update(1, {"name": " "})
        assert departments.find_by_id(1) == before

    def test_update_missing_raises_not_found(self, departments):
        with pytest.raises(NotFoundError, match="Department 999 not found"):
            departments.update(999, {"budget": 1})

    def test_remove_preserves_order_of_others(self, departments):
        departments.remove(2)
        assert [d.id for d in departments.find_all()] == [1, 3]

    def test_remove_twice_raises_not_found(self, departments):
        departments.remove(3)
        with pytest.raises(NotFoundError):
            departments.remove(3)
        assert len(departments) == 2

    def test_get_missing_raises_not_found(self, departments):
        assert departments.find_by_id(42) is None
        with pytest.raises(NotFoundError):
            departments.get(42)


# ==========================================
# EMPLOYEE STORE
# ==========================================


class TestEmployeeStore:
    def test_create_stamps_timestamps(self, employees):
        created = employees.create(new_employee())
        assert created.created_at == created.updated_at
        assert created.status is EmployeeStatus.ACTIVE

    def test_create_round_trip(self, employees):
        fields = new_employee(department_name="Engineering")
        created = employees.create(fields)
        found = employees.find_by_id(created.id)
        assert found == created
        assert found.model_dump(include=set(fields)) == fields

    def test_department_name_filled_from_department(self, employees):
        created = employees.create(new_employee(department_id=2))
        assert created.department_name == "Product"

    def test_unknown_department_is_accepted(self, employees):
        created = employees.create(new_employee(department_id=42))
        assert created.department_id == 42
        assert created.department_name is None

    def test_moving_department_refreshes_name(self, employees):
        updated = employees.update(1, {"department_id": 3})
        assert updated.department_name == "Operations"

    def test_department_rename_does_not_touch_snapshot(self, employees, departments):
        departments.update(1, {"name": "R&D"})
        assert employees.find_by_id(1).department_name == "Engineering"

    def test_update_refreshes_updated_at(self, employees):
        before = employees.find_by_id(1)
        updated = employees.update(1, {"position": "Senior Frontend Engineer"})
        assert updated.position == "Senior Frontend Engineer"
        assert updated.updated_at >= before.updated_at
        assert updated.created_at == before.created_at

    def test_update_empty_patch_only_touches_updated_at(self, employees):
        before = employees.find_by_id(1)
        updated = employees.update(1, {})
        assert updated.model_dump(exclude={"updated_at"}) == before.model_dump(exclude={"updated_at"})

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"name": " "}, "name is required"),
            ({"employee_id": ""}, "employee_id is required"),
            ({"salary": -100}, "salary must be non-negative"),
            ({"status": "retired"}, "status must be one of"),
            ({"department_id": None}, "department_id is required"),
            ({"hire_date": "not-a-date"}, "hire_date"),
        ],
    )
    def test_invalid_create_is_rejected_without_mutation(self, employees, overrides, message):
        with pytest.raises(ValidationError, match=message):
            employees.create(new_employee(**overrides))
        assert len(employees) == 3

    def test_find_by_department(self, employees):
        employees.create(new_employee(department_id=1))
        assert [e.employee_id for e in employees.find_by_department(1)] == ["EMP001", "EMP100"]
        assert employees.find_by_department(99) == []

    def test_remove_missing_raises_not_found(self, employees):
        with pytest.raises(NotFoundError, match="Employee 77 not found"):
            employees.remove(77)


# ==========================================
# STATISTICS
# ==========================================


class TestStatistics:
    def test_seeded_statistics(self, employees):
        stats = employees.statistics()
        assert stats.total == 3
        assert stats.counts_by_status == {"active": 3, "inactive": 0, "terminated": 0}
        assert stats.counts_by_department_name == {"Engineering": 1, "Product": 1, "Operations": 1}

    def test_statistics_follow_mutations(self, employees):
        employees.update(1, {"status": "terminated"})
        employees.update(2, {"status": "inactive"})
        employees.create(new_employee(department_id=42))
        stats = employees.statistics()
        assert stats.total == 4
        assert stats.counts_by_status == {"active": 2, "inactive": 1, "terminated": 1}
        assert stats.counts_by_department_name["unassigned"] == 1

    def test_empty_store(self):
        stats = EmployeesService().statistics()
        assert stats.total == 0
        assert stats.counts_by_status == {"active": 0, "inactive": 0, "terminated": 0}
        assert stats.counts_by_department_name == {}


# ==========================================
# USER STORE
# ==========================================


class TestUserStore:
    def test_create_hashes_password(self, users, hasher):
        alice = users.find_by_username("alice")
        assert alice.password_hash != "wonderland"
        assert hasher.verify("wonderland", alice.password_hash)
        assert alice.role is Role.HR

    def test_duplicate_username_conflicts(self, users):
        with pytest.raises(ConflictError, match="alice"):
            users.create({"username": "alice", "password": "x", "email": "a2@techcorp.com", "role": "hr"})
        assert len(users) == 1

    def test_username_is_case_sensitive(self, users):
        users.create({"username": "Alice", "password": "x", "email": "a2@techcorp.com", "role": "manager"})
        assert len(users) == 2

    def test_update_password_is_rehashed(self, users, hasher):
        alice = users.find_by_username("alice")
        updated = users.update(alice.id, {"password": "looking-glass"})
        assert updated.password_hash != "looking-glass"
        assert hasher.verify("looking-glass", updated.password_hash)
        assert not hasher.verify("wonderland", updated.password_hash)

    def test_update_rejects_raw_password_hash(self, users):
        alice = users.find_by_username("alice")
        with pytest.raises(ValidationError, match="password_hash"):
            users.update(alice.id, {"password_hash": "plaintext"})
        assert users.find_by_id(alice.id) == alice

    def test_update_rejects_empty_password(self, users):
        alice = users.find_by_username("alice")
        with pytest.raises(ValidationError, match="password is required"):
            users.update(alice.id, {"password": ""})

    def test_rename_onto_existing_username_conflicts(self, users):
        bob = users.create({"username": "bob", "password": "x", "email": "bob@techcorp.com", "role": "manager"})
        with pytest.raises(ConflictError):
            users.update(bob.id, {"username": "alice"})
        assert users.find_by_id(bob.id).username == "bob"

    def test_update_keeping_own_username_is_allowed(self, users):
        alice = users.find_by_username("alice")
        assert users.update(alice.id, {"username": "alice"}).username == "alice"

    def test_invalid_role_is_rejected(self, users):
        with pytest.raises(ValidationError, match="role must be one of"):
            users.create({"username": "eve", "password": "x", "email": "eve@techcorp.com", "role": "root"})
