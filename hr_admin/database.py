"""In-memory stores, seed fixtures and request-scoped access."""

from dataclasses import dataclass
from datetime import date, timedelta

from fastapi import Request

from hr_admin.auth import AuthService, CredentialService
from hr_admin.config import Settings
from hr_admin.models import Department, Employee, Role, User
from hr_admin.security import PasswordHasher, TokenIssuer
from hr_admin.services import DepartmentsService, EmployeesService, UsersService
from hr_admin.store import utcnow

# Default rows present on every start
DEFAULT_DEPARTMENTS = [
    {"id": 1, "name": "Engineering", "description": "Product development and technical support", "budget": 500000},
    {"id": 2, "name": "Product", "description": "Product planning and requirements management", "budget": 300000},
    {"id": 3, "name": "Operations", "description": "Marketing operations and user growth", "budget": 400000},
]

DEFAULT_EMPLOYEES = [
    {
        "id": 1,
        "employee_id": "EMP001",
        "name": "Zhang San",
        "email": "zhangsan@techcorp.com",
        "phone": "13800138001",
        "position": "Frontend Engineer",
        "department_id": 1,
        "department_name": "Engineering",
        "salary": 15000,
        "hire_date": date(2023, 1, 15),
        "status": "active",
        "address": "Wangjing, Chaoyang District, Beijing",
        "emergency_contact": "Li Si",
        "emergency_phone": "13900139001",
    },
    {
        "id": 2,
        "employee_id": "EMP002",
        "name": "Wang Xiaoming",
        "email": "wangxiaoming@techcorp.com",
        "phone": "13800138002",
        "position": "Product Manager",
        "department_id": 2,
        "department_name": "Product",
        "salary": 18000,
        "hire_date": date(2023, 3, 20),
        "status": "active",
        "address": "Zhongguancun, Haidian District, Beijing",
        "emergency_contact": "Wang Daming",
        "emergency_phone": "13900139002",
    },
    {
        "id": 3,
        "employee_id": "EMP003",
        "name": "Li Hong",
        "email": "lihong@techcorp.com",
        "phone": "13800138003",
        "position": "Operations Specialist",
        "department_id": 3,
        "department_name": "Operations",
        "salary": 12000,
        "hire_date": date(2023, 5, 10),
        "status": "active",
        "address": "Financial Street, Xicheng District, Beijing",
        "emergency_contact": "Li Lv",
        "emergency_phone": "13900139003",
    },
]

DEFAULT_ADMIN = {"id": 1, "username": "admin", "email": "admin@techcorp.com", "role": Role.ADMIN}


@dataclass(frozen=True)
class Database:
    """Everything one application instance owns."""

    users: UsersService
    employees: EmployeesService
    departments: DepartmentsService

    credentials: CredentialService
    auth: AuthService


def seed_departments() -> list[Department]:
    now = utcnow()
    return [Department(created_at=now, **row) for row in DEFAULT_DEPARTMENTS]


def seed_employees() -> list[Employee]:
    now = utcnow()
    return [Employee(created_at=now, updated_at=now, **row) for row in DEFAULT_EMPLOYEES]


def seed_users(hasher: PasswordHasher, admin_password: str) -> list[User]:
    return [
        User(
            created_at=utcnow(),
            password_hash=hasher.hash(admin_password),
            **DEFAULT_ADMIN,
        )
    ]


def build_database(settings: Settings) -> Database:
    """Create seeded stores and the services wired on top of them."""
    hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    tokens = TokenIssuer(
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )

    departments = DepartmentsService(seed_departments())
    employees = EmployeesService(seed_employees(), departments=departments)
    users = UsersService(hasher, seed_users(hasher, settings.SEED_ADMIN_PASSWORD))

    credentials = CredentialService(users, hasher)
    return Database(
        users=users,
        employees=employees,
        departments=departments,
        credentials=credentials,
        auth=AuthService(credentials, tokens),
    )


def get_db(request: Request) -> Database:
    """Dependency to get the application's stores."""
    return request.app.state.db
