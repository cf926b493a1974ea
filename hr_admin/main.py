"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from hr_admin.config import Settings, configure_logging, settings as default_settings
from hr_admin.database import Database, build_database, get_db
from hr_admin.exceptions import AuthenticationError, ErrorKind, HRAdminError
from hr_admin.models import Principal
from hr_admin.schemas import (
    DepartmentCreate,
    DepartmentResponse,
    DepartmentUpdate,
    EmployeeCreate,
    EmployeeResponse,
    EmployeeUpdate,
    ErrorResponse,
    HealthResponse,
    LoginRequest,
    PrincipalResponse,
    RegisterRequest,
    StatisticsResponse,
    TokenResponse,
    UserResponse,
    UserSummary,
    UserUpdate,
)

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
}

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Database = Depends(get_db),
) -> Principal:
    """Dependency resolving the bearer token into a principal.

    Any valid token grants access; roles are carried but not checked.
    """
    if credentials is None:
        raise AuthenticationError("Not authenticated")
    return db.auth.verify(credentials.credentials)


def _error_response(status_code: int, detail: str, headers: Optional[dict] = None) -> JSONResponse:
    body = ErrorResponse(detail=detail, status_code=status_code)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"), headers=headers)


async def handle_domain_error(request: Request, exc: HRAdminError) -> JSONResponse:
    status_code = STATUS_BY_KIND[exc.kind]
    headers = {"WWW-Authenticate": "Bearer"} if exc.kind is ErrorKind.AUTHENTICATION else None
    return _error_response(status_code, exc.message, headers)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = exc.errors()[0]
    # drop the "body"/"query"/"path" prefix
    field = ".".join(str(part) for part in error["loc"][1:]) or "body"
    return _error_response(400, f"{field}: {error['msg']}")


ERROR_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Missing, invalid or expired token"},
}


# --- Auth Endpoints ---

auth_router = APIRouter(prefix="/auth", tags=["Auth"])


# bcrypt work happens in these handlers, so they are plain functions run in
# the threadpool rather than on the event loop.
@auth_router.post(
    "/login",
    response_model=TokenResponse,
    summary="Log In",
    description="Exchange username and password for a bearer token.",
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
)
def login(body: LoginRequest, db: Database = Depends(get_db)):
    token, user = db.auth.login(body.username, body.password)
    return TokenResponse(access_token=token, user=UserSummary.model_validate(user.model_dump()))


@auth_router.post(
    "/register",
    response_model=UserResponse,
    status_code=201,
    summary="Register",
    description="Create an account. The response never contains the password.",
    responses={409: {"model": ErrorResponse, "description": "Username already exists"}},
)
def register(body: RegisterRequest, db: Database = Depends(get_db)):
    user = db.credentials.register(
        username=body.username,
        password=body.password,
        email=body.email,
        role=body.role,
    )
    return UserResponse.of(user)


@auth_router.get(
    "/me",
    response_model=PrincipalResponse,
    summary="Current Principal",
    responses=ERROR_RESPONSES,
)
async def read_current_principal(principal: Principal = Depends(get_current_principal)):
    return PrincipalResponse.of(principal)


# --- Department Endpoints ---

departments_router = APIRouter(
    prefix="/departments",
    tags=["Departments"],
    dependencies=[Depends(get_current_principal)],
    responses=ERROR_RESPONSES,
)


@departments_router.get("", response_model=list[DepartmentResponse], summary="List Departments")
async def list_departments(db: Database = Depends(get_db)):
    return [DepartmentResponse.of(dept) for dept in db.departments.find_all()]


@departments_router.get(
    "/{department_id}",
    response_model=DepartmentResponse,
    summary="Get Department",
    responses={404: {"model": ErrorResponse, "description": "Department not found"}},
)
async def get_department(department_id: int, db: Database = Depends(get_db)):
    return DepartmentResponse.of(db.departments.get(department_id))


@departments_router.post(
    "",
    response_model=DepartmentResponse,
    status_code=201,
    summary="Create Department",
    responses={400: {"model": ErrorResponse, "description": "Invalid field"}},
)
async def create_department(department: DepartmentCreate, db: Database = Depends(get_db)):
    return DepartmentResponse.of(db.departments.create(department.model_dump()))


@departments_router.put(
    "/{department_id}",
    response_model=DepartmentResponse,
    summary="Update Department",
    description="Only provided fields will be updated.",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid field"},
        404: {"model": ErrorResponse, "description": "Department not found"},
    },
)
async def update_department(department_id: int, updates: DepartmentUpdate, db: Database = Depends(get_db)):
    dept = db.departments.update(department_id, updates.model_dump(exclude_unset=True))
    return DepartmentResponse.of(dept)


@departments_router.delete(
    "/{department_id}",
    status_code=204,
    summary="Delete Department",
    responses={404: {"model": ErrorResponse, "description": "Department not found"}},
)
async def delete_department(department_id: int, db: Database = Depends(get_db)):
    db.departments.remove(department_id)


# --- Employee Endpoints ---

employees_router = APIRouter(
    prefix="/employees",
    tags=["Employees"],
    dependencies=[Depends(get_current_principal)],
    responses=ERROR_RESPONSES,
)


@employees_router.get(
    "",
    response_model=list[EmployeeResponse],
    summary="List Employees",
    description="Get all employees, optionally only those of one department.",
)
async def list_employees(
    department_id: Optional[int] = Query(None, alias="departmentId", description="Filter by department"),
    db: Database = Depends(get_db),
):
    if department_id is not None:
        employees = db.employees.find_by_department(department_id)
    else:
        employees = db.employees.find_all()
    return [EmployeeResponse.of(emp) for emp in employees]


@employees_router.get(
    "/statistics",
    response_model=StatisticsResponse,
    summary="Employee Statistics",
    description="Headcount by status and by department name, computed on each call.",
)
async def employee_statistics(db: Database = Depends(get_db)):
    stats = db.employees.statistics()
    return StatisticsResponse(
        total=stats.total,
        active=stats.counts_by_status["active"],
        inactive=stats.counts_by_status["inactive"],
        terminated=stats.counts_by_status["terminated"],
        counts_by_status=stats.counts_by_status,
        counts_by_department_name=stats.counts_by_department_name,
    )


@employees_router.get(
    "/{employee_id}",
    response_model=EmployeeResponse,
    summary="Get Employee",
    responses={404: {"model": ErrorResponse, "description": "Employee not found"}},
)
async def get_employee(employee_id: int, db: Database = Depends(get_db)):
    return EmployeeResponse.of(db.employees.get(employee_id))


@employees_router.post(
    "",
    response_model=EmployeeResponse,
    status_code=201,
    summary="Create Employee",
    responses={400: {"model": ErrorResponse, "description": "Invalid field"}},
)
async def create_employee(employee: EmployeeCreate, db: Database = Depends(get_db)):
    return EmployeeResponse.of(db.employees.create(employee.model_dump()))


@employees_router.put(
    "/{employee_id}",
    response_model=EmployeeResponse,
    summary="Update Employee",
    description="Only provided fields will be updated.",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid field"},
        404: {"model": ErrorResponse, "description": "Employee not found"},
    },
)
async def update_employee(employee_id: int, updates: EmployeeUpdate, db: Database = Depends(get_db)):
    emp = db.employees.update(employee_id, updates.model_dump(exclude_unset=True))
    return EmployeeResponse.of(emp)


@employees_router.delete(
    "/{employee_id}",
    status_code=204,
    summary="Delete Employee",
    responses={404: {"model": ErrorResponse, "description": "Employee not found"}},
)
async def delete_employee(employee_id: int, db: Database = Depends(get_db)):
    db.employees.remove(employee_id)


# --- User Endpoints ---

users_router = APIRouter(
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(get_current_principal)],
    responses=ERROR_RESPONSES,
)


@users_router.get("", response_model=list[UserResponse], summary="List Users")
async def list_users(db: Database = Depends(get_db)):
    return [UserResponse.of(user) for user in db.users.find_all()]


@users_router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get User",
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
)
async def get_user(user_id: int, db: Database = Depends(get_db)):
    return UserResponse.of(db.users.get(user_id))


@users_router.put(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update User",
    description="Only provided fields will be updated. A new password is hashed before storage.",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid field"},
        404: {"model": ErrorResponse, "description": "User not found"},
        409: {"model": ErrorResponse, "description": "Username already exists"},
    },
)
def update_user(user_id: int, updates: UserUpdate, db: Database = Depends(get_db)):
    return UserResponse.of(db.credentials.update_user(user_id, updates.model_dump(exclude_unset=True)))


@users_router.delete(
    "/{user_id}",
    status_code=204,
    summary="Delete User",
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
)
async def delete_user(user_id: int, db: Database = Depends(get_db)):
    db.users.remove(user_id)


# --- Application ---

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build an application instance with its own freshly seeded stores."""
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "HR admin API %s ready: %d users, %d employees, %d departments",
            settings.APP_VERSION,
            len(app.state.db.users),
            len(app.state.db.employees),
            len(app.state.db.departments),
        )
        yield

    app = FastAPI(
        title="HR Administration API",
        description="Users, employees and departments behind bearer-token authentication.",
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    app.state.db = build_database(settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(HRAdminError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)

    # --- Health Check ---

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["Health"],
        summary="Health Check",
        description="Check if the API is running and healthy.",
    )
    async def health_check():
        return HealthResponse(
            status="healthy",
            version=settings.APP_VERSION,
            timestamp=datetime.now(UTC),
        )

    app.include_router(auth_router)
    app.include_router(departments_router)
    app.include_router(employees_router)
    app.include_router(users_router)
    return app


app = create_app()
