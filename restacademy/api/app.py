"""FastAPI web application for REST Academy."""

import logging
from contextlib import asynccontextmanager
from typing import List

from fastapi import Depends, FastAPI, Query, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from restacademy.api.auth_models import (
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    PrincipalResponse,
    RegisterRequest,
)
from restacademy.auth.dependencies import (
    get_auth_service,
    get_credential_hasher,
    get_current_principal,
    get_user_service,
)
from restacademy.database.database import SessionLocal, init_db
from restacademy.database.seed import seed_enabled, seed_sample_users
from restacademy.models.constants import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    DEFAULT_SORT_DIRECTION,
    DEFAULT_SORT_FIELD,
    SERVICE_NAME,
    SERVICE_VERSION,
)
from restacademy.models.user import (
    DepartmentCount,
    Principal,
    UserCreate,
    UserPage,
    UserPublicView,
    UserUpdate,
    utc_now,
)
from restacademy.services.auth_service import AuthService
from restacademy.services.exceptions import (
    DuplicateEmail,
    InvalidCredentials,
    InvalidQuery,
    InvalidToken,
    NotFound,
    StorageUnavailable,
    UserServiceError,
    ValidationFailed,
)
from restacademy.services.user_service import UserService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if seed_enabled():
        db = SessionLocal()
        try:
            seed_sample_users(db, get_credential_hasher())
        finally:
            db.close()
    yield


# Initialize FastAPI app
app = FastAPI(
    title=SERVICE_NAME,
    description="User management with password login and bearer tokens",
    version=SERVICE_VERSION,
    lifespan=lifespan,
)


# Error mapping: typed service failure -> (HTTP status, error title)
ERROR_STATUS = {
    NotFound: (status.HTTP_404_NOT_FOUND, "Resource Not Found"),
    DuplicateEmail: (status.HTTP_409_CONFLICT, "Duplicate Resource"),
    InvalidQuery: (status.HTTP_400_BAD_REQUEST, "Invalid Query"),
    ValidationFailed: (status.HTTP_400_BAD_REQUEST, "Validation Failed"),
    InvalidCredentials: (status.HTTP_401_UNAUTHORIZED, "Unauthorized"),
    InvalidToken: (status.HTTP_401_UNAUTHORIZED, "Unauthorized"),
    StorageUnavailable: (status.HTTP_503_SERVICE_UNAVAILABLE, "Service Unavailable"),
}


def _error_response(request: Request, status_code: int, error: str, message: str, **extra) -> JSONResponse:
    body = ErrorResponse(
        timestamp=utc_now(),
        status=status_code,
        error=error,
        message=message,
        path=request.url.path,
        **extra,
    )
    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body, by_alias=True, exclude_none=True),
        headers=headers,
    )


@app.exception_handler(UserServiceError)
async def handle_service_error(request: Request, exc: UserServiceError) -> JSONResponse:
    status_code, error = ERROR_STATUS.get(
        type(exc), (status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")
    )
    extra = {}
    if isinstance(exc, ValidationFailed):
        extra["validation_errors"] = exc.field_errors
    return _error_response(request, status_code, error, exc.message, **extra)


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    field_errors = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field_errors[".".join(loc) or "request"] = err.get("msg", "Invalid value")
    return await handle_service_error(request, ValidationFailed(field_errors))


@app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {type(exc).__name__}: {str(exc)}")
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal Server Error",
        "An unexpected error occurred",
    )


# Health


@app.get("/health")
def health():
    """Basic liveness check."""
    return {
        "status": "UP",
        "timestamp": utc_now(),
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
    }


@app.get("/info")
def info():
    """Application metadata."""
    return {
        "application": "REST Academy",
        "description": "User management REST API with JWT authentication",
        "version": SERVICE_VERSION,
        "documentation": "/docs",
        "timestamp": utc_now(),
        "features": {
            "CRUD Operations": "Create, read, update and delete users",
            "Data Validation": "Field-level validation with structured error responses",
            "Pagination": "Paged listing with sorting",
            "Custom Queries": "Department, age range and first-name search",
            "Authentication": "Password login issuing bearer tokens",
        },
    }


@app.get("/welcome")
def welcome():
    """Greeting with pointers to the API docs."""
    return {
        "message": "Welcome to REST Academy!",
        "description": "This FastAPI application demonstrates RESTful API best practices",
        "documentation": "Visit /docs for interactive API documentation",
    }


# Users
# Fixed paths are registered before /users/{user_id}.


@app.post("/users", response_model=UserPublicView, status_code=status.HTTP_201_CREATED)
def create_user(fields: UserCreate, user_service: UserService = Depends(get_user_service)):
    """Create a user."""
    return user_service.create(fields)


@app.get("/users", response_model=UserPage)
def list_users(
    page: int = Query(DEFAULT_PAGE),
    size: int = Query(DEFAULT_PAGE_SIZE),
    sort_by: str = Query(DEFAULT_SORT_FIELD, alias="sortBy"),
    sort_dir: str = Query(DEFAULT_SORT_DIRECTION, alias="sortDir"),
    user_service: UserService = Depends(get_user_service),
):
    """List users one page at a time."""
    return user_service.list_paged(page, size, sort_by, sort_dir)


@app.get("/users/all", response_model=List[UserPublicView])
def list_all_users(user_service: UserService = Depends(get_user_service)):
    """List every user without pagination."""
    return user_service.list_all()


@app.get("/users/age-range", response_model=List[UserPublicView])
def list_users_by_age_range(
    min_age: int = Query(..., alias="minAge"),
    max_age: int = Query(..., alias="maxAge"),
    user_service: UserService = Depends(get_user_service),
):
    """List users whose age is within [minAge, maxAge]."""
    return user_service.list_by_age_range(min_age, max_age)


@app.get("/users/search", response_model=List[UserPublicView])
def search_users(
    first_name: str = Query("", alias="firstName"),
    user_service: UserService = Depends(get_user_service),
):
    """Case-insensitive first-name search."""
    return user_service.search_by_first_name(first_name)


@app.get("/users/department/{department}", response_model=List[UserPublicView])
def list_users_by_department(department: str, user_service: UserService = Depends(get_user_service)):
    """List a department's users by last name."""
    return user_service.list_by_department(department)


@app.get("/users/department/{department}/count", response_model=DepartmentCount)
def count_users_by_department(department: str, user_service: UserService = Depends(get_user_service)):
    """Count a department's users."""
    return DepartmentCount(department=department, user_count=user_service.count_by_department(department))


@app.get("/users/{user_id}", response_model=UserPublicView)
def get_user(user_id: int, user_service: UserService = Depends(get_user_service)):
    """Get a user by id."""
    return user_service.get_by_id(user_id)


@app.put("/users/{user_id}", response_model=UserPublicView)
def update_user(user_id: int, fields: UserUpdate, user_service: UserService = Depends(get_user_service)):
    """Replace a user's mutable fields."""
    return user_service.update(user_id, fields)


@app.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, user_service: UserService = Depends(get_user_service)):
    """Delete a user permanently."""
    user_service.delete(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Auth


@app.post("/auth/login", response_model=LoginResponse)
def login(request: LoginRequest, auth_service: AuthService = Depends(get_auth_service)):
    """Exchange email and password for a bearer token."""
    result = auth_service.login(request.email, request.password)
    return LoginResponse(
        token=result.token,
        email=result.email,
        first_name=result.first_name,
        last_name=result.last_name,
    )


@app.post("/auth/register", response_model=UserPublicView, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, auth_service: AuthService = Depends(get_auth_service)):
    """Create an account. Does not log in."""
    return auth_service.register(request, request.password)


@app.get("/auth/me", response_model=PrincipalResponse)
def current_principal(principal: Principal = Depends(get_current_principal)):
    """Return the identity behind the bearer token."""
    return PrincipalResponse(
        email=principal.email,
        first_name=principal.first_name,
        last_name=principal.last_name,
    )
