"""Error taxonomy and the HTTP responses each error maps to.

Handlers and services raise these; the app factory registers
``register_exception_handlers`` so every route shares one wire shape
per failure kind:

- any AuthenticationError → 401 {"message": "Access Denied"}
- ValidationFailed        → 400 {"errors": [...]}
- Forbidden               → 403 {"error": "Not the correct user"}
- NotFound                → 404 {"message": "..."}
- store faults            → 500 {"message": "Internal Server Error"}
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger()


class CoursebookError(Exception):
    """Base class for errors with a client-facing response."""


# ─── Authentication ─────────────────────────────────────


class AuthenticationError(CoursebookError):
    """The request could not be tied to a known user.

    Subclasses stay distinct for logging; clients only ever see
    the generic 401 body.
    """

    reason = "authentication_failed"

    def __init__(self, identifier: str | None = None):
        self.identifier = identifier
        super().__init__(self.reason)


class MissingCredentials(AuthenticationError):
    reason = "missing_credentials"


class UnknownIdentifier(AuthenticationError):
    reason = "unknown_identifier"


class InvalidSecret(AuthenticationError):
    reason = "invalid_secret"


# ─── Client errors ──────────────────────────────────────


class ValidationFailed(CoursebookError):
    """One or more payload fields were rejected."""

    def __init__(self, messages: list[str]):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


class Forbidden(CoursebookError):
    """Known identity, but not the owner of the target resource."""

    def __init__(self, message: str = "Not the correct user"):
        self.message = message
        super().__init__(message)


class NotFound(CoursebookError):
    def __init__(self, message: str = "Course not found"):
        self.message = message
        super().__init__(message)


# ─── Server errors ──────────────────────────────────────


# Unexpected persistence failures are SQLAlchemy's own exceptions; they
# propagate untouched to the handler below.
StoreError = SQLAlchemyError


# ─── Handlers ───────────────────────────────────────────


async def _authentication_error(request: Request, exc: AuthenticationError):
    return JSONResponse(status_code=401, content={"message": "Access Denied"})


async def _validation_failed(request: Request, exc: ValidationFailed):
    return JSONResponse(status_code=400, content={"errors": exc.messages})


async def _request_validation_error(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"][1:]) or str(err["loc"][0])
        messages.append(f'Invalid value for "{field}": {err["msg"]}')
    return JSONResponse(status_code=400, content={"errors": messages})


async def _forbidden(request: Request, exc: Forbidden):
    return JSONResponse(status_code=403, content={"error": exc.message})


async def _not_found(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"message": exc.message})


async def _http_exception(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return JSONResponse(status_code=404, content={"message": "Route Not Found"})
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def _store_error(request: Request, exc: Exception):
    logger.exception(
        "store.error",
        method=request.method,
        path=request.url.path,
        error_type=type(exc).__name__,
    )
    return JSONResponse(
        status_code=500, content={"message": "Internal Server Error"}
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the shared error responses to an app."""
    app.add_exception_handler(AuthenticationError, _authentication_error)
    app.add_exception_handler(ValidationFailed, _validation_failed)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(Forbidden, _forbidden)
    app.add_exception_handler(NotFound, _not_found)
    app.add_exception_handler(StarletteHTTPException, _http_exception)
    app.add_exception_handler(StoreError, _store_error)
