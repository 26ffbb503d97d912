from typing import Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from loguru import logger


class MockBackendError(Exception):
    """
    Base exception for the mock backend.

    Every subclass carries the HTTP status it maps to; the message becomes
    the ``message`` field of the JSON error body.
    """
    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(MockBackendError):
    """Raised when a write request carries a body that is not a JSON object."""
    status_code = 400
    default_message = "Bad Request"


class InvalidCredentialsError(MockBackendError):
    status_code = 401
    default_message = "Invalid credentials"


class NotFoundError(MockBackendError):
    """Raised for an unknown collection or record id."""
    status_code = 404
    default_message = "Not Found"


class MethodNotAllowedError(MockBackendError):
    status_code = 405
    default_message = "Method Not Allowed"


class DuplicateIdError(MockBackendError):
    status_code = 409
    default_message = "Duplicate id"


class StoreError(MockBackendError):
    """Raised when the document store cannot be read or written."""
    status_code = 500
    default_message = "Internal Server Error"


def error_body(message: str) -> dict:
    return {"message": message}


def add_exception_handlers(app: FastAPI):
    """Registers the JSON error handlers on the app."""

    @app.exception_handler(MockBackendError)
    async def mock_backend_error_handler(request: Request, exc: MockBackendError):
        if exc.status_code >= 500:
            logger.opt(exception=exc).error(f"{request.method} {request.url.path} failed: {exc.message}")
            # Storage details stay in the log
            message = MockBackendError.default_message
        else:
            message = exc.message
        return JSONResponse(status_code=exc.status_code, content=error_body(message))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Unmatched routes and wrong methods"""
        return JSONResponse(status_code=exc.status_code, content=error_body(str(exc.detail)))
