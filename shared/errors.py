"""
Error taxonomy shared by every service, and the FastAPI handlers that turn
it into HTTP responses.

Validation and not-found errors carry enough detail for the caller to fix the
request. Storage errors are opaque to the caller; the full exception is only
written to the logs.
"""
from typing import Iterable, Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)


class ServiceError(Exception):
    """Base class for errors raised by the service layer."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    def __init__(
        self,
        message: str,
        missing_fields: Optional[Iterable[str]] = None,
        invalid_fields: Optional[dict] = None,
        valid_options: Optional[Iterable[str]] = None,
    ):
        super().__init__(message)
        self.missing_fields = list(missing_fields or [])
        self.invalid_fields = dict(invalid_fields or {})
        self.valid_options = list(valid_options) if valid_options is not None else None

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.missing_fields:
            body["missing_fields"] = self.missing_fields
        if self.invalid_fields:
            body["invalid_fields"] = self.invalid_fields
        if self.valid_options is not None:
            body["valid_options"] = self.valid_options
        return body


class NotFoundError(ServiceError):
    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found")
        self.resource = resource
        self.identifier = identifier


class PermissionDenied(ServiceError):
    pass


class StorageError(ServiceError):
    """Any persistence failure. The original exception is kept as __cause__."""


class DependencyFailure(ServiceError):
    """A best-effort collaborator (e.g. the notification sink) failed."""


async def _validation_error_handler(request: Request, exc: ValidationError):
    logger.info("request_rejected", path=request.url.path, reason=exc.message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=exc.to_dict())


async def _not_found_handler(request: Request, exc: NotFoundError):
    logger.info("resource_not_found", resource=exc.resource, identifier=exc.identifier)
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": exc.message})


async def _permission_denied_handler(request: Request, exc: PermissionDenied):
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"message": exc.message})


async def _storage_error_handler(request: Request, exc: StorageError):
    logger.error("storage_failure", path=request.url.path, error=repr(exc.__cause__ or exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": exc.message},
    )


async def _request_validation_handler(request: Request, exc: RequestValidationError):
    # Report body problems the same way as service-level validation: 400 with field names
    invalid = {}
    missing = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        if error.get("type") == "missing":
            missing.append(field)
        else:
            invalid[field] = error.get("msg", "invalid value")
    error = ValidationError("Invalid request", missing_fields=missing, invalid_fields=invalid)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, _validation_error_handler)
    app.add_exception_handler(NotFoundError, _not_found_handler)
    app.add_exception_handler(PermissionDenied, _permission_denied_handler)
    app.add_exception_handler(StorageError, _storage_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
