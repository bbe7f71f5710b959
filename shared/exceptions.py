# shared/exceptions.py
from fastapi import Request, status
from fastapi.responses import JSONResponse


class AppError(Exception):
    kind = "error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(AppError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class AuthorizationError(AppError):
    kind = "authorization"
    status_code = status.HTTP_403_FORBIDDEN


class ValidationError(AppError):
    kind = "validation"
    status_code = 422


class InvalidTransitionError(ValidationError):
    """Requested status change is not allowed from the assessment's current status."""

    kind = "invalid_transition"
    status_code = status.HTTP_409_CONFLICT


class StorageError(AppError):
    kind = "storage"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "detail": exc.message},
    )
