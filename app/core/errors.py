"""Application errors and their HTTP rendering."""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppError(Exception):
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInputError(AppError):
    status_code = 400
    default_message = "Invalid input"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class NoStepsError(NotFoundError):
    default_message = "No steps found for this scenario."


class UnauthenticatedError(AppError):
    status_code = 401
    default_message = "Authentication required"


class ConflictError(AppError):
    """Uniqueness violation; the badge awarder treats it as already awarded."""

    status_code = 409
    default_message = "Already exists"


class StoreError(AppError):
    """Persistence failure after the submission was scored."""

    default_message = "Failed to persist progress"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthenticatedError) else None
    return JSONResponse({"message": exc.message}, status_code=exc.status_code, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
