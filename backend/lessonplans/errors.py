"""
Application errors raised by services.

Services don't know about HTTP, but they do know when something is
"not found" or "invalid". These exceptions carry a status code so the
handler registered in main.py can translate them into a JSON response
with the same shape as FastAPI's HTTPException: {"detail": "..."}.
"""


class AppError(Exception):
    """Base error for expected, user-facing failures."""

    status_code: int = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(AppError):
    status_code = 404


class ValidationError(AppError):
    status_code = 422
