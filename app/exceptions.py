"""
Domain exceptions raised by the service layer.

Services raise the most specific kind; ``app.errors`` maps each one to an
HTTP status and the uniform JSON error body.  Routers never translate.
"""


class AppError(Exception):
    status_code: int = 500
    error: str = "Internal Server Error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(AppError):
    status_code = 404
    error = "Not Found"


class ForbiddenError(AppError):
    status_code = 403
    error = "Forbidden"


class ConflictError(AppError):
    status_code = 409
    error = "Conflict"


class UnauthorizedError(AppError):
    status_code = 401
    error = "Unauthorized"
