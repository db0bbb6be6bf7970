# common/api_error/ApiError.py
class AppError(Exception):
    """Base error for all application-specific issues."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "INTERNAL_ERROR",
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(self.message)


class DatabaseError(AppError):
    """Specific for DB issues."""

    def __init__(self, message: str):
        super().__init__(message, status_code=500, code="DATABASE_ERROR")


class NotFoundError(AppError):
    """Requested record does not exist."""

    def __init__(self, resource: str, identifier: object):
        super().__init__(
            f"{resource} '{identifier}' not found",
            status_code=404,
            code="NOT_FOUND",
        )
        self.resource = resource
        self.identifier = identifier


class TemplateValidationError(AppError):
    """Shift template rejected before it reaches expansion."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message, status_code=422, code="INVALID_TEMPLATE")
        self.errors = errors or []


class TemplateInactiveError(AppError):
    """Operation needs an active template."""

    def __init__(self, template_id: str):
        super().__init__(
            f"ShiftTemplate '{template_id}' is inactive",
            status_code=409,
            code="TEMPLATE_INACTIVE",
        )
        self.template_id = template_id


class AuthenticationError(AppError):
    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, status_code=401, code="UNAUTHENTICATED")


class PermissionDeniedError(AppError):
    def __init__(self, message: str = "Permission denied"):
        super().__init__(message, status_code=403, code="PERMISSION_DENIED")


__all__ = [
    "AppError",
    "DatabaseError",
    "NotFoundError",
    "TemplateValidationError",
    "TemplateInactiveError",
    "AuthenticationError",
    "PermissionDeniedError",
]
