from dataclasses import dataclass
from fastapi import status


@dataclass(frozen=True)
class ErrorDefinition:
    code: str
    message: str
    status_code: int


class ErrorCatalog:
    INVALID_TOKEN = ErrorDefinition("INVALID_TOKEN", "Invalid token", status.HTTP_401_UNAUTHORIZED)
    INVALID_CREDENTIALS = ErrorDefinition(
        "INVALID_CREDENTIALS",
        "Invalid credentials",
        status.HTTP_401_UNAUTHORIZED,
    )
    USER_INACTIVE = ErrorDefinition(
        "USER_INACTIVE",
        "User is inactive",
        status.HTTP_403_FORBIDDEN,
    )
    PERMISSION_DENIED = ErrorDefinition(
        "PERMISSION_DENIED",
        "Permission denied",
        status.HTTP_403_FORBIDDEN,
    )
    NOT_FOUND = ErrorDefinition(
        "NOT_FOUND",
        "Resource not found",
        status.HTTP_404_NOT_FOUND,
    )
    CONFLICT = ErrorDefinition(
        "CONFLICT",
        "Resource already exists",
        status.HTTP_409_CONFLICT,
    )
    SALE_HAS_NO_ITEMS = ErrorDefinition(
        "SALE_HAS_NO_ITEMS",
        "Cannot finalize a sale without items",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    PAYMENT_METHOD_REQUIRED = ErrorDefinition(
        "PAYMENT_METHOD_REQUIRED",
        "Payment method is required",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    SALE_NOT_PENDING = ErrorDefinition(
        "SALE_NOT_PENDING",
        "Sale is no longer pending",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    INSUFFICIENT_STOCK = ErrorDefinition(
        "INSUFFICIENT_STOCK",
        "Insufficient stock",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    DB_UNAVAILABLE = ErrorDefinition(
        "DB_UNAVAILABLE",
        "Database unavailable",
        status.HTTP_503_SERVICE_UNAVAILABLE,
    )
    VALIDATION_ERROR = ErrorDefinition(
        "VALIDATION_ERROR",
        "Validation error",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    INTERNAL_ERROR = ErrorDefinition(
        "INTERNAL_ERROR",
        "Internal server error",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


class AppError(Exception):
    def __init__(self, error: ErrorDefinition, details: object | None = None):
        self.error = error
        self.details = details
        super().__init__(error.message)


def validation_failed(errors: list[str]) -> AppError:
    return AppError(ErrorCatalog.VALIDATION_ERROR, details={"errors": list(errors)})
