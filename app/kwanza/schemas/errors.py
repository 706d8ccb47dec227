from pydantic import BaseModel


class ApiErrorResponse(BaseModel):
    code: str
    message: str
    details: dict | None = None
    trace_id: str | None = None


class ApiValidationErrorItem(BaseModel):
    field: str | None = None
    message: str
    type: str
    loc: list[str | int] | None = None
    input: object | None = None


class ApiValidationErrorDetails(BaseModel):
    errors: list[ApiValidationErrorItem | str]


class ApiValidationErrorResponse(ApiErrorResponse):
    details: ApiValidationErrorDetails | dict | None = None


ERROR_RESPONSES = {
    401: {"model": ApiErrorResponse, "description": "Missing or invalid token"},
    403: {"model": ApiErrorResponse, "description": "Permission denied or inactive user"},
    404: {"model": ApiErrorResponse, "description": "Resource not found"},
    422: {"model": ApiValidationErrorResponse, "description": "Validation or business rule failure"},
    503: {"model": ApiErrorResponse, "description": "Database unavailable"},
}
