"""Error taxonomy and HTTP mapping.

Every error leaves the service as `{"error": {"code", "message", "details"?}}`.
The authorization policy only ever produces UNAUTHORIZED, FORBIDDEN and
INVALID_USER; the remaining codes belong to request handlers.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from fastapi import HTTPException, status


class ErrorCode(str, Enum):
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    INVALID_USER = "INVALID_USER"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    REPORT_NOT_FOUND = "REPORT_NOT_FOUND"
    COMMENT_NOT_FOUND = "COMMENT_NOT_FOUND"
    EMPLOYEE_NOT_FOUND = "EMPLOYEE_NOT_FOUND"
    CUSTOMER_NOT_FOUND = "CUSTOMER_NOT_FOUND"
    REPORT_ALREADY_EXISTS = "REPORT_ALREADY_EXISTS"
    EMAIL_ALREADY_EXISTS = "EMAIL_ALREADY_EXISTS"
    CUSTOMER_IN_USE = "CUSTOMER_IN_USE"
    EMPLOYEE_IN_USE = "EMPLOYEE_IN_USE"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.INVALID_USER: status.HTTP_400_BAD_REQUEST,
    ErrorCode.VALIDATION_ERROR: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.REPORT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.COMMENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.EMPLOYEE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.CUSTOMER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.REPORT_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorCode.EMAIL_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorCode.CUSTOMER_IN_USE: status.HTTP_409_CONFLICT,
    ErrorCode.EMPLOYEE_IN_USE: status.HTTP_409_CONFLICT,
    ErrorCode.INTERNAL_SERVER_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.SERVICE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


class ApiError(HTTPException):
    """HTTPException carrying a taxonomy code and a user-facing message."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        *,
        details: Optional[list[dict[str, str]]] = None,
    ) -> None:
        super().__init__(status_code=HTTP_STATUS[code], detail=message)
        self.code = code
        self.message = message
        self.details = details

    def to_body(self) -> dict[str, Any]:
        return error_body(self.code, self.message, details=self.details)


def error_body(
    code: ErrorCode,
    message: str,
    *,
    details: Optional[list[dict[str, str]]] = None,
) -> dict[str, Any]:
    err: dict[str, Any] = {"code": code.value, "message": message}
    if details:
        err["details"] = details
    return {"error": err}


def validation_error(field: str, message: str) -> ApiError:
    return ApiError(
        ErrorCode.VALIDATION_ERROR,
        "入力内容に誤りがあります",
        details=[{"field": field, "message": message}],
    )


def validation_details(errors: list[dict[str, Any]], *, skip_loc_prefix: bool = False) -> list[dict[str, str]]:
    """Flatten pydantic errors into [{"field", "message"}]; ValueError texts pass through verbatim."""
    details: list[dict[str, str]] = []
    for err in errors:
        loc = list(err.get("loc", ()))
        if skip_loc_prefix and loc and loc[0] in ("body", "query", "path"):
            loc = loc[1:]
        ctx_error = (err.get("ctx") or {}).get("error")
        message = str(ctx_error) if ctx_error is not None else str(err.get("msg", ""))
        details.append({"field": ".".join(str(p) for p in loc), "message": message})
    return details


def invalid_input(errors: list[dict[str, Any]], *, skip_loc_prefix: bool = False) -> ApiError:
    return ApiError(
        ErrorCode.VALIDATION_ERROR,
        "入力内容に誤りがあります",
        details=validation_details(errors, skip_loc_prefix=skip_loc_prefix),
    )
