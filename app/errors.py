from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

INVALID_DATE = "INVALID_DATE"
INVALID_RANGE = "INVALID_RANGE"
INVALID_PAGINATION = "INVALID_PAGINATION"
DUPLICATE_CHECK_IN = "DUPLICATE_CHECK_IN"
DUPLICATE_CHECK_OUT = "DUPLICATE_CHECK_OUT"
MISSING_CHECK_IN = "MISSING_CHECK_IN"
NOT_FOUND = "NOT_FOUND"


class ApiError(Exception):
    def __init__(self, status_code: int, code: str, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message


def get_request_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        return str(request_id)
    return "unknown"


def error_response(request: Request, *, status_code: int, code: str, message: str) -> JSONResponse:
    payload = {
        "error": {
            "code": code,
            "message": message,
            "request_id": get_request_id(request),
        }
    }
    return JSONResponse(status_code=status_code, content=payload)
