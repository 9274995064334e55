"""
cms-feed — Response envelopes.

    success: {"success": true,  "data": ...}
    failure: {"success": false, "error": {"code", "message", "details"?}}
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi.responses import JSONResponse

METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
UNAUTHORIZED = "UNAUTHORIZED"
CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
FETCH_FAILED = "FETCH_FAILED"
INTERNAL_ERROR = "INTERNAL_ERROR"


def success_body(data: Any) -> dict:
    return {"success": True, "data": data}


def error_body(code: str, message: str, details: Optional[list[dict]] = None) -> dict:
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"success": False, "error": error}


def items_data(items: list[dict], total_count: Optional[int]) -> dict:
    data: dict[str, Any] = {"items": items}
    if total_count is not None:
        data["totalCount"] = total_count
    return data


def send_success(data: Any, status: int = 200, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status, content=success_body(data), headers=headers)


def send_error(
    code: str,
    message: str,
    status: int = 400,
    details: Optional[list[dict]] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content=error_body(code, message, details),
        headers=headers,
    )
