# pocketbook/responses.py
"""JSON envelope shared by every route: {success, data?, message?, error?, count?, total?}."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse


def ok(
    data: Any = None,
    *,
    message: Optional[str] = None,
    count: Optional[int] = None,
    total: Optional[float] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if count is not None:
        body["count"] = count
    if total is not None:
        body["total"] = total
    if data is not None:
        body["data"] = data
    return body


def fail(status_code: int, message: str, error: Optional[str] = None) -> JSONResponse:
    body: Dict[str, Any] = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return JSONResponse(status_code=status_code, content=body)


def money(value: float) -> float:
    """Round a derived amount or percentage for output."""
    return round(float(value), 2)
