"""Unified API response wrapper.

All API endpoints return this format:
{
    "code": 0,           // 0=success, non-0=error code
    "message": "success",
    "data": { ... },     // null on error
    "timestamp": "...",
    "request_id": "..."
}
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.shuk_common.errors import OperationResult


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: str = Field(default_factory=lambda: f"req_{uuid.uuid4().hex[:12]}")


def success_response(data: Any = None, message: str = "success") -> ApiResponse:
    return ApiResponse(code=0, message=message, data=data)


def error_response(code: int, message: str) -> ApiResponse:
    return ApiResponse(code=code, message=message, data=None)


def with_request_id(resp: ApiResponse, request: Request) -> ApiResponse:
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


def result_response(result: OperationResult, request: Request) -> JSONResponse:
    """Render a mutator outcome; failures keep their message verbatim."""
    if result.success:
        resp = success_response(result.data or None, message=result.message)
        status = 200
    else:
        resp = error_response(result.error_code, result.message)
        resp.data = {"reason": result.code.value if result.code else None}
        status = result.http_status
    with_request_id(resp, request)
    return JSONResponse(status_code=status, content=resp.model_dump(mode="json"))
