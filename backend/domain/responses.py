"""
Standard API response models and helpers for consistent response formatting.

All endpoints should use these helpers to ensure consistent response envelopes:
- Success: { "success": true, "data": <payload>, "message": "...", "meta": {...} }
- Error: { "success": false, "error": { "code": "...", "message": "...", "details": {...} } }
"""
import math
from typing import Any
from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Standard error detail structure."""
    code: str = Field(..., description="Error code (e.g., 'notfound', 'validation_error')")
    message: str = Field(..., description="Human-readable error message")
    details: Any | None = Field(default=None, description="Additional error context")


class StandardErrorResponse(BaseModel):
    """Standard error response envelope."""
    success: bool = Field(False, description="Always false for errors")
    error: ErrorDetail = Field(..., description="Error details")


def success_response(
    data: Any = None,
    meta: dict[str, Any] | None = None,
    message: str | None = None,
) -> dict[str, Any]:
    """
    Create a standardized success response.

    Args:
        data: The response payload
        meta: Optional metadata (pagination, totals, etc.)
        message: Optional human-readable message

    Returns:
        dict: { "success": true, "data": <data>, "message": <message>, "meta": <meta> }
    """
    response: dict[str, Any] = {"success": True}
    if message:
        response["message"] = message
    if data is not None:
        response["data"] = data
    if meta:
        response["meta"] = meta
    return response


def pagination_meta(page: int, limit: int, total: int, total_key: str = "total") -> dict[str, Any]:
    """Build page-based pagination metadata; totalPages is ceil(total / limit)."""
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "currentPage": page,
        "totalPages": total_pages,
        total_key: total,
        "hasNextPage": page < total_pages,
        "hasPrevPage": page > 1,
    }


def paginated_response(
    items: list[Any],
    *,
    key: str,
    page: int,
    limit: int,
    total: int,
    total_key: str = "total",
) -> dict[str, Any]:
    """
    Create a standardized paginated response.

    Args:
        items: List of items for this page
        key: Name of the list inside ``data`` (e.g. "products", "orders")
        page: 1-based page number
        limit: Number of items per page
        total: Total number of matching items
        total_key: Name of the total counter inside ``pagination``

    Returns:
        dict: { "success": true, "data": { <key>: [...], "pagination": {...} } }
    """
    return success_response(
        data={
            key: items,
            "pagination": pagination_meta(page, limit, total, total_key=total_key),
        }
    )


def error_payload(code: str, message: str, details: Any = None) -> dict[str, Any]:
    """Error envelope used by the global exception handlers in main.py."""
    envelope = StandardErrorResponse(error=ErrorDetail(code=code, message=message, details=details))
    return envelope.model_dump()
