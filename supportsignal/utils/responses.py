from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi import HTTPException, Request

from supportsignal.core.exceptions import (
    AppError,
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    PermissionDeniedError,
    SessionExpiredError,
    ValidationError,
)
from supportsignal.schemas.common import ApiResponse, ErrorDetail, ResponseMeta


def _request_id(request: Optional[Request]) -> str:
    if request is not None and hasattr(request.state, "correlation_id"):
        return request.state.correlation_id
    return str(uuid4())


def _to_data(data: Any) -> Dict[str, Any]:
    if isinstance(data, dict):
        return data
    if hasattr(data, "model_dump"):
        return data.model_dump(mode="json")
    if isinstance(data, list):
        return {
            "items": [
                item.model_dump(mode="json") if hasattr(item, "model_dump") else item
                for item in data
            ]
        }
    if data is None:
        return {}
    return {"value": data}


def create_api_response(
    data: Any,
    message: str = "Operation successful",
    status: bool = True,
    request: Optional[Request] = None,
    api_version: str = "v1"
) -> Dict[str, Any]:
    """Create a standardized API response as a dictionary.

    Lists are wrapped as ``{"items": [...]}``; scalars as ``{"value": ...}``.
    """
    meta = ResponseMeta(
        timestamp=datetime.now(timezone.utc),
        request_id=_request_id(request),
        api_version=api_version
    )

    response = ApiResponse(
        status=status,
        message=message,
        data=_to_data(data),
        meta=meta
    )
    return response.model_dump(mode="json")


def create_error_detail(
    title: str,
    status: int,
    detail: str,
    request: Optional[Request] = None,
    instance: Optional[str] = None
) -> ErrorDetail:
    """Create a standardized error detail (RFC 7807)."""
    return ErrorDetail(
        title=title,
        status=status,
        detail=detail,
        instance=instance or (request.url.path if request else None),
        request_id=_request_id(request),
        timestamp=datetime.now(timezone.utc)
    )


_ERROR_STATUS = (
    (ValidationError, 400, "Validation Failed"),
    (InvalidCredentialsError, 401, "Authentication Failed"),
    (SessionExpiredError, 401, "Session Expired"),
    (PermissionDeniedError, 403, "Permission Denied"),
    (NotFoundError, 404, "Not Found"),
    (ConflictError, 409, "Conflict"),
)


def app_error_to_http(error: AppError, request: Optional[Request] = None) -> HTTPException:
    """Translate an application error into an HTTPException with an RFC 7807 body."""
    status_code, title = 500, "Internal Server Error"
    for error_type, code, error_title in _ERROR_STATUS:
        if isinstance(error, error_type):
            status_code, title = code, error_title
            break

    detail = create_error_detail(title=title, status=status_code, detail=error.message, request=request)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return HTTPException(status_code=status_code, detail=detail.model_dump(mode="json"), headers=headers)
