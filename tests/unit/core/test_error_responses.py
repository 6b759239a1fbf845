"""Tests for response envelopes and application error translation."""

import pytest

from supportsignal.core.exceptions import (
    AppError,
    ConflictError,
    DatabaseError,
    InvalidCredentialsError,
    NotFoundError,
    PermissionDeniedError,
    SessionExpiredError,
    ValidationError,
)
from supportsignal.utils.responses import app_error_to_http, create_api_response


@pytest.mark.parametrize(
    "error, status_code",
    [
        (ValidationError("bad"), 400),
        (InvalidCredentialsError("bad"), 401),
        (SessionExpiredError("bad"), 401),
        (PermissionDeniedError("bad"), 403),
        (NotFoundError("bad"), 404),
        (ConflictError("bad"), 409),
        (DatabaseError("bad"), 500),
        (AppError("bad"), 500),
    ],
)
def test_app_error_status_mapping(error, status_code):
    http_error = app_error_to_http(error)

    assert http_error.status_code == status_code
    assert http_error.detail["status"] == status_code
    assert http_error.detail["detail"] == "bad"


def test_unauthorized_errors_carry_bearer_challenge():
    assert app_error_to_http(SessionExpiredError("x")).headers == {"WWW-Authenticate": "Bearer"}
    assert app_error_to_http(NotFoundError("x")).headers is None


def test_list_data_is_wrapped_in_items():
    body = create_api_response(data=[{"a": 1}], message="listed")

    assert body["status"] is True
    assert body["message"] == "listed"
    assert body["data"] == {"items": [{"a": 1}]}
    assert body["meta"]["api_version"] == "v1"
