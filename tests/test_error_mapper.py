"""Tests for mapping service responses to typed errors."""

import json

import pytest

from provisioning_registry import (
    BadRequest,
    Conflict,
    NotFound,
    ServerError,
    ServiceError,
    Throttled,
    Unauthorized,
)
from provisioning_registry.enroll.error_mapper import map_error_response, parse_retry_after, raise_for_status
from provisioning_registry.transport import TransportResponse


@pytest.mark.parametrize(
    "status,expected",
    [
        (400, BadRequest),
        (401, Unauthorized),
        (404, NotFound),
        (409, Conflict),
        (412, Conflict),
        (429, Throttled),
        (500, ServerError),
        (503, ServerError),
    ],
)
def test_status_selects_error_type(status, expected):
    error = map_error_response(TransportResponse(status_code=status))

    assert type(error) is expected
    assert error.status == status


def test_unlisted_status_falls_back_to_service_error():
    error = map_error_response(TransportResponse(status_code=403))

    assert type(error) is ServiceError
    assert error.message == "403 Forbidden"


def test_structured_body_is_parsed():
    body = json.dumps({"errorCode": 400004, "trackingId": "abc", "message": "Bad attestation"}).encode("utf-8")

    error = map_error_response(TransportResponse(status_code=400, body=body))

    assert error.code == "400004"
    assert error.message == "Bad attestation"
    assert error.tracking_id == "abc"
    assert str(error) == "[400] Bad attestation (code: 400004)"


def test_structured_body_without_message_uses_reason_phrase():
    body = json.dumps({"errorCode": 400001, "trackingId": "t-1"}).encode("utf-8")

    error = map_error_response(TransportResponse(status_code=400, body=body))

    assert error.message == "400 Bad Request"
    assert error.code == "400001"
    assert error.tracking_id == "t-1"


def test_plain_text_body_becomes_message():
    error = map_error_response(TransportResponse(status_code=502, body=b"upstream gone"))

    assert error.code is None
    assert error.message == "upstream gone"


def test_throttled_carries_retry_after():
    response = TransportResponse(status_code=429, headers={"retry-after": "12"})

    error = map_error_response(response)

    assert error.retry_after == 12.0


def test_throttled_without_retry_after():
    assert map_error_response(TransportResponse(status_code=429)).retry_after is None


def test_parse_retry_after_http_date_in_past():
    assert parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT") == 0.0
    assert parse_retry_after("soon") is None


def test_raise_for_status_passes_success_through():
    response = TransportResponse(status_code=204)

    assert raise_for_status(response) is response
