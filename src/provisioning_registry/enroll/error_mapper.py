"""Map non-2xx service responses to typed registry errors."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from http import HTTPStatus
from typing import Any, Dict, Optional, Tuple, Type

from loguru import logger

from ..errors import BadRequest, Conflict, NotFound, ServerError, ServiceError, Throttled, Unauthorized
from ..transport import TransportResponse

STATUS_ERRORS: Dict[int, Type[ServiceError]] = {
    400: BadRequest,
    401: Unauthorized,
    404: NotFound,
    409: Conflict,
    412: Conflict,
    429: Throttled,
}


def _reason_phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Unknown status"


def _error_object(body: Optional[bytes]) -> Optional[Dict[str, Any]]:
    if not body:
        return None
    try:
        data: Any = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def parse_error_body(body: Optional[bytes]) -> Tuple[Optional[str], Optional[str], Optional[str]]:
    """Extract ``(code, message, tracking_id)`` from a structured error body.

    Returns a tuple of Nones when the body is empty or not a JSON object.
    """
    data = _error_object(body)
    if data is None:
        return None, None, None

    code = data.get("errorCode", data.get("code", data.get("ErrorCode")))
    message = data.get("message", data.get("Message"))
    tracking_id = data.get("trackingId", data.get("TrackingId"))
    return (
        str(code) if code is not None else None,
        str(message) if message is not None else None,
        str(tracking_id) if tracking_id is not None else None,
    )


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Parse a Retry-After header given as delta-seconds or an HTTP date."""
    if not value:
        return None
    value = value.strip()
    try:
        return max(0.0, float(value))
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
    if when is None:
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())


def map_error_response(response: TransportResponse, operation: str = "request") -> ServiceError:
    """Build the typed error for a non-2xx response.

    Args:
        response: The transport response
        operation: Operation name used in log and error messages

    Returns:
        A ServiceError subclass chosen by status code
    """
    status = response.status_code
    code, message, tracking_id = parse_error_body(response.body)

    if not message:
        # raw text is only shown for bodies that are not a structured error object
        raw = ""
        if response.body and _error_object(response.body) is None:
            raw = response.body.decode("utf-8", errors="replace").strip()
        message = raw or f"{status} {_reason_phrase(status)}"

    if status in STATUS_ERRORS:
        error_cls = STATUS_ERRORS[status]
    elif 500 <= status < 600:
        error_cls = ServerError
    else:
        error_cls = ServiceError

    logger.warning(f"{operation} failed with HTTP {status}: {message}")

    if error_cls is Throttled:
        return Throttled(
            message,
            status,
            code=code,
            tracking_id=tracking_id,
            retry_after=parse_retry_after(response.header("Retry-After")),
        )
    return error_cls(message, status, code=code, tracking_id=tracking_id)


def raise_for_status(response: TransportResponse, operation: str = "request") -> TransportResponse:
    """Return the response unchanged when 2xx, otherwise raise the mapped error."""
    if not response.is_success:
        raise map_error_response(response, operation)
    return response
