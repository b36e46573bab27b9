"""Wire codec for individual enrollment records."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ...errors import ProtocolViolation
from ..models import Enrollment


def enrollment_to_dict(enrollment: Enrollment) -> Dict[str, Any]:
    """Convert an enrollment to its JSON-ready wire mapping (camelCase, no nulls)."""
    return enrollment.model_dump(mode="json", by_alias=True, exclude_none=True)


def enrollment_from_dict(data: Any) -> Enrollment:
    """Build an enrollment from a decoded wire mapping.

    Raises:
        ProtocolViolation: If the mapping is not a valid enrollment
    """
    if not isinstance(data, dict):
        raise ProtocolViolation(f"Enrollment must be a JSON object, got {type(data).__name__}")
    try:
        enrollment = Enrollment.model_validate(data)
    except PydanticValidationError as e:
        raise ProtocolViolation(f"Invalid enrollment in response: {e}") from e
    if not enrollment.registration_id:
        raise ProtocolViolation("Enrollment in response has an empty registrationId")
    return enrollment


def encode_enrollment(enrollment: Enrollment) -> bytes:
    """Serialize an enrollment to a UTF-8 JSON request body."""
    return json.dumps(enrollment_to_dict(enrollment)).encode("utf-8")


def _load_json(body: Optional[bytes], operation: str) -> Any:
    if not body:
        raise ProtocolViolation(f"Http response for {operation} cannot contain an empty body", body)
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise ProtocolViolation(f"Http response for {operation} is not valid JSON: {e}", body) from e


def decode_enrollment(body: Optional[bytes], operation: str = "enrollment") -> Enrollment:
    """Parse a response body into an enrollment.

    Args:
        body: Raw response body
        operation: Operation name used in error messages

    Raises:
        ProtocolViolation: If the body is empty or not a valid enrollment
    """
    return enrollment_from_dict(_load_json(body, operation))


def decode_enrollment_page(body: Optional[bytes], operation: str = "query") -> List[Enrollment]:
    """Parse a query page body (a JSON array of enrollments)."""
    data = _load_json(body, operation)
    if not isinstance(data, list):
        raise ProtocolViolation(f"Http response for {operation} must be a JSON array", body)
    return [enrollment_from_dict(item) for item in data]
