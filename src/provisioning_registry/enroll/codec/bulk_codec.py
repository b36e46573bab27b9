"""Wire codec for bulk enrollment operations.

Request body::

    {"mode": "create", "enrollments": [{...}, ...]}

Response body::

    {"isSuccessful": false, "errors": [{"registrationId": ..., "errorCode": ...,
                                        "errorStatus": ..., "errorMessage": ...}]}

Services differ on whether ``errors`` lists only failed items or every item;
both are accepted, and an entry without any error detail counts as success.
"""

from __future__ import annotations

import json
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ...errors import ProtocolViolation
from ..models import BulkOperationError, BulkOperationItemResult, BulkOperationMode, BulkOperationResult, Enrollment
from .entity_codec import enrollment_to_dict


def encode_bulk_operation(mode: BulkOperationMode, enrollments: Iterable[Enrollment]) -> bytes:
    """Serialize a bulk request, preserving enrollment order."""
    payload = {
        "mode": BulkOperationMode(mode).value,
        "enrollments": [enrollment_to_dict(enrollment) for enrollment in enrollments],
    }
    return json.dumps(payload).encode("utf-8")


def _is_failure(error: BulkOperationError) -> bool:
    return error.error_code is not None or bool(error.error_status) or bool(error.error_message)


def _parse_errors(raw_errors: list, body: bytes) -> Dict[str, BulkOperationError]:
    errors: Dict[str, BulkOperationError] = {}
    for raw in raw_errors:
        try:
            error = BulkOperationError.model_validate(raw)
        except PydanticValidationError as e:
            raise ProtocolViolation(f"Malformed bulk operation error entry: {e}", body) from e
        if _is_failure(error):
            # first report for an id wins
            errors.setdefault(error.registration_id, error)
    return errors


def decode_bulk_result(body: Optional[bytes], requested_ids: Iterable[str]) -> BulkOperationResult:
    """Parse a bulk response into one outcome per requested enrollment.

    Args:
        body: Raw response body
        requested_ids: Registration ids in request order

    Raises:
        ProtocolViolation: If the body is empty, not JSON, lacks ``isSuccessful``,
            or reports failure without a usable per-item error list
    """
    if not body:
        raise ProtocolViolation("Http response for bulkOperation cannot contain an empty body", body)

    try:
        data = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise ProtocolViolation(f"Http response for bulkOperation is not valid JSON: {e}", body) from e

    if not isinstance(data, dict):
        raise ProtocolViolation("Bulk operation result must be a JSON object", body)

    is_successful = data.get("isSuccessful")
    if not isinstance(is_successful, bool):
        raise ProtocolViolation("Bulk operation result is missing isSuccessful", body)

    raw_errors = data.get("errors")
    if raw_errors is None:
        raw_errors = []
    elif not isinstance(raw_errors, list):
        raise ProtocolViolation("Bulk operation result has a malformed errors list", body)

    errors = _parse_errors(raw_errors, body)
    if not is_successful and not errors:
        raise ProtocolViolation("Bulk operation reported failure without any per-item error", body)

    items: List[BulkOperationItemResult] = []
    seen = set()
    for registration_id in requested_ids:
        if registration_id in seen:
            continue
        seen.add(registration_id)
        items.append(BulkOperationItemResult(registration_id=registration_id, error=errors.get(registration_id)))

    # errors for ids the caller did not send are still surfaced
    for registration_id, error in errors.items():
        if registration_id not in seen:
            items.append(BulkOperationItemResult(registration_id=registration_id, error=error))

    return BulkOperationResult(is_successful=is_successful, items=items)
