"""Enrollment registry client for the provisioning service.

This module handles the individual enrollment APIs:
- Create, update, get and delete single enrollments with etag concurrency
- Bulk create/update/delete of many enrollments in one request
- Creating paginated enrollment queries
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, Optional, Union
from urllib.parse import quote

from loguru import logger

from ...config.settings import RegistryConfig
from ...errors import ValidationError
from ...transport import BaseTransport, ConnectionString, HttpTransport, SasTokenProvider, TransportResponse
from ..codec import decode_bulk_result, decode_enrollment, encode_bulk_operation, encode_enrollment
from ..error_mapper import raise_for_status
from ..models import BulkOperationMode, BulkOperationResult, Enrollment, QuerySpecification
from ..query import Query

PATH_ENROLLMENTS = "enrollments"
CONDITION_KEY = "If-Match"


def _enrollment_path(registration_id: str) -> str:
    return f"{PATH_ENROLLMENTS}/{quote(registration_id, safe='')}"


def _condition_headers(etag: Optional[str]) -> Dict[str, str]:
    if etag:
        return {CONDITION_KEY: etag}
    return {}


class EnrollmentRegistryClient:
    """Stateless façade over the transport for individual enrollment records.

    Safe to share between threads: each call builds its own headers and body.
    Errors are never retried here; see ``provisioning_registry.errors``.
    """

    def __init__(self, transport: BaseTransport):
        if transport is None:
            raise ValidationError("transport cannot be null.")
        self._transport = transport

    @classmethod
    def from_connection_string(
        cls,
        connection_string: Optional[str] = None,
        config: Optional[RegistryConfig] = None,
    ) -> EnrollmentRegistryClient:
        """Create a client using HTTPS and SAS authentication.

        Args:
            connection_string: ``HostName=...;SharedAccessKeyName=...;SharedAccessKey=...``;
                defaults to ``config.connection_string`` (``PROVISIONING_CONNECTION_STRING``)
            config: Optional configuration; the service URL defaults to the connection string host

        Raises:
            ValidationError: If no connection string is available or it is malformed
        """
        config = config or RegistryConfig()
        connection_string = connection_string or config.connection_string
        if not connection_string:
            raise ValidationError("connection string cannot be null or empty.")
        parsed = ConnectionString.parse(connection_string)
        credentials = SasTokenProvider(
            parsed,
            ttl_seconds=config.sas_token_ttl_seconds,
            refresh_margin_seconds=config.sas_token_refresh_margin,
        )
        transport = HttpTransport(config.get_transport_config(config.service_url or parsed.service_url), credentials)
        logger.info(f"Created enrollment registry client for {parsed.host_name}")
        return cls(transport)

    def _send(self, method: str, path: str, headers: Dict[str, str], body: bytes, operation: str) -> TransportResponse:
        logger.debug(f"{operation}: {method} {path}")
        response = self._transport.execute(method, path, headers, body)
        return raise_for_status(response, operation)

    def create_or_update(self, enrollment: Enrollment) -> Enrollment:
        """Create or update an enrollment record.

        A non-empty etag on the enrollment makes the write conditional on it.

        Args:
            enrollment: The enrollment to write

        Returns:
            The service copy, with refreshed etag and timestamps

        Raises:
            ValidationError: If the enrollment or its registration id is missing
            TransportError: If the request could not be sent
            ServiceError: If the service rejected the write (Conflict on etag mismatch)
            ProtocolViolation: If the service answered without a usable body
        """
        if enrollment is None:
            raise ValidationError("enrollment cannot be null.")
        if not enrollment.registration_id:
            raise ValidationError("registrationId cannot be null or empty.")

        path = _enrollment_path(enrollment.registration_id)
        response = self._send("PUT", path, _condition_headers(enrollment.etag), encode_enrollment(enrollment), "createOrUpdate")

        result = decode_enrollment(response.body, "createOrUpdate")
        logger.info(f"Enrollment {result.registration_id} written, etag={result.etag}")
        return result

    def get(self, registration_id: str) -> Enrollment:
        """Get an enrollment record.

        Raises:
            ValidationError: If the registration id is empty
            NotFound: If the record does not exist
        """
        if not registration_id:
            raise ValidationError("registrationId cannot be null or empty.")

        response = self._send("GET", _enrollment_path(registration_id), {}, b"", "get")
        return decode_enrollment(response.body, "get")

    def delete(self, enrollment: Union[Enrollment, str], etag: Optional[str] = None) -> None:
        """Delete an enrollment record.

        Accepts either an ``Enrollment`` (its own etag is used) or a
        registration id with an optional etag. An empty etag deletes
        unconditionally.

        Raises:
            ValidationError: If the enrollment or registration id is missing
            Conflict: If the etag does not match the service's current one
            NotFound: If the record does not exist
        """
        if enrollment is None:
            raise ValidationError("enrollment cannot be null.")

        if isinstance(enrollment, Enrollment):
            registration_id = enrollment.registration_id
            etag = enrollment.etag if etag is None else etag
        else:
            registration_id = enrollment

        if not registration_id:
            raise ValidationError("registrationId cannot be null or empty.")

        self._send("DELETE", _enrollment_path(registration_id), _condition_headers(etag), b"", "delete")
        logger.info(f"Enrollment {registration_id} deleted")

    def bulk_operation(self, mode: BulkOperationMode, enrollments: Iterable[Enrollment]) -> BulkOperationResult:
        """Apply one mode to many enrollments in a single request.

        Returns:
            One outcome per enrollment in request order; items without an
            error succeeded

        Raises:
            ValidationError: If the mode is missing or the collection is empty
            ProtocolViolation: If the service answered without a usable result
        """
        if mode is None:
            raise ValidationError("bulkOperationMode cannot be null.")
        try:
            mode = BulkOperationMode(mode)
        except ValueError as e:
            raise ValidationError(f"Unknown bulkOperationMode: {mode}") from e

        if enrollments is None:
            raise ValidationError("enrollments cannot be null or empty.")
        items = list(enrollments)
        if not items:
            raise ValidationError("enrollments cannot be null or empty.")
        for item in items:
            if item is None or not item.registration_id:
                raise ValidationError("every enrollment in a bulk operation needs a registrationId.")

        response = self._send("POST", PATH_ENROLLMENTS, {}, encode_bulk_operation(mode, items), "bulkOperation")
        result = decode_bulk_result(response.body, [item.registration_id for item in items])
        logger.info(f"Bulk {mode.value} of {len(items)} enrollments: successful={result.is_successful}, failed={len(result.failed_ids)}")
        return result

    def create_query(self, query_specification: QuerySpecification, page_size: int = 0) -> Query:
        """Create a lazy query cursor over the enrollment collection.

        Args:
            query_specification: Filter expression
            page_size: Items per page, 0 for the service default

        Raises:
            ValidationError: If the specification is missing or page size is negative
        """
        if query_specification is None:
            raise ValidationError("querySpecification cannot be null.")
        if page_size is None or page_size < 0:
            raise ValidationError("pageSize cannot be negative.")

        return Query(self._transport, PATH_ENROLLMENTS, query_specification, page_size)

    def query_all(self, query_specification: QuerySpecification, page_size: int = 0) -> Iterator[Enrollment]:
        """Run a fresh query to the end, yielding every enrollment in service order."""
        query = self.create_query(query_specification, page_size)
        return query.iter_items()
