"""Error taxonomy for the provisioning registry client.

Every failure raised by this package derives from ``RegistryError`` and carries
an ``ErrorKind`` discriminant so callers can branch on the kind of failure:

- ValidationError: a caller argument broke a precondition (never hits the network)
- TransportError: the HTTP executor itself failed (connection, timeout, TLS)
- ServiceError: the service answered with a non-2xx status
- ProtocolViolation: the service answered 2xx with a body the client cannot use
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional


class ErrorKind(str, Enum):
    """Machine-distinguishable failure kinds."""

    VALIDATION = "validation"
    TRANSPORT = "transport"
    SERVICE = "service"
    PROTOCOL_VIOLATION = "protocol_violation"


class RegistryError(Exception):
    """Base error for all registry client failures."""

    kind: ErrorKind = ErrorKind.SERVICE

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(RegistryError, ValueError):
    """A caller-supplied argument violates a precondition."""

    kind = ErrorKind.VALIDATION


class QueryExhaustedError(ValidationError):
    """``next()`` was called on a query that has no more pages."""


class TransportError(RegistryError):
    """The transport executor failed before a response was received."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ProtocolViolation(RegistryError):
    """The service returned a 2xx response that breaks the client contract."""

    kind = ErrorKind.PROTOCOL_VIOLATION

    def __init__(self, message: str, body: Optional[bytes] = None):
        super().__init__(message)
        self.body = body


class ServiceError(RegistryError):
    """The service returned a non-2xx status.

    Attributes:
        status: HTTP status code
        code: Service error code from the structured body, if any
        tracking_id: Service tracking id from the structured body, if any
    """

    kind = ErrorKind.SERVICE

    def __init__(
        self,
        message: str,
        status: int,
        code: Optional[str] = None,
        tracking_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.status = status
        self.code = code
        self.tracking_id = tracking_id

    def __str__(self) -> str:
        base = f"[{self.status}] {self.message}"
        if self.code:
            base = f"{base} (code: {self.code})"
        return base


class BadRequest(ServiceError):
    """400: the service rejected the request content."""


class Unauthorized(ServiceError):
    """401: missing or invalid credentials."""


class NotFound(ServiceError):
    """404: the enrollment does not exist."""


class Conflict(ServiceError):
    """409/412: etag mismatch or conflicting record state."""


class Throttled(ServiceError):
    """429: the caller is being rate limited."""

    def __init__(
        self,
        message: str,
        status: int,
        code: Optional[str] = None,
        tracking_id: Optional[str] = None,
        retry_after: Optional[float] = None,
    ):
        super().__init__(message, status, code, tracking_id)
        self.retry_after = retry_after


class ServerError(ServiceError):
    """5xx: the service failed internally."""


@dataclass
class RegistryOutcome:
    """Tagged result of a registry call, for callers that prefer values over exceptions."""

    ok: bool
    value: Any = None
    kind: Optional[ErrorKind] = None
    status: Optional[int] = None
    code: Optional[str] = None
    message: str = ""
    error: Optional[RegistryError] = None

    @classmethod
    def capture(cls, operation: Callable[..., Any], *args: Any, **kwargs: Any) -> RegistryOutcome:
        """Run a registry operation and fold its result or failure into an outcome."""
        try:
            value = operation(*args, **kwargs)
        except RegistryError as e:
            return cls.from_error(e)
        return cls(ok=True, value=value)

    @classmethod
    def from_error(cls, error: RegistryError) -> RegistryOutcome:
        return cls(
            ok=False,
            kind=error.kind,
            status=getattr(error, "status", None),
            code=getattr(error, "code", None),
            message=error.message,
            error=error,
        )
