"""Provisioning Registry - client for the enrollment registry of a device provisioning service."""

from .config import get_config_manager, setup_logging
from .enroll import (
    BulkOperationMode,
    BulkOperationResult,
    Enrollment,
    EnrollmentRegistryClient,
    ProvisioningStatus,
    Query,
    QueryResult,
    QuerySpecification,
)
from .errors import (
    BadRequest,
    Conflict,
    ErrorKind,
    NotFound,
    ProtocolViolation,
    QueryExhaustedError,
    RegistryError,
    RegistryOutcome,
    ServerError,
    ServiceError,
    Throttled,
    TransportError,
    Unauthorized,
    ValidationError,
)

__version__ = "1.0.0"

__all__ = [
    "EnrollmentRegistryClient",
    "Query",
    "QueryResult",
    "QuerySpecification",
    "Enrollment",
    "ProvisioningStatus",
    "BulkOperationMode",
    "BulkOperationResult",
    "ErrorKind",
    "RegistryError",
    "RegistryOutcome",
    "ValidationError",
    "QueryExhaustedError",
    "TransportError",
    "ProtocolViolation",
    "ServiceError",
    "BadRequest",
    "Unauthorized",
    "NotFound",
    "Conflict",
    "Throttled",
    "ServerError",
    "get_config_manager",
    "setup_logging",
]
