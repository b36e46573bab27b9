"""Enrollment package: registry client, query cursor, codecs and models."""

from .client.registry_client import EnrollmentRegistryClient
from .models import (
    BulkOperationError,
    BulkOperationItemResult,
    BulkOperationMode,
    BulkOperationResult,
    Enrollment,
    ProvisioningStatus,
    QueryResult,
    QuerySpecification,
)
from .query import Query

__all__ = [
    "EnrollmentRegistryClient",
    "Query",
    "Enrollment",
    "ProvisioningStatus",
    "QuerySpecification",
    "QueryResult",
    "BulkOperationMode",
    "BulkOperationError",
    "BulkOperationItemResult",
    "BulkOperationResult",
]
