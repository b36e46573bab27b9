"""Enrollment data models."""

from .bulk_models import BulkOperationError, BulkOperationItemResult, BulkOperationMode, BulkOperationResult
from .enrollment_models import Enrollment, ProvisioningStatus, QueryResult, QuerySpecification

__all__ = [
    "Enrollment",
    "ProvisioningStatus",
    "QuerySpecification",
    "QueryResult",
    "BulkOperationMode",
    "BulkOperationError",
    "BulkOperationItemResult",
    "BulkOperationResult",
]
