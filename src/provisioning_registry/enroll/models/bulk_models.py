"""Pydantic models for bulk enrollment operations."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class BulkOperationMode(str, Enum):
    """How the service treats every item of one bulk request."""

    CREATE = "create"
    UPDATE = "update"
    UPDATE_IF_MATCH_ETAG = "updateIfMatchETag"
    DELETE = "delete"


class BulkOperationError(BaseModel):
    """Failure details for a single item of a bulk operation."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    registration_id: str = Field(..., alias="registrationId", min_length=1)
    error_code: Optional[int] = Field(None, alias="errorCode")
    error_status: Optional[str] = Field(None, alias="errorStatus")
    error_message: Optional[str] = Field(None, alias="errorMessage")


class BulkOperationItemResult(BaseModel):
    """Outcome for one enrollment of a bulk operation. No error means success."""

    registration_id: str
    error: Optional[BulkOperationError] = None

    @property
    def is_successful(self) -> bool:
        return self.error is None


class BulkOperationResult(BaseModel):
    """Whole-batch result: overall flag plus one outcome per enrollment, in request order."""

    is_successful: bool
    items: List[BulkOperationItemResult] = Field(default_factory=list)

    @property
    def errors(self) -> List[BulkOperationError]:
        return [item.error for item in self.items if item.error is not None]

    @property
    def failed_ids(self) -> List[str]:
        return [item.registration_id for item in self.items if not item.is_successful]

    def get(self, registration_id: str) -> Optional[BulkOperationItemResult]:
        for item in self.items:
            if item.registration_id == registration_id:
                return item
        return None
