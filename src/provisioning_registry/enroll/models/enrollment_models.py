"""Pydantic models for enrollment records and query structures."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProvisioningStatus(str, Enum):
    """Desired provisioning status of an enrollment."""

    ENABLED = "enabled"
    DISABLED = "disabled"


class Enrollment(BaseModel):
    """Individual enrollment record.

    Attestation, initial twin and registration state are opaque mappings owned
    by other subsystems; the client passes them through untouched. Unknown wire
    fields are kept so a get-modify-put cycle does not drop them.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True, extra="allow")

    registration_id: str = Field(..., alias="registrationId", frozen=True, description="Unique enrollment key")
    device_id: Optional[str] = Field(None, alias="deviceId", description="Desired device id in the hub")
    attestation: Optional[Dict[str, Any]] = Field(None, description="Attestation mechanism reference")
    iot_hub_host_name: Optional[str] = Field(None, alias="iotHubHostName", description="Target hub host name")
    provisioning_status: Optional[ProvisioningStatus] = Field(None, alias="provisioningStatus", description="Desired provisioning status")
    initial_twin: Optional[Dict[str, Any]] = Field(None, alias="initialTwin", description="Initial twin state")
    registration_state: Optional[Dict[str, Any]] = Field(None, alias="registrationState", description="Read-only registration state")
    etag: Optional[str] = Field(None, description="Opaque server-assigned version token")
    created_time: Optional[datetime] = Field(None, alias="createdDateTimeUtc", description="Server-assigned creation time")
    last_updated_time: Optional[datetime] = Field(None, alias="lastUpdatedDateTimeUtc", description="Server-assigned update time")


class QuerySpecification(BaseModel):
    """Caller-owned filter expression for an enrollment query."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    query: str = Field(..., description="Query filter expression, e.g. SELECT * FROM enrollments")
    order_by: Optional[str] = Field(None, alias="orderBy", description="Optional ordering clause")


class QueryResult(BaseModel):
    """One page of query results."""

    type: str = Field(default="enrollment", description="Item type reported by the service")
    items: List[Enrollment] = Field(default_factory=list)
    continuation_token: Optional[str] = Field(None, description="Opaque cursor for the next page")
