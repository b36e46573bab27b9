"""HTTP transport module for talking to the provisioning service."""

from .auth import ConnectionString, SasToken, SasTokenProvider, generate_sas_token
from .http_transport import BaseTransport, HttpTransport, TransportConfig, TransportResponse, create_default_transport

__all__ = [
    "BaseTransport",
    "HttpTransport",
    "TransportConfig",
    "TransportResponse",
    "create_default_transport",
    "ConnectionString",
    "SasToken",
    "SasTokenProvider",
    "generate_sas_token",
]
