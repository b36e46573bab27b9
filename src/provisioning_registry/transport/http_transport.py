"""HTTP transport for the provisioning service REST API.

This module provides the request executor the registry client runs on. It
sends one request per call and hands back the raw status, body and headers;
interpreting them is left to the caller. Nothing is retried here: conditional
writes make blind retries unsafe.
"""

from __future__ import annotations

import socket
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from http.client import HTTPException
from typing import Callable, Dict, Mapping, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from loguru import logger

from ..errors import TransportError

ALLOWED_METHODS = frozenset({"GET", "PUT", "POST", "DELETE"})


@dataclass
class TransportResponse:
    """Raw response from the transport."""

    status_code: int
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class BaseTransport(ABC):
    """Request executor consumed by the registry client."""

    @abstractmethod
    def execute(self, method: str, path: str, headers: Mapping[str, str], body: bytes) -> TransportResponse:
        """Send one request.

        Args:
            method: One of GET, PUT, POST, DELETE
            path: Path relative to the service root, e.g. ``enrollments/dev-1``
            headers: Request headers
            body: Request body (may be empty)

        Returns:
            The response, whatever its status code

        Raises:
            TransportError: If no response could be obtained
        """


@dataclass
class TransportConfig:
    """Configuration for the HTTP transport."""

    service_url: str = ""  # e.g. https://my-dps.azure-devices-provisioning.net
    api_version: str = "2021-10-01"
    timeout_seconds: float = 30
    user_agent: str = "ProvisioningRegistry-Client/1.0.0"


class HttpTransport(BaseTransport):
    """urllib-based executor with pluggable ``Authorization`` header provider."""

    def __init__(
        self,
        config: TransportConfig,
        credential_provider: Optional[Callable[[], str]] = None,
    ):
        """Initialize the HTTP transport.

        Args:
            config: Transport configuration
            credential_provider: Callable returning the Authorization header value
        """
        if not config.service_url:
            raise TransportError("Transport requires a service URL")
        self.config = config
        self._credential_provider = credential_provider

    def build_url(self, path: str) -> str:
        base = self.config.service_url.rstrip("/")
        query = urlencode({"api-version": self.config.api_version})
        # '%' is safe so already-escaped path segments are not escaped twice
        return f"{base}/{quote(path.lstrip('/'), safe='/%')}?{query}"

    def _build_headers(self, headers: Mapping[str, str]) -> Dict[str, str]:
        request_headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.config.user_agent,
        }
        if self._credential_provider is not None:
            request_headers["Authorization"] = self._credential_provider()
        request_headers.update({str(k): str(v) for k, v in headers.items()})
        return request_headers

    def _open(self, req: Request) -> TransportResponse:
        try:
            with urlopen(req, timeout=self.config.timeout_seconds) as response:
                return TransportResponse(
                    status_code=response.status,
                    body=response.read() or b"",
                    headers=dict(response.headers.items()),
                )

        except HTTPError as e:
            # non-2xx is a valid response; the caller maps it
            try:
                error_body = e.read() or b""
            finally:
                e.close()
            return TransportResponse(
                status_code=e.code,
                body=error_body,
                headers=dict(e.headers.items()) if e.headers else {},
            )

    def execute(self, method: str, path: str, headers: Mapping[str, str], body: bytes) -> TransportResponse:
        method = method.upper()
        if method not in ALLOWED_METHODS:
            raise TransportError(f"Unsupported HTTP method: {method}")

        url = self.build_url(path)
        req = Request(
            url,
            data=body if body else None,
            headers=self._build_headers(headers),
            method=method,
        )

        try:
            # body reads happen inside, so a truncated error body is mapped too
            result = self._open(req)

        except HTTPException as e:
            logger.error(f"Malformed HTTP response on {method} {path}: {e!r}")
            raise TransportError(f"Malformed HTTP response: {e!r}", cause=e) from e

        except URLError as e:
            logger.error(f"Network error on {method} {path}: {e.reason}")
            raise TransportError(f"Network error: {e.reason}", cause=e) from e

        except (socket.timeout, TimeoutError) as e:
            logger.error(f"Timeout on {method} {path} after {self.config.timeout_seconds}s")
            raise TransportError(f"Request timed out after {self.config.timeout_seconds}s", cause=e) from e

        except OSError as e:
            logger.error(f"Connection error on {method} {path}: {e}")
            raise TransportError(f"Connection error: {e}", cause=e) from e

        logger.debug(f"{method} {path} -> {result.status_code}")
        return result


def create_default_transport(
    service_url: str,
    credential_provider: Optional[Callable[[], str]] = None,
    timeout_seconds: float = 30,
) -> HttpTransport:
    """Create an HTTP transport with default configuration.

    Args:
        service_url: Base URL of the provisioning service
        credential_provider: Callable returning the Authorization header value
        timeout_seconds: Request timeout

    Returns:
        Configured HTTP transport
    """
    config = TransportConfig(service_url=service_url, timeout_seconds=timeout_seconds)
    return HttpTransport(config, credential_provider)
