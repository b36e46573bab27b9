"""Service credentials: connection string parsing and SAS token generation."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional
from urllib.parse import quote_plus

from loguru import logger

from ..errors import ValidationError

HOST_NAME = "HostName"
SHARED_ACCESS_KEY_NAME = "SharedAccessKeyName"
SHARED_ACCESS_KEY = "SharedAccessKey"


@dataclass(frozen=True)
class ConnectionString:
    """Parsed provisioning service connection string."""

    host_name: str
    shared_access_key_name: str
    shared_access_key: str

    @classmethod
    def parse(cls, connection_string: str) -> ConnectionString:
        """Parse ``HostName=...;SharedAccessKeyName=...;SharedAccessKey=...``.

        Raises:
            ValidationError: If the string is empty or a required part is missing
        """
        if not connection_string or not connection_string.strip():
            raise ValidationError("connection string cannot be null or empty.")

        parts: Dict[str, str] = {}
        for segment in connection_string.strip().split(";"):
            if not segment:
                continue
            key, sep, value = segment.partition("=")
            if not sep or not key.strip():
                raise ValidationError(f"Malformed connection string segment: {segment!r}")
            parts[key.strip()] = value.strip()

        missing = [name for name in (HOST_NAME, SHARED_ACCESS_KEY_NAME, SHARED_ACCESS_KEY) if not parts.get(name)]
        if missing:
            raise ValidationError(f"Connection string is missing: {', '.join(missing)}")

        try:
            base64.b64decode(parts[SHARED_ACCESS_KEY], validate=True)
        except binascii.Error as e:
            raise ValidationError("SharedAccessKey must be base64 encoded") from e

        return cls(
            host_name=parts[HOST_NAME],
            shared_access_key_name=parts[SHARED_ACCESS_KEY_NAME],
            shared_access_key=parts[SHARED_ACCESS_KEY],
        )

    @property
    def service_url(self) -> str:
        return f"https://{self.host_name}"


@dataclass
class SasToken:
    """Shared access signature with expiry tracking."""

    token: str
    expires_at: float  # epoch seconds

    def is_expired(self, margin_seconds: int = 0) -> bool:
        """Check if token is expired (with optional margin)."""
        return time.time() >= (self.expires_at - margin_seconds)

    def to_header(self) -> str:
        """Get authorization header value."""
        return self.token


def generate_sas_token(resource_uri: str, key_name: str, key: str, expiry: int) -> str:
    """Sign ``resource_uri`` until ``expiry`` (epoch seconds) with a base64 shared key."""
    encoded_uri = quote_plus(resource_uri)
    to_sign = f"{encoded_uri}\n{expiry}".encode("utf-8")
    digest = hmac.new(base64.b64decode(key), to_sign, hashlib.sha256).digest()
    signature = quote_plus(base64.b64encode(digest).decode("utf-8"))
    return f"SharedAccessSignature sr={encoded_uri}&sig={signature}&se={expiry}&skn={key_name}"


class SasTokenProvider:
    """Produces ``Authorization`` header values, refreshing before expiry."""

    def __init__(
        self,
        connection_string: ConnectionString,
        ttl_seconds: int = 3600,
        refresh_margin_seconds: int = 300,
        clock: Callable[[], float] = time.time,
    ):
        self.connection_string = connection_string
        self.ttl_seconds = ttl_seconds
        self.refresh_margin_seconds = refresh_margin_seconds
        self._clock = clock
        self._token: Optional[SasToken] = None

    def __call__(self) -> str:
        return self.get_token().to_header()

    def get_token(self) -> SasToken:
        if self._token is None or self._clock() >= self._token.expires_at - self.refresh_margin_seconds:
            expiry = int(self._clock()) + self.ttl_seconds
            token = generate_sas_token(
                self.connection_string.host_name,
                self.connection_string.shared_access_key_name,
                self.connection_string.shared_access_key,
                expiry,
            )
            self._token = SasToken(token=token, expires_at=float(expiry))
            logger.debug(f"Generated SAS token for {self.connection_string.host_name}, expires at {expiry}")
        return self._token
