import itertools
import json
from typing import Dict, List, Mapping, Optional
from urllib.parse import unquote

import pytest

from provisioning_registry.enroll import EnrollmentRegistryClient
from provisioning_registry.transport import BaseTransport, TransportResponse

TIMESTAMP = "2026-01-01T00:00:00Z"


def _json_response(status: int, payload, headers: Optional[Dict[str, str]] = None) -> TransportResponse:
    return TransportResponse(status_code=status, body=json.dumps(payload).encode("utf-8"), headers=headers or {})


def _error(status: int, code: int, message: str) -> TransportResponse:
    return _json_response(status, {"errorCode": code, "trackingId": f"track-{code}", "message": message})


class FakeProvisioningService(BaseTransport):
    """In-memory stand-in for the provisioning service REST API."""

    def __init__(self):
        self.records: Dict[str, dict] = {}
        self.requests: List[tuple] = []
        self.list_all_bulk_items = False
        self.leading_empty_pages = 0
        self._etags = itertools.count(1)

    def _new_etag(self) -> str:
        return f'"etag-{next(self._etags)}"'

    def _write(self, registration_id: str, data: dict) -> dict:
        existing = self.records.get(registration_id)
        record = dict(data)
        record["registrationId"] = registration_id
        record["etag"] = self._new_etag()
        record["createdDateTimeUtc"] = existing["createdDateTimeUtc"] if existing else TIMESTAMP
        record["lastUpdatedDateTimeUtc"] = TIMESTAMP
        self.records[registration_id] = record
        return record

    def execute(self, method: str, path: str, headers: Mapping[str, str], body: bytes) -> TransportResponse:
        self.requests.append((method, path, dict(headers), body))
        if path == "enrollments" and method == "POST":
            return self._bulk(json.loads(body))
        if path == "enrollments/query" and method == "POST":
            return self._query(headers)
        if path.startswith("enrollments/"):
            registration_id = unquote(path[len("enrollments/") :])
            return self._single(method, registration_id, headers.get("If-Match"), body)
        return _error(404, 404000, f"No route for {method} {path}")

    def _single(self, method: str, registration_id: str, if_match: Optional[str], body: bytes) -> TransportResponse:
        existing = self.records.get(registration_id)
        if method == "GET":
            if existing is None:
                return _error(404, 404201, "Enrollment not found")
            return _json_response(200, existing)

        if if_match and (existing is None or existing["etag"] != if_match):
            return _error(412, 412002, "Precondition failed: etag mismatch")

        if method == "PUT":
            return _json_response(200, self._write(registration_id, json.loads(body)))

        if method == "DELETE":
            if existing is None:
                return _error(404, 404201, "Enrollment not found")
            del self.records[registration_id]
            return TransportResponse(status_code=204)

        return _error(405, 405000, "Method not allowed")

    def _bulk(self, request: dict) -> TransportResponse:
        mode = request["mode"]
        errors = []
        results = []
        for item in request["enrollments"]:
            registration_id = item["registrationId"]
            existing = self.records.get(registration_id)
            error = None
            if mode == "create" and existing is not None:
                error = (409, "Conflict", "Enrollment already exists")
            elif mode == "updateIfMatchETag" and (existing is None or existing["etag"] != item.get("etag")):
                error = (412, "PreconditionFailed", "Etag mismatch")
            elif mode == "delete" and existing is None:
                error = (404, "NotFound", "Enrollment not found")

            if error is not None:
                errors.append(
                    {
                        "registrationId": registration_id,
                        "errorCode": error[0],
                        "errorStatus": error[1],
                        "errorMessage": error[2],
                    }
                )
            elif mode == "delete":
                del self.records[registration_id]
            else:
                self._write(registration_id, item)
            if error is None:
                results.append({"registrationId": registration_id})

        reported = errors + results if self.list_all_bulk_items else errors
        return _json_response(200, {"isSuccessful": not errors, "errors": reported})

    def _query(self, headers: Mapping[str, str]) -> TransportResponse:
        token = headers.get("x-ms-continuation")
        page_size = int(headers.get("x-ms-max-item-count", "100"))

        if token and token.startswith("empty-"):
            remaining = int(token[len("empty-") :])
            token = None
        else:
            remaining = self.leading_empty_pages if token is None else 0
        if remaining > 0:
            return _json_response(200, [], {"x-ms-continuation": f"empty-{remaining - 1}" if remaining > 1 else "0", "x-ms-item-type": "Enrollment"})

        start = int(token) if token else 0
        ids = sorted(self.records)
        page = [self.records[i] for i in ids[start : start + page_size]]
        response_headers = {"x-ms-item-type": "Enrollment"}
        if start + page_size < len(ids):
            response_headers["x-ms-continuation"] = str(start + page_size)
        return _json_response(200, page, response_headers)


class StubTransport(BaseTransport):
    """Replays canned responses (or raises canned errors) and records requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: List[tuple] = []

    def execute(self, method, path, headers, body):
        self.requests.append((method, path, dict(headers), body))
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def service() -> FakeProvisioningService:
    return FakeProvisioningService()


@pytest.fixture
def client(service: FakeProvisioningService) -> EnrollmentRegistryClient:
    return EnrollmentRegistryClient(service)


@pytest.fixture
def stub_transport():
    """Factory for a StubTransport loaded with the given responses."""
    return StubTransport


@pytest.fixture
def json_response():
    return _json_response


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "PROVISIONING_CONNECTION_STRING",
        "PROVISIONING_SERVICE_URL",
        "PROVISIONING_API_VERSION",
        "PROVISIONING_TIMEOUT_SECONDS",
        "PROVISIONING_SAS_TTL_SECONDS",
        "PROVISIONING_LOG_LEVEL",
        "PROVISIONING_LOG_TO_FILE",
        "PROVISIONING_LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
