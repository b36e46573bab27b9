"""Tests for the paginated query cursor."""

import json

import pytest

from provisioning_registry import Enrollment, QueryExhaustedError, QuerySpecification, ServerError, ValidationError
from provisioning_registry.enroll import Query
from provisioning_registry.transport import TransportResponse

SPEC = QuerySpecification(query="SELECT * FROM enrollments")


def _seed(client, count: int) -> set:
    ids = {f"dev-{i:02d}" for i in range(count)}
    for registration_id in ids:
        client.create_or_update(Enrollment(registration_id=registration_id))
    return ids


def test_create_query_is_lazy(client, service):
    query = client.create_query(SPEC, 5)

    assert service.requests == []
    assert query.has_next() is True
    assert query.continuation_token is None
    assert query.page_size == 5


@pytest.mark.parametrize("count,page_size", [(7, 1), (7, 3), (10, 5), (10, 9)])
def test_pages_cover_every_record_once(client, service, count, page_size):
    expected = _seed(client, count)
    query = client.create_query(SPEC, page_size)

    seen = []
    pages = 0
    while query.has_next():
        page = query.next()
        pages += 1
        seen.extend(item.registration_id for item in page.items)
        if page.continuation_token is None:
            assert query.has_next() is False

    assert sorted(seen) == sorted(expected)
    assert len(seen) == len(set(seen))
    assert pages == -(-count // page_size)


def test_request_carries_page_size_and_continuation(client, service):
    _seed(client, 3)
    service.requests.clear()
    query = client.create_query(SPEC, 2)

    query.next()
    query.next()

    first, second = service.requests
    assert first[:2] == ("POST", "enrollments/query")
    assert first[2] == {"x-ms-max-item-count": "2"}
    assert json.loads(first[3]) == {"query": "SELECT * FROM enrollments"}
    assert second[2] == {"x-ms-max-item-count": "2", "x-ms-continuation": "2"}


def test_default_page_size_sends_no_header(client, service):
    query = client.create_query(SPEC)

    page = query.next()

    assert service.requests[0][2] == {}
    assert page.items == []
    assert query.has_next() is False


def test_empty_page_with_token_requires_another_fetch(client, service):
    expected = _seed(client, 2)
    service.leading_empty_pages = 2
    query = client.create_query(SPEC, 10)

    first = query.next()
    assert first.items == []
    assert query.has_next() is True

    items = list(query.iter_items())

    assert {item.registration_id for item in items} == expected
    assert query.has_next() is False


def test_exhausted_query_refuses_next(client):
    query = client.create_query(SPEC)
    query.next()

    with pytest.raises(QueryExhaustedError):
        query.next()


def test_query_iteration_protocol(client):
    _seed(client, 4)

    pages = list(client.create_query(SPEC, 3))

    assert [len(page.items) for page in pages] == [3, 1]
    assert pages[0].type == "Enrollment"


def test_service_order_is_preserved(stub_transport, json_response):
    transport = stub_transport(
        json_response(200, [{"registrationId": "z"}, {"registrationId": "a"}], {"X-MS-Continuation": "opaque=="}),
        json_response(200, [{"registrationId": "m"}]),
    )
    query = Query(transport, "enrollments", SPEC)

    first = query.next()
    assert first.continuation_token == "opaque=="
    second = query.next()

    assert [e.registration_id for e in first.items + second.items] == ["z", "a", "m"]
    assert transport.requests[1][2]["x-ms-continuation"] == "opaque=="


def test_failed_fetch_leaves_cursor_state(stub_transport, json_response):
    transport = stub_transport(
        json_response(200, [{"registrationId": "a"}], {"x-ms-continuation": "t1"}),
        TransportResponse(status_code=503, body=b""),
        json_response(200, [{"registrationId": "b"}]),
    )
    query = Query(transport, "enrollments", SPEC, 1)
    query.next()

    with pytest.raises(ServerError):
        query.next()

    assert query.has_next() is True
    assert query.continuation_token == "t1"
    assert [e.registration_id for e in query.next().items] == ["b"]
    assert transport.requests[2][2]["x-ms-continuation"] == "t1"


def test_page_size_setter_rejects_negative(client):
    query = client.create_query(SPEC)
    query.page_size = 4
    assert query.page_size == 4

    with pytest.raises(ValidationError):
        query.page_size = -2


def test_query_requires_target_path(service):
    with pytest.raises(ValidationError):
        Query(service, "", SPEC)
