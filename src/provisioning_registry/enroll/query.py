"""Paginated enrollment query cursor.

A ``Query`` is created by the registry client and fetches one page per
``next()`` call. The service hands back an opaque continuation token with every
page that has a successor; the first page without one exhausts the cursor. An
exhausted query cannot be restarted, create a new one instead.

Not safe for concurrent use: serialize ``next()`` calls on one instance.
"""

from __future__ import annotations

import json
from typing import Dict, Iterator, Optional

from loguru import logger

from ..errors import QueryExhaustedError, ValidationError
from ..transport import BaseTransport
from .codec import decode_enrollment_page
from .error_mapper import raise_for_status
from .models import Enrollment, QueryResult, QuerySpecification

QUERY_PATH_SUFFIX = "query"
PAGE_SIZE_HEADER = "x-ms-max-item-count"
CONTINUATION_TOKEN_HEADER = "x-ms-continuation"
ITEM_TYPE_HEADER = "x-ms-item-type"


class Query:
    """Stateful cursor over the pages of one query specification."""

    def __init__(
        self,
        transport: BaseTransport,
        target_path: str,
        query_specification: QuerySpecification,
        page_size: int = 0,
    ):
        """Initialize the cursor. No request is sent until ``next()``.

        Args:
            transport: Request executor
            target_path: Collection path, e.g. ``enrollments``
            query_specification: Filter expression to run
            page_size: Requested items per page, 0 for the service default
        """
        if not target_path:
            raise ValidationError("targetPath cannot be null or empty.")
        if query_specification is None:
            raise ValidationError("querySpecification cannot be null.")
        self._check_page_size(page_size)

        self._transport = transport
        self._query_path = f"{target_path.rstrip('/')}/{QUERY_PATH_SUFFIX}"
        self._body = json.dumps(query_specification.model_dump(by_alias=True, exclude_none=True)).encode("utf-8")
        self._query_specification = query_specification
        self._page_size = page_size
        self._continuation_token: Optional[str] = None
        self._exhausted = False
        self._pages_fetched = 0

    @staticmethod
    def _check_page_size(page_size: int) -> None:
        if page_size is None or page_size < 0:
            raise ValidationError("pageSize cannot be negative.")

    @property
    def query_specification(self) -> QuerySpecification:
        return self._query_specification

    @property
    def page_size(self) -> int:
        return self._page_size

    @page_size.setter
    def page_size(self, page_size: int) -> None:
        self._check_page_size(page_size)
        self._page_size = page_size

    @property
    def continuation_token(self) -> Optional[str]:
        return self._continuation_token

    def has_next(self) -> bool:
        """True until the service has returned a page without a continuation token."""
        return not self._exhausted

    def next(self) -> QueryResult:
        """Fetch the next page.

        Returns:
            The page; it may be empty while still carrying a continuation token

        Raises:
            QueryExhaustedError: If the cursor is exhausted
            TransportError, ServiceError, ProtocolViolation: On request failure,
                in which case the cursor state is unchanged
        """
        if self._exhausted:
            raise QueryExhaustedError("There are no more pending elements in this query.")

        headers: Dict[str, str] = {}
        if self._page_size > 0:
            headers[PAGE_SIZE_HEADER] = str(self._page_size)
        if self._continuation_token:
            headers[CONTINUATION_TOKEN_HEADER] = self._continuation_token

        response = self._transport.execute("POST", self._query_path, headers, self._body)
        raise_for_status(response, "query")

        items = decode_enrollment_page(response.body, "query")
        token = response.header(CONTINUATION_TOKEN_HEADER) or None
        item_type = response.header(ITEM_TYPE_HEADER) or "enrollment"

        self._continuation_token = token
        self._pages_fetched += 1
        if token is None:
            self._exhausted = True

        logger.debug(f"Query page {self._pages_fetched}: {len(items)} items, more={token is not None}")
        return QueryResult(type=item_type, items=items, continuation_token=token)

    def __iter__(self) -> Iterator[QueryResult]:
        return self

    def __next__(self) -> QueryResult:
        if not self.has_next():
            raise StopIteration
        return self.next()

    def iter_items(self) -> Iterator[Enrollment]:
        """Yield every remaining enrollment, page by page, in service order."""
        while self.has_next():
            yield from self.next().items
