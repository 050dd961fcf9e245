"""
Cursor-based bulk retrieval for accounts.search.

The first request carries the query with the page size appended as a
``limit`` clause and asks the service to open a cursor. Every following
request carries only the cursor handle the previous page returned, forwarded
unmodified. An empty cursor means the result set is exhausted.

Pages are fetched strictly one after another: the server-side cursor is
single-use per step, so concurrent fetches would race on its invalidation.

Failures never discard progress. A transport, decode or application error
ends the loop and is returned next to whatever was accumulated so far.
"""

import logging
from typing import Callable, Optional

from .client import AccountsClient
from ..api.models import ResultPage, RetrievalResult
from ..errors import APIError, GigyaError

logger = logging.getLogger(__name__)

MIN_BATCH_SIZE = 1
# Larger pages make the search endpoint unreliable.
MAX_BATCH_SIZE = 100

ProgressCallback = Callable[[int, int], None]


def clamp_batch_size(batch_size: int) -> int:
    """Clamp a requested page size to [MIN_BATCH_SIZE, MAX_BATCH_SIZE]."""
    return max(MIN_BATCH_SIZE, min(MAX_BATCH_SIZE, batch_size))


def limited_query(query: str, batch_size: int) -> str:
    """Append the page size to a query as a limit clause."""
    return f"{query} limit {batch_size}"


class PaginatedRetriever:
    """
    Retrieve complete result sets across as many round trips as needed.

    The retriever keeps no state between calls; everything mutable lives in
    the local variables of one ``retrieve_all`` invocation.
    """

    def __init__(self, client: AccountsClient):
        """
        Initialize retriever.

        Args:
            client: Accounts client used to issue every page request
        """
        self.client = client

    def first_page(self, query: str, batch_size: int) -> ResultPage:
        """Open a cursor for ``query`` and fetch its first page."""
        response = self.client.search_page(
            query=limited_query(query, batch_size), open_cursor=True
        )
        return ResultPage.from_response(response)

    def next_page(self, cursor: str) -> ResultPage:
        """Fetch the page a cursor points at."""
        response = self.client.search_page(cursor_id=cursor)
        return ResultPage.from_response(response)

    def retrieve_all(
        self,
        query: str,
        batch_size: int,
        progress: Optional[ProgressCallback] = None,
    ) -> RetrievalResult:
        """
        Retrieve every account matching ``query``.

        Args:
            query: Search expression without a limit clause
            batch_size: Requested page size, clamped to [1, 100]
            progress: Called as ``progress(accumulated, total)`` after every
                decoded page; exceptions it raises propagate to the caller

        Returns:
            RetrievalResult with all accounts, or the partial set and the error
        """
        size = clamp_batch_size(batch_size)
        if size != batch_size:
            logger.debug(f"Batch size {batch_size} clamped to {size}")

        result = RetrievalResult()
        cursor = ""
        pages = 0

        while True:
            try:
                if pages == 0:
                    page = self.first_page(query, size)
                else:
                    page = self.next_page(cursor)
            except APIError as e:
                if e.total_count is not None:
                    result.total_count = e.total_count
                result.error = e
                logger.warning(
                    f"Retrieval stopped after {pages} page(s), "
                    f"{len(result.accounts)} account(s): {e}"
                )
                return result
            except GigyaError as e:
                result.error = e
                logger.warning(
                    f"Retrieval stopped after {pages} page(s), "
                    f"{len(result.accounts)} account(s): {e}"
                )
                return result

            pages += 1
            if pages > 1 and page.total_count != result.total_count:
                logger.warning(
                    f"Total count changed mid-retrieval: {result.total_count} -> {page.total_count}"
                )

            result.accounts.extend(page.accounts)
            result.total_count = page.total_count
            logger.debug(
                f"Page {pages}: {len(page.accounts)} account(s), "
                f"{len(result.accounts)}/{result.total_count}"
            )

            if progress:
                progress(len(result.accounts), result.total_count)

            if page.exhausted:
                logger.info(
                    f"Retrieved {len(result.accounts)} of {result.total_count} account(s) "
                    f"in {pages} page(s)"
                )
                return result

            cursor = page.next_cursor

    def search(self, query: str, limit: int) -> RetrievalResult:
        """
        Fetch a single page.

        Opens a cursor like ``retrieve_all`` but discards it, whether or not
        more pages remain.
        """
        size = clamp_batch_size(limit)
        try:
            page = self.first_page(query, size)
        except APIError as e:
            return RetrievalResult(total_count=e.total_count or 0, error=e)
        except GigyaError as e:
            return RetrievalResult(error=e)

        return RetrievalResult(accounts=list(page.accounts), total_count=page.total_count)
