#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Follow GetQueryResults cursors to read a whole result set.

Pages are fetched one after the other: the NextToken of a page is needed to
ask for the next one, so there is no way to fetch them in parallel or out of
order. The first row of the first page is the column header.
"""
import threading

from little_owl.errors import PageFetchError, QueryAborted, TransportError

DEFAULT_MAX_ROWS = 1000


class ResultPaginator:
    """Read the results of a SUCCEEDED query page by page."""

    def __init__(self, connection, max_rows=DEFAULT_MAX_ROWS, cancel_event=None):
        """Initialize a paginator.

        Args:
            connection (AthenaConnection): Connection used for every fetch
            max_rows (int): MaxResults sent with every fetch. Athena may
                return fewer rows; nothing is checked locally.
            cancel_event (threading.Event, optional): Stops fetching when set
        """
        self.connection = connection
        self.max_rows = max_rows
        self.cancel_event = cancel_event if cancel_event is not None else threading.Event()
        self.header = None

    def cancel(self):
        self.cancel_event.set()

    def pages(self, handle):
        """Yield the raw pages of a result set in cursor order.

        The generator is forward only. Once a page without a cursor has been
        yielded it stops, and nothing more is requested for the handle.

        Args:
            handle (QueryHandle): A query that has SUCCEEDED

        Yields:
            ResultPage: Pages numbered from 1, header row still in page 1

        Raises:
            PageFetchError: A fetch failed; earlier pages were already yielded
            QueryAborted: The paginator was cancelled
        """
        next_token = None
        number = 1
        while True:
            if self.cancel_event.is_set():
                raise QueryAborted("cancelled", query_id=handle.query_id)
            try:
                page = self.connection.get_result_page(
                    handle, self.max_rows, next_token=next_token, number=number
                )
            except TransportError as e:
                raise PageFetchError(
                    f"Failed to fetch page {number}: {e}",
                    page_number=number,
                    query_id=handle.query_id,
                ) from e

            yield page

            if not page.has_more:
                return
            next_token = page.next_token
            number += 1

    def fetch_all(self, handle, on_page, on_header=None, on_fetch=None):
        """Deliver every data row of a result set, page by page.

        ``on_header(header)`` is called once with row 0 of page 1. After that
        ``on_page(rows, has_more)`` is called for every page that holds data
        rows, in order. When the last page holds none but earlier pages were
        delivered, ``on_page([], False)`` marks the end. An empty result set
        calls ``on_page`` zero times.

        Args:
            handle (QueryHandle): A query that has SUCCEEDED
            on_page (callable): Receives the data rows of one page
            on_header (callable, optional): Receives the column header row
            on_fetch (callable, optional): Called as on_fetch(page_number, row_count)
                for every page fetched, including pages without data rows

        Returns:
            list: The header row, or None when the result had no rows at all
        """
        self.header = None
        delivered = False
        for page in self.pages(handle):
            rows = page.rows
            if page.number == 1:
                # The header is row 0 of page 1 by position; nothing marks it otherwise
                if rows:
                    self.header, rows = rows[0], rows[1:]
                if on_header:
                    on_header(self.header)
            if rows or (delivered and not page.has_more):
                on_page(rows, page.has_more)
                delivered = True
            if on_fetch:
                on_fetch(page.number, len(rows))
        return self.header

    def rows(self, handle):
        """Yield the data rows of a result set, header excluded.

        ``self.header`` is set as soon as the first page has been read.
        """
        self.header = None
        for page in self.pages(handle):
            rows = page.rows
            if page.number == 1 and rows:
                self.header, rows = rows[0], rows[1:]
            for row in rows:
                yield row
