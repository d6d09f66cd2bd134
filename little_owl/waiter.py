#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Submit a query and wait for Athena to finish it.

Athena only offers fire-and-forget submission, so the waiter polls
GetQueryExecution on a flat interval until the query reaches SUCCEEDED,
FAILED or CANCELLED. It issues exactly one poll per observed status and
never polls again once a terminal status has been seen.
"""
import threading
import time

from little_owl.errors import (
    PollingTransportError,
    QueryAborted,
    QueryFailed,
    SubmissionError,
    TransportError,
)
from little_owl.models import QueryRequest

DEFAULT_POLL_INTERVAL = 3.0


class ExecutionWaiter:
    """Turn an asynchronous Athena submission into a blocking call."""

    def __init__(self, connection, poll_interval=DEFAULT_POLL_INTERVAL, max_attempts=None,
                 timeout=None, on_status=None, cancel_event=None):
        """Initialize a waiter.

        Args:
            connection (AthenaConnection): Connection used for every call
            poll_interval (float): Seconds to wait between two status polls
            max_attempts (int, optional): Give up after this many polls
            timeout (float, optional): Give up this many seconds after submission
            on_status (callable, optional): Called as on_status(handle, status, attempt)
                after every poll
            cancel_event (threading.Event, optional): Event shared with whoever
                may cancel the wait, e.g. a paginator for the same query
        """
        self.connection = connection
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.timeout = timeout
        self.on_status = on_status
        self.cancel_event = cancel_event if cancel_event is not None else threading.Event()
        self.last_status = None

    def cancel(self):
        """Stop waiting. The query keeps running on Athena."""
        self.cancel_event.set()

    @property
    def cancelled(self):
        return self.cancel_event.is_set()

    def _check_cancelled(self, handle=None):
        if self.cancelled:
            raise QueryAborted("cancelled", query_id=handle and handle.query_id)

    def _wait(self):
        # Event.wait returns early when cancel() is called
        self.cancel_event.wait(self.poll_interval)

    def submit(self, sql):
        """Submit a query and block until it reaches a terminal state.

        Args:
            sql (str): SQL statement, passed to Athena as is

        Returns:
            QueryHandle: Handle of the query, which has SUCCEEDED

        Raises:
            SubmissionError: Athena did not accept the query
            PollingTransportError: A status poll failed
            QueryFailed: The query ended FAILED or CANCELLED
            QueryAborted: The wait was cancelled or exceeded its bounds
        """
        self.last_status = None
        self._check_cancelled()

        request = QueryRequest(sql, self.connection.output_location)
        try:
            handle = self.connection.start_execution(request)
        except TransportError as e:
            raise SubmissionError(str(e)) from e

        started = time.monotonic()
        attempt = 0
        while True:
            self._check_cancelled(handle)
            attempt += 1
            try:
                status = self.connection.get_execution_status(handle)
            except TransportError as e:
                raise PollingTransportError(str(e), query_id=handle.query_id) from e

            self.last_status = status
            if self.on_status:
                self.on_status(handle, status, attempt)

            if status.state.is_terminal:
                break

            if self.max_attempts is not None and attempt >= self.max_attempts:
                raise QueryAborted(
                    f"still {status.state.value} after {attempt} polls",
                    query_id=handle.query_id,
                )
            if self.timeout is not None and time.monotonic() - started + self.poll_interval > self.timeout:
                raise QueryAborted(
                    f"still {status.state.value} after {self.timeout}s",
                    query_id=handle.query_id,
                )

            self._wait()

        if status.state.is_failure:
            raise QueryFailed(status.state, status.reason, query_id=handle.query_id)
        return handle
