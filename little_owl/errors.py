#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Exceptions raised while running a query against Athena.

Every error a query can end with is an ``OwlError``. The subclasses tell the
caller which step gave up, so it can branch with ``except`` instead of
inspecting messages.
"""


class OwlError(Exception):
    """Base class for little-owl errors."""

    def __init__(self, message, query_id=None):
        super().__init__(message)
        self.message = message
        self.query_id = query_id

    def __str__(self):
        return self.message


class TransportError(OwlError):
    """A call to the Athena API failed before returning a response."""

    def __init__(self, operation, message, code=None):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.code = code


class SubmissionError(OwlError):
    """StartQueryExecution was rejected. Nothing was polled."""


class PollingTransportError(OwlError):
    """GetQueryExecution failed while waiting for the query."""


class QueryFailed(OwlError):
    """The query itself ended in FAILED or CANCELLED."""

    def __init__(self, state, reason="", query_id=None):
        reason = reason or ""
        message = f"Query {state.value}"
        if reason:
            message += f": {reason}"
        super().__init__(message, query_id=query_id)
        self.state = state
        self.reason = reason


class PageFetchError(OwlError):
    """GetQueryResults failed part way through the result set.

    Pages delivered before ``page_number`` have already been handed out.
    """

    def __init__(self, message, page_number, query_id=None):
        super().__init__(message, query_id=query_id)
        self.page_number = page_number


class QueryAborted(OwlError):
    """Waiting was stopped locally: cancelled, or a poll bound was hit.

    The remote query keeps running unless it was stopped explicitly.
    """

    def __init__(self, reason, query_id=None):
        super().__init__(f"Query aborted: {reason}", query_id=query_id)
        self.reason = reason
