#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Values passed between the Athena client, the waiter and the paginator.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class QueryState(str, Enum):
    QUEUED = "QUEUED"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self):
        return self not in (QueryState.QUEUED, QueryState.RUNNING)

    @property
    def is_failure(self):
        return self in (QueryState.FAILED, QueryState.CANCELLED)


@dataclass(frozen=True)
class QueryRequest:
    sql: str
    output_location: str

    def to_params(self):
        """Build the keyword arguments for StartQueryExecution."""
        return {
            "QueryString": self.sql,
            "ResultConfiguration": {"OutputLocation": self.output_location},
        }


@dataclass(frozen=True)
class QueryHandle:
    query_id: str

    def __str__(self):
        return self.query_id


@dataclass(frozen=True)
class ExecutionStatus:
    state: QueryState
    reason: str = ""

    @classmethod
    def from_response(cls, response):
        """Read the status out of a GetQueryExecution response.

        Raises:
            ValueError: If the state is missing or not one Athena documents.
        """
        status = response["QueryExecution"]["Status"]
        return cls(
            state=QueryState(status["State"]),
            reason=status.get("StateChangeReason") or "",
        )


@dataclass(frozen=True)
class ResultPage:
    """One GetQueryResults response.

    Cells are strings, or None where Athena sent no VarCharValue (NULL).
    """
    number: int
    rows: List[List[Optional[str]]] = field(default_factory=list)
    next_token: Optional[str] = None

    @property
    def has_more(self):
        return self.next_token is not None

    @classmethod
    def from_response(cls, response, number):
        rows = [
            [cell.get("VarCharValue") for cell in row.get("Data", [])]
            for row in response["ResultSet"].get("Rows", [])
        ]
        return cls(number=number, rows=rows, next_token=response.get("NextToken") or None)
