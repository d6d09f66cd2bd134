#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Connection module for the Amazon Athena API.
"""
import os
import sys

import boto3
from botocore import xform_name
from botocore.exceptions import BotoCoreError, ClientError

from little_owl.errors import TransportError
from little_owl.models import ExecutionStatus, QueryHandle, ResultPage

DEFAULT_REGION = "us-east-1"
DEFAULT_OUTPUT_LOCATION = "s3://little-owl-athena-output"


class AthenaConnection:
    """Connection manager for Amazon Athena.

    Holds no per-query state, so one connection can serve several
    independent waiters and paginators.
    """

    def __init__(self, access_key_id=None, secret_access_key=None, region=None,
                 output_location=None, client=None):
        """Initialize a connection to Athena.

        Anything not given falls back to the matching environment variable
        and then to the defaults.

        Args:
            access_key_id (str, optional): AWS access key id
            secret_access_key (str, optional): AWS secret access key
            region (str, optional): AWS region, defaults to us-east-1
            output_location (str, optional): S3 location where Athena stores
                the raw result files of every query
            client (optional): Pre-built Athena client to use instead of boto3
        """
        self.access_key_id = access_key_id or os.environ.get("AWS_ACCESS_KEY_ID")
        self.secret_access_key = secret_access_key or os.environ.get("AWS_SECRET_ACCESS_KEY")
        self.region = region or os.environ.get("AWS_REGION") or DEFAULT_REGION
        self.output_location = (output_location or os.environ.get("AWS_OUTPUT_BUCKET")
                                or DEFAULT_OUTPUT_LOCATION)
        self.client = client

    def connect(self):
        """Create the Athena client.

        Returns:
            bool: True if the client is ready, False otherwise
        """
        if self.client is not None:
            return True
        try:
            self.client = boto3.client(
                "athena",
                aws_access_key_id=self.access_key_id,
                aws_secret_access_key=self.secret_access_key,
                region_name=self.region,
            )
            return True
        except (BotoCoreError, ValueError) as e:
            print(f"Connection failed: {e}", file=sys.stderr)
            return False

    def _call(self, operation, **params):
        if self.client is None and not self.connect():
            raise TransportError(operation, "no Athena client available")
        method = getattr(self.client, xform_name(operation))
        try:
            return method(**params)
        except ClientError as e:
            error = e.response.get("Error", {})
            raise TransportError(operation, error.get("Message") or str(e),
                                 code=error.get("Code")) from e
        except BotoCoreError as e:
            raise TransportError(operation, str(e)) from e

    def start_execution(self, request):
        """Submit a query.

        Args:
            request (QueryRequest): SQL text and output location

        Returns:
            QueryHandle: Handle of the new query execution
        """
        response = self._call("StartQueryExecution", **request.to_params())
        return QueryHandle(response["QueryExecutionId"])

    def get_execution_status(self, handle):
        """Fetch the current status of a query.

        Args:
            handle (QueryHandle): Query to look up

        Returns:
            ExecutionStatus: State and, for failures, the reason given by Athena
        """
        response = self._call("GetQueryExecution", QueryExecutionId=handle.query_id)
        try:
            return ExecutionStatus.from_response(response)
        except (KeyError, ValueError) as e:
            raise TransportError("GetQueryExecution", f"unexpected response: {e}") from e

    def get_result_page(self, handle, max_rows, next_token=None, number=1):
        """Fetch one page of results.

        Args:
            handle (QueryHandle): A query that has SUCCEEDED
            max_rows (int): MaxResults hint sent to Athena
            next_token (str, optional): Cursor from the previous page
            number (int): Position of this page, starting at 1

        Returns:
            ResultPage: Rows of the page and the cursor of the next one
        """
        params = {"QueryExecutionId": handle.query_id, "MaxResults": max_rows}
        if next_token:
            params["NextToken"] = next_token
        response = self._call("GetQueryResults", **params)
        try:
            return ResultPage.from_response(response, number)
        except KeyError as e:
            raise TransportError("GetQueryResults", f"unexpected response: missing {e}") from e

    def stop_execution(self, handle):
        """Ask Athena to stop a running query.

        Returns:
            bool: True if the request was accepted, False otherwise
        """
        try:
            self._call("StopQueryExecution", QueryExecutionId=handle.query_id)
            return True
        except TransportError as e:
            print(f"Failed to stop query {handle}: {e}", file=sys.stderr)
            return False

    def close(self):
        """Drop the client."""
        self.client = None
