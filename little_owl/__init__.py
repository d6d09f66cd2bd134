#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
little-owl - A command line client for Amazon Athena.

Features:
- Submit a query and wait for it with a fixed polling interval
- Follow result cursors to read result sets of any size
- Stream results as CSV page by page, or show them as a table
- Cancel waiting with Ctrl+C, optionally stopping the query on Athena
"""

__version__ = "0.3.0"

__all__ = [
    "AthenaConnection",
    "ExecutionWaiter",
    "ResultPaginator",
    "ProgressTracker",
    "main",
    "display_results",
    "run_query",
    "stream_query",
    "handle_query_with_progress",
    "export_query_results_to_csv",
    "CsvStreamWriter",
]

from little_owl.connection import AthenaConnection
from little_owl.waiter import ExecutionWaiter
from little_owl.paginator import ResultPaginator
from little_owl.progress import ProgressTracker
from little_owl.cli import main
from little_owl.display import display_results
from little_owl.query_handler import run_query, stream_query, handle_query_with_progress
from little_owl.export import export_query_results_to_csv, CsvStreamWriter
