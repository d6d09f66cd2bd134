#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Query handling utilities for little-owl.

``stream_query`` and ``run_query`` run the waiter and then the paginator for
one statement. ``handle_query_with_progress`` adds the terminal concerns the
CLI needs: progress line, Ctrl+C handling and output.
"""
import signal
import sys
import threading
import time
from dataclasses import dataclass
from typing import List, Optional

from little_owl.export import CsvStreamWriter
from little_owl.paginator import DEFAULT_MAX_ROWS, ResultPaginator
from little_owl.progress import ProgressTracker
from little_owl.waiter import DEFAULT_POLL_INTERVAL, ExecutionWaiter


@dataclass
class QueryResult:
    """Summary handed to on_complete once the last page was delivered."""
    query_id: str
    column_names: Optional[List[str]]
    row_count: int
    page_count: int
    runtime: float


def stream_query(connection, sql, on_header, on_row, on_complete=None,
                 poll_interval=DEFAULT_POLL_INTERVAL, max_attempts=None, timeout=None,
                 max_rows=DEFAULT_MAX_ROWS, cancel_event=None, on_status=None, on_page=None):
    """Run a query and hand its rows out as the pages arrive.

    Args:
        connection (AthenaConnection): Connection to Athena
        sql (str): SQL statement
        on_header (callable): Called once with the header row (None if the
            result has no rows at all)
        on_row (callable): Called for every data row, in order
        on_complete (callable, optional): Called with the QueryResult after
            the last page
        poll_interval, max_attempts, timeout: See ExecutionWaiter
        max_rows (int): MaxResults hint per page
        cancel_event (threading.Event, optional): Set it to stop waiting or fetching
        on_status (callable, optional): Status hook, see ExecutionWaiter
        on_page (callable, optional): Called as on_page(page_number, row_count)
            for every page fetched, after its rows went through on_row. Pages
            without data rows are reported too, with a row_count of 0.

    Returns:
        QueryResult: Summary of the run

    Raises:
        OwlError: Any error of the waiter or the paginator, unchanged. Rows
            already passed to on_row stay delivered.
    """
    cancel_event = cancel_event if cancel_event is not None else threading.Event()
    start_time = time.time()

    waiter = ExecutionWaiter(
        connection,
        poll_interval=poll_interval,
        max_attempts=max_attempts,
        timeout=timeout,
        on_status=on_status,
        cancel_event=cancel_event,
    )
    handle = waiter.submit(sql)

    paginator = ResultPaginator(connection, max_rows=max_rows, cancel_event=cancel_event)
    counts = {"rows": 0, "pages": 0}

    def deliver(rows, has_more):
        for row in rows:
            on_row(row)
        counts["rows"] += len(rows)

    def fetched(page_number, row_count):
        counts["pages"] = page_number
        if on_page:
            on_page(page_number, row_count)

    header = paginator.fetch_all(handle, deliver, on_header=on_header, on_fetch=fetched)

    result = QueryResult(
        query_id=handle.query_id,
        column_names=header,
        row_count=counts["rows"],
        page_count=counts["pages"],
        runtime=time.time() - start_time,
    )
    if on_complete:
        on_complete(result)
    return result


def run_query(connection, sql, **options):
    """Run a query and return all of its rows at once.

    Args:
        connection (AthenaConnection): Connection to Athena
        sql (str): SQL statement
        **options: Passed on to stream_query

    Returns:
        list: The header row followed by the data rows, or an empty list
            when the statement produced no rows at all
    """
    rows = []

    def add_header(header):
        if header is not None:
            rows.append(header)

    stream_query(connection, sql, on_header=add_header, on_row=rows.append, **options)
    return rows


def handle_query_with_progress(connection, query, stream=False, output_file=None, silent=False,
                               stop_on_cancel=False, **options):
    """Handle query execution with progress tracking.

    In buffered mode the rows are collected and returned; the caller is
    responsible for displaying them. In stream mode rows are written as CSV
    (to output_file, or stdout) page by page and are not returned.

    Args:
        connection (AthenaConnection): Connection to Athena
        query (str): SQL query to execute
        stream (bool): Stream CSV instead of collecting rows
        output_file (str, optional): CSV file for stream mode
        silent (bool): Don't draw the progress line
        stop_on_cancel (bool): Stop the query on Athena when Ctrl+C is pressed
        **options: Passed on to stream_query

    Returns:
        tuple: (column_names, results, query_id, runtime); results is None in
            stream mode

    Raises:
        OwlError: On any terminal query error
        KeyboardInterrupt: When the user pressed Ctrl+C
    """
    progress_tracker = ProgressTracker(silent=silent)
    cancel_event = threading.Event()
    current = {"handle": None}
    original_handler = signal.getsignal(signal.SIGINT)

    def on_status(handle, status, attempt):
        current["handle"] = handle
        progress_tracker.update_status(handle, status, attempt)

    def sigint_handler(sig, frame):
        # Restore original handler
        signal.signal(signal.SIGINT, original_handler)
        cancel_event.set()
        progress_tracker.stop_tracking()
        print("\n[INFO] Query interrupted (Ctrl+C)", file=sys.stderr)
        if stop_on_cancel and current["handle"] is not None:
            if connection.stop_execution(current["handle"]):
                print(f"[INFO] Query {current['handle']} stopped on Athena.", file=sys.stderr)
            else:
                print("[WARN] Query cancellation may have failed.", file=sys.stderr)
        # Abandon whatever call is in flight
        raise KeyboardInterrupt()

    signal.signal(signal.SIGINT, sigint_handler)

    writer = None
    try:
        progress_tracker.start_tracking()

        if stream:
            writer = CsvStreamWriter(output_file)

            def on_page(page_number, row_count):
                writer.flush()
                progress_tracker.update_page(page_number, row_count)

            result = stream_query(
                connection, query,
                on_header=writer.write_header,
                on_row=writer.write_row,
                on_status=on_status,
                on_page=on_page,
                cancel_event=cancel_event,
                **options
            )
            column_names, results = result.column_names, None
        else:
            rows = run_query(
                connection, query,
                on_status=on_status,
                on_page=progress_tracker.update_page,
                cancel_event=cancel_event,
                **options
            )
            column_names, results = (rows[0], rows[1:]) if rows else (None, [])

        progress_tracker.stop_tracking()
        runtime = progress_tracker.get_total_runtime()
        query_id = current["handle"].query_id if current["handle"] else None
        return column_names, results, query_id, runtime
    finally:
        # Restore original handler
        signal.signal(signal.SIGINT, original_handler)
        progress_tracker.stop_tracking()
        if writer is not None:
            writer.close()
