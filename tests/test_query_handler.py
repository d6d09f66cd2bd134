"""
Tests for running a query end to end against a scripted client.
"""
import io
import os
import shutil
import signal
import tempfile
import unittest
from unittest.mock import MagicMock, patch

from little_owl.connection import AthenaConnection
from little_owl.errors import PageFetchError, QueryFailed
from little_owl.query_handler import (
    QueryResult,
    handle_query_with_progress,
    run_query,
    stream_query,
)
from tests.fakes import FakeAthenaClient, client_error

PAGES = [
    [["id", "name"], ["1", "Alice"], ["2", "Bob"]],
    [["3", "Charlie"]],
    [["4", None]],
]


def make_connection(client):
    return AthenaConnection(output_location="s3://bucket/out/", client=client)


class TestRunQuery(unittest.TestCase):
    """Buffered composition of waiter and paginator."""

    def test_returns_header_then_rows(self):
        client = FakeAthenaClient(states=["QUEUED", "RUNNING", "SUCCEEDED"], pages=PAGES)

        rows = run_query(make_connection(client), "SELECT * FROM people", poll_interval=0)

        self.assertEqual(rows, [
            ["id", "name"],
            ["1", "Alice"],
            ["2", "Bob"],
            ["3", "Charlie"],
            ["4", None],
        ])

    def test_same_output_twice(self):
        """Running the same query twice gives identical output."""
        outputs = []
        for _ in range(2):
            client = FakeAthenaClient(states=["RUNNING", "SUCCEEDED"], pages=PAGES)
            rows = run_query(make_connection(client), "SELECT * FROM people", poll_interval=0)
            outputs.append(repr(rows).encode("utf-8"))

        self.assertEqual(outputs[0], outputs[1])

    def test_statement_without_rows(self):
        client = FakeAthenaClient(pages=[[]])

        self.assertEqual(run_query(make_connection(client), "CREATE DATABASE x", poll_interval=0), [])

    def test_failed_query_skips_pagination(self):
        """A FAILED query raises and no result page is requested."""
        client = FakeAthenaClient(states=["RUNNING", "FAILED"], reason="Table not found")

        with self.assertRaises(QueryFailed) as ctx:
            run_query(make_connection(client), "SELECT * FROM missing", poll_interval=0)

        self.assertEqual(ctx.exception.reason, "Table not found")
        self.assertEqual(client.calls_to("get_query_results"), [])


class TestStreamQuery(unittest.TestCase):
    """Streaming composition of waiter and paginator."""

    def test_callbacks_in_order(self):
        client = FakeAthenaClient(pages=PAGES)
        events = []

        result = stream_query(
            make_connection(client), "SELECT * FROM people",
            on_header=lambda header: events.append(("header", header)),
            on_row=lambda row: events.append(("row", row[0])),
            on_complete=lambda summary: events.append(("complete", summary.row_count)),
            on_page=lambda page_number, row_count: events.append(("page", page_number, row_count)),
            poll_interval=0,
        )

        self.assertEqual(events, [
            ("header", ["id", "name"]),
            ("row", "1"),
            ("row", "2"),
            ("page", 1, 2),
            ("row", "3"),
            ("page", 2, 1),
            ("row", "4"),
            ("page", 3, 1),
            ("complete", 4),
        ])
        self.assertIsInstance(result, QueryResult)
        self.assertEqual(result.query_id, "query-1")
        self.assertEqual(result.column_names, ["id", "name"])
        self.assertEqual(result.page_count, 3)

    def test_zero_rows(self):
        """A header-only result completes without any on_row call."""
        client = FakeAthenaClient(pages=[[["id", "name"]]])
        on_header = MagicMock()
        on_row = MagicMock()
        on_complete = MagicMock()

        stream_query(make_connection(client), "SELECT * FROM empty", on_header, on_row,
                     on_complete=on_complete, poll_interval=0)

        on_header.assert_called_once_with(["id", "name"])
        on_row.assert_not_called()
        self.assertEqual(on_complete.call_args[0][0].row_count, 0)

    def test_page_count_includes_empty_pages(self):
        """page_count is the number of pages fetched, not pages with rows."""
        client = FakeAthenaClient(pages=[[["a"]], [["1"]], []])
        pages = []

        result = stream_query(make_connection(client), "SELECT a FROM t",
                              on_header=lambda header: None, on_row=lambda row: None,
                              on_page=lambda number, count: pages.append((number, count)),
                              poll_interval=0)

        self.assertEqual(pages, [(1, 0), (2, 1), (3, 0)])
        self.assertEqual(result.page_count, 3)
        self.assertEqual(result.row_count, 1)

    def test_partial_output_stands(self):
        """Rows of page 1 are delivered even though page 2 fails."""
        client = FakeAthenaClient(pages=PAGES, page_errors={2: client_error("GetQueryResults")})
        rows = []
        on_complete = MagicMock()

        with self.assertRaises(PageFetchError):
            stream_query(make_connection(client), "SELECT * FROM people",
                         on_header=lambda header: None, on_row=rows.append,
                         on_complete=on_complete, poll_interval=0)

        self.assertEqual(rows, [["1", "Alice"], ["2", "Bob"]])
        on_complete.assert_not_called()
        self.assertEqual(len(client.calls_to("get_query_results")), 2)

    def test_shared_connection(self):
        """Two queries can run one after the other on one connection."""
        client = FakeAthenaClient(pages=PAGES)
        connection = make_connection(client)

        first = run_query(connection, "SELECT 1", poll_interval=0)
        second = run_query(connection, "SELECT 2", poll_interval=0)

        self.assertEqual(first, second)
        self.assertEqual(len(client.calls_to("start_query_execution")), 2)


class TestHandleQueryWithProgress(unittest.TestCase):
    """CLI glue: progress, signals and CSV streaming."""

    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()
        self.csv_file = os.path.join(self.tmp_dir, "res.csv")

    def tearDown(self):
        shutil.rmtree(self.tmp_dir)

    def test_buffered(self):
        client = FakeAthenaClient(states=["RUNNING", "SUCCEEDED"], pages=PAGES)

        column_names, results, query_id, runtime = handle_query_with_progress(
            make_connection(client), "SELECT * FROM people", silent=True, poll_interval=0)

        self.assertEqual(column_names, ["id", "name"])
        self.assertEqual(len(results), 4)
        self.assertEqual(query_id, "query-1")
        self.assertGreaterEqual(runtime, 0)

    def test_stream_to_file(self):
        client = FakeAthenaClient(pages=PAGES)

        column_names, results, query_id, _ = handle_query_with_progress(
            make_connection(client), "SELECT * FROM people", stream=True,
            output_file=self.csv_file, silent=True, poll_interval=0)

        self.assertEqual(column_names, ["id", "name"])
        self.assertIsNone(results)
        with open(self.csv_file, newline='') as f:
            self.assertEqual(f.read(), "id,name\r\n1,Alice\r\n2,Bob\r\n3,Charlie\r\n4,\r\n")

    def test_stream_keeps_partial_file(self):
        """CSV rows of pages fetched before a failure remain in the file."""
        client = FakeAthenaClient(pages=PAGES, page_errors={3: client_error("GetQueryResults")})

        with self.assertRaises(PageFetchError):
            handle_query_with_progress(
                make_connection(client), "SELECT * FROM people", stream=True,
                output_file=self.csv_file, silent=True, poll_interval=0)

        with open(self.csv_file, newline='') as f:
            self.assertEqual(f.read(), "id,name\r\n1,Alice\r\n2,Bob\r\n3,Charlie\r\n")

    def test_progress_updates(self):
        """The progress line is redrawn for every poll and every page."""
        client = FakeAthenaClient(states=["RUNNING", "SUCCEEDED"], pages=PAGES)
        stderr = io.StringIO()

        with patch("sys.stderr", stderr):
            handle_query_with_progress(make_connection(client), "SELECT * FROM people", poll_interval=0)

        output = stderr.getvalue()
        self.assertIn("State: RUNNING | Query ID: query-1", output)
        self.assertIn("State: SUCCEEDED", output)
        self.assertEqual(output.count("Fetched page"), 3)
        self.assertIn("Fetched page 3 | Rows: 4", output)

    def test_progress_counts_empty_pages(self):
        """Every fetch is reported, even a last page without rows."""
        client = FakeAthenaClient(pages=[[["a"], ["1"]], []])
        stderr = io.StringIO()

        with patch("sys.stderr", stderr):
            handle_query_with_progress(make_connection(client), "SELECT a FROM t", poll_interval=0)

        output = stderr.getvalue()
        self.assertEqual(len(client.calls_to("get_query_results")), 2)
        self.assertEqual(output.count("Fetched page"), 2)
        self.assertIn("Fetched page 2 | Rows: 1", output)

    def test_signal_handler_restored(self):
        original = signal.getsignal(signal.SIGINT)
        client = FakeAthenaClient(states=["FAILED"])

        with self.assertRaises(QueryFailed):
            handle_query_with_progress(make_connection(client), "SELECT 1", silent=True, poll_interval=0)

        self.assertEqual(signal.getsignal(signal.SIGINT), original)

    def test_interrupt_stops_remote_query(self):
        """Ctrl+C with stop_on_cancel stops the query on Athena."""
        client = FakeAthenaClient(states=["RUNNING"])
        original = client.get_query_execution
        polls = []

        def poll_then_interrupt(**params):
            response = original(**params)
            polls.append(params)
            if len(polls) == 2:
                signal.getsignal(signal.SIGINT)(signal.SIGINT, None)
            return response

        client.get_query_execution = poll_then_interrupt

        with patch("sys.stderr", io.StringIO()):
            with self.assertRaises(KeyboardInterrupt):
                handle_query_with_progress(make_connection(client), "SELECT 1", silent=True,
                                           stop_on_cancel=True, poll_interval=0)

        self.assertEqual(len(polls), 2)
        self.assertEqual(client.calls_to("stop_query_execution"), [{"QueryExecutionId": "query-1"}])


if __name__ == '__main__':
    unittest.main()
