"""
Module for displaying query progress information.
"""
import sys
import time


class ProgressTracker:
    """Track and display query progress.

    The tracker does not poll anything itself. The waiter reports every
    status it observes and the paginator every page it fetches; each report
    redraws a single status line.
    """

    def __init__(self, query_id=None, silent=False, stream=None):
        """Initialize a progress tracker.

        Args:
            query_id (str, optional): The query ID to show, can be set later
            silent (bool, optional): If True, nothing is written
            stream (file, optional): Where to write, defaults to stderr
        """
        self.query_id = query_id
        self.silent_mode = silent
        self.stream = stream if stream is not None else sys.stderr
        self.tracking = False
        self.start_time = None
        self.total_runtime = 0
        self.state = None
        self.polls = 0
        self.pages = 0
        self.rows = 0
        self.last_line = ""

    def start_tracking(self):
        """Start tracking a query."""
        if self.tracking:
            return
        self.start_time = time.time()
        self.total_runtime = 0
        self.tracking = True

    def stop_tracking(self):
        """Stop tracking and finish the status line."""
        if not self.tracking:
            return
        self.tracking = False
        if self.start_time:
            self.total_runtime = time.time() - self.start_time
        if self.last_line and not self.silent_mode:
            print(file=self.stream)

    def get_total_runtime(self):
        """Get the total runtime in seconds.

        Returns:
            float: Total runtime in seconds, or 0 if tracking hasn't started
        """
        if self.total_runtime > 0:
            return self.total_runtime
        elif self.start_time:
            return time.time() - self.start_time
        return 0

    def update_status(self, handle, status, attempt):
        """Report one status poll. Matches the waiter's on_status hook."""
        self.query_id = handle.query_id
        self.state = status.state.value
        self.polls = attempt
        self._display(f"State: {self.state} | Query ID: {self.query_id} | "
                      f"{self._runtime_str()} | Polls: {self.polls}")

    def update_page(self, page_number, row_count):
        """Report one fetched page."""
        self.pages = page_number
        self.rows += row_count
        self._display(f"Fetched page {self.pages} | Rows: {self.rows:,} | "
                      f"Query ID: {self.query_id} | {self._runtime_str()}")

    def _runtime_str(self):
        return f"Runtime: {self.get_total_runtime():.2f}s"

    def _display(self, progress_str):
        if self.silent_mode:
            return
        # Clear the whole previous line before printing the new one
        print("\r" + " " * len(self.last_line) + "\r" + progress_str,
              end="", file=self.stream, flush=True)
        self.last_line = progress_str
