#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Export utilities for little-owl.
"""
import csv
import sys


def _csv_row(row):
    return ["" if cell is None else cell for cell in row]


def export_query_results_to_csv(column_names, results, output_file):
    """Export buffered query results to a CSV file.

    Args:
        column_names (list): Header row
        results (list): Data rows
        output_file (str): Path to the output CSV file

    Returns:
        bool: True if successful, False otherwise
    """
    try:
        with open(output_file, 'w', newline='') as csvfile:
            writer = csv.writer(csvfile)
            writer.writerow(_csv_row(column_names))
            for row in results:
                writer.writerow(_csv_row(row))
        return True
    except OSError as e:
        print(f"Error exporting to CSV: {e}", file=sys.stderr)
        return False


class CsvStreamWriter:
    """Write CSV as result pages arrive.

    The caller flushes once per page, so the rows of pages that were already
    fetched stay on disk if a later page fails.
    """

    def __init__(self, output_file=None):
        """
        Args:
            output_file (str, optional): Path to write to, stdout if not given
        """
        self.output_file = output_file
        if output_file:
            self._file = open(output_file, 'w', newline='')
        else:
            self._file = sys.stdout
        self._writer = csv.writer(self._file)

    def write_header(self, column_names):
        if column_names is None:
            return
        self._writer.writerow(_csv_row(column_names))
        self._file.flush()

    def write_row(self, row):
        self._writer.writerow(_csv_row(row))

    def flush(self):
        self._file.flush()

    def close(self):
        if self.output_file:
            self._file.close()
        else:
            self._file.flush()
