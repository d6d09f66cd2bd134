#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Display utilities for little-owl.
"""
from rich.console import Console
from rich.table import Table


def display_results(column_names, results, query_id=None, runtime=None, output_file=None, console=None):
    """Display query results in tabular format using rich.

    Args:
        column_names (list): Header row of the result
        results (list): Data rows, each a list of cells
        query_id (str, optional): The Athena query execution ID
        runtime (float, optional): Query runtime in seconds
        output_file (str, optional): Path to output CSV file
        console (Console, optional): Console to print to
    """
    if not column_names:
        return

    console = console or Console()

    table = Table(show_header=True, header_style="bold magenta")
    for col in column_names:
        table.add_column(col if col is not None else "")
    for row in results:
        table.add_row(*["NULL" if cell is None else str(cell) for cell in row])

    console.print(table)
    console.print(f"\nRows: {len(results)}")

    if query_id:
        console.print(f"Query ID: {query_id}")
        if runtime is not None:
            console.print(f"Query Time: {runtime:.2f}s")

    if output_file:
        # Import here to avoid circular imports
        from little_owl.export import export_query_results_to_csv

        if export_query_results_to_csv(column_names, results, output_file):
            console.print(f"\nQuery results exported to: {output_file}")
        else:
            console.print(f"\nFailed to export query results to: {output_file}")
