#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Command line interface for Amazon Athena.
"""
import os
import sys
import click
import configparser
from dotenv import load_dotenv

from little_owl import __version__
from little_owl.connection import AthenaConnection
from little_owl.display import display_results
from little_owl.errors import OwlError
from little_owl.paginator import DEFAULT_MAX_ROWS
from little_owl.query_handler import handle_query_with_progress
from little_owl.utils import get_config_file, read_sql
from little_owl.waiter import DEFAULT_POLL_INTERVAL

MAX_ROWS_RANGE = click.IntRange(1, 1000)

CONFIG_KEYS = {
    "access_key_id": str,
    "secret_access_key": str,
    "region": str,
    "output_location": str,
    "max_rows": MAX_ROWS_RANGE,
    "poll_interval": float,
    "max_attempts": int,
    "timeout": float,
}


@click.group()
@click.version_option(version=__version__)
def main():
    """Run SQL on Amazon Athena from the command line.

    \b
    Examples
      $ little-owl query "SELECT count(*) from osm.changesets"
      $ echo "SELECT * from osm.changesets" | little-owl query --csv > out.csv
    """
    load_dotenv()


@main.command()
@click.argument("sql", required=False)
@click.option("--config", help="Path to configuration file")
@click.option("--access-key-id", default=None, help="AWS access key id")
@click.option("--secret-access-key", default=None, help="AWS secret access key")
@click.option("--region", default=None, help="AWS region")
@click.option("--output-location", default=None, help="S3 location for Athena result files")
@click.option("--max-rows", default=None, type=MAX_ROWS_RANGE, help="Rows requested per page")
@click.option("--poll-interval", default=None, type=float, help="Seconds between status checks")
@click.option("--max-attempts", default=None, type=int, help="Give up after this many status checks")
@click.option("--timeout", default=None, type=float, help="Give up after waiting this many seconds")
@click.option("--csv", "stream", is_flag=True, help="Stream results as CSV, page by page")
@click.option("--output", help="Write results to a CSV file (e.g., res.csv)")
@click.option("--quiet", "-q", is_flag=True, help="Don't show query progress")
@click.option("--stop-on-cancel", is_flag=True, help="Stop the query on Athena when Ctrl+C is pressed")
@click.pass_context
def query(ctx, sql, config, access_key_id, secret_access_key, region, output_location, max_rows,
          poll_interval, max_attempts, timeout, stream, output, quiet, stop_on_cancel):
    """Run SQL given as argument or on stdin."""
    sql = read_sql(sql)
    if not sql:
        click.echo("Input required", err=True)
        click.echo(ctx.get_help(), err=True)
        ctx.exit(1)

    # Load config file if specified
    config_params = load_config(config or get_config_file())

    # Apply values with precedence: command line > config file > environment > defaults
    connection = AthenaConnection(
        access_key_id=access_key_id or config_params.get('access_key_id'),
        secret_access_key=secret_access_key or config_params.get('secret_access_key'),
        region=region or config_params.get('region'),
        output_location=output_location or config_params.get('output_location'),
    )
    if not connection.connect():
        ctx.exit(1)

    options = {
        "max_rows": max_rows or config_params.get('max_rows', DEFAULT_MAX_ROWS),
        "poll_interval": _first(poll_interval, config_params.get('poll_interval'), DEFAULT_POLL_INTERVAL),
        "max_attempts": _first(max_attempts, config_params.get('max_attempts')),
        "timeout": _first(timeout, config_params.get('timeout')),
    }

    # No progress line when CSV goes to a pipe
    silent = quiet or (stream and not output and not sys.stdout.isatty())

    try:
        column_names, results, query_id, runtime = handle_query_with_progress(
            connection, sql,
            stream=stream,
            output_file=output if stream else None,
            silent=silent,
            stop_on_cancel=stop_on_cancel,
            **options
        )
        if not stream:
            if column_names:
                display_results(column_names, results, query_id, runtime, output)
            else:
                click.echo(f"Query {query_id} returned no rows.", err=True)
        elif output:
            click.echo(f"Query results exported to: {output}", err=True)
    except (OwlError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    except KeyboardInterrupt:
        click.echo("Query cancelled by user.", err=True)
        ctx.exit(130)
    finally:
        connection.close()


def _first(*values):
    for value in values:
        if value is not None:
            return value
    return None


def load_config(config_path):
    """Load configuration from a file.

    Args:
        config_path (str): Path to the configuration file

    Returns:
        dict: Dictionary containing configuration parameters

    Raises:
        click.BadParameter: max_rows is outside 1..1000, the same bounds
            as the --max-rows option
    """
    config_params = {}
    if not config_path:
        return config_params

    try:
        if not os.path.exists(config_path):
            click.echo(f"Config file not found: {config_path}", err=True)
            return config_params

        config = configparser.ConfigParser()
        config.read(config_path)

        if 'athena' in config:
            athena_section = config['athena']
            for key, convert in CONFIG_KEYS.items():
                if key in athena_section:
                    try:
                        config_params[key] = convert(athena_section[key])
                    except click.BadParameter as e:
                        e.param_hint = f"'{key}' in {config_path}"
                        raise
    except (configparser.Error, ValueError) as e:
        click.echo(f"Error reading config file: {e}", err=True)

    return config_params


if __name__ == "__main__":
    main()
