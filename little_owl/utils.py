#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Utility functions for little-owl.
"""
import os
import sys


def get_config_file():
    """Get the default config file path, or None if there is none."""
    home_dir = os.path.expanduser("~")
    config_file = os.path.join(home_dir, ".little_owl", "config.ini")
    if os.path.isfile(config_file):
        return config_file
    return None


def read_sql(sql, stdin=None):
    """Return the SQL to run.

    The positional argument wins. Without it, SQL is read from stdin unless
    stdin is an interactive terminal.

    Args:
        sql (str): SQL given on the command line, may be None
        stdin (file, optional): Defaults to sys.stdin

    Returns:
        str: Stripped SQL text, empty if there is none
    """
    if sql:
        return sql.strip()
    stdin = stdin if stdin is not None else sys.stdin
    if stdin is None or stdin.isatty():
        return ""
    return stdin.read().strip()
