"""
Helper functions for the Stack Combiner.

This module contains various utility functions used across the application.
"""

import os
import time
import functools
import logging


def ensure_directory(directory):
    """Ensure a directory exists, create it if it doesn't."""
    if directory and not os.path.exists(directory):
        os.makedirs(directory)
    return directory


def get_file_size_str(file_path):
    """Get the file size as a human-readable string."""
    if not os.path.exists(file_path):
        return "N/A"

    size_bytes = os.path.getsize(file_path)

    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size_bytes < 1024 or unit == 'TB':
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024


def time_function(func):
    """Decorator to log the execution time of a function at debug level."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = time.perf_counter() - start_time
        logging.getLogger('stack_combiner').debug(
            f"Function {func.__name__} took {elapsed:.4f} seconds to execute"
        )
        return result

    return wrapper
