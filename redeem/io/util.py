"""
This module provides utility functions for detecting the type of PSM input files.

Functions:
    - is_tsv_file(file_path): Checks if a file is likely a TSV file based on its extension and content.
    - is_parquet_file(file_path): Validates if a file is a Parquet file.
    - get_parquet_column_names(file_path): Retrieves column names from a Parquet file without reading the entire file.

Dependencies:
    - os
    - click
    - pyarrow.parquet
    - loguru
"""

import os

import click
from loguru import logger


def _ensure_pyarrow():
    """
    Avoid importing pyarrow at module import time; import lazily in functions that need it.
    """
    try:
        import pyarrow as pa  # type: ignore
        import pyarrow.parquet  # type: ignore  # noqa: F401
        from pyarrow.lib import ArrowInvalid, ArrowIOError  # type: ignore

        return pa, ArrowInvalid, ArrowIOError
    except ImportError as exc:
        raise click.ClickException(
            "Parquet support requires 'pyarrow'. Install with 'pip install pyarrow'."
        ) from exc


def is_tsv_file(file_path):
    """
    Checks if a file is likely a TSV file based on extension and content.

    Args:
        file_path (str): The path to the file.

    Returns:
        bool: True if the file is likely a TSV file, False otherwise.
    """
    if not os.path.exists(file_path):
        logger.error(f"File not found at {file_path}")
        return False

    if not file_path.lower().endswith(".tsv") and not file_path.lower().endswith(
        ".txt"
    ):
        return False

    try:
        with open(file_path, "r", encoding="utf-8") as file:
            for line in file:
                if "\t" in line:
                    return True  # Found tab character, likely a TSV
        return False  # No tab character found
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Error reading file: {e}")
        return False


def is_parquet_file(file_path):
    """
    Check if the file is a valid Parquet file.
    """

    # First check extension
    if os.path.splitext(file_path)[1].lower() not in (".parquet", ".pq"):
        return False

    # Then verify it's actually a parquet file
    try:
        pa, ArrowInvalid, ArrowIOError = _ensure_pyarrow()
        pa.parquet.read_schema(file_path)
        return True
    except (ArrowInvalid, ArrowIOError, OSError):
        return False


def get_parquet_column_names(file_path):
    """
    Retrieves column names from a Parquet file without reading the entire file.
    """
    pa, _, _ = _ensure_pyarrow()
    return pa.parquet.read_schema(file_path).names
