"""
The `io` module provides tools for reading PSM tables and writing rescoring
results. It supports tab-separated and Parquet files.

Submodules:
-----------
- `util`: Contains utility functions for file type detection.
- `dispatcher`: Provides dispatcher classes for routing I/O configurations to the appropriate
  reader and writer implementations based on file type.
- `_base`: Defines abstract base classes for readers and writers.
- `tsv`: Reader and writer for tab-separated files.
- `parquet`: Reader and writer for Parquet files.

Dependencies:
-------------
- `pandas`
- `pyarrow`
- `loguru`
- `click`

"""
