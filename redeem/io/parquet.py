import pandas as pd
from loguru import logger

from ._base import BaseReader, BaseWriter
from .util import _ensure_pyarrow, get_parquet_column_names
from .._config import RunnerIOConfig


class ParquetReader(BaseReader):
    """
    Class for reading PSM tables stored in a Parquet file.

    Methods:
        read(): Read the PSM table from the input file.
    """

    def __init__(self, config: RunnerIOConfig):
        super().__init__(config)

    def read(self) -> pd.DataFrame:
        _ensure_pyarrow()
        logger.debug(
            f"Columns in {self.infile}: {get_parquet_column_names(self.infile)}"
        )
        return pd.read_parquet(self.infile, engine="pyarrow")


class ParquetWriter(BaseWriter):
    """
    Class for writing rescoring results to a Parquet file.

    Methods:
        save_results(result): Save the scored table and the summary statistics.
        save_weights(weights): Save the weights to the output file.
    """

    def __init__(self, config: RunnerIOConfig):
        super().__init__(config)

    def _write_table(self, table, path):
        _ensure_pyarrow()
        table.to_parquet(path, engine="pyarrow", index=False)
