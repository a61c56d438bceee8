import pandas as pd

from ._base import BaseReader, BaseWriter
from .._config import RunnerIOConfig


class TSVReader(BaseReader):
    """
    Class for reading PSM tables stored in a tab-separated format.

    Attributes:
        infile (str): Input file path.

    Methods:
        read(): Read the PSM table from the input file.
    """

    def __init__(self, config: RunnerIOConfig):
        super().__init__(config)

    def read(self) -> pd.DataFrame:
        infile = self.config.infile
        table = pd.read_csv(infile, sep="\t")
        return table


class TSVWriter(BaseWriter):
    """
    Class for writing rescoring results to a tab-separated format.

    Methods:
        save_results(result): Save the scored table and the summary statistics.
        save_weights(weights): Save the weights to the output file.
    """

    def __init__(self, config: RunnerIOConfig):
        super().__init__(config)

    def _write_table(self, table, path):
        table.to_csv(path, sep="\t", index=False)
