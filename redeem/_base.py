from dataclasses import dataclass, field
import os
import copy

import click
from loguru import logger
from .io.util import is_tsv_file, is_parquet_file


@dataclass
class BaseIOConfig:
    """
    Base configuration class for I/O-related metadata shared by the rescoring commands.

    Attributes:
        infile (str): Path to the input PSM table (.tsv/.txt or .parquet/.pq).
        outfile (str): Path to the output file to be written.
        file_type (str): Type of the input file ('tsv' or 'parquet'), inferred from `infile`.
        context (str): Context in which the reader/writer operates (e.g., 'score_learn').
        prefix (str): Automatically derived from outfile (e.g., 'results/output' for 'results/output.tsv').
    """

    infile: str
    outfile: str
    file_type: str = field(init=False)
    context: str
    prefix: str = field(init=False)

    def __post_init__(self):
        """
        Initialize the file_type and prefix attributes based on the input file.
        """

        infile = self.infile

        if is_parquet_file(infile):
            self.file_type = "parquet"
        elif is_tsv_file(infile):
            self.file_type = "tsv"
        else:
            logger.critical(
                f"Failed to infer file type for: {infile}. Supported formats are: "
                ".tsv/.txt (tab-separated) or .parquet/.pq files.\n"
                f"  - exists: {os.path.exists(infile)}\n"
                f"  - is_parquet_file: {is_parquet_file(infile)}\n"
                f"  - is_tsv_file: {is_tsv_file(infile)}"
            )
            raise click.ClickException(f"Unsupported input file: {infile}")

        self.prefix = os.path.splitext(self.outfile)[0]

    def __str__(self):
        return (
            f"BaseIOConfig(\ninfile='{self.infile}'\noutfile='{self.outfile}'\n"
            f"file_type='{self.file_type}'\ncontext='{self.context}'\nprefix='{self.prefix}')"
        )

    def __repr__(self):
        return (
            f"BaseIOConfig(infile='{self.infile}', outfile='{self.outfile}', "
            f"context='{self.context}')"
        )

    def copy(self):
        """
        Return a deep copy of the config object.
        """
        return copy.deepcopy(self)
