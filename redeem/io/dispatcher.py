"""
This module provides dispatcher classes for routing I/O configurations to the appropriate
reader and writer implementations.

Supported file types:
- TSV
- Parquet

Classes:
- ReaderDispatcher: Routes configurations to the appropriate reader implementation.
- WriterDispatcher: Routes configurations to the appropriate writer implementation.
"""

from .parquet import ParquetReader, ParquetWriter
from .tsv import TSVReader, TSVWriter


class ReaderDispatcher:
    """
    Dispatcher class to route I/O configuration to the appropriate reader implementation.
    """

    @staticmethod
    def get_reader(config):
        """
        Return the appropriate reader instance based on the config's file_type.

        Args:
            config (BaseIOConfig): Configuration object with file_type and context.

        Returns:
            BaseReader: An instance of a subclass of BaseReader suitable for the given input type.

        Raises:
            ValueError: If an unsupported file type is provided.
        """
        if config.file_type == "parquet":
            return ParquetReader(config)
        elif config.file_type == "tsv":
            return TSVReader(config)
        else:
            raise ValueError(f"Unsupported file type: {config.file_type}")


class WriterDispatcher:
    """
    Dispatcher class to route I/O configuration to the appropriate writer implementation.
    """

    @staticmethod
    def get_writer(config):
        """
        Return the appropriate writer instance based on the config's file_type.

        Args:
            config (BaseIOConfig): Configuration object with file_type and context.

        Returns:
            BaseWriter: An instance of a subclass of BaseWriter suitable for the given output type.

        Raises:
            ValueError: If an unsupported file type is provided.
        """
        if config.file_type == "parquet":
            return ParquetWriter(config)
        elif config.file_type == "tsv":
            return TSVWriter(config)
        else:
            raise ValueError(f"Unsupported file type: {config.file_type}")
