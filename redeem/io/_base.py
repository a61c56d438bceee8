from abc import ABC, abstractmethod
import os
import pickle

import pandas as pd
from loguru import logger

from .._base import BaseIOConfig


class BaseReader(ABC):
    """
    Abstract base class for implementing readers that load PSM tables from different sources (TSV, Parquet).
    """

    def __init__(self, config: BaseIOConfig):
        """
        Initialize the reader with a given configuration.

        Args:
            config (BaseIOConfig): Configuration object containing input details.
        """
        self.config = config

    @property
    def infile(self):
        return self.config.infile

    @abstractmethod
    def read(self) -> pd.DataFrame:
        """
        Abstract method to be implemented by subclasses to read data from a specific format.
        """
        raise NotImplementedError("Subclasses must implement 'read'.")


class BaseWriter(ABC):
    """
    Abstract base class for implementing writers that save results to various output formats.
    """

    def __init__(self, config: BaseIOConfig):
        """
        Initialize the writer with a given configuration.

        Args:
            config (BaseIOConfig): Configuration object containing output details.
        """
        self.config = config

    def save_results(self, result):
        """
        Save the scored table and the summary statistics.

        Args:
            result (Result): The scored table and the summary statistics.
        """
        summ_stat_path = self.config.extra_writes.get("summ_stat_path")
        if summ_stat_path is not None and result.summary_statistics is not None:
            result.summary_statistics.to_csv(summ_stat_path, sep=",", index=False)
            logger.success("%s written." % summ_stat_path)

        output_path = self.config.extra_writes.get("output_path")
        if output_path is not None:
            self._write_table(result.scored_table, output_path)
            logger.success("%s written." % output_path)

    @abstractmethod
    def _write_table(self, table, path):
        raise NotImplementedError("Subclasses must implement '_write_table'.")

    def save_weights(self, weights):
        """
        Save the trained model, feature weights for linear learners and a pickled model otherwise.

        Args:
            weights: Weights DataFrame or trained model object.
        """
        if isinstance(weights, pd.DataFrame):
            self._save_tsv_weights(weights)
        elif weights is not None:
            self._save_bin_weights(weights)
        else:
            raise ValueError("No trained model to save.")

    def _save_tsv_weights(self, weights):
        """
        Save the feature weights to a CSV file.
        """
        trained_weights_path = self.config.extra_writes.get("trained_weights_path")

        if trained_weights_path is not None:
            if os.path.exists(trained_weights_path):
                logger.warning(f"Overwriting {trained_weights_path}.")
            weights.to_csv(trained_weights_path, sep=",", index=False)
            logger.success(f"{trained_weights_path} written.")

    def _save_bin_weights(self, weights):
        """
        Save the trained model to a binary file.

        Args:
            weights: Trained model object.
        """
        trained_model_path = self.config.extra_writes.get("trained_model_path")
        if trained_model_path is not None:
            with open(trained_model_path, "wb") as file:
                pickle.dump(weights, file)
            logger.success("%s written." % trained_model_path)
        else:
            logger.error("Trained model path not configured.")
