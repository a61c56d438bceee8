"""
This module defines the workflow that rescores a PSM table end to end: reading the
input, running the semi-supervised learner, estimating q-values and writing the
results.

Classes:
    - RedeemRunner: Runs the rescoring workflow for one input table.
"""

import time
import warnings
from collections import namedtuple

import numpy as np
from loguru import logger
from sklearn.preprocessing import StandardScaler

from .._config import RunnerIOConfig
from ..io.dispatcher import ReaderDispatcher, WriterDispatcher
from ..stats import summary_err_table, target_decoy_qvalues
from .classifiers import LinearLearner, create_learner
from .data_handling import prepare_data_table
from .semi_supervised import SemiSupervisedLearner

Result = namedtuple("Result", ["summary_statistics", "scored_table"])

SCORE_COLUMN = "redeem_score"
QVALUE_COLUMN = "redeem_q_value"


class RedeemRunner(object):
    """
    Runs the rescoring workflow for one input table.

    Attributes:
        config (RunnerIOConfig): Configuration object for the workflow.
        reader (BaseReader): Reader object for input data.
        writer (BaseWriter): Writer object for output data.
        table (pd.DataFrame): The input data table.
    """

    def __init__(self, config: RunnerIOConfig):
        self.config = config
        self.reader = ReaderDispatcher.get_reader(config)
        self.writer = WriterDispatcher.get_writer(config)
        logger.debug(
            f"Using reader: {self.reader.__class__.__name__} for file type: {self.config.file_type}"
        )
        self.table = self.reader.read()
        self.learner = None
        self.semi_supervised_learner = None

    @property
    def runner_config(self):
        return self.config.runner

    def run_algo(self):
        """
        Learns the final scores of the PSMs and estimates their q-values.

        Returns:
            tuple: The result and the trained weights (a DataFrame for linear learners,
                the trained model otherwise).
        """
        rc = self.runner_config
        x, y, feature_names, row_index = prepare_data_table(
            self.table,
            label_column=rc.label_column,
            decoy_column=rc.decoy_column,
            score_columns=rc.score_filter,
            id_columns=rc.id_columns,
        )
        logger.info(f"Using {len(feature_names)} features: {', '.join(feature_names)}")

        if rc.ss_scale_features:
            logger.info("Standardizing features before learning")
            x = StandardScaler().fit_transform(x).astype(np.float32)

        self.learner = create_learner(rc)
        self.semi_supervised_learner = SemiSupervisedLearner.from_config(
            rc, self.learner
        )
        scores = self.semi_supervised_learner.fit(x, y, feature_names)

        is_decoy = y == -1
        qvalues = target_decoy_qvalues(scores, is_decoy, descending=True)
        summary = summary_err_table(scores, is_decoy, descending=True)

        scored_table = self.table.iloc[row_index].reset_index(drop=True)
        scored_table[SCORE_COLUMN] = scores
        scored_table[QVALUE_COLUMN] = qvalues

        if isinstance(self.learner, LinearLearner):
            weights = self.learner.get_weights(feature_names)
            logger.info(weights)
        else:
            weights = self.learner.get_parameters()

        return Result(summary, scored_table), weights

    def run(self):
        """
        Executes the rescoring workflow, including learning, error estimation and saving results.

        Returns:
            pd.DataFrame: The input rows kept for learning with their score and q-value.
        """
        start_at = time.time()
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            result, weights = self.run_algo()
        needed = time.time() - start_at

        self.print_summary(result)

        self.writer.save_results(result)
        self.writer.save_weights(weights)

        seconds = int(needed)
        msecs = int(1000 * (needed - seconds))

        logger.info("Total time: %d seconds and %d msecs wall time" % (seconds, msecs))
        return result.scored_table

    def print_summary(self, result):
        if result.summary_statistics is not None:
            logger.opt(raw=True).info("=" * 80)
            logger.opt(raw=True).info("\n")
            logger.opt(raw=True).info(result.summary_statistics)
            logger.opt(raw=True).info("\n")
            logger.opt(raw=True).info("=" * 80)
            logger.opt(raw=True).info("\n")
