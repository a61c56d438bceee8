"""
This module implements the semi-supervised learning loop used to rescore
peptide-spectrum matches (PSMs).

Training labels are bootstrapped from a target-decoy competition instead of
ground truth: the single most discriminating feature provides the first
labels, a classifier is trained and evaluated on cross-validation folds, and
the out-of-fold predictions relabel the PSMs after every fold. A final model is
trained on all PSMs with their original target/decoy labels.

Classes:
    - SemiSupervisedLearner: Drives best-feature initialization, fold-wise
      training and relabeling, and the final refit.
"""

import click
import numpy as np
from loguru import logger

from .._config import RunnerConfig
from .classifiers import AbstractLearner
from .data_handling import Experiment

try:
    profile
except NameError:
    profile = lambda x: x


class SemiSupervisedLearner(object):
    """
    Implements the semi-supervised learning workflow.

    Attributes:
        learner (AbstractLearner): The classifier trained on each fold and on the full data.
        train_fdr (float): FDR threshold used to select the best feature and to relabel PSMs.
        xeval_num_iter (int): Number of cross-validation folds.
        seed (int): Seed for the fold shuffling, None is non-deterministic.

    After `fit`, the following attributes describe the run:
        best_feature (int): Index of the feature used for the initial labels.
        best_positives (int): Number of PSMs labeled 1 by the best feature.
        descending (bool): Whether higher scores were better for the best feature.
        fold_positives (list): Number of PSMs labeled 1 after each fold.
        xval_scores (np.ndarray): Out-of-fold predictions scattered back by row id.
    """

    def __init__(self, learner, train_fdr, xeval_num_iter, seed=None):
        assert isinstance(learner, AbstractLearner)
        self.learner = learner
        self.train_fdr = train_fdr
        self.xeval_num_iter = xeval_num_iter
        self.seed = seed

        self.best_feature = None
        self.best_positives = None
        self.descending = None
        self.fold_positives = []
        self.xval_scores = None

    @classmethod
    def from_config(cls, config: RunnerConfig, learner):
        """
        Creates a SemiSupervisedLearner instance from a configuration object.

        Args:
            config (RunnerConfig): The configuration object.
            learner (AbstractLearner): The base learner used for training.

        Returns:
            SemiSupervisedLearner: The initialized learner.
        """
        return cls(learner, config.train_fdr, config.xeval_num_iter, config.seed)

    def init_best_feature(self, experiment, eval_fdr):
        """
        Finds the single feature and sort direction labeling the most PSMs as targets.

        Every feature column is ranked ascending and descending. The pair with the
        strictly greatest number of targets passing `eval_fdr` wins, so ties go to
        the earliest column and then to the ascending direction.

        Args:
            experiment (Experiment): The PSMs to label.
            eval_fdr (float): FDR threshold.

        Returns:
            tuple: Feature index, number of positives, labels, whether the ranking is
                descending and the scores of the chosen feature.
        """
        assert isinstance(experiment, Experiment)

        best_feat = 0
        best_positives = 0
        best_desc = False
        new_labels = None

        feature_names = experiment.feature_names
        for col, name in enumerate(feature_names):
            scores = experiment.get_feature_column(col)
            for desc in (False, True):
                labels = experiment.update_labels(scores, eval_fdr, desc)
                num_passing = int((labels == 1).sum())
                logger.debug(
                    f"Feature {name} ({'descending' if desc else 'ascending'}): {num_passing} PSMs below {eval_fdr} FDR"
                )
                if num_passing > best_positives:
                    best_positives = num_passing
                    best_feat = col
                    best_desc = desc
                    new_labels = labels

        if best_positives == 0:
            raise click.ClickException(
                "No PSMs found below the 'eval_fdr' {}".format(eval_fdr)
            )

        logger.info(
            f"Using {feature_names[best_feat]} as initial score, "
            f"{best_positives} PSMs below {eval_fdr} FDR ({'descending' if best_desc else 'ascending'})"
        )

        best_feature_scores = experiment.get_feature_column(best_feat).copy()
        return best_feat, best_positives, new_labels, best_desc, best_feature_scores

    @profile
    def fit(self, x, y, feature_names=None):
        """
        Runs one full labeling and training cycle.

        Args:
            x (array-like): n-by-m feature matrix.
            y (array-like): n raw labels, 1 for targets and -1 for decoys.
            feature_names (list, optional): Names of the feature columns.

        Returns:
            np.ndarray: Final score of every PSM in the input order.
        """
        experiment = Experiment.from_arrays(x, y, feature_names)
        experiment.log_summary()
        original = experiment.copy()

        (
            self.best_feature,
            self.best_positives,
            new_labels,
            self.descending,
            _,
        ) = self.init_best_feature(experiment, self.train_fdr)
        experiment.set_labels(new_labels)

        folds = experiment.create_folds(self.xeval_num_iter, self.seed)

        all_predictions = np.zeros(len(experiment), dtype=np.float32)
        self.fold_positives = []
        for fold, (train_exp, test_exp) in enumerate(folds):
            logger.info(f"Learning on cross-validation fold: {fold}")

            train_exp.remove_unlabeled()
            logger.debug(
                f"Training on {len(train_exp)} labeled PSMs, evaluating {len(test_exp)} PSMs"
            )

            self.learner.fit(train_exp.get_feature_matrix(), train_exp.labels)
            fold_predictions = self.learner.predict_proba(test_exp.get_feature_matrix())

            all_predictions[test_exp.row_id] = fold_predictions

            new_labels = experiment.update_labels(
                all_predictions, self.train_fdr, self.descending
            )
            experiment.set_labels(new_labels)

            positives = int((new_labels == 1).sum())
            self.fold_positives.append(positives)
            logger.info(f"{positives} PSMs below {self.train_fdr} FDR after fold {fold}")

        self.xval_scores = all_predictions

        logger.info("Final prediction on the entire dataset")
        self.learner.fit(original.get_feature_matrix(), original.labels)
        return self.learner.predict_proba(original.get_feature_matrix())

