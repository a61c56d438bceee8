"""
This module defines configuration classes for the semi-supervised rescoring of
peptide-spectrum matches (PSMs).

The configurations are implemented using Python's `dataclass` to provide a
structured and type-safe way to manage parameters. They control the classifier
setup, the target-decoy labeling thresholds, the cross-validation and the
input/output file handling.

Classes:
    - RunnerConfig: Configuration for classifier setup, learning parameters and input table layout.
    - RunnerIOConfig: Wrapper configuration class for I/O and runner parameters.

Usage:
    These configuration classes are typically instantiated with default values
    or populated from command-line arguments using the `from_cli_args` class method.
"""

from dataclasses import dataclass, field
from typing import List, Literal, Optional
import os

import click

from ._base import BaseIOConfig


CLASSIFIERS = ("LDA", "SVM", "XGBoost", "HistGradientBoosting")


def default_xgb_params(threads=1, test=False):
    """
    Default parameters passed to `xgb.train`.

    The objective is `binary:logistic` so that predictions are posterior probabilities.
    """
    xgb_params = {
        "eta": 0.3,
        "gamma": 0,
        "max_depth": 6,
        "min_child_weight": 1,
        "subsample": 1,
        "colsample_bytree": 1,
        "colsample_bylevel": 1,
        "colsample_bynode": 1,
        "lambda": 1,
        "alpha": 0,
        "scale_pos_weight": 1,
        "verbosity": 0,
        "objective": "binary:logistic",
        "nthread": threads,
        "eval_metric": "logloss",
    }

    if test:
        xgb_params["tree_method"] = "exact"
        xgb_params["seed"] = 42

    return xgb_params


def default_xgb_hyperparams():
    return {
        "num_boost_round": 100,
        "early_stopping_rounds": 10,
        "test_size": 0.33,
    }


@dataclass
class RunnerConfig:
    """
    Configuration for classifier setup, learning parameters and input table layout.

    Attributes:
        classifier (str): Classifier type used for semi-supervised learning
            ('LDA', 'SVM', 'XGBoost' or 'HistGradientBoosting').
        xgb_params (dict): Parameters passed to `xgb.train`.
        xgb_hyperparams (dict): Boosting rounds, early stopping rounds and validation split size.
        hgb_params (dict): Parameters passed to `HistGradientBoostingClassifier`.

        train_fdr (float): FDR threshold used to select the initial best feature and to
            relabel PSMs after each cross-validation fold.
        xeval_num_iter (int): Number of cross-validation folds.
        threshold (float): Score threshold used by `predict` to call a PSM a target.

        ss_scale_features (bool): Whether to standardize features before learning.
        score_filter (list): Explicit list of feature columns to use (empty means all numeric columns).
        label_column (str): Column with +1 (target) / -1 (decoy) labels.
        decoy_column (str): Optional boolean decoy column used instead of `label_column`.
        id_columns (list): Columns never used as features.

        threads (int): Number of CPU threads available to the classifier.
        test (bool): Whether to enable test mode with deterministic behavior.
        seed (int): Seed for the fold shuffling. None means non-deterministic unless `test` is set.
    """

    # Classifier options
    classifier: Literal["LDA", "SVM", "XGBoost", "HistGradientBoosting"] = "XGBoost"
    xgb_params: dict = field(default_factory=dict)
    xgb_hyperparams: dict = field(default_factory=default_xgb_hyperparams)
    hgb_params: dict = field(default_factory=dict)

    # Semi-supervised settings
    train_fdr: float = 0.01
    xeval_num_iter: int = 3
    threshold: float = 0.5

    # Input table layout
    ss_scale_features: bool = False
    score_filter: List[str] = field(default_factory=list)
    label_column: str = "label"
    decoy_column: Optional[str] = None
    id_columns: List[str] = field(default_factory=list)

    # Miscellaneous
    threads: int = 1
    test: bool = False
    seed: Optional[int] = None

    def __post_init__(self):
        if not self.xgb_params:
            self.xgb_params = default_xgb_params(self.threads, self.test)

        if self.seed is None and self.test:
            self.seed = 42

        if not 0.0 < self.train_fdr <= 1.0:
            raise click.ClickException(
                f"train_fdr must be within (0, 1], got {self.train_fdr}."
            )
        if self.xeval_num_iter < 2:
            raise click.ClickException(
                f"xeval_num_iter must be at least 2, got {self.xeval_num_iter}."
            )
        if not 0.0 <= self.threshold <= 1.0:
            raise click.ClickException(
                f"threshold must be within [0, 1], got {self.threshold}."
            )

    def __str__(self):
        parts = [
            "RunnerConfig(",
            f"  classifier='{self.classifier}'",
        ]

        # Conditionally add XGBoost-specific parameters
        if self.classifier == "XGBoost":
            parts.extend(
                [
                    f"  xgb_params={self.xgb_params}",
                    f"  xgb_hyperparams={self.xgb_hyperparams}",
                ]
            )
        elif self.classifier == "HistGradientBoosting":
            parts.append(f"  hgb_params={self.hgb_params}")

        parts.extend(
            [
                f"  train_fdr={self.train_fdr}",
                f"  xeval_num_iter={self.xeval_num_iter}",
                f"  threshold={self.threshold}",
                f"  ss_scale_features={self.ss_scale_features}",
                f"  score_filter={self.score_filter}",
                f"  label_column='{self.label_column}'",
                f"  decoy_column={self.decoy_column!r}",
                f"  id_columns={self.id_columns}",
                f"  threads={self.threads}",
                f"  test={self.test}",
                f"  seed={self.seed}",
                ")",
            ]
        )

        return "\n".join(parts)

    def __repr__(self):
        return (
            f"RunnerConfig(classifier='{self.classifier}', train_fdr={self.train_fdr}, "
            f"xeval_num_iter={self.xeval_num_iter}, threshold={self.threshold}, "
            f"threads={self.threads}, seed={self.seed})"
        )


@dataclass
class RunnerIOConfig(BaseIOConfig):
    """
    Wrapper configuration class for I/O and runner parameters.

    Attributes:
        infile (str): Input file path (.tsv or .parquet).
        outfile (str): Output file path (same format as input).
        context (str): Scoring context (e.g. 'score_learn').
        prefix (str): Derived from `outfile`, used as prefix for output artifacts.
        runner (RunnerConfig): All scoring and learning configuration settings.
        extra_writes (dict): Dictionary of named output paths (e.g., summary, weights, model).
    """

    runner: RunnerConfig
    extra_writes: dict = field(init=False)

    def __post_init__(self):
        super().__post_init__()
        self.extra_writes = dict(self._extra_writes())

    def __str__(self):
        return (
            f"RunnerIOConfig(infile='{self.infile}'\noutfile='{self.outfile}'\n"
            f"file_type='{self.file_type}'\ncontext='{self.context}'\nprefix='{self.prefix}'\n"
            f"runner={self.runner}\nextra_writes={self.extra_writes})"
        )

    def __repr__(self):
        return (
            f"RunnerIOConfig(infile='{self.infile}', outfile='{self.outfile}', "
            f"context='{self.context}', runner={self.runner!r})"
        )

    @classmethod
    def from_cli_args(
        cls,
        infile,
        outfile,
        context,
        classifier,
        xeval_num_iter,
        train_fdr,
        threshold,
        label_column,
        decoy_column,
        id_columns,
        score_filter,
        ss_scale_features,
        seed,
        threads,
        test,
    ):
        """
        Creates a configuration object from command-line arguments.
        """
        runner_config = RunnerConfig(
            classifier=classifier,
            xgb_params=default_xgb_params(threads, test),
            train_fdr=train_fdr,
            xeval_num_iter=xeval_num_iter,
            threshold=threshold,
            ss_scale_features=ss_scale_features,
            score_filter=_split_columns(score_filter),
            label_column=label_column,
            decoy_column=decoy_column,
            id_columns=_split_columns(id_columns),
            threads=threads,
            test=test,
            seed=seed,
        )

        return cls(
            infile=infile,
            outfile=outfile,
            context=context,
            runner=runner_config,
        )

    def _extra_writes(self):
        """
        Generates paths for various output files based on the prefix provided.

        Yields:
            Tuple[str, str]: A tuple containing the name of the output file type and the corresponding file path.
        """
        if self.file_type == "parquet":
            yield "output_path", os.path.join(self.prefix + "_scored.parquet")
        else:
            yield "output_path", os.path.join(self.prefix + "_scored.tsv")
        yield "summ_stat_path", os.path.join(self.prefix + "_summary_stat.csv")
        yield "trained_weights_path", os.path.join(self.prefix + "_weights.csv")
        yield "trained_model_path", os.path.join(self.prefix + "_model.bin")
        yield "log_path", os.path.join(self.prefix + "_redeem_score.log")


def _split_columns(value):
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [v.strip() for v in value.split(",") if v.strip()]
