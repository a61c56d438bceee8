"""
This module provides utilities for handling and processing data for the semi-supervised
rescoring of peptide-spectrum matches (PSMs).

It includes functions for cleaning and validating PSM tables and preparing the feature
matrix and label vector. Additionally, it defines the `Experiment` class, which
encapsulates the feature matrix, the working labels, the original target/decoy
assignment and the original row ids of a set of PSMs.

Classes:
    - Experiment: Encapsulates labeling, filtering and partitioning of PSMs.

Functions:
    - check_raw_labels: Validates a raw target/decoy label vector.
    - cleanup_and_check: Cleans up the input DataFrame and validates its structure.
    - prepare_data_table: Prepares the feature matrix and labels from an input table.
"""

import click
import numpy as np
import pandas as pd
from loguru import logger

from ..stats import update_labels

try:
    profile
except NameError:

    def profile(fun):
        return fun


def check_raw_labels(y):
    """
    Checks that a raw label vector only contains +1 (target) and -1 (decoy).

    Args:
        y (iterable): raw labels.

    Returns:
        np.ndarray: The labels as int32 array.
    """
    y = np.asarray(y)
    if y.ndim != 1:
        raise click.ClickException(
            "Labels must be a 1-dimensional vector, got shape %s." % (y.shape,)
        )
    invalid = ~np.isin(y, (1, -1))
    if invalid.any():
        found = ", ".join(str(v) for v in np.unique(y[invalid])[:5])
        raise click.ClickException(
            "Labels must be 1 (target) or -1 (decoy), found: %s." % found
        )
    return y.astype(np.int32)


@profile
def cleanup_and_check(df, score_columns):
    """
    Cleans up the input DataFrame and validates its structure.

    Args:
        df (pd.DataFrame): Input data with an `is_decoy` column.
        score_columns (list): Feature columns that must not contain missing values.

    Returns:
        pd.DataFrame: Cleaned and validated data.
    """
    sub_df = df.loc[:, score_columns]
    flags = ~pd.isnull(sub_df)
    valid_rows = flags.all(axis=1)
    logger.trace(f"{valid_rows.sum()} valid rows out of {len(df)}")
    if not valid_rows.all():
        logger.warning(
            f"Dropping {(~valid_rows).sum()} PSMs with missing feature values."
        )
    df_cleaned = df.loc[valid_rows, :]

    n_decoy = int(df_cleaned["is_decoy"].sum())
    n_target = len(df_cleaned) - n_decoy

    logger.info("Data set contains %d decoy and %d target PSMs." % (n_decoy, n_target))
    if n_decoy < 1 or n_target < 1:
        raise click.ClickException(
            "At least one decoy PSM and one target PSM are required."
        )

    return df_cleaned


def prepare_data_table(
    table,
    label_column="label",
    decoy_column=None,
    score_columns=None,
    id_columns=None,
):
    """
    Prepares the input PSM table for rescoring.

    Args:
        table (pd.DataFrame): Input data table, one row per PSM.
        label_column (str): Name of the column with +1 (target) / -1 (decoy) labels.
        decoy_column (str, optional): Name of a boolean decoy column, used instead of `label_column`.
        score_columns (list, optional): Explicit feature columns. Defaults to every numeric column
            that is neither a label nor an id column.
        id_columns (list, optional): Columns never used as features.

    Returns:
        tuple: Feature matrix (np.float32), raw labels (np.int32), used feature names and the
            positional index of the kept input rows.
    """
    N = len(table)
    if not N:
        raise click.ClickException("Empty input file supplied.")
    header = list(table.columns.values)
    id_columns = list(id_columns or [])

    if decoy_column is not None:
        if decoy_column not in header:
            raise click.ClickException(
                "Column %s is not in input file(s)." % decoy_column
            )
        is_decoy = table[decoy_column].values.astype(bool)
        excluded = set([decoy_column, label_column] + id_columns)
    else:
        if label_column not in header:
            raise click.ClickException(
                "Column %s is not in input file(s)." % label_column
            )
        is_decoy = check_raw_labels(table[label_column].values) == -1
        excluded = set([label_column] + id_columns)

    if score_columns:
        missing = [c for c in score_columns if c not in header]
        if missing:
            missing_txt = ", ".join(["'%s'" % m for m in missing])
            raise click.ClickException(
                "Column(s) %s not found in input file. Please check your score filter (--score_filter)"
                % missing_txt
            )
        var_columns_available = list(score_columns)
    else:
        var_columns_available = []
        for c in header:
            if c in excluded:
                continue
            if c in Experiment.META_COLUMNS:
                logger.debug(f"Column {c} is reserved and is not used as a feature.")
                continue
            if pd.api.types.is_numeric_dtype(table[c]) and not pd.api.types.is_bool_dtype(
                table[c]
            ):
                var_columns_available.append(c)

    used_var_column_names = []
    for v in var_columns_available:
        if pd.isnull(table[v]).all():
            logger.debug(
                f"Column {v} contains only invalid/missing values. Column will be dropped."
            )
            continue
        used_var_column_names.append(v)

    if not used_var_column_names:
        raise click.ClickException("No feature column is in input file(s).")

    df = pd.DataFrame(
        {"row_index": np.arange(N), "is_decoy": is_decoy},
    )
    for v in used_var_column_names:
        df[v] = pd.to_numeric(table[v], errors="coerce").values

    df = cleanup_and_check(df, used_var_column_names)

    x = df[used_var_column_names].values.astype(np.float32)
    y = np.where(df["is_decoy"].values, -1, 1).astype(np.int32)
    return x, y, tuple(used_var_column_names), df["row_index"].values


class Experiment(object):
    """
    Encapsulates labeling, filtering and partitioning of a set of PSMs.

    The underlying DataFrame holds the columns `row_id`, `is_decoy`, `label`
    followed by the feature columns. Features and `is_decoy` are fixed at
    construction, `label` is the working label vector in {-1, 0, 1}.

    Attributes:
        df (pd.DataFrame): The underlying data.
    """

    META_COLUMNS = ("row_id", "is_decoy", "label")

    @profile
    def __init__(self, df):
        self.df = df.copy()

    @classmethod
    def from_arrays(cls, x, y, feature_names=None):
        """
        Builds an Experiment from a raw feature matrix and raw target/decoy labels.

        Args:
            x (array-like): n-by-m feature matrix.
            y (array-like): n raw labels, 1 for targets and -1 for decoys.
            feature_names (list, optional): Names of the m feature columns.

        Returns:
            Experiment: A new Experiment with `row_id` 0..n-1 and labels equal to `y`.
        """
        x = np.asarray(x, dtype=np.float32)
        if x.ndim != 2:
            raise click.ClickException(
                "Feature matrix must be 2-dimensional, got shape %s." % (x.shape,)
            )
        y = check_raw_labels(y)
        if x.shape[0] != y.shape[0]:
            raise click.ClickException(
                "Feature matrix has %d rows but %d labels were given."
                % (x.shape[0], y.shape[0])
            )
        if not np.isfinite(x).all():
            raise click.ClickException("Feature matrix contains non-finite values.")

        if feature_names is None:
            feature_names = ["feature_%d" % i for i in range(x.shape[1])]
        elif len(feature_names) != x.shape[1]:
            raise click.ClickException(
                "Got %d feature names for %d feature columns."
                % (len(feature_names), x.shape[1])
            )
        names = pd.Index(feature_names)
        if names.has_duplicates:
            raise click.ClickException(
                "Feature names %s are not unique."
                % ", ".join(map(str, names[names.duplicated()].unique()))
            )
        clashes = set(feature_names) & set(cls.META_COLUMNS)
        if clashes:
            raise click.ClickException(
                "Feature names %s are reserved." % ", ".join(sorted(clashes))
            )

        data = dict(
            row_id=np.arange(x.shape[0], dtype=np.int64),
            is_decoy=y == -1,
            label=y,
        )
        column_names = list(cls.META_COLUMNS)
        for i, name in enumerate(feature_names):
            data[name] = x[:, i]
            column_names.append(name)

        return cls(pd.DataFrame(data, columns=column_names))

    def log_summary(self):
        """
        Logs a summary of the input data, including the number of PSMs, targets,
        decoys and features.
        """
        n_decoy = int(self.is_decoy.sum())
        logger.info("Summary of input data:")
        logger.info("%d PSMs" % len(self))
        logger.info("%d targets" % (len(self) - n_decoy))
        logger.info("%d decoys" % n_decoy)
        logger.info("%d features" % len(self.feature_names))

    def __len__(self):
        return len(self.df)

    def __getitem__(self, *args):
        return self.df.__getitem__(*args)

    def __setattr__(self, name, value):
        if name not in [
            "df",
        ]:
            raise ValueError("Use 'set_labels' to change PSM labels.")
        object.__setattr__(self, name, value)

    @property
    def feature_names(self):
        return tuple(self.df.columns[len(self.META_COLUMNS) :])

    @property
    def labels(self):
        return self.df["label"].values.astype(np.int32)

    @property
    def is_decoy(self):
        return self.df["is_decoy"].values.astype(bool)

    @property
    def row_id(self):
        return self.df["row_id"].values.astype(np.int64)

    def get_feature_matrix(self):
        """
        Retrieves the feature matrix for learning and scoring.

        Returns:
            np.ndarray: The n-by-m feature matrix.
        """
        return self.df.iloc[:, len(self.META_COLUMNS) :].values.astype(
            np.float32, copy=False
        )

    def get_feature_column(self, index):
        return self.df.iloc[:, len(self.META_COLUMNS) + index].values

    def copy(self):
        """
        Returns a snapshot of this Experiment, labels included.
        """
        return Experiment(self.df)

    def set_labels(self, labels):
        """
        Overwrites the working labels.

        Args:
            labels (array-like): One label in {-1, 0, 1} per PSM.
        """
        labels = np.asarray(labels)
        if labels.shape != (len(self),):
            raise ValueError(
                "Got %d labels for %d PSMs." % (labels.size, len(self))
            )
        self.df["label"] = labels.astype(np.int32)

    def update_labels(self, scores, fdr_threshold, descending):
        """
        Computes target-decoy competition labels from the given scores.

        Decoys are identified by the original target/decoy assignment, not by the
        working labels.

        Args:
            scores (array-like): One score per PSM.
            fdr_threshold (float): Maximal accepted FDR.
            descending (bool): Whether higher scores are better.

        Returns:
            np.ndarray: Labels in {-1, 0, 1}.
        """
        return update_labels(scores, self.is_decoy, fdr_threshold, descending)

    def filter_(self, idx):
        """
        Filters the data based on the given boolean mask.

        Args:
            idx (array-like): Boolean mask with one entry per PSM.

        Returns:
            Experiment: A new Experiment containing the selected PSMs in their original order.
        """
        idx = np.asarray(idx, dtype=bool)
        if idx.shape != (len(self),):
            raise ValueError(
                "Mask of length %d does not match %d PSMs." % (idx.size, len(self))
            )
        return Experiment(self.df[idx])

    def remove_psms(self, indices):
        """
        Removes the PSMs at the given positions in place.

        Args:
            indices (iterable): Distinct positional indices.
        """
        indices = np.asarray(list(indices), dtype=np.int64)
        if np.unique(indices).size != indices.size:
            raise ValueError("Indices of PSMs to remove must be distinct.")
        if indices.size and (indices.min() < 0 or indices.max() >= len(self)):
            raise ValueError("Indices of PSMs to remove are out of range.")
        keep = np.ones(len(self), dtype=bool)
        keep[indices] = False
        self.df = self.df[keep].copy()

    def remove_unlabeled(self):
        """
        Removes PSMs whose current label is 0 in place.
        """
        self.remove_psms(np.flatnonzero(self.labels == 0))

    @profile
    def create_folds(self, n_folds, seed=None):
        """
        Partitions the PSMs into cross-validation folds.

        Positions are shuffled and cut into `n_folds` contiguous chunks of
        `len(self) // n_folds` PSMs. Each chunk is the test set of one fold and
        everything else is its training set. The `len(self) % n_folds` remaining
        PSMs are therefore in every training set and in no test set.

        Args:
            n_folds (int): Number of folds.
            seed (int, optional): Seed for the shuffle. None is non-deterministic.

        Returns:
            list: (train, test) Experiment pairs, one per fold.
        """
        n_samples = len(self)
        if n_folds < 2:
            raise click.ClickException(
                "At least 2 cross-validation folds are required, got %d." % n_folds
            )
        if n_folds > n_samples:
            raise click.ClickException(
                "Cannot create %d cross-validation folds from %d PSMs."
                % (n_folds, n_samples)
            )

        indices = np.random.default_rng(seed).permutation(n_samples)
        fold_size = n_samples // n_folds
        logger.debug(
            f"Fold size: {fold_size} PSMs, {n_samples % n_folds} PSMs are never held out."
        )

        folds = []
        for i in range(n_folds):
            test_mask = np.zeros(n_samples, dtype=bool)
            test_mask[indices[i * fold_size : (i + 1) * fold_size]] = True
            folds.append((self.filter_(~test_mask), self.filter_(test_mask)))
        return folds
