import numpy as np
import pandas as pd

try:
    profile
except NameError:
    profile = lambda x: x


def to_one_dim_array(values, as_type=None):
    """ Converts list or flattens n-dim array to 1-dim array if possible """

    if isinstance(values, (list, tuple)):
        values = np.array(values, dtype=np.float32)
    elif isinstance(values, pd.Series):
        values = values.values
    values = np.asarray(values).flatten()
    assert values.ndim == 1, "values has wrong dimension"
    if as_type is not None:
        return values.astype(as_type)
    return values


def rank_order(scores, descending):
    """ Positions of `scores` from best to worst; ties keep their original order """

    scores = to_one_dim_array(scores, np.float64)
    if descending:
        # mergesort is stable, negating keeps equal scores in row order
        return np.argsort(-scores, kind="mergesort")
    return np.argsort(scores, kind="mergesort")


@profile
def target_decoy_qvalues(scores, is_decoy, descending=True):
    """ Computes target-decoy competition q-values for each entry in 'scores'

    Entries are ranked from the best end (highest score if `descending`, lowest
    otherwise). At each rank the empirical FDR is decoys_seen / max(targets_seen, 1)
    and the q-value of a rank is the minimum FDR of that rank and all deeper ones.

        Args:
            scores(array-like): one score per PSM
            is_decoy(array-like): original decoy assignment, one bool per PSM
            descending(bool): whether higher scores are better

        Returns:
            np.ndarray: q-values in the original order of `scores`
    """

    scores = to_one_dim_array(scores, np.float64)
    is_decoy = to_one_dim_array(is_decoy, bool)

    if scores.shape[0] != is_decoy.shape[0]:
        raise ValueError(
            "Got %d scores for %d PSMs." % (scores.shape[0], is_decoy.shape[0])
        )

    n = scores.shape[0]
    if n == 0:
        return np.zeros(0, dtype=np.float64)

    order = rank_order(scores, descending)
    decoy_ranked = is_decoy[order]

    decoys_seen = np.cumsum(decoy_ranked)
    targets_seen = np.cumsum(~decoy_ranked)
    fdr = decoys_seen / np.maximum(targets_seen, 1)

    # running minimum from the worst rank upwards
    qvalues_ranked = np.minimum.accumulate(fdr[::-1])[::-1]

    qvalues = np.empty(n, dtype=np.float64)
    qvalues[order] = qvalues_ranked
    return qvalues


def update_labels(scores, is_decoy, fdr_threshold, descending):
    """ Ternary labels from a target-decoy competition on 'scores'

    Targets at or above the deepest rank whose empirical FDR is <= `fdr_threshold`
    are labeled 1, all other targets 0. Decoys are always -1.

        Args:
            scores(array-like): one score per PSM
            is_decoy(array-like): original decoy assignment, one bool per PSM
            fdr_threshold(float): maximal accepted FDR
            descending(bool): whether higher scores are better

        Returns:
            np.ndarray: labels in {-1, 0, 1}, int32
    """

    is_decoy = to_one_dim_array(is_decoy, bool)
    qvalues = target_decoy_qvalues(scores, is_decoy, descending)

    labels = np.zeros(is_decoy.shape[0], dtype=np.int32)
    labels[(qvalues <= fdr_threshold) & ~is_decoy] = 1
    labels[is_decoy] = -1
    return labels


def summary_err_table(scores, is_decoy, descending=True, qvalues=[0.001, 0.01, 0.02, 0.05, 0.1]):
    """ Summary table of accepted targets and decoys for some typical q-values """

    scores = to_one_dim_array(scores, np.float64)
    is_decoy = to_one_dim_array(is_decoy, bool)
    psm_qvalues = target_decoy_qvalues(scores, is_decoy, descending)

    rows = []
    for q in to_one_dim_array(qvalues, np.float64):
        passing = psm_qvalues <= q
        targets = passing & ~is_decoy
        if targets.any():
            target_scores = scores[targets]
            cutoff = target_scores.min() if descending else target_scores.max()
        else:
            cutoff = np.nan
        rows.append(
            dict(
                qvalue=q,
                targets=int(targets.sum()),
                decoys=int((passing & is_decoy).sum()),
                cutoff=cutoff,
            )
        )
    return pd.DataFrame(rows, columns=["qvalue", "targets", "decoys", "cutoff"])
