import click
import numpy as np
import pandas as pd
import pytest

from redeem.scoring.data_handling import (
    Experiment,
    check_raw_labels,
    prepare_data_table,
)


def _experiment(n=10, n_features=2):
    x = np.arange(n * n_features, dtype=np.float32).reshape(n, n_features)
    y = np.where(np.arange(n) % 2 == 0, 1, -1)
    return Experiment.from_arrays(x, y, ["f%d" % i for i in range(n_features)])


def test_check_raw_labels():
    np.testing.assert_array_equal(check_raw_labels([1, -1, 1]), [1, -1, 1])

    with pytest.raises(click.ClickException):
        check_raw_labels([1, 0, -1])

    with pytest.raises(click.ClickException):
        check_raw_labels([[1, -1]])


def test_from_arrays():
    exp = _experiment(6, 3)

    assert len(exp) == 6
    assert exp.feature_names == ("f0", "f1", "f2")
    assert list(exp.df.columns) == ["row_id", "is_decoy", "label", "f0", "f1", "f2"]
    np.testing.assert_array_equal(exp.row_id, np.arange(6))
    np.testing.assert_array_equal(exp.labels, [1, -1, 1, -1, 1, -1])
    np.testing.assert_array_equal(exp.is_decoy, [False, True] * 3)
    assert exp.get_feature_matrix().shape == (6, 3)
    assert exp.get_feature_matrix().dtype == np.float32
    np.testing.assert_array_equal(exp.get_feature_column(1), [1, 4, 7, 10, 13, 16])


def test_from_arrays_default_feature_names():
    exp = Experiment.from_arrays(np.zeros((2, 2)), [1, -1])
    assert exp.feature_names == ("feature_0", "feature_1")


def test_from_arrays_errors():
    with pytest.raises(click.ClickException):
        Experiment.from_arrays(np.zeros(4), [1, -1, 1, -1])

    with pytest.raises(click.ClickException):
        Experiment.from_arrays(np.zeros((4, 1)), [1, -1, 1])

    with pytest.raises(click.ClickException):
        Experiment.from_arrays(np.zeros((2, 1)), [1, 0])

    with pytest.raises(click.ClickException):
        Experiment.from_arrays(np.array([[1.0], [np.nan]]), [1, -1])

    with pytest.raises(click.ClickException):
        Experiment.from_arrays(np.zeros((2, 2)), [1, -1], ["a"])

    with pytest.raises(click.ClickException):
        Experiment.from_arrays(np.zeros((2, 1)), [1, -1], ["label"])

    with pytest.raises(click.ClickException, match="not unique"):
        Experiment.from_arrays([[1, 10], [2, 20], [3, 30]], [1, -1, 1], ["a", "a"])


def test_from_arrays_keeps_feature_columns():
    x = [[1, 10], [2, 20], [3, 30]]
    exp = Experiment.from_arrays(x, [1, -1, 1], ["b", "a"])

    assert exp.feature_names == ("b", "a")
    np.testing.assert_array_equal(exp.get_feature_matrix(), x)


def test_set_labels():
    exp = _experiment(4)
    exp.set_labels([0, -1, 1, -1])
    np.testing.assert_array_equal(exp.labels, [0, -1, 1, -1])

    # the original target/decoy assignment is untouched
    np.testing.assert_array_equal(exp.is_decoy, [False, True, False, True])

    with pytest.raises(ValueError):
        exp.set_labels([1, -1])


def test_attributes_are_protected():
    exp = _experiment(4)
    with pytest.raises(ValueError):
        exp.labels = np.ones(4)


def test_copy_is_independent():
    exp = _experiment(4)
    snapshot = exp.copy()
    exp.set_labels([0, 0, 0, 0])

    np.testing.assert_array_equal(snapshot.labels, [1, -1, 1, -1])


def test_update_labels_uses_decoy_assignment():
    exp = _experiment(4)
    exp.set_labels([0, 0, 0, 0])

    labels = exp.update_labels(np.array([4.0, 3.0, 2.0, 1.0]), 0.0, True)
    np.testing.assert_array_equal(labels, [1, -1, 0, -1])
    # update_labels does not change the working labels
    np.testing.assert_array_equal(exp.labels, [0, 0, 0, 0])


def test_filter():
    exp = _experiment(8)
    mask = np.array([True, False, False, True, True, False, False, True])

    sub = exp.filter_(mask)
    assert len(sub) == 4
    np.testing.assert_array_equal(sub.row_id, [0, 3, 4, 7])
    np.testing.assert_array_equal(sub.get_feature_column(0), [0, 6, 8, 14])

    # the parent is not changed
    assert len(exp) == 8

    with pytest.raises(ValueError):
        exp.filter_(mask[:5])


def test_remove_psms():
    exp = _experiment(5)
    exp.remove_psms([1, 3])
    assert len(exp) == 3
    np.testing.assert_array_equal(exp.row_id, [0, 2, 4])

    exp.remove_psms([])
    assert len(exp) == 3

    with pytest.raises(ValueError):
        exp.remove_psms([0, 0])

    with pytest.raises(ValueError):
        exp.remove_psms([3])


def test_remove_unlabeled():
    exp = _experiment(6)
    exp.set_labels([1, 0, 0, -1, 1, 0])
    exp.remove_unlabeled()

    np.testing.assert_array_equal(exp.row_id, [0, 3, 4])
    np.testing.assert_array_equal(exp.labels, [1, -1, 1])


def test_create_folds():
    exp = _experiment(10)
    folds = exp.create_folds(3, seed=1)

    assert len(folds) == 3
    tested = []
    for train, test in folds:
        assert len(test) == 3
        assert len(train) == 7
        assert not set(train.row_id) & set(test.row_id)
        assert set(train.row_id) | set(test.row_id) == set(range(10))
        tested.extend(test.row_id)

    # every PSM is tested at most once, the remainder is never tested
    assert len(tested) == len(set(tested)) == 9
    remainder = set(range(10)) - set(tested)
    assert len(remainder) == 1
    for train, _ in folds:
        assert remainder <= set(train.row_id)


def test_create_folds_seed():
    exp = _experiment(30)

    first = [test.row_id for _, test in exp.create_folds(3, seed=42)]
    second = [test.row_id for _, test in exp.create_folds(3, seed=42)]
    for a, b in zip(first, second):
        np.testing.assert_array_equal(a, b)


def test_create_folds_errors():
    exp = _experiment(4)

    with pytest.raises(click.ClickException):
        exp.create_folds(1)

    with pytest.raises(click.ClickException):
        exp.create_folds(5)


def _table():
    return pd.DataFrame(
        {
            "psm_id": ["p%d" % i for i in range(6)],
            "scan": [10, 11, 12, 13, 14, 15],
            "label": [1, -1, 1, -1, 1, -1],
            "score_a": [3.0, 1.0, 2.5, np.nan, 4.0, 0.5],
            "score_b": [0.1, 0.2, 0.3, 0.4, 0.5, 0.6],
            "empty": [np.nan] * 6,
        }
    )


def test_prepare_data_table():
    x, y, names, row_index = prepare_data_table(_table(), id_columns=["scan"])

    assert names == ("score_a", "score_b")
    assert x.shape == (5, 2)
    assert x.dtype == np.float32
    np.testing.assert_array_equal(y, [1, -1, 1, 1, -1])
    np.testing.assert_array_equal(row_index, [0, 1, 2, 4, 5])


def test_prepare_data_table_score_filter():
    x, y, names, row_index = prepare_data_table(
        _table(), score_columns=["score_b"]
    )

    assert names == ("score_b",)
    assert x.shape == (6, 1)
    np.testing.assert_array_equal(row_index, np.arange(6))

    with pytest.raises(click.ClickException):
        prepare_data_table(_table(), score_columns=["score_c"])


def test_prepare_data_table_decoy_column():
    table = _table().drop(columns=["label"])
    table["decoy"] = [False, True, False, True, False, True]

    x, y, names, _ = prepare_data_table(
        table, decoy_column="decoy", id_columns=["scan"]
    )
    assert names == ("score_a", "score_b")
    np.testing.assert_array_equal(y, [1, -1, 1, 1, -1])


def test_prepare_data_table_skips_reserved_columns():
    table = _table()
    table["is_decoy"] = (table["label"] == -1).astype(int)
    table["row_id"] = np.arange(len(table))

    _, _, names, _ = prepare_data_table(table, id_columns=["scan"])
    assert names == ("score_a", "score_b")


def test_prepare_data_table_errors():
    with pytest.raises(click.ClickException):
        prepare_data_table(_table().iloc[:0])

    with pytest.raises(click.ClickException):
        prepare_data_table(_table(), label_column="target")

    with pytest.raises(click.ClickException):
        prepare_data_table(_table(), decoy_column="decoy")

    table = _table()
    table["label"] = [1, 0, 1, -1, 1, -1]
    with pytest.raises(click.ClickException):
        prepare_data_table(table)

    table = _table()
    table["label"] = 1
    with pytest.raises(click.ClickException):
        prepare_data_table(table)

    with pytest.raises(click.ClickException):
        prepare_data_table(_table()[["psm_id", "label"]])
