import click
import numpy as np
import pandas as pd
import pytest
from sklearn.datasets import make_classification

from redeem._config import RunnerConfig, default_xgb_params
from redeem.scoring.classifiers import (
    HistGBCLearner,
    LDALearner,
    SVMLearner,
    XGBLearner,
    binary_targets,
    create_learner,
)


def _data():
    x, y = make_classification(
        n_samples=300,
        n_features=5,
        n_informative=3,
        n_redundant=0,
        class_sep=2.0,
        random_state=0,
    )
    return x.astype(np.float32), np.where(y == 1, 1, -1)


def _accuracy(learner, x, y):
    return (learner.predict(x) == y).mean()


def test_binary_targets():
    np.testing.assert_array_equal(binary_targets([1, -1, -1, 1]), [1, 0, 0, 1])

    with pytest.raises(ValueError):
        binary_targets([1, 0, -1])


def test_lda_learner():
    x, y = _data()
    learner = LDALearner().fit(x, y)

    scores = learner.predict_proba(x)
    assert scores.shape == (300,)
    assert scores.dtype == np.float32
    assert ((scores >= 0) & (scores <= 1)).all()
    assert _accuracy(learner, x, y) > 0.8

    weights = learner.get_weights(["f%d" % i for i in range(5)])
    assert isinstance(weights, pd.DataFrame)
    assert list(weights.columns) == ["score", "weight"]
    assert len(weights) == 5


def test_svm_learner():
    x, y = _data()
    learner = SVMLearner().fit(x, y)

    assert learner.threshold == 0.0
    assert learner.predict_proba(x).shape == (300,)
    assert _accuracy(learner, x, y) > 0.8


def test_xgb_learner():
    x, y = _data()
    learner = XGBLearner(default_xgb_params(test=True)).fit(x, y)

    scores = learner.predict_proba(x)
    assert ((scores >= 0) & (scores <= 1)).all()
    assert _accuracy(learner, x, y) > 0.8
    assert learner.importance is not None

    # an explicit eval set is used for early stopping
    learner = XGBLearner(default_xgb_params(test=True)).fit(x[:200], y[:200], x[200:], y[200:])
    assert _accuracy(learner, x[200:], y[200:]) > 0.8


def test_hgb_learner():
    x, y = _data()
    learner = HistGBCLearner({"max_iter": 50, "not_a_parameter": 1}).fit(x, y)

    assert learner.get_parameters().max_iter == 50
    assert _accuracy(learner, x, y) > 0.8


def test_learners_reject_unlabeled_psms():
    x, y = _data()
    y = y.copy()
    y[0] = 0

    for learner in (LDALearner(), SVMLearner(), XGBLearner(default_xgb_params())):
        with pytest.raises(ValueError):
            learner.fit(x, y)


def test_set_parameters():
    x, y = _data()
    trained = LDALearner().fit(x, y)

    learner = LDALearner().set_parameters(trained.get_parameters())
    np.testing.assert_array_equal(learner.predict_proba(x), trained.predict_proba(x))


def test_create_learner():
    assert isinstance(create_learner(RunnerConfig(classifier="LDA")), LDALearner)
    assert isinstance(create_learner(RunnerConfig(classifier="svm")), SVMLearner)
    assert isinstance(create_learner(RunnerConfig(classifier="XGBoost")), XGBLearner)
    assert isinstance(
        create_learner(RunnerConfig(classifier="HistGradientBoosting")), HistGBCLearner
    )

    learner = create_learner(RunnerConfig(classifier="LDA", threshold=0.7))
    assert learner.threshold == 0.7

    with pytest.raises(click.ClickException, match="Unknown model type"):
        create_learner(RunnerConfig(classifier="RandomForest"))
