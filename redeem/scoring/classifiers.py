"""
This module defines the classifiers (learners) driven by the semi-supervised
rescoring of peptide-spectrum matches.

Every learner implements the same capability: `fit` on PSMs labeled 1 (target)
or -1 (decoy) and `predict_proba` returning one continuous score per PSM, higher
meaning more target-like.

Classes:
    - AbstractLearner: Base class for defining a learner interface.
    - LinearLearner: Shared weight handling of the linear learners.
    - LDALearner: Implements a Linear Discriminant Analysis (LDA) learner.
    - SVMLearner: Implements a linear Support Vector Machine (SVM) learner.
    - HistGBCLearner: Implements a scikit-learn HistGradientBoosting learner.
    - XGBLearner: Implements an XGBoost-based learner.

Functions:
    - create_learner: Instantiates the learner selected in a `RunnerConfig`.
"""

import inspect

import click
import numpy as np
import pandas as pd
import xgboost as xgb
from loguru import logger
from sklearn.discriminant_analysis import LinearDiscriminantAnalysis
from sklearn.ensemble import HistGradientBoostingClassifier
from sklearn.model_selection import train_test_split
from sklearn.svm import LinearSVC


def binary_targets(y):
    """
    Converts labels in {1, -1} to classes in {1, 0}.

    Raises:
        ValueError: If any label is 0 (unlabeled PSMs must be removed by the caller).
    """
    y = np.asarray(y)
    if not np.isin(y, (1, -1)).all():
        raise ValueError(
            "Learners are trained on PSMs labeled 1 or -1 only, remove unlabeled PSMs first."
        )
    return (y == 1).astype(np.int32)


class AbstractLearner(object):
    """
    Abstract base class for defining a learner interface.

    Methods:
        - fit: Abstract method for training the learner.
        - predict_proba: Abstract method for scoring data.
        - predict: Calls targets where the score reaches `threshold`.
        - get_parameters: Abstract method for retrieving the trained model.
        - set_parameters: Abstract method for setting the trained model.
    """

    threshold = 0.5

    def fit(self, x, y, x_eval=None, y_eval=None):
        """Train the learner on PSMs labeled 1 (target) or -1 (decoy)."""
        raise NotImplementedError()

    def predict_proba(self, x):
        """Score the given PSMs, higher is more target-like."""
        raise NotImplementedError()

    def predict(self, x):
        """Label the given PSMs 1 where the score reaches the threshold, -1 otherwise."""
        scores = self.predict_proba(x)
        return np.where(scores >= self.threshold, 1, -1).astype(np.int32)

    def get_parameters(self):
        """Retrieve the trained model."""
        raise NotImplementedError()

    def set_parameters(self, param):
        """Set the trained model."""
        raise NotImplementedError()


class LinearLearner(AbstractLearner):
    """
    Shared weight handling of the linear learners.

    Methods:
        - get_weights: Retrieve feature weights from the model.
    """

    def get_weights(self, features):
        """
        Return a DataFrame with feature names and their weights.

        Args:
            features (List[str]): List of feature names.

        Returns:
            pd.DataFrame: DataFrame containing feature names and weights.
        """
        if self.classifier is None:
            raise ValueError("Classifier has not been trained yet.")

        weights = np.asarray(self.classifier.coef_).flatten()
        assert weights.shape[0] == len(features)
        return pd.DataFrame({"score": list(features), "weight": weights})

    def get_parameters(self):
        """Retrieve the trained model."""
        return self.classifier

    def set_parameters(self, classifier):
        """Set the trained model."""
        self.classifier = classifier
        return self


class LDALearner(LinearLearner):
    """
    Implements a Linear Discriminant Analysis (LDA) learner.

    The score is the posterior probability of the target class.
    """

    def __init__(self, threshold=0.5):
        self.classifier = None
        self.threshold = threshold

    def fit(self, x, y, x_eval=None, y_eval=None):
        """Train the LDA model, the eval set is not used."""
        classifier = LinearDiscriminantAnalysis()
        classifier.fit(x, binary_targets(y))
        self.classifier = classifier
        return self

    def predict_proba(self, x):
        """Posterior probability of the target class."""
        return self.classifier.predict_proba(x)[:, 1].astype(np.float32)


class SVMLearner(LinearLearner):
    """
    Implements a linear Support Vector Classification (SVM) learner.

    The score is the signed distance to the separating hyperplane, so `predict`
    uses a threshold of 0.
    """

    def __init__(self, C=1.0, max_iter=1000, threshold=0.0):
        self.classifier = None
        self.C = C
        self.max_iter = max_iter
        self.threshold = threshold

    def fit(self, x, y, x_eval=None, y_eval=None):
        """Train the SVM model, the eval set is not used."""
        classifier = LinearSVC(dual=False, C=self.C, max_iter=self.max_iter)
        classifier.fit(x, binary_targets(y))
        self.classifier = classifier
        return self

    def predict_proba(self, x):
        """Decision function of the SVM model."""
        return self.classifier.decision_function(x).astype(np.float32)


class HistGBCLearner(AbstractLearner):
    """
    Implements a scikit-learn HistGradientBoostingClassifier-based learner.

    Methods:
        - fit: Train the HistGradientBoosting model.
        - predict_proba: Posterior probability of the target class.
        - get_parameters: Retrieve the trained model.
        - set_parameters: Set the trained model.
    """

    def __init__(self, hgb_params=None, threshold=0.5):
        self.classifier = None
        self.importance = None
        self.hgb_params = hgb_params or {}
        self.threshold = threshold

    def fit(self, x, y, x_eval=None, y_eval=None):
        """Train the HistGradientBoosting model, the eval set is not used."""
        # Configure classifier with user params or defaults
        clf_params = dict(self.hgb_params)
        clf_params.setdefault("random_state", 42)
        clf_params.setdefault("max_iter", 100)
        clf_params.setdefault("early_stopping", "auto")

        # Filter out any params not accepted by HistGradientBoostingClassifier
        valid_params = inspect.signature(
            HistGradientBoostingClassifier.__init__
        ).parameters
        clf_params = {k: v for k, v in clf_params.items() if k in valid_params}

        classifier = HistGradientBoostingClassifier(**clf_params)
        classifier.fit(x, binary_targets(y))

        self.classifier = classifier
        return self

    def predict_proba(self, x):
        """Posterior probability of the target class."""
        return self.classifier.predict_proba(x)[:, 1].astype(np.float32)

    def get_parameters(self):
        """Retrieve the trained model."""
        return self.classifier

    def set_parameters(self, classifier):
        """Set the trained model."""
        self.classifier = classifier
        return self


class XGBLearner(AbstractLearner):
    """
    Implements an XGBoost-based learner.

    Training stops early on the supplied eval set; without one, a random
    `test_size` fraction of the training PSMs is held out for early stopping.

    Methods:
        - fit: Train the XGBoost model.
        - predict_proba: Score the given PSMs using the XGBoost model.
        - get_parameters: Retrieve the trained booster.
        - set_parameters: Set the trained booster.
    """

    def __init__(self, xgb_params, xgb_hyperparams=None, threads=1, threshold=0.5):
        self.classifier = None
        self.importance = None
        self.xgb_hyperparams = {
            "num_boost_round": 100,
            "early_stopping_rounds": 10,
            "test_size": 0.33,
        }
        self.xgb_hyperparams.update(xgb_hyperparams or {})
        self.xgb_params = dict(xgb_params)
        self.threads = threads
        self.xgb_params["nthread"] = self.threads
        self.threshold = threshold

    def fit(self, x, y, x_eval=None, y_eval=None):
        """Train the XGBoost model on PSMs labeled 1 or -1."""
        y = binary_targets(y)

        if x_eval is not None and y_eval is not None:
            x_train, y_train = x, y
            x_val, y_val = x_eval, binary_targets(y_eval)
        else:
            # prepare training and validation data
            x_train, x_val, y_train, y_val = train_test_split(
                x, y, test_size=self.xgb_hyperparams["test_size"], random_state=42
            )
        dtrain = xgb.DMatrix(x_train, label=y_train)
        dval = xgb.DMatrix(x_val, label=y_val)

        # learn model
        classifier = xgb.train(
            params=self.xgb_params,
            dtrain=dtrain,
            num_boost_round=self.xgb_hyperparams["num_boost_round"],
            evals=[(dval, "validation")],
            early_stopping_rounds=self.xgb_hyperparams["early_stopping_rounds"],
            verbose_eval=False,
        )

        self.importance = classifier.get_score(importance_type="gain")
        self.classifier = classifier
        return self

    def predict_proba(self, x):
        """Score the given PSMs using the XGBoost model."""
        dtest = xgb.DMatrix(x)
        result = self.classifier.predict(dtest)
        return result.astype(np.float32)

    def get_parameters(self):
        """Retrieve the trained booster."""
        return self.classifier

    def set_parameters(self, classifier):
        """Set the trained booster."""
        self.classifier = classifier
        self.importance = classifier.get_score(importance_type="gain")
        return self


def create_learner(config):
    """
    Instantiates the learner selected in a `RunnerConfig`.

    Args:
        config (RunnerConfig): The runner configuration.

    Returns:
        AbstractLearner: The base learner used for training.
    """
    name = config.classifier.lower()
    if name == "lda":
        learner = LDALearner(threshold=config.threshold)
    elif name == "svm":
        learner = SVMLearner()
    elif name == "xgboost":
        learner = XGBLearner(
            config.xgb_params,
            config.xgb_hyperparams,
            config.threads,
            threshold=config.threshold,
        )
    elif name == "histgradientboosting":
        learner = HistGBCLearner(config.hgb_params, threshold=config.threshold)
    else:
        raise click.ClickException(f"Unknown model type: {config.classifier}")

    logger.debug(f"Using base learner: {learner.__class__.__name__}")
    return learner
