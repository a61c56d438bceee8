"""
This module provides the semi-supervised rescoring of peptide-spectrum matches (PSMs)
with a target-decoy competition in place of ground truth labels.

Submodules:
-----------
- `data_handling`: The `Experiment` class and the preparation of PSM tables into a
  feature matrix and target/decoy labels.
- `classifiers`: Learners (LDA, SVM, XGBoost, HistGradientBoosting) consumed through
  `fit` and `predict_proba`.
- `semi_supervised`: Best-feature initialization, cross-validation and relabeling.
- `runner`: Reads PSM tables, runs the rescoring and writes results.

Dependencies:
-------------
- `numpy`
- `pandas`
- `scikit-learn`
- `xgboost`
- `loguru`
- `click`
"""
