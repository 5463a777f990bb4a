"""
Model module.
Defines candidate specifications and the engines that fit them
(linear regression, logistic regression, random forests).
Exposes: build_model(...), fit_candidate(...), predict_candidate(...)
"""
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable

import numpy as np
import pandas as pd
from sklearn.ensemble import RandomForestClassifier, RandomForestRegressor
from sklearn.linear_model import LinearRegression, LogisticRegression

from cvflow.config import TARGET_COL, RANDOM_STATE
from cvflow.data import split_X_y
from cvflow.errors import InvalidParameter
from cvflow.features import build_design
from cvflow.preprocess import prepare_for_model


def _linear_regression(random_state: int, **params):
    # deterministic solver; random_state does not apply
    return LinearRegression(**params)


def _logistic_regression(random_state: int, **params):
    params.setdefault("max_iter", 1000)
    return LogisticRegression(random_state=random_state, **params)


def _random_forest(random_state: int, **params):
    return RandomForestClassifier(random_state=random_state, **params)


def _random_forest_regressor(random_state: int, **params):
    return RandomForestRegressor(random_state=random_state, **params)


ENGINES: dict[str, Callable] = {
    "linear_regression": _linear_regression,
    "logistic_regression": _logistic_regression,
    "random_forest": _random_forest,
    "random_forest_regressor": _random_forest_regressor,
}

CLASSIFIERS = {"logistic_regression", "random_forest"}


def build_model(family: str, random_state: int = RANDOM_STATE, **params):
    """Build and return an unfitted estimator for a model family."""
    try:
        engine = ENGINES[family]
    except KeyError:
        raise InvalidParameter(
            f"unknown model family {family!r}; expected one of {sorted(ENGINES)}"
        ) from None
    return engine(random_state, **params)


@dataclass(frozen=True)
class ModelSpec:
    """A candidate: model family + feature terms + hyperparameters."""
    name: str
    family: str
    features: tuple | None = None  # None -> every column except id/target
    params: dict = field(default_factory=dict)

    def __post_init__(self):
        if self.family not in ENGINES:
            raise InvalidParameter(f"unknown model family {self.family!r}")
        if self.features is not None:
            object.__setattr__(self, "features", tuple(self.features))

    @property
    def is_classifier(self) -> bool:
        return self.family in CLASSIFIERS


@dataclass(frozen=True)
class FittedModel:
    spec: ModelSpec
    estimator: Any
    scaler: Any
    feature_cols: list
    classes: tuple | None = None
    medians: dict = field(default_factory=dict)  # training medians of numeric columns


def _design(df: pd.DataFrame, spec: ModelSpec, target_col: str) -> pd.DataFrame:
    X, _ = split_X_y(df, target_col=target_col)
    if spec.features is None:
        return X
    if target_col in spec.features:
        raise InvalidParameter(f"candidate {spec.name!r} uses the outcome {target_col!r} as a feature")
    return build_design(df, spec.features)


def fit_candidate(
    train_df: pd.DataFrame,
    spec: ModelSpec,
    target_col: str = TARGET_COL,
    random_state: int = RANDOM_STATE,
) -> FittedModel:
    """Fit one candidate on a training subset."""
    if target_col not in train_df.columns:
        raise InvalidParameter(f"training data has no outcome column {target_col!r}")
    y = train_df[target_col].to_numpy()
    X = _design(train_df, spec, target_col)

    X_arr, scaler, feature_cols, medians = prepare_for_model(X, fit=True)
    estimator = build_model(spec.family, random_state=random_state, **spec.params)
    estimator.fit(X_arr, y)

    classes = tuple(estimator.classes_) if spec.is_classifier else None
    return FittedModel(spec, estimator, scaler, feature_cols, classes, medians)


def _model_matrix(model: FittedModel, df: pd.DataFrame, target_col: str):
    X = _design(df, model.spec, target_col)
    return prepare_for_model(
        X, fit=False, scaler=model.scaler, feature_cols=model.feature_cols, medians=model.medians
    )


def predict_candidate(model: FittedModel, df: pd.DataFrame, target_col: str = TARGET_COL) -> np.ndarray:
    """Predicted values (regression) or classes (classification) for each row."""
    return model.estimator.predict(_model_matrix(model, df, target_col))


def predict_proba_candidate(
    model: FittedModel,
    df: pd.DataFrame,
    positive=1,
    target_col: str = TARGET_COL,
) -> np.ndarray:
    """Probability of the positive class for each row."""
    if not model.spec.is_classifier:
        raise InvalidParameter(f"candidate {model.spec.name!r} is not a classifier")
    if positive not in model.classes:
        raise InvalidParameter(
            f"positive class {positive!r} is not one of the fitted classes {list(model.classes)}"
        )
    proba = model.estimator.predict_proba(_model_matrix(model, df, target_col))
    return proba[:, model.classes.index(positive)]


def make_fit_fn(target_col: str = TARGET_COL, random_state: int = RANDOM_STATE):
    """fit(training_subset, candidate) bound to an outcome column and seed."""
    return partial(fit_candidate, target_col=target_col, random_state=random_state)


def make_predict_fn(target_col: str = TARGET_COL, proba: bool = False, positive=1):
    """predict(fitted_model, validation_subset) returning values, classes or probabilities."""
    if proba:
        return partial(predict_proba_candidate, positive=positive, target_col=target_col)
    return partial(predict_candidate, target_col=target_col)
