"""
Scoring functions for held-out predictions.
All scorers are pure functions of (predicted, actual).
"""
from dataclasses import dataclass
from typing import Callable

import numpy as np
import pandas as pd
from sklearn.metrics import confusion_matrix

from cvflow.errors import InvalidParameter, EmptyFold


def _as_pairs(predicted, actual) -> tuple[np.ndarray, np.ndarray]:
    predicted = np.asarray(predicted)
    actual = np.asarray(actual)
    if predicted.shape != actual.shape:
        raise InvalidParameter(
            f"predicted and actual differ in shape: {predicted.shape} vs {actual.shape}"
        )
    if predicted.size == 0:
        raise EmptyFold("cannot score an empty set of predictions")
    return predicted, actual


def residuals(predicted, actual) -> pd.DataFrame:
    """Residual records: predicted, actual, error = predicted - actual."""
    predicted, actual = _as_pairs(predicted, actual)
    predicted = predicted.astype(float)
    actual = actual.astype(float)
    return pd.DataFrame({
        "predicted": predicted,
        "actual": actual,
        "error": predicted - actual,
    })


def rmse(predicted, actual) -> float:
    """Root-mean-square error: sqrt(mean((predicted - actual)^2))."""
    predicted, actual = _as_pairs(predicted, actual)
    error = predicted.astype(float) - actual.astype(float)
    return float(np.sqrt(np.mean(error ** 2)))


def accuracy(predicted, actual) -> float:
    """Share of predictions that match the ground truth class."""
    predicted, actual = _as_pairs(predicted, actual)
    return float(np.mean(predicted == actual))


def roc_auc(scores, actual, positive=1) -> float:
    """
    Area under the ROC curve for a binary outcome.

    Rank-based: the probability that a randomly chosen positive is scored
    above a randomly chosen negative, with half credit for ties (average
    ranks). Constant scores give 0.5; a perfect separator gives 1.0.
    """
    scores, actual = _as_pairs(scores, actual)
    is_pos = actual == positive
    n_pos = int(is_pos.sum())
    n_neg = int(is_pos.size - n_pos)
    if n_pos == 0 or n_neg == 0:
        raise InvalidParameter("roc_auc needs at least one positive and one negative record")

    ranks = pd.Series(scores.astype(float)).rank(method="average").to_numpy()
    u = ranks[is_pos].sum() - n_pos * (n_pos + 1) / 2.0
    return float(u / (n_pos * n_neg))


def confusion(predicted, actual) -> pd.DataFrame:
    """Confusion matrix with actual classes as rows and predicted classes as columns."""
    predicted, actual = _as_pairs(predicted, actual)
    labels = sorted(set(actual.tolist()) | set(predicted.tolist()))
    matrix = confusion_matrix(actual, predicted, labels=labels)
    return pd.DataFrame(
        matrix,
        index=pd.Index(labels, name="actual"),
        columns=pd.Index(labels, name="predicted"),
    )


@dataclass(frozen=True)
class Scorer:
    name: str
    fn: Callable
    greater_is_better: bool
    needs_proba: bool = False

    def __call__(self, predicted, actual) -> float:
        return self.fn(predicted, actual)


SCORERS = {
    "rmse": Scorer("rmse", rmse, greater_is_better=False),
    "accuracy": Scorer("accuracy", accuracy, greater_is_better=True),
    "roc_auc": Scorer("roc_auc", roc_auc, greater_is_better=True, needs_proba=True),
}


def get_scorer(scorer) -> Scorer:
    """Resolve a scorer name (or pass a Scorer through)."""
    if isinstance(scorer, Scorer):
        return scorer
    try:
        return SCORERS[scorer]
    except KeyError:
        raise InvalidParameter(
            f"unknown scorer {scorer!r}; expected one of {sorted(SCORERS)}"
        ) from None
