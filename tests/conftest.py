# tests/conftest.py
from __future__ import annotations

import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def regression_df() -> pd.DataFrame:
    """
    100 records: outcome = 3 + 2*x1 - x2 + group effect + noise.
    """
    rng = np.random.default_rng(0)
    n = 100
    x1 = rng.normal(size=n)
    x2 = rng.normal(size=n)
    group = rng.choice(["a", "b", "c"], size=n)
    effect = pd.Series(group).map({"a": 0.0, "b": 1.0, "c": -1.0}).to_numpy()
    outcome = 3 + 2 * x1 - x2 + effect + rng.normal(scale=0.1, size=n)
    return pd.DataFrame({
        "id": np.arange(n),
        "x1": x1,
        "x2": x2,
        "group": pd.Categorical(group),
        "outcome": outcome,
    })


@pytest.fixture
def classification_df() -> pd.DataFrame:
    """
    200 records with a binary outcome driven by x1 and x2.
    """
    rng = np.random.default_rng(1)
    n = 200
    x1 = rng.normal(size=n)
    x2 = rng.normal(size=n)
    outcome = ((x1 + 0.5 * x2 + rng.normal(scale=0.5, size=n)) > 0).astype(int)
    return pd.DataFrame({
        "id": np.arange(n),
        "x1": x1,
        "x2": x2,
        "outcome": outcome,
    })


@pytest.fixture
def mean_fit_fn():
    """fit_fn for a model that always predicts the training mean."""
    def fit(train: pd.DataFrame, candidate):
        return float(train["outcome"].mean())
    return fit


@pytest.fixture
def constant_predict_fn():
    def predict(model: float, valid: pd.DataFrame):
        return np.full(len(valid), model)
    return predict
