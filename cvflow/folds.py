"""
Fold assignment for k-fold cross-validation.
Every randomized step takes an explicit seed; global RNG state is never touched.
"""
import numpy as np
import pandas as pd
from loguru import logger

from cvflow.config import RANDOM_STATE
from cvflow.errors import InvalidParameter

FOLD_COL = "fold"


def _check_k(k, n: int) -> None:
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)):
        raise InvalidParameter(f"k must be an integer, got {k!r}")
    if k < 1 or k > n:
        raise InvalidParameter(f"k must satisfy 1 <= k <= N (N={n}), got k={k}")


def _index_of(dataset) -> pd.Index:
    if isinstance(dataset, (pd.DataFrame, pd.Series)):
        if not dataset.index.is_unique:
            raise InvalidParameter("dataset index has duplicate labels; reset it before assigning folds")
        return dataset.index
    return pd.RangeIndex(len(dataset))


def assign_folds(dataset, k: int, seed: int = RANDOM_STATE) -> pd.Series:
    """
    Assign each record a fold label in 1..k.

    Records are shuffled with a seeded permutation and labels are dealt
    round-robin over the shuffled order, so fold sizes differ by at most 1.
    The same (dataset length, k, seed) always yields the same assignment.

    Returns a Series of int labels named "fold", indexed like the dataset.
    """
    n = len(dataset)
    _check_k(k, n)

    rng = np.random.default_rng(seed)
    order = rng.permutation(n)
    labels = np.empty(n, dtype=int)
    labels[order] = np.arange(n) % k + 1

    folds = pd.Series(labels, index=_index_of(dataset), name=FOLD_COL)
    logger.debug(f"[assign_folds] n={n} k={k} seed={seed} sizes={fold_sizes(folds)}")
    return folds


def assign_stratified_folds(dataset: pd.DataFrame, k: int, strata: str, seed: int = RANDOM_STATE) -> pd.Series:
    """
    Fold assignment that keeps each stratum spread evenly over the folds.

    Each stratum is shuffled on its own; labels keep dealing round-robin
    from where the previous stratum stopped, so overall fold sizes still
    differ by at most 1.
    """
    n = len(dataset)
    _check_k(k, n)
    _index_of(dataset)
    if strata not in dataset.columns:
        raise InvalidParameter(f"strata column {strata!r} not in dataset")

    rng = np.random.default_rng(seed)
    labels = pd.Series(0, index=dataset.index, name=FOLD_COL, dtype=int)
    offset = 0
    # sorted groups keep the assignment independent of first-seen order
    for _, group in dataset.groupby(strata, sort=True, observed=True, dropna=False):
        shuffled = group.index[rng.permutation(len(group))]
        labels.loc[shuffled] = (offset + np.arange(len(group))) % k + 1
        offset += len(group)

    logger.debug(f"[assign_stratified_folds] n={n} k={k} seed={seed} strata={strata}")
    return labels


def fold_sizes(folds: pd.Series) -> dict[int, int]:
    """Number of records per fold label, in label order."""
    counts = folds.value_counts().sort_index()
    return {int(label): int(size) for label, size in counts.items()}


def fold_indices(folds: pd.Series, fold: int) -> tuple[pd.Index, pd.Index]:
    """Return (training index, validation index) for one held-out fold."""
    mask = folds == fold
    return folds.index[~mask], folds.index[mask]
