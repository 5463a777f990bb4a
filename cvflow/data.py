"""
Data loading utilities.
Loads delimited datasets, types their columns, and provides train/test splits.
"""
from pathlib import Path

import pandas as pd
from loguru import logger
from sklearn.model_selection import train_test_split

from cvflow.config import (
    DATASET_CSV,
    TARGET_COL,
    ID_COL,
    TEST_SIZE,
    RANDOM_STATE,
)
from cvflow.errors import InvalidParameter

# String columns with at most this many distinct values are typed as categorical
MAX_CATEGORY_LEVELS = 20


def load_dataset(path: str | Path = DATASET_CSV, categorical=None, **read_csv_kwargs) -> pd.DataFrame:
    """Load a delimited text file as a typed DataFrame with a 0..N-1 index."""
    df = pd.read_csv(path, **read_csv_kwargs)
    df = coerce_types(df, categorical=categorical).reset_index(drop=True)
    logger.info(f"[load_dataset] {path} rows={len(df)} cols={df.shape[1]}")
    return df


def coerce_types(df: pd.DataFrame, categorical=None, max_levels: int = MAX_CATEGORY_LEVELS) -> pd.DataFrame:
    """
    Give every column a deterministic type:
    - numeric-like columns -> numeric
    - columns named in `categorical`, or string columns with few levels -> category
    - remaining string columns -> text (pandas "string" dtype)
    """
    categorical = set(categorical or [])
    out = df.copy()

    for col in out.columns:
        if col in categorical:
            out[col] = out[col].astype("category")
            continue
        if pd.api.types.is_numeric_dtype(out[col]) or pd.api.types.is_bool_dtype(out[col]):
            continue
        try:
            out[col] = pd.to_numeric(out[col], errors="raise")
            continue
        except (ValueError, TypeError):
            pass
        if out[col].nunique(dropna=True) <= max_levels:
            out[col] = out[col].astype("category")
        else:
            out[col] = out[col].astype("string")

    return out


def split_X_y(df: pd.DataFrame, target_col: str = TARGET_COL) -> tuple[pd.DataFrame, pd.Series]:
    """
    Split DataFrame into features X and target y.
    Excludes id and target columns from X.
    """
    cols_to_drop = [c for c in [ID_COL, target_col] if c in df.columns]
    X = df.drop(columns=cols_to_drop, errors="ignore")
    y = df[target_col] if target_col in df.columns else None
    return X, y


def train_test_split_df(
    df: pd.DataFrame,
    test_size: float = TEST_SIZE,
    strata: str | None = None,
    random_state: int = RANDOM_STATE,
):
    """
    Split a DataFrame into train/test by row.
    When `strata` names a column, the outcome proportion is preserved in both parts.
    Returns (train_df, test_df).
    """
    if not 0 < test_size < 1:
        raise InvalidParameter(f"test_size must be in (0, 1), got {test_size}")
    if strata is not None and strata not in df.columns:
        raise InvalidParameter(f"strata column {strata!r} not in dataset")

    stratify = df[strata] if strata is not None else None
    train_df, test_df = train_test_split(
        df, test_size=test_size, random_state=random_state, stratify=stratify
    )
    logger.info(f"[train_test_split] train={len(train_df)} test={len(test_df)} strata={strata}")
    return train_df, test_df
