"""
Model-matrix preparation shared by every engine.
Fills missing values, one-hot encodes categoricals and scales.
"""
import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler

MISSING_CAT = "missing"


def prepare_for_model(X: pd.DataFrame, fit: bool = True, scaler=None, feature_cols=None, medians=None):
    """
    Prepare DataFrame for sklearn: fill NaNs, encode categoricals, scale.
    When fit=True: returns (X_array, scaler, feature_cols, medians).
    When fit=False: uses provided scaler, feature_cols and training medians to transform.
    """
    X = X.copy()
    # Fill numeric NaNs with the training median
    numeric_cols = X.select_dtypes(include=[np.number]).columns
    if fit:
        medians = {col: X[col].median() for col in numeric_cols}
    medians = medians or {}
    for col in numeric_cols:
        if col in medians:
            X[col] = X[col].fillna(medians[col])
    for col in X.select_dtypes(include=["bool"]).columns:
        X[col] = X[col].astype(int)
    # Categoricals keep their full category set so every fold encodes alike
    for col in X.select_dtypes(include=["category"]).columns:
        if X[col].isna().any():
            if MISSING_CAT not in X[col].cat.categories:
                X[col] = X[col].cat.add_categories([MISSING_CAT])
            X[col] = X[col].fillna(MISSING_CAT)
    # Fill remaining object/text NaNs with 'missing'
    for col in X.select_dtypes(include=["object", "string"]).columns:
        X[col] = X[col].astype(object).fillna(MISSING_CAT).astype(str)
    # One-hot encode
    X = pd.get_dummies(X, drop_first=True, dtype=float)
    if fit:
        feature_cols = X.columns.tolist()
        scaler = StandardScaler()
        X_arr = scaler.fit_transform(X)
        return X_arr, scaler, feature_cols, medians
    else:
        # Align to training columns
        for c in feature_cols:
            if c not in X.columns:
                X[c] = 0.0
        X = X[feature_cols]
        X_arr = scaler.transform(X)
        return X_arr
