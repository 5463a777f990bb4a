import numpy as np
import pandas as pd

from cvflow.evaluate import evaluate
from cvflow.features import polynomial_terms
from cvflow.folds import assign_folds, fold_sizes
from cvflow.metrics import rmse
from cvflow.model import ModelSpec, make_fit_fn, make_predict_fn
from cvflow.train import run_cv, run_holdout
from cvflow.data import train_test_split_df

# ---------------------------------------------------
# Config
# ---------------------------------------------------
SEED = 42
N_FOLDS = 10
TARGET = "outcome"

# ---------------------------------------------------
# Data: mpg falls off non-linearly with horsepower
# ---------------------------------------------------
rng = np.random.default_rng(SEED)
n = 392
horsepower = rng.uniform(45, 230, size=n)
weight = 1500 + 12 * horsepower + rng.normal(scale=300, size=n)
mpg = 56 - 0.47 * horsepower + 0.0012 * horsepower ** 2 - 0.002 * weight + rng.normal(scale=3.5, size=n)
auto = pd.DataFrame({"horsepower": horsepower, "weight": weight, TARGET: mpg})
print("auto:", auto.shape)

# ---------------------------------------------------
# Manual 10-fold CV: which polynomial degree in horsepower?
# ---------------------------------------------------
folds = assign_folds(auto, k=N_FOLDS, seed=SEED)
print("Fold sizes:", fold_sizes(folds))

poly_candidates = [
    ModelSpec(f"degree_{d}", "linear_regression", features=polynomial_terms("horsepower", d))
    for d in range(1, 6)
]
report = evaluate(
    auto,
    folds,
    poly_candidates,
    fit_fn=make_fit_fn(target_col=TARGET, random_state=SEED),
    predict_fn=make_predict_fn(target_col=TARGET),
    score_fn=rmse,
    target_col=TARGET,
)
print("\nCV RMSE by degree:")
print(report.summary().to_string())
print("Best degree:", report.best(greater_is_better=False))

# Per-fold scores for the quadratic fit
print("\nDegree 2, first folds:", report.fold_scores("degree_2").head(3).to_dict())

# ---------------------------------------------------
# Train/test split + holdout error
# ---------------------------------------------------
train, test = train_test_split_df(auto, test_size=0.25, random_state=SEED)
run_holdout(train, test, poly_candidates[1], target_col=TARGET, random_state=SEED)

# ---------------------------------------------------
# Classification: is a car fuel efficient?
# ---------------------------------------------------
cars = auto.assign(**{TARGET: (auto[TARGET] > auto[TARGET].median()).astype(int)})
train, test = train_test_split_df(cars, test_size=0.25, strata=TARGET, random_state=SEED)

logit = ModelSpec("logistic", "logistic_regression", features=["horsepower", "weight"])
run_holdout(train, test, logit, target_col=TARGET, random_state=SEED)

forest = ModelSpec("random_forest", "random_forest", params={"n_estimators": 500, "min_samples_leaf": 5})
cv = run_cv(
    train,
    [logit, forest],
    scorer="roc_auc",
    n_folds=N_FOLDS,
    random_state=SEED,
    target_col=TARGET,
    stratify=True,
)
print("\nBest classifier by CV AUC:", cv.best())
run_holdout(train, test, forest, target_col=TARGET, random_state=SEED)
