"""
Training pipeline.
Wires data, folds, model, and evaluate together.
1) Load the dataset and split train/test
2) Cross-validate the candidates on train
3) Fit the best candidate on train and score it on test
4) Refit on the full dataset and save model and artifacts for predict.py
"""
import pickle
from pathlib import Path

from cvflow.config import (
    DATASET_CSV,
    MODEL_ARTIFACT_DIR,
    TARGET_COL,
    ID_COL,
    TEST_SIZE,
    RANDOM_STATE,
    N_FOLDS,
    N_JOBS,
    LOG_DIR,
)
from cvflow.data import load_dataset, train_test_split_df
from cvflow.errors import CVFlowError, InvalidParameter
from cvflow.evaluate import evaluate, EvaluationReport
from cvflow.folds import assign_folds, assign_stratified_folds
from cvflow.logger import configure_logging
from cvflow.metrics import get_scorer, accuracy, confusion, rmse, roc_auc, Scorer
from cvflow.model import (
    ModelSpec,
    fit_candidate,
    make_fit_fn,
    make_predict_fn,
    predict_candidate,
    predict_proba_candidate,
)


MODEL_FILE = "model.pkl"
ARTIFACTS_FILE = "artifacts.pkl"

DEFAULT_CANDIDATES = (
    ModelSpec("linear_regression", "linear_regression"),
    ModelSpec("random_forest", "random_forest_regressor", params={"n_estimators": 200}),
)


def run_cv(
    df,
    candidates,
    scorer="rmse",
    n_folds: int = N_FOLDS,
    random_state: int = RANDOM_STATE,
    target_col: str = TARGET_COL,
    n_jobs: int = N_JOBS,
    stratify: bool = False,
    positive=1,
) -> EvaluationReport:
    """
    K-fold cross-validation of candidate ModelSpecs on one dataset.
    All candidates share the same seeded fold assignment.
    """
    scorer = get_scorer(scorer)
    if scorer.needs_proba and positive != 1:
        base = scorer
        scorer = Scorer(
            base.name,
            lambda p, a: base.fn(p, a, positive=positive),
            base.greater_is_better,
            base.needs_proba,
        )

    if stratify:
        folds = assign_stratified_folds(df, n_folds, strata=target_col, seed=random_state)
    else:
        folds = assign_folds(df, n_folds, seed=random_state)

    report = evaluate(
        df,
        folds,
        candidates,
        fit_fn=make_fit_fn(target_col=target_col, random_state=random_state),
        predict_fn=make_predict_fn(target_col=target_col, proba=scorer.needs_proba, positive=positive),
        score_fn=scorer,
        target_col=target_col,
        n_jobs=n_jobs,
    )
    print(f"{n_folds}-fold CV ({scorer.name}):")
    print(report.summary().to_string())
    return report


def run_holdout(
    train_df,
    test_df,
    spec: ModelSpec,
    target_col: str = TARGET_COL,
    random_state: int = RANDOM_STATE,
    positive=1,
) -> dict:
    """
    Fit one candidate on the training split and score it on the test split.
    Regression -> rmse; classification -> accuracy, roc_auc (binary) and confusion matrix.
    """
    model = fit_candidate(train_df, spec, target_col=target_col, random_state=random_state)
    actual = test_df[target_col].to_numpy()
    pred = predict_candidate(model, test_df, target_col=target_col)

    metrics = {}
    if not spec.is_classifier:
        metrics["test_rmse"] = rmse(pred, actual)
        print(f"Test RMSE ({spec.name}): {metrics['test_rmse']:.4f}")
        return metrics

    metrics["test_accuracy"] = accuracy(pred, actual)
    print(f"Test accuracy ({spec.name}): {metrics['test_accuracy']:.4f}")
    if len(model.classes) == 2:
        proba = predict_proba_candidate(model, test_df, positive=positive, target_col=target_col)
        metrics["test_roc_auc"] = roc_auc(proba, actual, positive=positive)
        print(f"Test AUC ({spec.name}): {metrics['test_roc_auc']:.4f}")
    metrics["confusion"] = confusion(pred, actual)
    print(metrics["confusion"].to_string())
    return metrics


def run_train_pipeline(
    path=DATASET_CSV,
    candidates=DEFAULT_CANDIDATES,
    scorer="rmse",
    test_size: float = TEST_SIZE,
    n_folds: int = N_FOLDS,
    random_state: int = RANDOM_STATE,
    target_col: str = TARGET_COL,
    n_jobs: int = N_JOBS,
    stratify: bool = False,
    artifact_dir=MODEL_ARTIFACT_DIR,
    log_dir=None,
    positive=1,
) -> dict:
    """
    Full training pipeline:
    1. Load data and split train/test (stratified on the outcome if requested)
    2. Cross-validate the candidates on train
    3. Score the best candidate on test
    4. Refit it on all data and save model and artifacts
    `positive` names the positive class for AUC on a binary outcome.
    Returns metrics dict.
    """
    configure_logging(log_dir=log_dir)
    artifact_dir = Path(artifact_dir)
    artifact_dir.mkdir(parents=True, exist_ok=True)
    candidates = list(candidates)
    if not candidates:
        raise InvalidParameter("at least one candidate is required")
    scorer = get_scorer(scorer)

    # 1. Load and split
    df = load_dataset(path)
    if target_col not in df.columns:
        raise InvalidParameter(f"dataset has no outcome column {target_col!r}")
    train_df, test_df = train_test_split_df(
        df,
        test_size=test_size,
        strata=target_col if stratify else None,
        random_state=random_state,
    )

    # 2. Cross-validation on train
    report = run_cv(
        train_df,
        candidates,
        scorer=scorer,
        n_folds=n_folds,
        random_state=random_state,
        target_col=target_col,
        n_jobs=n_jobs,
        stratify=stratify,
        positive=positive,
    )
    best_name = report.best()
    if best_name is None:
        raise CVFlowError("no candidate completed cross-validation without a failed fold")
    best = next(c for c in candidates if c.name == best_name)
    summary = report.summary()

    metrics = {
        "best_candidate": best_name,
        f"cv_mean_{scorer.name}": float(summary.loc[best_name, "mean"]),
        f"cv_std_{scorer.name}": float(summary.loc[best_name, "std"]),
        "cv_failures": len(report.failures()),
    }
    print(f"Best candidate: {best_name}")

    # 3. Holdout
    metrics.update(run_holdout(
        train_df, test_df, best, target_col=target_col, random_state=random_state, positive=positive
    ))

    # 4. Refit on all data and save
    model = fit_candidate(df, best, target_col=target_col, random_state=random_state)
    artifacts = {
        "target_col": target_col,
        "id_col": ID_COL,
        "scorer": scorer.name,
        "cv_summary": summary.reset_index().to_dict(orient="records"),
    }
    with open(artifact_dir / MODEL_FILE, "wb") as f:
        pickle.dump(model, f)
    with open(artifact_dir / ARTIFACTS_FILE, "wb") as f:
        pickle.dump(artifacts, f)
    print(f"Model saved to {artifact_dir / MODEL_FILE}")

    return metrics


if __name__ == "__main__":
    run_train_pipeline(log_dir=LOG_DIR)
