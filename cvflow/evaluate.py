"""
Evaluation module.
Runs k-fold cross-validation over a grid of (candidate, fold) cells and
aggregates per-candidate scores.
Exposes: evaluate(...) -> EvaluationReport
"""
from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from time import perf_counter
from typing import Any, Callable, Iterable

import numpy as np
import pandas as pd
from loguru import logger

from cvflow.config import TARGET_COL, N_JOBS
from cvflow.errors import InvalidParameter, EmptyFold, CellFailure, FitFailure, ScoreFailure
from cvflow.folds import fold_indices
from cvflow.metrics import Scorer, get_scorer


@dataclass(frozen=True)
class FoldResult:
    """Outcome of one (candidate, fold) cell."""
    candidate: str
    fold: int
    score: float = float("nan")
    n_train: int = 0
    n_valid: int = 0
    elapsed: float = 0.0
    error: CellFailure | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class EvaluationReport:
    candidates: list[str]
    results: list[FoldResult]
    scorer: str | None = None
    greater_is_better: bool | None = None

    def fold_scores(self, candidate: str) -> pd.Series:
        """Per-fold scores of one candidate, indexed by fold label."""
        rows = [r for r in self.results if r.candidate == candidate]
        if not rows:
            raise KeyError(candidate)
        return pd.Series(
            [r.score for r in rows],
            index=pd.Index([r.fold for r in rows], name="fold"),
            name=candidate,
        )

    def failures(self) -> list[CellFailure]:
        return [r.error for r in self.results if r.error is not None]

    def summary(self) -> pd.DataFrame:
        """
        Mean and standard deviation of fold scores per candidate, in input order.
        Candidates with any failed fold get NaN aggregates.
        """
        rows = []
        for name in self.candidates:
            cells = [r for r in self.results if r.candidate == name]
            n_failed = sum(not r.ok for r in cells)
            scores = np.array([r.score for r in cells if r.ok], dtype=float)
            if n_failed or scores.size == 0:
                mean = std = float("nan")
            else:
                mean, std = float(scores.mean()), float(scores.std())
            rows.append({
                "candidate": name,
                "mean": mean,
                "std": std,
                "n_folds": len(cells),
                "n_failed": n_failed,
            })
        return pd.DataFrame(rows).set_index("candidate")

    def to_frame(self) -> pd.DataFrame:
        """One row per (candidate, fold) cell."""
        return pd.DataFrame([
            {
                "candidate": r.candidate,
                "fold": r.fold,
                "score": r.score,
                "n_train": r.n_train,
                "n_valid": r.n_valid,
                "elapsed": r.elapsed,
                "error": None if r.ok else str(r.error),
            }
            for r in self.results
        ])

    def best(self, greater_is_better: bool | None = None) -> str | None:
        """Name of the best fully-evaluated candidate (first wins ties), or None."""
        if greater_is_better is None:
            greater_is_better = self.greater_is_better
        if greater_is_better is None:
            raise InvalidParameter("score direction unknown; pass greater_is_better")

        summary = self.summary()
        complete = summary[summary["n_failed"] == 0]["mean"]
        if complete.empty:
            return None
        return complete.idxmax() if greater_is_better else complete.idxmin()


def candidate_name(candidate: Any) -> str:
    name = getattr(candidate, "name", None)
    return name if name is not None else str(candidate)


def _align_folds(dataset: pd.DataFrame, folds) -> pd.Series:
    if not dataset.index.is_unique:
        raise InvalidParameter("dataset index has duplicate labels; reset it before evaluating")
    if isinstance(folds, pd.Series) and not folds.index.is_unique:
        raise InvalidParameter("fold assignment index has duplicate labels")
    if not isinstance(folds, pd.Series):
        folds = np.asarray(folds)
        if len(folds) != len(dataset):
            raise InvalidParameter(
                f"fold assignment has {len(folds)} labels for {len(dataset)} records"
            )
        folds = pd.Series(folds, index=dataset.index, name="fold")

    aligned = folds.reindex(dataset.index)
    if len(folds) != len(dataset) or aligned.isna().any():
        raise InvalidParameter("fold assignment does not cover every record of the dataset")
    if not pd.api.types.is_integer_dtype(aligned):
        try:
            as_int = aligned.astype(int)
        except (TypeError, ValueError):
            raise InvalidParameter("fold labels must be integers") from None
        if not (as_int == aligned).all():
            raise InvalidParameter("fold labels must be integers")
        aligned = as_int
    return aligned


def _check_partition(folds: pd.Series) -> list[int]:
    """Fold labels 1..k, each leaving non-empty training and validation subsets."""
    n = len(folds)
    if n == 0:
        raise EmptyFold("dataset is empty")
    if folds.min() < 1:
        raise InvalidParameter(f"fold labels must be >= 1, got {int(folds.min())}")

    k = int(folds.max())
    sizes = folds.value_counts()
    labels = list(range(1, k + 1))
    for f in labels:
        n_valid = int(sizes.get(f, 0))
        if n_valid == 0:
            raise EmptyFold(f"fold {f} has no validation records", fold=f)
        if n - n_valid == 0:
            raise EmptyFold(f"fold {f} leaves no training records", fold=f)
    return labels


def _evaluate_cell(
    dataset: pd.DataFrame,
    folds: pd.Series,
    candidate: Any,
    fold: int,
    fit_fn: Callable,
    predict_fn: Callable,
    score_fn: Callable,
    target_col: str,
) -> FoldResult:
    name = candidate_name(candidate)
    train_idx, valid_idx = fold_indices(folds, fold)
    train = dataset.loc[train_idx]
    valid = dataset.loc[valid_idx]

    start = perf_counter()

    def failed(kind, exc) -> FoldResult:
        failure = kind(name, fold, exc)
        failure.__cause__ = exc
        logger.warning(f"[evaluate] {failure}")
        return FoldResult(
            candidate=name,
            fold=fold,
            n_train=len(train),
            n_valid=len(valid),
            elapsed=perf_counter() - start,
            error=failure,
        )

    try:
        model = fit_fn(train, candidate)
    except Exception as exc:
        return failed(FitFailure, exc)

    try:
        predicted = predict_fn(model, valid)
        score = float(score_fn(predicted, valid[target_col].to_numpy()))
    except Exception as exc:
        return failed(ScoreFailure, exc)
    elapsed = perf_counter() - start
    logger.debug(f"[evaluate] candidate={name} fold={fold} score={score:.6f} took {elapsed:.3f}s")
    return FoldResult(
        candidate=name,
        fold=fold,
        score=score,
        n_train=len(train),
        n_valid=len(valid),
        elapsed=elapsed,
    )


def _resolve_workers(n_cells: int, n_jobs: int | None) -> int:
    cpu = os.cpu_count() or 1
    if n_jobs is None or n_jobs < 0:
        return max(1, min(cpu, n_cells))
    return max(1, min(n_jobs, n_cells))


def _run_cells(cells: list, handler: Callable, n_jobs: int | None) -> list[FoldResult]:
    workers = _resolve_workers(len(cells), n_jobs)
    if workers == 1:
        return [handler(*cell) for cell in cells]

    logger.info(f"[evaluate] run parallel | workers={workers} cells={len(cells)}")
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(handler, *cell) for cell in cells]
        # collected in submission order so results do not depend on timing
        return [fut.result() for fut in futures]


def evaluate(
    dataset: pd.DataFrame,
    folds,
    candidates: Iterable[Any],
    fit_fn: Callable,
    predict_fn: Callable,
    score_fn,
    *,
    target_col: str = TARGET_COL,
    n_jobs: int | None = N_JOBS,
) -> EvaluationReport:
    """
    Cross-validate every candidate over every fold.

    For each candidate and each fold label f: fit on records with label != f,
    predict the records with label == f, and score (predicted, actual).

    fit_fn(training_subset, candidate) -> model
    predict_fn(model, validation_subset) -> estimates, one per record
    score_fn(predicted, actual) -> float, or a scorer name ("rmse", ...)

    Partition problems (InvalidParameter, EmptyFold) are raised before any
    fitting. A fit that raises is recorded as a FitFailure on its cell, a
    predict or score that raises as a ScoreFailure, and the remaining cells
    still run.
    """
    if target_col not in dataset.columns:
        raise InvalidParameter(f"dataset has no outcome column {target_col!r}")

    scorer_name, greater_is_better = None, None
    if isinstance(score_fn, (str, Scorer)):
        scorer = get_scorer(score_fn)
        scorer_name, greater_is_better = scorer.name, scorer.greater_is_better
        score_fn = scorer

    candidates = list(candidates)
    names = [candidate_name(c) for c in candidates]
    if len(set(names)) != len(names):
        raise InvalidParameter(f"candidate names must be unique, got {names}")

    folds = _align_folds(dataset, folds)
    labels = _check_partition(folds)

    logger.info(
        f"[evaluate] start candidates={len(names)} folds={len(labels)} "
        f"records={len(dataset)} scorer={scorer_name or getattr(score_fn, '__name__', 'custom')}"
    )

    def handler(candidate, fold):
        return _evaluate_cell(dataset, folds, candidate, fold, fit_fn, predict_fn, score_fn, target_col)

    cells = [(candidate, fold) for candidate in candidates for fold in labels]
    results = _run_cells(cells, handler, n_jobs)

    report = EvaluationReport(names, results, scorer_name, greater_is_better)
    for name, row in report.summary().iterrows():
        logger.info(
            f"[evaluate] {name}: mean={row['mean']:.6f} std={row['std']:.6f} "
            f"failed={int(row['n_failed'])}/{int(row['n_folds'])}"
        )
    return report
