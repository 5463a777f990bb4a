# tests/test_metrics.py
import math

import numpy as np
import pytest
from sklearn.metrics import roc_auc_score

from cvflow.errors import EmptyFold, InvalidParameter
from cvflow.metrics import (
    SCORERS,
    accuracy,
    confusion,
    get_scorer,
    residuals,
    rmse,
    roc_auc,
)


def test_rmse_known_value():
    assert rmse([1, 2, 3], [1, 2, 5]) == pytest.approx(math.sqrt(4 / 3))


def test_rmse_zero_only_for_exact_predictions():
    assert rmse([1.5, -2.0], [1.5, -2.0]) == 0.0
    assert rmse([1.5, -2.0], [1.5, -2.000001]) > 0.0


def test_rmse_non_negative_on_random_residuals():
    rng = np.random.default_rng(3)
    for _ in range(20):
        p, a = rng.normal(size=15), rng.normal(size=15)
        assert rmse(p, a) >= 0.0


def test_two_constant_models_have_identical_rmse():
    actual = np.array([2.0, 4.0, 6.0, 8.0])
    mean = actual.mean()

    assert rmse(np.full(4, mean), actual) == rmse(np.full(4, mean), actual)


def test_rmse_empty_input_is_empty_fold():
    with pytest.raises(EmptyFold):
        rmse([], [])


def test_mismatched_lengths_rejected():
    with pytest.raises(InvalidParameter):
        rmse([1, 2], [1, 2, 3])


def test_accuracy_bounds_and_value():
    assert accuracy([1, 0, 1, 1], [1, 1, 1, 0]) == 0.5
    assert accuracy(["a", "b"], ["a", "b"]) == 1.0
    assert accuracy([0, 0], [1, 1]) == 0.0


def test_auc_perfect_separation():
    assert roc_auc([0.9, 0.8, 0.3, 0.1], [1, 1, 0, 0]) == 1.0


def test_auc_constant_scores_is_half():
    assert roc_auc([0.4] * 6, [1, 0, 1, 0, 0, 1]) == 0.5


def test_auc_reversed_is_zero():
    assert roc_auc([0.1, 0.2, 0.8, 0.9], [1, 1, 0, 0]) == 0.0


def test_auc_ties_get_half_credit():
    scores = [0.5, 0.5, 0.2, 0.8]
    actual = [1, 0, 0, 1]

    assert roc_auc(scores, actual) == pytest.approx(0.875)
    assert roc_auc(scores, actual) == pytest.approx(roc_auc_score(actual, scores))


def test_auc_matches_sklearn_on_random_data():
    rng = np.random.default_rng(11)
    actual = rng.integers(0, 2, size=60)
    scores = np.round(rng.random(60), 1)  # rounding forces ties

    assert roc_auc(scores, actual) == pytest.approx(roc_auc_score(actual, scores))


def test_auc_string_positive_label():
    assert roc_auc([0.9, 0.1, 0.7], ["yes", "no", "yes"], positive="yes") == 1.0


def test_auc_needs_both_classes():
    with pytest.raises(InvalidParameter):
        roc_auc([0.2, 0.4], [1, 1])


def test_residuals_record_error():
    res = residuals([3.0, 1.0], [2.0, 1.5])

    assert list(res.columns) == ["predicted", "actual", "error"]
    assert res["error"].tolist() == [1.0, -0.5]


def test_confusion_matrix_rows_are_actual():
    cm = confusion([1, 0, 1, 1], [1, 1, 1, 0])

    assert cm.index.name == "actual"
    assert cm.columns.name == "predicted"
    assert cm.values.tolist() == [[0, 1], [1, 2]]


def test_scorer_registry():
    assert get_scorer("rmse").greater_is_better is False
    assert get_scorer("accuracy").greater_is_better is True
    assert get_scorer("roc_auc").needs_proba is True
    assert get_scorer(SCORERS["rmse"]) is SCORERS["rmse"]
    with pytest.raises(InvalidParameter):
        get_scorer("r2")
