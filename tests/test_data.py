# tests/test_data.py
import pandas as pd
import pytest

from cvflow.data import coerce_types, load_dataset, split_X_y, train_test_split_df
from cvflow.errors import InvalidParameter


def test_load_dataset_types_columns(tmp_path):
    path = tmp_path / "data.csv"
    pd.DataFrame({
        "id": range(30),
        "num": [str(i * 0.5) for i in range(30)],
        "color": ["red", "green", "blue"] * 10,
        "note": [f"note {i}" for i in range(30)],
        "outcome": [0, 1] * 15,
    }).to_csv(path, index=False)

    df = load_dataset(path)

    assert pd.api.types.is_numeric_dtype(df["num"])
    assert isinstance(df["color"].dtype, pd.CategoricalDtype)
    assert pd.api.types.is_string_dtype(df["note"])
    assert not isinstance(df["note"].dtype, pd.CategoricalDtype)
    assert df.index.tolist() == list(range(30))


def test_coerce_types_named_categorical_and_no_mutation():
    df = pd.DataFrame({"code": [1, 2, 1], "text": ["a", "b", "c"]})

    out = coerce_types(df, categorical=["code"], max_levels=2)

    assert isinstance(out["code"].dtype, pd.CategoricalDtype)
    assert pd.api.types.is_string_dtype(out["text"])
    assert df["code"].dtype == "int64"


def test_split_X_y_drops_id_and_target(regression_df):
    X, y = split_X_y(regression_df)

    assert "id" not in X.columns
    assert "outcome" not in X.columns
    assert y.name == "outcome"
    assert split_X_y(X)[1] is None


def test_train_test_split_sizes_and_seed(regression_df):
    train, test = train_test_split_df(regression_df, test_size=0.25, random_state=1)
    train2, test2 = train_test_split_df(regression_df, test_size=0.25, random_state=1)

    assert len(train) == 75 and len(test) == 25
    assert set(train.index).isdisjoint(test.index)
    assert test.index.equals(test2.index)


def test_stratified_split_keeps_proportion(classification_df):
    share = classification_df["outcome"].mean()

    train, test = train_test_split_df(classification_df, test_size=0.25, strata="outcome", random_state=4)

    assert train["outcome"].mean() == pytest.approx(share, abs=0.01)
    assert test["outcome"].mean() == pytest.approx(share, abs=0.03)


@pytest.mark.parametrize("size", [0, 1, -0.1, 1.5])
def test_split_rejects_bad_size(regression_df, size):
    with pytest.raises(InvalidParameter):
        train_test_split_df(regression_df, test_size=size)


def test_split_rejects_unknown_strata(regression_df):
    with pytest.raises(InvalidParameter):
        train_test_split_df(regression_df, strata="nope")
