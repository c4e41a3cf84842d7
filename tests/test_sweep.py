import numpy as np
import pytest
from sklearn.ensemble import GradientBoostingRegressor, RandomForestRegressor

from src.pipelines import data_setup as ds
from src.pipelines.hyperparameter_sweep import SweepResult, oob_mse, sweep_hyperparameter


@pytest.fixture
def split(boston_df):
    idx = ds.sample_train_indices(len(boston_df), 80, seed=101)
    return ds.split_by_indices(boston_df, idx)


def test_sweep_lengths_and_non_negative(split):
    train_df, test_df = split
    values = [1, 4, 13]
    result = sweep_hyperparameter(
        lambda m: RandomForestRegressor(n_estimators=25, max_features=m, oob_score=True, random_state=0),
        train_df, test_df, values, "medv",
        param_name="max_features", verbose=False,
    )
    assert result.values == values
    assert len(result.internal_errors) == len(values)
    assert len(result.test_errors) == len(values)
    assert all(e >= 0 for e in result.internal_errors)
    assert all(e >= 0 for e in result.test_errors)
    assert result.best_value in values

    frame = result.to_frame()
    assert list(frame.columns) == ["max_features", "internal_error", "test_error"]
    assert len(frame) == len(values)


def test_sweep_without_internal_estimate(split):
    train_df, test_df = split
    result = sweep_hyperparameter(
        lambda n: GradientBoostingRegressor(n_estimators=n, random_state=0),
        train_df, test_df, [5, 10], "medv",
    )
    assert result.internal_errors == [None, None]
    assert all(np.isfinite(result.test_errors))


def test_sweep_propagates_fit_errors(split):
    train_df, test_df = split
    with pytest.raises(ValueError):
        sweep_hyperparameter(
            lambda m: RandomForestRegressor(n_estimators=5, max_features=m),
            train_df, test_df, [0], "medv", verbose=False,
        )


def test_oob_mse_matches_oob_predictions(split):
    train_df, _ = split
    X, y = train_df.drop(columns=["medv"]), train_df["medv"]
    model = RandomForestRegressor(n_estimators=50, oob_score=True, random_state=0).fit(X, y)
    assert oob_mse(model, X, y) == pytest.approx(np.mean((y - model.oob_prediction_) ** 2))

    plain = RandomForestRegressor(n_estimators=5, random_state=0).fit(X, y)
    assert oob_mse(plain, X, y) is None


def test_best_value_uses_test_error():
    result = SweepResult("k", [1, 2, 3], [None] * 3, [3.0, 1.0, 2.0])
    assert result.best_value == 2
