import numpy as np
import pandas as pd
import pytest

from src.pipelines import data_setup as ds


def test_sample_train_indices_are_unique_sorted_and_reproducible():
    a = ds.sample_train_indices(506, 300, seed=101)
    b = ds.sample_train_indices(506, 300, seed=101)
    assert len(a) == 300
    assert len(np.unique(a)) == 300
    assert np.all(np.diff(a) > 0)
    assert np.array_equal(a, b)
    assert a.min() >= 0 and a.max() < 506


@pytest.mark.parametrize("train_size", [0, 507])
def test_sample_train_indices_rejects_bad_size(train_size):
    with pytest.raises(ValueError):
        ds.sample_train_indices(506, train_size, seed=1)


def test_split_by_indices_is_exact_partition(boston_df):
    idx = ds.sample_train_indices(len(boston_df), 80, seed=3)
    train, test = ds.split_by_indices(boston_df, idx)

    assert len(train) + len(test) == len(boston_df)
    assert set(train.index).isdisjoint(test.index)
    assert set(train.index) | set(test.index) == set(boston_df.index)


def test_make_grid_is_inclusive():
    grid = ds.make_grid(pd.Series([18, 45, 80]))
    assert grid[0] == 18 and grid[-1] == 80
    assert len(grid) == 63
    assert np.allclose(np.diff(grid), 1)


def test_add_high_earner_threshold(wage_df):
    out = ds.add_high_earner(wage_df.drop(columns=["high_earner"]), threshold=250)
    assert set(out["high_earner"].unique()) <= {0, 1}
    assert (out.loc[out["high_earner"] == 1, "wage"] > 250).all()
    assert (out.loc[out["high_earner"] == 0, "wage"] <= 250).all()
    assert "high_earner" not in wage_df.drop(columns=["high_earner"]).columns


def test_load_dataset_adds_high_earner(monkeypatch, wage_df):
    class DummyLoader:
        def __init__(self, name, cache_dir="data/raw"):
            self.name = name

        def run(self):
            return wage_df.drop(columns=["high_earner"])

    monkeypatch.setattr(ds, "DataLoader", DummyLoader)
    df = ds.load_dataset("wage")
    assert "high_earner" in df.columns


def test_build_feature_frame_success(boston_df):
    X, y = ds.build_feature_frame(boston_df, ds.BOSTON_CONFIG)
    assert list(X.columns) == ds.BOSTON_CONFIG.features
    assert y.name == "medv"


def test_build_feature_frame_missing_columns_raises(boston_df):
    with pytest.raises(ValueError):
        ds.build_feature_frame(boston_df.drop(columns=["lstat"]), ds.BOSTON_CONFIG)


def test_dataset_config_to_dict():
    cfg = ds.WAGE_CONFIG.to_dict()
    assert cfg == {"name": "wage", "target": "wage", "features": ["year", "age", "education"]}
