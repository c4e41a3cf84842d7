from pathlib import Path

import pandas as pd
import pytest

from data.data_loader import DataLoader, EXPECTED_COLUMNS


@pytest.fixture
def raw_wage():
    return pd.DataFrame(
        {
            "year": [2003, 2004, 2005],
            "age": [25, 40, 61],
            "education": [" 2. HS Grad", "4. College Grad ", "1. < HS Grad"],
            "wage": [80.5, 120.0, 300.2],
        }
    )


def test_unknown_dataset_raises(tmp_path):
    with pytest.raises(ValueError):
        DataLoader("carseats", cache_dir=str(tmp_path))


def test_load_data_reads_cache_without_fetching(tmp_path, raw_wage, monkeypatch):
    raw_wage.to_csv(tmp_path / "wage.csv", index=False)

    def fail_fetch(self):
        raise AssertionError("fetch should not be called when a cache exists")

    monkeypatch.setattr(DataLoader, "fetch", fail_fetch)
    df = DataLoader("wage", cache_dir=str(tmp_path)).load_data()
    assert list(df.columns) == EXPECTED_COLUMNS["wage"]
    assert len(df) == 3


def test_load_data_fetches_and_caches(tmp_path, raw_wage, monkeypatch):
    monkeypatch.setattr(DataLoader, "fetch", lambda self: raw_wage.copy())
    cache_dir = tmp_path / "cache"

    loader = DataLoader("wage", cache_dir=str(cache_dir))
    df = loader.load_data()

    assert Path(loader.cache_path).exists()
    assert len(pd.read_csv(loader.cache_path)) == len(df)


def test_load_data_missing_required_columns(tmp_path, raw_wage):
    raw_wage.drop(columns=["age"]).to_csv(tmp_path / "wage.csv", index=False)
    with pytest.raises(ValueError, match="Missing expected columns"):
        DataLoader("wage", cache_dir=str(tmp_path)).load_data()


def test_preprocess_strips_education_and_keeps_input(raw_wage):
    loader = DataLoader("wage")
    processed = loader.preprocess(raw_wage)

    assert processed["education"].tolist() == ["2. HS Grad", "4. College Grad", "1. < HS Grad"]
    # input frame is untouched
    assert raw_wage["education"].iloc[0] == " 2. HS Grad"


def test_run_boston_from_cache(tmp_path, boston_df):
    boston_df.to_csv(tmp_path / "boston.csv", index=False)
    df = DataLoader("boston", cache_dir=str(tmp_path)).run()
    assert set(EXPECTED_COLUMNS["boston"]).issubset(df.columns)
    assert len(df) == len(boston_df)
