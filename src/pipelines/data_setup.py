"""Utilities to load the reference datasets and prepare splits and grids."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import pandas as pd

from src.data.data_loader import DataLoader

HIGH_EARNER_THRESHOLD = 250


@dataclass(frozen=True)
class DatasetConfig:
    """Captures the column selections used by one walkthrough."""

    name: str
    target: str
    features: list[str]

    def to_dict(self) -> dict:
        return {"name": self.name, "target": self.target, "features": list(self.features)}


WAGE_CONFIG = DatasetConfig(
    name="wage",
    target="wage",
    features=["year", "age", "education"],
)

BOSTON_CONFIG = DatasetConfig(
    name="boston",
    target="medv",
    features=[
        "crim", "zn", "indus", "chas", "nox", "rm", "age",
        "dis", "rad", "tax", "ptratio", "black", "lstat",
    ],
)


def load_dataset(name: str, cache_dir: str = "data/raw",
                 threshold: float = HIGH_EARNER_THRESHOLD) -> pd.DataFrame:
    """Load one dataset through DataLoader, adding derived Wage columns."""
    df = DataLoader(name, cache_dir=cache_dir).run()
    if name == "wage":
        df = add_high_earner(df, threshold=threshold)
    return df


def add_high_earner(df: pd.DataFrame, threshold: float = HIGH_EARNER_THRESHOLD) -> pd.DataFrame:
    """Return a copy with the binary `high_earner` column (wage > threshold)."""
    out = df.copy()
    out["high_earner"] = (out["wage"] > threshold).astype(int)
    print(f"[INFO] High earners (wage > {threshold}): {int(out['high_earner'].sum())}")
    return out


def make_grid(values, step: float = 1) -> np.ndarray:
    """Evenly spaced points from min(values) to max(values), both inclusive."""
    values = np.asarray(values, dtype=float)
    lo, hi = values.min(), values.max()
    n = int(np.floor((hi - lo) / step + 1e-9)) + 1
    return lo + step * np.arange(n)


def sample_train_indices(n_rows: int, train_size: int, seed: Optional[int] = None) -> np.ndarray:
    """Sorted row positions drawn uniformly without replacement."""
    if not 0 < train_size <= n_rows:
        raise ValueError(f"train_size must be in (0, {n_rows}], got {train_size}")
    rng = np.random.RandomState(seed)
    return np.sort(rng.choice(n_rows, size=train_size, replace=False))


def split_by_indices(df: pd.DataFrame, train_idx) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Split a frame into the rows at `train_idx` and their exact complement."""
    mask = np.zeros(len(df), dtype=bool)
    mask[np.asarray(train_idx)] = True
    return df.iloc[mask], df.iloc[~mask]


def build_feature_frame(
    df: pd.DataFrame, config: DatasetConfig = BOSTON_CONFIG
) -> Tuple[pd.DataFrame, pd.Series]:
    """Return feature matrix and target series based on the configuration."""
    required_columns = config.features + [config.target]

    missing = sorted(set(required_columns) - set(df.columns))
    if missing:
        raise ValueError(f"Missing columns in dataframe: {missing}")

    return df[config.features], df[config.target]
