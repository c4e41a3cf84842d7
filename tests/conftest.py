import sys
from contextlib import contextmanager
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

# Ensure project root and /src are on sys.path for imports like `src.*` or `data.*`
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
for path in (PROJECT_ROOT, SRC_DIR):
    str_path = str(path)
    if str_path not in sys.path:
        sys.path.insert(0, str_path)

EDUCATION_LEVELS = [
    "1. < HS Grad",
    "2. HS Grad",
    "3. Some College",
    "4. College Grad",
    "5. Advanced Degree",
]

BOSTON_FEATURES = [
    "crim", "zn", "indus", "chas", "nox", "rm", "age",
    "dis", "rad", "tax", "ptratio", "black", "lstat",
]


@pytest.fixture
def wage_df():
    """Wage-like frame: concave in age, rising in year and education,
    with high earners only outside the lowest education level."""
    rng = np.random.RandomState(0)
    n = 500
    age = rng.randint(18, 81, size=n)
    year = rng.randint(2003, 2010, size=n)
    edu_idx = rng.randint(0, len(EDUCATION_LEVELS), size=n)
    wage = (
        40 + 4.2 * age - 0.042 * age ** 2
        + np.array([0, 12, 25, 45, 70])[edu_idx]
        + 5.0 * (year - 2003)
        + rng.normal(0, 20, size=n)
    )
    bonus = (edu_idx >= 1) & (rng.uniform(size=n) < 0.2)
    wage = wage + 150 * bonus
    wage = np.where(edu_idx == 0, np.minimum(wage, 200.0), wage)
    df = pd.DataFrame({
        "year": year,
        "age": age,
        "education": np.array(EDUCATION_LEVELS)[edu_idx],
        "wage": wage,
    })
    df["high_earner"] = (df["wage"] > 250).astype(int)
    return df


@pytest.fixture
def boston_df():
    rng = np.random.RandomState(1)
    n = 120
    data = {name: rng.uniform(0, 10, size=n) for name in BOSTON_FEATURES}
    data["chas"] = rng.randint(0, 2, size=n).astype(float)
    data["rad"] = rng.randint(1, 9, size=n).astype(float)
    data["rm"] = rng.uniform(4, 8, size=n)
    data["lstat"] = rng.uniform(2, 35, size=n)
    df = pd.DataFrame(data)
    df["medv"] = 30 + 4 * (df["rm"] - 6) - 0.5 * df["lstat"] + rng.normal(0, 2, size=n)
    return df


class FakeMlflow:
    """Records the mlflow calls made through ExperimentTracker."""

    def __init__(self):
        self.tracking_uri = None
        self.experiment = None
        self.run_names = []
        self.tags = {}
        self.params = {}
        self.metrics = {}
        self.artifacts = []
        self._active = None

    def set_tracking_uri(self, uri):
        self.tracking_uri = uri

    def set_experiment(self, name):
        self.experiment = name

    def active_run(self):
        return self._active

    @contextmanager
    def start_run(self, run_name=None):
        self.run_names.append(run_name)
        self._active = run_name
        try:
            yield run_name
        finally:
            self._active = None

    def set_tags(self, tags):
        self.tags.update(tags)

    def log_params(self, params):
        self.params.update(params)

    def log_metrics(self, metrics):
        self.metrics.update(metrics)

    def log_artifacts(self, local_dir, artifact_path=None):
        self.artifacts.append((local_dir, artifact_path))


@pytest.fixture
def fake_mlflow(monkeypatch):
    from src.utils import tracking

    fake = FakeMlflow()
    monkeypatch.setattr(tracking, "_MLFLOW_AVAILABLE", True)
    monkeypatch.setattr(tracking, "mlflow", fake, raising=False)
    return fake
