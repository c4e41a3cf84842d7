import random

import numpy as np

from src.utils import env as env_mod
from src.utils import seeds
from src.utils import tracking

ENV_KEYS = ["ENV", "EXPERIMENT_NAME", "DATA_DIR", "MLFLOW_TRACKING_URI", "SEED", "RUN_STAGE"]


def test_load_env_defaults_and_env_file(monkeypatch, tmp_path):
    # Ensure clean environment; setenv first so teardown undoes what load_dotenv writes
    for key in ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)

    # With .env present
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text(
        "ENV=prod\nEXPERIMENT_NAME=my-exp\nDATA_DIR=cache\nSEED=7\nRUN_STAGE=ci\nMLFLOW_TRACKING_URI=file:mlruns\n"
    )
    values = env_mod.load_env()
    assert values["ENV"] == "prod"
    assert values["EXPERIMENT_NAME"] == "my-exp"
    assert values["DATA_DIR"] == "cache"
    assert values["SEED"] == 7
    assert values["RUN_STAGE"] == "ci"
    assert values["MLFLOW_TRACKING_URI"] == "file:mlruns"

    # Without .env, falls back to environment variables
    (tmp_path / ".env").unlink()
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("EXPERIMENT_NAME", "fallback-exp")
    values = env_mod.load_env()
    assert values["EXPERIMENT_NAME"] == "fallback-exp"
    assert values["ENV"] == "local"
    assert values["SEED"] == seeds.DEFAULT_SEED
    assert values["MLFLOW_TRACKING_URI"] is None
    assert values["DATA_DIR"] == "data/raw"


def test_set_global_seed_is_reproducible():
    assert seeds.set_global_seed(123) == 123
    a = (random.random(), np.random.rand())
    seeds.set_global_seed(123)
    b = (random.random(), np.random.rand())
    assert a == b


def test_set_global_seed_falls_back_to_env(monkeypatch):
    monkeypatch.setenv("SEED", "17")
    assert seeds.set_global_seed() == 17
    monkeypatch.delenv("SEED")
    assert seeds.set_global_seed() == seeds.DEFAULT_SEED
    # zero is a valid seed, not a missing one
    assert seeds.set_global_seed(0) == 0


def test_seed_lab_params_fills_only_missing_values():
    seeded = seeds.seed_lab_params("boston", {"random_forest": {"n_estimators": 50}}, seed=3)
    assert seeded["seed"] == 3
    assert seeded["random_forest"] == {"random_state": 3, "n_estimators": 50}
    assert seeded["boosting"] == {"random_state": 3}

    kept = seeds.seed_lab_params("boston", {"seed": 9, "boosting": {"random_state": 0}}, seed=3)
    assert kept["seed"] == 9
    assert kept["boosting"]["random_state"] == 0

    assert seeds.seed_lab_params("wage", None, seed=3) == {"seed": 3}


def test_tracker_is_noop_without_mlflow(monkeypatch, tmp_path):
    monkeypatch.setattr(tracking, "_MLFLOW_AVAILABLE", False)
    tracker = tracking.ExperimentTracker(experiment_name="x")
    assert tracker.use_mlflow is False
    with tracker.start_run("wage") as run:
        assert run is None
    tracker.log_params({"a": 1})
    tracker.log_metrics({"mse": 1.0})
    tracker.log_artifacts(tmp_path)


def test_tracker_logs_through_mlflow(fake_mlflow, monkeypatch, tmp_path):
    monkeypatch.setenv("EXPERIMENT_NAME", "env-exp")
    tracker = tracking.ExperimentTracker(tracking_uri="file:mlruns", tags={"stage": "ci"})
    assert fake_mlflow.tracking_uri == "file:mlruns"

    class Trainer:
        model_params = {"degree": 4}
        training_params = {"target": "wage"}

    with tracker.start_run("wage"):
        # nested runs reuse the active one
        with tracker.start_run("inner"):
            tracker.log_trainer_params("polynomial", Trainer())
        tracker.log_metrics({"poly_r2": np.float64(0.25)})
        tracker.log_artifacts(tmp_path, artifact_path="figures")
        tracker.log_artifacts(tmp_path / "missing")

    assert fake_mlflow.experiment == "env-exp"
    assert fake_mlflow.run_names == ["wage"]
    assert fake_mlflow.tags == {"stage": "ci"}
    assert fake_mlflow.params == {"polynomial.model__degree": 4, "polynomial.train__target": "wage"}
    assert fake_mlflow.metrics == {"poly_r2": 0.25}
    assert fake_mlflow.artifacts == [(str(tmp_path), "figures")]
