# src/utils/tracking.py
import os
from contextlib import contextmanager
from pathlib import Path

try:
    import mlflow
    _MLFLOW_AVAILABLE = True
except Exception:
    _MLFLOW_AVAILABLE = False


class ExperimentTracker:
    """
    MLflow run bookkeeping for the walkthroughs. When mlflow is missing or
    disabled every method is a no-op, so the metrics JSON stays the record.
    """

    def __init__(self, experiment_name: str | None = None,
                 tracking_uri: str | None = None,
                 use_mlflow: bool = True,
                 tags: dict | None = None):
        self.use_mlflow = bool(use_mlflow and _MLFLOW_AVAILABLE)
        self.experiment_name = experiment_name or os.getenv("EXPERIMENT_NAME", "islr-labs")
        self.tracking_uri = tracking_uri or os.getenv("MLFLOW_TRACKING_URI")
        self.tags = tags or {}

        if self.use_mlflow and self.tracking_uri:
            mlflow.set_tracking_uri(self.tracking_uri)

    @contextmanager
    def start_run(self, run_name: str | None = None):
        if not self.use_mlflow:
            yield None
            return
        if mlflow.active_run() is not None:
            yield mlflow.active_run()
            return
        mlflow.set_experiment(self.experiment_name)
        with mlflow.start_run(run_name=run_name) as run:
            if self.tags:
                mlflow.set_tags(self.tags)
            print(f"[INFO] MLflow run '{run_name}' in experiment '{self.experiment_name}'")
            yield run

    def log_params(self, params: dict | None, prefix: str = ""):
        if not self.use_mlflow or not params:
            return
        mlflow.log_params({f"{prefix}{k}": v for k, v in params.items()})

    def log_trainer_params(self, name: str, trainer):
        """Log a trainer's merged model and training params as ``<name>.model__*`` / ``<name>.train__*``."""
        self.log_params(getattr(trainer, "model_params", None), prefix=f"{name}.model__")
        self.log_params(getattr(trainer, "training_params", None), prefix=f"{name}.train__")

    def log_metrics(self, metrics: dict):
        if not self.use_mlflow:
            return
        mlflow.log_metrics({k: float(v) for k, v in metrics.items()})

    def log_artifacts(self, local_dir, artifact_path: str | None = None):
        if not self.use_mlflow or not Path(local_dir).is_dir():
            return
        mlflow.log_artifacts(str(local_dir), artifact_path=artifact_path)
