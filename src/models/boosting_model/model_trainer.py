# src/models/boosting_model/model_trainer.py
import numpy as np
import pandas as pd
from sklearn.ensemble import GradientBoostingRegressor
from sklearn.inspection import partial_dependence
from sklearn.metrics import mean_squared_error, mean_absolute_error, r2_score
from .config import MODEL_CONFIG, TRAINING_CONFIG


class ModelTrainer:
    """
    Trains and evaluates a gradient-boosted regression tree ensemble.
    """

    def __init__(self, model_params=None, training_params=None):
        self.model_params = {**MODEL_CONFIG, **(model_params or {})}
        self.training_params = {**TRAINING_CONFIG, **(training_params or {})}
        self.model = GradientBoostingRegressor(**self.model_params)

    def train(self, X_train, y_train):
        """
        Train the boosted ensemble on the given data.
        """
        print(f"[INFO] Training Gradient Boosting model ({self.model.n_estimators} trees)...")
        self.model.fit(X_train, y_train)
        print("[INFO] Training complete.")
        return self.model

    def evaluate(self, X_train, X_test, y_train, y_test):
        """
        Compute regression metrics on the test and train sets.
        """
        print("[INFO] Evaluating model performance...")
        y_pred = self.model.predict(X_test)
        y_train_pred = self.model.predict(X_train)
        test_mse = mean_squared_error(y_test, y_pred)
        metrics = {
            "MSE": test_mse,
            "RMSE": np.sqrt(test_mse),
            "MAE": mean_absolute_error(y_test, y_pred),
            "R2_test": r2_score(y_test, y_pred),
            "R2_train": r2_score(y_train, y_train_pred),
        }
        print("[INFO] Model Evaluation:")
        for k, v in metrics.items():
            print(f"   {k}: {v:.4f}")
        return metrics

    def default_tree_grid(self):
        start = self.training_params["n_trees_start"]
        step = self.training_params["n_trees_step"]
        return list(range(start, self.model.n_estimators + 1, step))

    def test_error_curve(self, X_test, y_test, n_trees=None) -> pd.DataFrame:
        """
        Held-out MSE of the first `n` trees for every `n` in `n_trees`,
        read from the staged predictions of a single fit.
        """
        n_trees = sorted(int(n) for n in (n_trees if n_trees is not None else self.default_tree_grid()))
        fitted = self.model.n_estimators_
        if not n_trees or n_trees[0] < 1 or n_trees[-1] > fitted:
            raise ValueError(f"n_trees must lie in [1, {fitted}], got {n_trees[:1]}..{n_trees[-1:]}")

        wanted = set(n_trees)
        errors = {}
        for stage, y_pred in enumerate(self.model.staged_predict(X_test), start=1):
            if stage in wanted:
                errors[stage] = mean_squared_error(y_test, y_pred)
            if stage >= n_trees[-1]:
                break
        curve = pd.DataFrame({"n_trees": n_trees, "test_error": [errors[n] for n in n_trees]})
        best = curve.loc[curve["test_error"].idxmin()]
        print(f"[INFO] Best boosting test MSE {best['test_error']:.4f} at {int(best['n_trees'])} trees")
        return curve

    def variable_importance(self, feature_names=None) -> pd.Series:
        """Relative influence of each predictor in percent, largest first."""
        names = feature_names if feature_names is not None else getattr(
            self.model, "feature_names_in_", None
        )
        if names is None:
            names = [f"x{i}" for i in range(self.model.n_features_in_)]
        influence = pd.Series(100 * self.model.feature_importances_, index=list(names), name="rel_inf")
        return influence.sort_values(ascending=False)

    def partial_dependence(self, X, feature, grid_resolution=None) -> pd.DataFrame:
        """Average prediction as `feature` varies over a grid, others marginalized."""
        grid_resolution = grid_resolution if grid_resolution is not None else self.training_params["pdp_grid_resolution"]
        result = partial_dependence(
            self.model, X, [feature], kind="average", grid_resolution=grid_resolution
        )
        return pd.DataFrame({
            feature: result["grid_values"][0],
            "partial_dependence": result["average"][0],
        })
