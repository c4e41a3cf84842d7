import numpy as np
from sklearn.ensemble import RandomForestRegressor
from sklearn.metrics import mean_squared_error, mean_absolute_error, r2_score
from sklearn.model_selection import cross_val_score
from .config import MODEL_CONFIG, TRAINING_CONFIG

from src.pipelines.hyperparameter_sweep import oob_mse, sweep_hyperparameter


class ModelTrainer:
    """
    Trains, evaluates, and sweeps a Random Forest regression model.
    """

    def __init__(self, model_params=None, training_params=None):
        self.model_params = {**MODEL_CONFIG, **(model_params or {})}
        self.training_params = {**TRAINING_CONFIG, **(training_params or {})}
        self.model = RandomForestRegressor(**self.model_params)

    def train(self, X_train, y_train):
        print("[INFO] Training Random Forest model...")
        self.model.fit(X_train, y_train)
        print("[INFO] Training complete.")
        return self.model

    def oob_error(self, X_train, y_train):
        """Out-of-bag MSE of the fitted forest (None without oob_score)."""
        return oob_mse(self.model, X_train, y_train)

    def evaluate(self, X_train, X_test, y_train, y_test):
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
        oob = self.oob_error(X_train, y_train)
        if oob is not None:
            metrics["OOB_MSE"] = oob
        print("[INFO] Model Evaluation:")
        for k, v in metrics.items():
            print(f"   {k}: {v:.4f}")
        return metrics

    def cross_validate(self, X, y):
        print("[INFO] Running cross-validation...")
        scores = cross_val_score(self.model, X, y, scoring="neg_mean_squared_error",
                                 cv=self.training_params.get("cv_folds", 5))
        scores = -scores
        print(f"[INFO] CV MSE mean: {scores.mean():.4f} ± {scores.std():.4f}")
        return scores

    def mtry_sweep(self, train_df, test_df, target, values=None, n_estimators=None):
        """
        Refit the forest for every number of candidate split variables and
        collect OOB and held-out MSE on the same split.
        """
        n_features = train_df.shape[1] - 1
        values = list(values) if values is not None else list(range(1, n_features + 1))
        n_estimators = n_estimators if n_estimators is not None else self.training_params["sweep_n_estimators"]
        params = {**self.model_params, "n_estimators": n_estimators, "oob_score": True}

        def build_model(mtry):
            return RandomForestRegressor(**{**params, "max_features": int(mtry)})

        print(f"[INFO] Sweeping max_features over {values[0]}..{values[-1]} ({n_estimators} trees)")
        return sweep_hyperparameter(
            build_model, train_df, test_df, values, target,
            param_name="max_features",
            internal_error=oob_mse,
        )
