"""Sweep one integer hyperparameter over a fixed train/held-out split."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

import numpy as np
import pandas as pd

from src.pipelines.evaluation import mse


@dataclass
class SweepResult:
    """Error curves aligned index-for-index with the swept values."""

    param_name: str
    values: list
    internal_errors: list = field(default_factory=list)
    test_errors: list = field(default_factory=list)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                self.param_name: self.values,
                "internal_error": self.internal_errors,
                "test_error": self.test_errors,
            }
        )

    @property
    def best_value(self):
        return self.values[int(np.argmin(self.test_errors))]


def oob_mse(model, X_train, y_train) -> Optional[float]:
    """
    Out-of-bag MSE reported by a fitted bagging ensemble, or None when the
    estimator does not define one.
    """
    oob_pred = getattr(model, "oob_prediction_", None)
    if oob_pred is None:
        return None
    return mse(y_train, np.ravel(oob_pred))


def sweep_hyperparameter(
    build_model: Callable,
    train_df: pd.DataFrame,
    test_df: pd.DataFrame,
    values: Iterable,
    target: str,
    *,
    param_name: str = "value",
    internal_error: Optional[Callable] = oob_mse,
    verbose: bool = True,
) -> SweepResult:
    """
    Refit `build_model(value)` on the training rows for every candidate value.

    The internal estimate comes from `internal_error(model, X_train, y_train)`
    and the held-out estimate is the test-set MSE. Fitting errors propagate.
    """
    X_train, y_train = train_df.drop(columns=[target]), train_df[target]
    X_test, y_test = test_df.drop(columns=[target]), test_df[target]

    result = SweepResult(param_name=param_name, values=list(values))
    for value in result.values:
        model = build_model(value)
        model.fit(X_train, y_train)

        internal = internal_error(model, X_train, y_train) if internal_error else None
        test = mse(y_test, model.predict(X_test))

        result.internal_errors.append(internal)
        result.test_errors.append(test)
        if verbose:
            internal_txt = f"{internal:.4f}" if internal is not None else "n/a"
            print(f"[INFO] {param_name}={value}: internal={internal_txt} test={test:.4f}")
    return result
