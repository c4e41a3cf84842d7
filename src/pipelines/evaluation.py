"""Metrics, confidence bands and prediction helpers shared by the walkthroughs."""

from __future__ import annotations

from typing import Callable, Optional, Tuple

import numpy as np
import pandas as pd
from scipy import stats
from scipy.special import expit
from sklearn.metrics import mean_squared_error


def mse(y_true, y_pred) -> float:
    """Mean of squared differences between paired truths and predictions."""
    return float(mean_squared_error(y_true, y_pred))


def inv_logit(x):
    """Inverse-logit (logistic) transform; maps 0 to exactly 0.5."""
    return expit(x)


def confidence_bands(
    fit,
    se,
    multiplier: float = 2.0,
    inverse_link: Optional[Callable] = None,
) -> pd.DataFrame:
    """
    Build `fit ± multiplier * se` bands on the model scale.

    When `inverse_link` is given it is applied to lower, fit and upper after
    the bands are formed, so the bands are asymmetric on the response scale.
    """
    fit = np.asarray(fit, dtype=float)
    se = np.asarray(se, dtype=float)
    if fit.shape != se.shape:
        raise ValueError(f"fit and se shapes differ: {fit.shape} vs {se.shape}")
    if np.any(se < 0):
        raise ValueError("Standard errors must be non-negative.")

    bands = pd.DataFrame({
        "lower": fit - multiplier * se,
        "fit": fit,
        "upper": fit + multiplier * se,
    })
    if inverse_link is not None:
        bands = bands.apply(inverse_link)
    return bands


def predict_with_se(results, new_data: pd.DataFrame) -> Tuple[np.ndarray, np.ndarray]:
    """
    Linear predictor and its standard error for a formula-fitted statsmodels
    result evaluated on `new_data`. GLM fits are predicted on the link scale.
    """
    kwargs = {"which": "linear"} if hasattr(results.model, "family") else {}
    prediction = results.get_prediction(new_data, **kwargs)
    return np.asarray(prediction.predicted, dtype=float), np.asarray(prediction.se, dtype=float)


def compare_deviance(small, large, labels: Tuple[str, str] = ("reduced", "full")) -> pd.DataFrame:
    """
    Chi-square deviance comparison of two nested GLM/GAM fits.
    """
    dev_drop = small.deviance - large.deviance
    df_drop = small.df_resid - large.df_resid
    p_value = stats.chi2.sf(dev_drop, df_drop) if df_drop > 0 else np.nan
    return pd.DataFrame(
        {
            "resid_df": [small.df_resid, large.df_resid],
            "resid_dev": [small.deviance, large.deviance],
            "df": [np.nan, df_drop],
            "deviance": [np.nan, dev_drop],
            "p_value": [np.nan, p_value],
        },
        index=list(labels),
    )
