from dataclasses import dataclass

import numpy as np
import pandas as pd
import statsmodels.formula.api as smf
from scipy.interpolate import make_smoothing_spline
from scipy.optimize import brentq, minimize_scalar
from statsmodels.nonparametric.smoothers_lowess import lowess

from .config import MODEL_CONFIG, TRAINING_CONFIG
from src.pipelines.evaluation import confidence_bands, predict_with_se


@dataclass
class SmoothingSplineFit:
    """Fitted smoothing spline with its penalty and effective degrees of freedom."""

    spline: object
    lam: float
    df: float
    criterion: str

    def predict(self, x):
        return self.spline(np.asarray(x, dtype=float))


def _collapse(x, y):
    """Unique sorted x with mean response, multiplicity weights and within-x SS."""
    y = np.asarray(y, dtype=float)
    xu, inverse, counts = np.unique(np.asarray(x, dtype=float), return_inverse=True, return_counts=True)
    inverse = inverse.ravel()
    ybar = np.bincount(inverse, weights=y) / counts
    within_ss = float(np.sum((y - ybar[inverse]) ** 2))
    return xu, ybar, counts.astype(float), within_ss


def _smoother_matrix(xu, w, lam):
    # column j is the fitted response to the j-th unit vector
    return make_smoothing_spline(xu, np.eye(xu.size), w=w, lam=lam)(xu)


def effective_df(xu, w, lam) -> float:
    return float(np.trace(_smoother_matrix(xu, w, lam)))


class SplineModelTrainer:
    """
    Regression, natural and smoothing splines plus local regression of wage on age.
    """

    def __init__(self, model_params=None, training_params=None, verbose: bool = True):
        self.model_params = {**MODEL_CONFIG, **(model_params or {})}
        self.training_params = {**TRAINING_CONFIG, **(training_params or {})}
        self.verbose = verbose
        self.x = self.training_params["predictor"]
        self.y = self.training_params["target"]

    def _report(self, results, title: str):
        if self.verbose:
            print(f"[INFO] {title}")
            print(results.summary())

    def predict_bands(self, results, grid) -> pd.DataFrame:
        grid_df = pd.DataFrame({self.x: np.asarray(grid, dtype=float)})
        fit, se = predict_with_se(results, grid_df)
        bands = confidence_bands(fit, se, multiplier=self.model_params["band_multiplier"])
        bands.insert(0, self.x, grid_df[self.x].to_numpy())
        return bands

    # ---------------------- basis splines (OLS) ----------------------
    def fit_regression_spline(self, df: pd.DataFrame, knots=None):
        """Cubic B-spline basis with fixed interior knots."""
        knots = tuple(knots if knots is not None else self.model_params["knots"])
        results = smf.ols(f"{self.y} ~ bs({self.x}, knots={knots}, degree=3)", data=df).fit()
        self._report(results, f"Regression spline fit (knots {knots})")
        return results

    def fit_natural_spline(self, df: pd.DataFrame, dof: int | None = None):
        """Natural cubic regression spline, centered for use with an intercept."""
        dof = dof if dof is not None else self.model_params["natural_df"]
        results = smf.ols(
            f"{self.y} ~ cr({self.x}, df={dof}, constraints='center')", data=df
        ).fit()
        self._report(results, f"Natural spline fit (df {dof})")
        return results

    # ---------------------- smoothing spline ----------------------
    def fit_smoothing_spline(self, x, y, dof: float | None = None) -> SmoothingSplineFit:
        """
        Penalized cubic smoothing spline.

        With `dof` the penalty is solved so that the trace of the smoother
        matrix equals `dof`; otherwise the penalty minimizes GCV.
        """
        xu, ybar, w, within_ss = _collapse(x, y)
        lo, hi = self.training_params["lam_bounds"]

        if dof is not None:
            if not 2 < dof < xu.size:
                raise ValueError(f"df must lie in (2, {xu.size}), got {dof}")
            log_lam = brentq(lambda s: effective_df(xu, w, 10.0 ** s) - dof, lo, hi, xtol=1e-6)
            criterion = "df"
        else:
            n = w.sum()

            def gcv(s):
                S = _smoother_matrix(xu, w, 10.0 ** s)
                rss = within_ss + np.sum(w * (ybar - S @ ybar) ** 2)
                return n * rss / (n - np.trace(S)) ** 2

            log_lam = minimize_scalar(gcv, bounds=(lo, hi), method="bounded").x
            criterion = "gcv"

        lam = 10.0 ** log_lam
        spline = make_smoothing_spline(xu, ybar, w=w, lam=lam)
        fit = SmoothingSplineFit(spline=spline, lam=lam, df=effective_df(xu, w, lam), criterion=criterion)
        if self.verbose:
            print(f"[INFO] Smoothing spline ({criterion}): lambda={fit.lam:.4g} df={fit.df:.2f}")
        return fit

    # ---------------------- local regression ----------------------
    def fit_local_regression(self, x, y, grid, span: float) -> np.ndarray:
        """Local linear regression (lowess, no robustness iterations) on `grid`."""
        if not 0 < span <= 1:
            raise ValueError(f"span must be in (0, 1], got {span}")
        return lowess(
            np.asarray(y, dtype=float),
            np.asarray(x, dtype=float),
            frac=span,
            it=0,
            xvals=np.asarray(grid, dtype=float),
        )
