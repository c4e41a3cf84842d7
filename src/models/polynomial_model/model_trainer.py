import numpy as np
import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf
from statsmodels.stats.anova import anova_lm

from .basis import poly  # noqa: F401  (resolved by name inside formulas)
from .config import MODEL_CONFIG, TRAINING_CONFIG
from src.pipelines.evaluation import confidence_bands, inv_logit, predict_with_se


class PolynomialModelTrainer:
    """
    Polynomial, logistic-polynomial and step-function fits of wage on age.
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

    # ---------------------- linear fits ----------------------
    def fit_orthogonal(self, df: pd.DataFrame, degree: int | None = None):
        degree = degree if degree is not None else self.model_params["degree"]
        results = smf.ols(f"{self.y} ~ poly({self.x}, {degree})", data=df).fit()
        self._report(results, f"Orthogonal polynomial fit (degree {degree})")
        return results

    def fit_raw(self, df: pd.DataFrame, degree: int | None = None):
        degree = degree if degree is not None else self.model_params["degree"]
        terms = [self.x] + [f"I({self.x} ** {d})" for d in range(2, degree + 1)]
        results = smf.ols(f"{self.y} ~ " + " + ".join(terms), data=df).fit()
        self._report(results, f"Raw polynomial fit (degree {degree})")
        return results

    def predict_bands(self, results, grid) -> pd.DataFrame:
        grid_df = pd.DataFrame({self.x: np.asarray(grid)})
        fit, se = predict_with_se(results, grid_df)
        bands = confidence_bands(fit, se, multiplier=self.model_params["band_multiplier"])
        bands.insert(0, self.x, grid_df[self.x].to_numpy())
        return bands

    def compare_nested(self, df: pd.DataFrame, max_degree: int | None = None) -> pd.DataFrame:
        """ANOVA of nested poly(age, 1..max_degree) fits."""
        max_degree = max_degree if max_degree is not None else self.model_params["max_anova_degree"]
        fits = [
            smf.ols(f"{self.y} ~ poly({self.x}, {d})", data=df).fit()
            for d in range(1, max_degree + 1)
        ]
        table = anova_lm(*fits)
        table.index = [f"degree_{d}" for d in range(1, max_degree + 1)]
        if self.verbose:
            print("[INFO] Nested polynomial ANOVA:")
            print(table)
        return table

    def compare_education_models(self, df: pd.DataFrame) -> pd.DataFrame:
        formulas = [
            f"{self.y} ~ education",
            f"{self.y} ~ education + {self.x}",
            f"{self.y} ~ education + poly({self.x}, 2)",
            f"{self.y} ~ education + poly({self.x}, 3)",
        ]
        fits = [smf.ols(f, data=df).fit() for f in formulas]
        table = anova_lm(*fits)
        table.index = ["education", "+age", "+poly2", "+poly3"]
        if self.verbose:
            print("[INFO] Education + age ANOVA:")
            print(table)
        return table

    # ---------------------- logistic fit ----------------------
    def fit_logistic(self, df: pd.DataFrame, degree: int | None = None):
        degree = degree if degree is not None else self.model_params["logistic_degree"]
        target = self.training_params["binary_target"]
        results = smf.glm(
            f"{target} ~ poly({self.x}, {degree})",
            data=df,
            family=sm.families.Binomial(),
        ).fit()
        self._report(results, f"Logistic polynomial fit (degree {degree})")
        return results

    def predict_probability_bands(self, results, grid) -> pd.DataFrame:
        """Bands formed on the logit scale, then mapped to probabilities."""
        grid_df = pd.DataFrame({self.x: np.asarray(grid)})
        fit, se = predict_with_se(results, grid_df)
        bands = confidence_bands(
            fit, se,
            multiplier=self.model_params["band_multiplier"],
            inverse_link=inv_logit,
        )
        bands.insert(0, self.x, grid_df[self.x].to_numpy())
        return bands

    # ---------------------- step function ----------------------
    def cut_counts(self, df: pd.DataFrame, bins: int | None = None) -> pd.Series:
        bins = bins if bins is not None else self.model_params["step_bins"]
        return pd.cut(df[self.x], bins).value_counts(sort=False)

    def fit_step_function(self, df: pd.DataFrame, bins: int | None = None):
        """Piecewise-constant fit on equal-width age bands; returns (results, edges)."""
        bins = bins if bins is not None else self.model_params["step_bins"]
        bands, edges = pd.cut(df[self.x], bins, retbins=True)
        data = df.assign(age_band=bands)
        results = smf.ols(f"{self.y} ~ C(age_band)", data=data).fit()
        self._report(results, f"Step function fit ({bins} bands)")
        return results, edges

    def predict_step(self, results, edges, grid) -> np.ndarray:
        grid = np.asarray(grid, dtype=float)
        grid_df = pd.DataFrame({"age_band": pd.cut(grid, edges)})
        return np.asarray(results.predict(grid_df))
