import numpy as np
import pandas as pd
from patsy import dmatrix
import statsmodels.api as sm
import statsmodels.formula.api as smf
from statsmodels.gam.api import BSplines, GLMGam
from statsmodels.stats.anova import anova_lm

from .config import MODEL_CONFIG, TRAINING_CONFIG
from src.pipelines.evaluation import compare_deviance, confidence_bands


class GAMTrainer:
    """
    Additive models for wage: least-squares fits on natural-spline bases,
    penalized B-spline GAMs and a logistic GAM for the high-earner indicator.
    """

    def __init__(self, model_params=None, training_params=None, verbose: bool = True):
        self.model_params = {**MODEL_CONFIG, **(model_params or {})}
        self.training_params = {**TRAINING_CONFIG, **(training_params or {})}
        self.verbose = verbose
        self.y = self.training_params["target"]

    def _report(self, results, title: str):
        if self.verbose:
            print(f"[INFO] {title}")
            print(results.summary())

    # ---------------------- least-squares GAMs ----------------------
    def _spline_terms(self, year_df=None, age_df=None):
        year_df = year_df if year_df is not None else self.model_params["year_df"]
        age_df = age_df if age_df is not None else self.model_params["age_df"]
        return (
            f"cr(year, df={year_df}, constraints='center')",
            f"cr(age, df={age_df}, constraints='center')",
        )

    def fit_spline_gam(self, df: pd.DataFrame, year_df=None, age_df=None):
        year_term, age_term = self._spline_terms(year_df, age_df)
        results = smf.ols(f"{self.y} ~ {year_term} + {age_term} + C(education)", data=df).fit()
        self._report(results, "Least-squares GAM (natural splines in year and age)")
        return results

    def compare_gams(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        F-tests for m1 (no year), m2 (linear year) and m3 (smooth year).
        """
        year_term, age_term = self._spline_terms()
        formulas = {
            "m1": f"{self.y} ~ {age_term} + C(education)",
            "m2": f"{self.y} ~ year + {age_term} + C(education)",
            "m3": f"{self.y} ~ {year_term} + {age_term} + C(education)",
        }
        fits = [smf.ols(f, data=df).fit() for f in formulas.values()]
        table = anova_lm(*fits)
        table.index = list(formulas)
        if self.verbose:
            print("[INFO] GAM comparison (ANOVA):")
            print(table)
        return table

    def partial_effects(self, results, df: pd.DataFrame, term: str, grid) -> pd.DataFrame:
        """
        Contribution of one smooth term with ±2 se bands, other terms held at
        their first row values.
        """
        cols = [i for i, name in enumerate(results.model.exog_names) if f"({term}," in name]
        if not cols:
            raise KeyError(f"No spline columns for term '{term}' in the fitted model.")
        grid = np.asarray(grid, dtype=float)
        base = df.iloc[[0] * grid.size].reset_index(drop=True)
        base[term] = grid
        data = results.model.data
        spec = getattr(data, "model_spec", None)
        if spec is None:
            spec = data.design_info
        exog = np.asarray(dmatrix(spec, base))
        x_term = exog[:, cols]
        params = np.asarray(results.params)[cols]
        cov = np.asarray(results.cov_params())[np.ix_(cols, cols)]
        fit = x_term @ params
        se = np.sqrt(np.einsum("ij,jk,ik->i", x_term, cov, x_term))
        bands = confidence_bands(fit, se)
        bands.insert(0, term, grid)
        return bands

    # ---------------------- penalized GAMs ----------------------
    def fit_penalized_gam(self, df: pd.DataFrame, alpha=None):
        smoother = BSplines(
            df[["year", "age"]],
            df=self.model_params["spline_df"],
            degree=self.model_params["spline_degree"],
        )
        alpha = alpha if alpha is not None else self.model_params["alpha"]
        model = GLMGam.from_formula(
            f"{self.y} ~ C(education)", data=df, smoother=smoother, alpha=alpha
        )
        results = model.fit()
        self._report(results, "Penalized GAM (B-spline smoothers in year and age)")
        return results

    def smooth_bands(self, results, smooth_index: int) -> pd.DataFrame:
        """Partial prediction of one smoother with ±2 se bands, sorted by x."""
        fit, se = results.partial_values(smooth_index, include_constant=True)
        x = np.asarray(results.model.smoother.smoothers[smooth_index].x, dtype=float).ravel()
        order = np.argsort(x, kind="stable")
        bands = confidence_bands(fit[order], se[order])
        bands.insert(0, "x", x[order])
        return bands.drop_duplicates(subset="x").reset_index(drop=True)

    # ---------------------- logistic GAM ----------------------
    def education_crosstab(self, df: pd.DataFrame) -> pd.DataFrame:
        table = pd.crosstab(df["education"], df[self.training_params["binary_target"]])
        if self.verbose:
            print("[INFO] Education vs high earner:")
            print(table)
        return table

    def _logistic_subset(self, df: pd.DataFrame) -> pd.DataFrame:
        excluded = self.training_params["excluded_education"]
        return df[df["education"] != excluded].reset_index(drop=True)

    def fit_logistic_gam(self, df: pd.DataFrame, include_year: bool = True, alpha=None):
        """
        Binomial GAM of the high-earner indicator with a smooth in age.
        The lowest education level has no high earners and is dropped.
        """
        data = self._logistic_subset(df)
        target = self.training_params["binary_target"]
        smoother = BSplines(
            data[["age"]],
            df=[self.model_params["spline_df"][1]],
            degree=[self.model_params["spline_degree"][1]],
        )
        alpha = alpha if alpha is not None else [self.model_params["alpha"][1]]
        rhs = "year + C(education)" if include_year else "C(education)"
        model = GLMGam.from_formula(
            f"{target} ~ {rhs}",
            data=data,
            smoother=smoother,
            alpha=alpha,
            family=sm.families.Binomial(),
        )
        results = model.fit()
        self._report(results, f"Logistic GAM ({'with' if include_year else 'without'} year)")
        return results

    def compare_logistic_gams(self, df: pd.DataFrame):
        """Deviance table for the logistic GAM without and with year, plus the fitted full model."""
        reduced = self.fit_logistic_gam(df, include_year=False)
        full = self.fit_logistic_gam(df, include_year=True)
        table = compare_deviance(reduced, full, labels=("without_year", "with_year"))
        if self.verbose:
            print("[INFO] Logistic GAM deviance comparison:")
            print(table)
        return table, full
