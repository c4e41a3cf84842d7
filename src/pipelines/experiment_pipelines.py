"""Run the Wage (non-linear models) and Boston (tree ensembles) walkthroughs."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, Optional

import numpy as np
import pandas as pd
import yaml

from src.models.boosting_model.model_trainer import ModelTrainer as BoostingTrainer
from src.models.gam_model.model_trainer import GAMTrainer
from src.models.polynomial_model.model_trainer import PolynomialModelTrainer
from src.models.random_forest_model.model_trainer import ModelTrainer as RFTrainer
from src.models.spline_model.model_trainer import SplineModelTrainer
from src.pipelines.data_setup import (
    BOSTON_CONFIG,
    HIGH_EARNER_THRESHOLD,
    build_feature_frame,
    load_dataset,
    make_grid,
    sample_train_indices,
    split_by_indices,
)
from src.utils.env import load_env
from src.utils.seeds import DEFAULT_SEED, seed_lab_params, set_global_seed
from src.utils.tracking import ExperimentTracker
from src.visualization import plots

# Metric files written after each walkthrough
METRIC_PATHS = {
    "wage": "reports/metrics_wage.json",
    "boston": "reports/metrics_boston.json",
}


def _section(title: str):
    print("=" * 70); print(f"[PIPELINE] {title}"); print("=" * 70)


def save_metrics(metrics: Dict[str, float], path: str) -> str:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w") as f:
        json.dump({k: float(v) for k, v in metrics.items()}, f, indent=2)
    print(f"[INFO] Metrics saved to: {path}")
    return path


def run_wage_walkthrough(
    df: pd.DataFrame,
    params: Optional[dict] = None,
    figures_dir: str = "reports/figures",
    tracker: Optional[ExperimentTracker] = None,
) -> Dict[str, float]:
    """Polynomials, step functions, splines, local regression and GAMs on Wage."""
    params = params or {}
    tracker = tracker or ExperimentTracker(use_mlflow=False)
    fig_dir = Path(figures_dir)
    metrics: Dict[str, float] = {}

    age_grid = make_grid(df["age"])
    year_grid = make_grid(df["year"])

    # 1) Polinomios
    _section("Polynomial regression")
    poly_trainer = PolynomialModelTrainer(model_params=params.get("polynomial"))
    ortho = poly_trainer.fit_orthogonal(df)
    raw = poly_trainer.fit_raw(df)
    bands = poly_trainer.predict_bands(ortho, age_grid)
    plots.plot_fit_with_bands(
        df["age"], df["wage"], bands, "age", fig_dir / "wage_poly4.png",
        title=f"Degree-{poly_trainer.model_params['degree']} polynomial", ylabel="wage",
    )
    basis_gap = float(np.max(np.abs(np.asarray(ortho.fittedvalues) - np.asarray(raw.fittedvalues))))
    print(f"[INFO] Max |orthogonal - raw| fitted difference: {basis_gap:.3e}")
    plots.plot_fitted_comparison(ortho.fittedvalues, raw.fittedvalues, fig_dir / "wage_poly_basis.png")
    metrics["poly_r2"] = ortho.rsquared
    metrics["poly_basis_max_gap"] = basis_gap

    poly_trainer.compare_nested(df)
    poly_trainer.compare_education_models(df)

    logit = poly_trainer.fit_logistic(df)
    prob_bands = poly_trainer.predict_probability_bands(logit, age_grid)
    plots.plot_probability_bands(
        df["age"], df["high_earner"], prob_bands, "age", fig_dir / "wage_logistic_poly.png",
        title="Pr(high earner), logistic polynomial", seed=params.get("seed", DEFAULT_SEED),
    )
    metrics["logistic_poly_deviance"] = logit.deviance

    print(poly_trainer.cut_counts(df))
    step, edges = poly_trainer.fit_step_function(df)
    metrics["step_r2"] = step.rsquared

    # 2) Splines y regresión local
    _section("Splines and local regression")
    spline_trainer = SplineModelTrainer(model_params=params.get("spline"))
    regression_spline = spline_trainer.fit_regression_spline(df)
    natural_spline = spline_trainer.fit_natural_spline(df)
    spline_bands = spline_trainer.predict_bands(regression_spline, age_grid)
    plots.plot_curves(
        df["age"], df["wage"], age_grid,
        {
            "cubic spline": spline_bands["fit"],
            "natural spline": spline_trainer.predict_bands(natural_spline, age_grid)["fit"],
            "step function": poly_trainer.predict_step(step, edges, age_grid),
        },
        fig_dir / "wage_splines.png",
        title="Regression splines", xlabel="age", ylabel="wage",
        bands={"cubic spline": spline_bands},
    )

    smooth_fixed = spline_trainer.fit_smoothing_spline(
        df["age"], df["wage"], dof=spline_trainer.model_params["smoothing_df"]
    )
    smooth_gcv = spline_trainer.fit_smoothing_spline(df["age"], df["wage"])
    plots.plot_curves(
        df["age"], df["wage"], age_grid,
        {
            f"{smooth_fixed.df:.0f} df": smooth_fixed.predict(age_grid),
            f"{smooth_gcv.df:.1f} df (GCV)": smooth_gcv.predict(age_grid),
        },
        fig_dir / "wage_smoothing_spline.png",
        title="Smoothing spline", xlabel="age", ylabel="wage",
    )
    metrics["smoothing_spline_gcv_df"] = smooth_gcv.df

    loess_curves = {
        f"span={span}": spline_trainer.fit_local_regression(df["age"], df["wage"], age_grid, span)
        for span in spline_trainer.model_params["loess_spans"]
    }
    plots.plot_curves(
        df["age"], df["wage"], age_grid, loess_curves, fig_dir / "wage_local_regression.png",
        title="Local regression", xlabel="age", ylabel="wage",
    )

    # 3) GAMs
    _section("Generalized additive models")
    gam_trainer = GAMTrainer(model_params=params.get("gam"))
    spline_gam = gam_trainer.fit_spline_gam(df)
    plots.plot_partial_effects(
        {
            "year": gam_trainer.partial_effects(spline_gam, df, "year", year_grid),
            "age": gam_trainer.partial_effects(spline_gam, df, "age", age_grid),
        },
        fig_dir / "wage_gam_least_squares.png",
        title="GAM with natural splines (least squares)",
    )
    anova = gam_trainer.compare_gams(df)
    metrics["gam_m2_vs_m1_pvalue"] = anova["Pr(>F)"].iloc[1]
    metrics["gam_m3_vs_m2_pvalue"] = anova["Pr(>F)"].iloc[2]

    penalized = gam_trainer.fit_penalized_gam(df)
    plots.plot_partial_effects(
        {"year": gam_trainer.smooth_bands(penalized, 0), "age": gam_trainer.smooth_bands(penalized, 1)},
        fig_dir / "wage_gam_penalized.png",
        title="Penalized B-spline GAM",
    )
    metrics["penalized_gam_deviance"] = penalized.deviance

    gam_trainer.education_crosstab(df)
    logistic_table, logistic_gam = gam_trainer.compare_logistic_gams(df)
    plots.plot_partial_effects(
        {"age": gam_trainer.smooth_bands(logistic_gam, 0)},
        fig_dir / "wage_gam_logistic.png",
        title="Logistic GAM: smooth in age (logit scale)",
    )
    metrics["logistic_gam_year_pvalue"] = logistic_table["p_value"].iloc[1]

    for name, trainer in [("polynomial", poly_trainer), ("spline", spline_trainer), ("gam", gam_trainer)]:
        tracker.log_trainer_params(name, trainer)
    tracker.log_metrics(metrics)
    tracker.log_artifacts(fig_dir, artifact_path="figures")
    save_metrics(metrics, METRIC_PATHS["wage"])
    return metrics


def run_boston_walkthrough(
    df: pd.DataFrame,
    params: Optional[dict] = None,
    figures_dir: str = "reports/figures",
    tracker: Optional[ExperimentTracker] = None,
) -> Dict[str, float]:
    """Random forest, variable-subsample sweep and boosting on Boston."""
    params = params or {}
    tracker = tracker or ExperimentTracker(use_mlflow=False)
    fig_dir = Path(figures_dir)
    target = BOSTON_CONFIG.target
    metrics: Dict[str, float] = {}

    data = df[BOSTON_CONFIG.features + [target]]
    seed = params.get("seed", DEFAULT_SEED)
    train_size = params.get("train_size", 300)
    train_idx = sample_train_indices(len(data), train_size, seed=seed)
    train_df, test_df = split_by_indices(data, train_idx)
    X_train, y_train = build_feature_frame(train_df, BOSTON_CONFIG)
    X_test, y_test = build_feature_frame(test_df, BOSTON_CONFIG)
    print(f"[INFO] X_train {X_train.shape} | X_test {X_test.shape}")

    # 1) Random forest
    _section("Random forest")
    rf = RFTrainer(model_params=params.get("random_forest"), training_params=params.get("random_forest_training"))
    rf.train(X_train, y_train)
    rf_metrics = rf.evaluate(X_train, X_test, y_train, y_test)
    metrics.update({f"rf_{k}": v for k, v in rf_metrics.items()})

    sweep = rf.mtry_sweep(train_df, test_df, target)
    print(sweep.to_frame())
    plots.plot_error_curves(
        sweep.values,
        {"OOB": sweep.internal_errors, "Test": sweep.test_errors},
        fig_dir / "boston_rf_mtry.png",
        xlabel="max_features (mtry)", title="Random forest: OOB vs test error",
    )
    best_rf = float(np.min(sweep.test_errors))
    metrics["rf_sweep_best_mtry"] = sweep.best_value
    metrics["rf_sweep_best_test_mse"] = best_rf

    # 2) Boosting
    _section("Gradient boosting")
    boost = BoostingTrainer(model_params=params.get("boosting"), training_params=params.get("boosting_training"))
    boost.train(X_train, y_train)
    boost_metrics = boost.evaluate(X_train, X_test, y_train, y_test)
    metrics.update({f"boost_{k}": v for k, v in boost_metrics.items()})

    importance = boost.variable_importance()
    print(importance)
    plots.plot_variable_importance(importance, fig_dir / "boston_boost_importance.png")
    for feature in boost.training_params["pdp_features"]:
        pdp = boost.partial_dependence(X_train, feature)
        plots.plot_partial_dependence(pdp, fig_dir / f"boston_boost_pdp_{feature}.png")

    curve = boost.test_error_curve(X_test, y_test)
    plots.plot_error_curves(
        curve["n_trees"],
        {"Boosting test error": curve["test_error"].tolist()},
        fig_dir / "boston_boost_ntrees.png",
        xlabel="Number of trees", title="Boosting test error",
        hline=best_rf, hline_label="best random forest",
    )
    metrics["boost_curve_best_test_mse"] = float(curve["test_error"].min())

    tracker.log_params({"seed": seed, "train_size": train_size})
    tracker.log_trainer_params("random_forest", rf)
    tracker.log_trainer_params("boosting", boost)
    tracker.log_metrics(metrics)
    tracker.log_artifacts(fig_dir, artifact_path="figures")
    save_metrics(metrics, METRIC_PATHS["boston"])
    return metrics


WALKTHROUGHS = {
    "wage": run_wage_walkthrough,
    "boston": run_boston_walkthrough,
}


def load_params(params_path: str = "params.yaml") -> dict:
    """Read params.yaml; a missing file means every default applies."""
    if not os.path.exists(params_path):
        print(f"[WARN] {params_path} not found, using defaults.")
        return {}
    with open(params_path, "r") as f:
        return yaml.safe_load(f) or {}


def run_lab(lab: str, params: dict, seed=None,
            tracker: Optional[ExperimentTracker] = None) -> Dict[str, float]:
    """Load one lab's data and run its walkthrough inside a tracking run named after the lab."""
    if lab not in WALKTHROUGHS:
        raise ValueError(f"Unsupported lab '{lab}'. Use one of: {list(WALKTHROUGHS)}")
    tracker = tracker or ExperimentTracker(use_mlflow=False)
    data_cfg = params.get("data", {})
    figures_dir = params.get("reports", {}).get("figures_dir", "reports/figures")
    df = load_dataset(
        lab,
        cache_dir=data_cfg.get("cache_dir", "data/raw"),
        threshold=data_cfg.get("high_earner_threshold", HIGH_EARNER_THRESHOLD),
    )
    lab_params = seed_lab_params(lab, params.get(lab), seed)
    with tracker.start_run(run_name=lab):
        return WALKTHROUGHS[lab](df, lab_params, figures_dir=figures_dir, tracker=tracker)


def main(params_path="params.yaml", labs=None):
    P = load_params(params_path)
    env = load_env()
    seed = set_global_seed(env["SEED"])
    tracker = ExperimentTracker(env["EXPERIMENT_NAME"], env["MLFLOW_TRACKING_URI"], tags={"stage": env["RUN_STAGE"]})
    labs = labs or P.get("labs") or list(WALKTHROUGHS)
    results = {}
    for lab in labs:
        _section(f"Lab: {lab}")
        results[lab] = run_lab(lab, P, seed=seed, tracker=tracker)
    return results


if __name__ == "__main__":
    import argparse
    ap = argparse.ArgumentParser()
    ap.add_argument("--params", default="params.yaml")
    args = ap.parse_args()
    main(args.params)
