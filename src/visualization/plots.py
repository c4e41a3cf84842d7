"""
Figures for the walkthroughs. Every function draws one chart, saves it as a
PNG and returns the saved path.
"""

from pathlib import Path
from typing import Dict, Optional

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns


def _save(fig, out_path) -> str:
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return str(out_path)


def plot_fit_with_bands(x, y, bands: pd.DataFrame, grid_col: str, out_path,
                        title: str = "", xlabel: str = "", ylabel: str = "") -> str:
    """Scatter of the data, fitted curve and dashed ±2 se bands."""
    fig, ax = plt.subplots(figsize=(7, 5))
    ax.scatter(x, y, s=6, color="darkgrey", alpha=0.6)
    ax.plot(bands[grid_col], bands["fit"], color="blue", lw=2, label="fit")
    ax.plot(bands[grid_col], bands["lower"], color="blue", lw=1, ls="--", label="±2 se")
    ax.plot(bands[grid_col], bands["upper"], color="blue", lw=1, ls="--")
    ax.set_title(title)
    ax.set_xlabel(xlabel or grid_col)
    ax.set_ylabel(ylabel)
    ax.legend()
    return _save(fig, out_path)


def plot_probability_bands(x, y_binary, bands: pd.DataFrame, grid_col: str, out_path,
                           title: str = "", ylim: float = 0.2, seed: int = 0) -> str:
    """
    Probability curve with its bands. The binary response is drawn as a rug
    at 0 and at `ylim` (jittered along x).
    """
    rng = np.random.RandomState(seed)
    x = np.asarray(x, dtype=float)
    jitter = x + rng.uniform(-0.2, 0.2, size=x.size)
    fig, ax = plt.subplots(figsize=(7, 5))
    ax.plot(bands[grid_col], bands["fit"], color="blue", lw=2)
    ax.fill_between(bands[grid_col], bands["lower"], bands["upper"], color="blue", alpha=0.15)
    ax.scatter(jitter, np.asarray(y_binary) * ylim, marker="|", s=30, color="darkgrey")
    ax.set_ylim(0, ylim)
    ax.set_title(title)
    ax.set_xlabel(grid_col)
    ax.set_ylabel("Pr(high earner | x)")
    return _save(fig, out_path)


def plot_curves(x, y, grid, curves: Dict[str, np.ndarray], out_path,
                title: str = "", xlabel: str = "", ylabel: str = "",
                bands: Optional[Dict[str, pd.DataFrame]] = None) -> str:
    """Overlay of several fitted curves on the same scatter."""
    fig, ax = plt.subplots(figsize=(7, 5))
    ax.scatter(x, y, s=6, color="darkgrey", alpha=0.6)
    for label, values in curves.items():
        line, = ax.plot(grid, values, lw=2, label=label)
        if bands and label in bands:
            ax.plot(grid, bands[label]["lower"], color=line.get_color(), lw=1, ls="--")
            ax.plot(grid, bands[label]["upper"], color=line.get_color(), lw=1, ls="--")
    ax.set_title(title)
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    ax.legend()
    return _save(fig, out_path)


def plot_fitted_comparison(fitted_a, fitted_b, out_path,
                           label_a: str = "orthogonal", label_b: str = "raw") -> str:
    fig, ax = plt.subplots(figsize=(5, 5))
    ax.scatter(fitted_a, fitted_b, s=6)
    lims = [min(np.min(fitted_a), np.min(fitted_b)), max(np.max(fitted_a), np.max(fitted_b))]
    ax.plot(lims, lims, color="red", ls="--")
    ax.set_xlabel(f"fitted ({label_a})")
    ax.set_ylabel(f"fitted ({label_b})")
    ax.set_title("Same function, different basis")
    return _save(fig, out_path)


def plot_error_curves(values, curves: Dict[str, list], out_path,
                      xlabel: str = "", ylabel: str = "Mean Squared Error",
                      title: str = "", hline: Optional[float] = None,
                      hline_label: str = "reference") -> str:
    """Error against a swept hyperparameter; None entries are skipped."""
    fig, ax = plt.subplots(figsize=(7, 5))
    values = np.asarray(values)
    for label, errors in curves.items():
        errors = np.array([np.nan if e is None else e for e in errors], dtype=float)
        if np.all(np.isnan(errors)):
            continue
        ax.plot(values, errors, marker="o" if values.size <= 30 else None, ms=4, label=label)
    if hline is not None:
        ax.axhline(hline, color="red", ls="--", label=hline_label)
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    ax.set_title(title)
    ax.legend()
    ax.grid(True, linestyle="--", alpha=0.6)
    return _save(fig, out_path)


def plot_partial_effects(panels: Dict[str, pd.DataFrame], out_path, title: str = "") -> str:
    """One panel per smooth term; each frame holds x in its first column plus bands."""
    fig, axes = plt.subplots(1, len(panels), figsize=(5 * len(panels), 4), squeeze=False)
    for ax, (label, bands) in zip(axes[0], panels.items()):
        x = bands.iloc[:, 0]
        ax.plot(x, bands["fit"], color="blue", lw=2)
        ax.plot(x, bands["lower"], color="blue", lw=1, ls="--")
        ax.plot(x, bands["upper"], color="blue", lw=1, ls="--")
        ax.set_xlabel(label)
        ax.set_ylabel(f"f({label})")
    fig.suptitle(title)
    fig.tight_layout()
    return _save(fig, out_path)


def plot_variable_importance(importance: pd.Series, out_path,
                             title: str = "Relative influence") -> str:
    fig, ax = plt.subplots(figsize=(6, 5))
    sns.barplot(x=importance.values, y=importance.index, orient="h", color="steelblue", ax=ax)
    ax.set_xlabel("relative influence (%)")
    ax.set_title(title)
    return _save(fig, out_path)


def plot_partial_dependence(pdp: pd.DataFrame, out_path, title: str = "") -> str:
    feature = pdp.columns[0]
    fig, ax = plt.subplots(figsize=(6, 4))
    ax.plot(pdp[feature], pdp["partial_dependence"], lw=2)
    ax.set_xlabel(feature)
    ax.set_ylabel("partial dependence")
    ax.set_title(title or f"Partial dependence on {feature}")
    return _save(fig, out_path)
