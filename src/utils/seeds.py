# src/utils/seeds.py

"""
One seed per run: it drives the global generators, the Boston train/test draw
and the random_state of every tree ensemble that params.yaml leaves unset.
"""

import os
import random
import numpy as np

DEFAULT_SEED = 101

# Lab sections whose estimators take a random_state
SEEDED_ESTIMATORS = {
    "boston": ("random_forest", "boosting"),
}


def resolve_seed(seed=None) -> int:
    """Explicit seed first, then the SEED environment variable, then DEFAULT_SEED."""
    if seed is None:
        seed = os.getenv("SEED", DEFAULT_SEED)
    return int(seed)


def set_global_seed(seed=None) -> int:
    """
    Seed the random number generators used in the project.

    Returns the seed actually used so it can be logged with the run.
    """
    seed = resolve_seed(seed)
    random.seed(seed)
    np.random.seed(seed)
    return seed


def seed_lab_params(lab: str, lab_params=None, seed=None) -> dict:
    """
    Copy of one lab's params where ``seed`` and each estimator's
    ``random_state`` fall back to the run seed. Values set in params.yaml win.
    """
    seed = resolve_seed(seed)
    seeded = dict(lab_params or {})
    seeded.setdefault("seed", seed)
    for section in SEEDED_ESTIMATORS.get(lab, ()):
        seeded[section] = {"random_state": seed, **(seeded.get(section) or {})}
    return seeded
