MODEL_CONFIG = {
    "n_estimators": 500,
    "max_features": 1 / 3,   # p/3 candidate variables per split for regression
    "min_samples_leaf": 5,
    "bootstrap": True,
    "oob_score": True,
    "random_state": 101,
    "n_jobs": -1
}

TRAINING_CONFIG = {
    "cv_folds": 5,
    "sweep_n_estimators": 400,
}
