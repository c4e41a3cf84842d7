# src/models/boosting_model/config.py

MODEL_CONFIG = {
    "n_estimators": 10000,
    "learning_rate": 0.01,
    "max_depth": 4,
    "subsample": 0.5,
    "loss": "squared_error",
    "random_state": 101,
}

TRAINING_CONFIG = {
    "n_trees_start": 100,
    "n_trees_step": 100,
    "pdp_features": ["lstat", "rm"],
    "pdp_grid_resolution": 50,
}
