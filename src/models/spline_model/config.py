MODEL_CONFIG = {
    "knots": [25, 40, 60],
    "natural_df": 4,
    "smoothing_df": 16,
    "loess_spans": [0.2, 0.5],
    "band_multiplier": 2.0,
}

TRAINING_CONFIG = {
    "predictor": "age",
    "target": "wage",
    # log10 search range for the smoothing-spline penalty
    "lam_bounds": (-4.0, 9.0),
}
