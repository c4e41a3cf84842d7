MODEL_CONFIG = {
    "degree": 4,
    "logistic_degree": 3,
    "max_anova_degree": 5,
    "step_bins": 4,
    "band_multiplier": 2.0,
}

TRAINING_CONFIG = {
    "predictor": "age",
    "target": "wage",
    "binary_target": "high_earner",
}
