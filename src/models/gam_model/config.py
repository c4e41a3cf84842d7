MODEL_CONFIG = {
    "year_df": 4,
    "age_df": 5,
    # penalized B-spline smoothers (statsmodels GLMGam)
    "spline_df": [4, 6],
    "spline_degree": [3, 3],
    "alpha": [10.0, 10.0],
}

TRAINING_CONFIG = {
    "target": "wage",
    "binary_target": "high_earner",
    "excluded_education": "1. < HS Grad",
}
