# src/utils/env.py
from dotenv import load_dotenv
from pathlib import Path
import os

def load_env():
    """
    Load environment variables from a .env file (if present) and return the
    settings used by the walkthroughs.
    """
    dotenv_path = Path(".") / ".env"
    if dotenv_path.exists():
        load_dotenv(dotenv_path)
        print("[INFO] Loaded .env file.")
    else:
        print("[INFO] No .env found, using system environment variables.")

    return {
        "ENV": os.getenv("ENV", "local"),
        "EXPERIMENT_NAME": os.getenv("EXPERIMENT_NAME", "islr-labs"),
        "DATA_DIR": os.getenv("DATA_DIR", "data/raw"),
        "MLFLOW_TRACKING_URI": os.getenv("MLFLOW_TRACKING_URI"),
        "SEED": int(os.getenv("SEED", 101)),
        "RUN_STAGE": os.getenv("RUN_STAGE", "dev"),
    }
