# src/main.py
import argparse

import matplotlib

matplotlib.use("Agg")

from src.pipelines.experiment_pipelines import WALKTHROUGHS, load_params, run_lab
from src.utils.env import load_env
from src.utils.seeds import set_global_seed
from src.utils.tracking import ExperimentTracker


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run the Wage and Boston walkthroughs.")
    parser.add_argument("--lab", type=str, default="all",
                        choices=["all"] + list(WALKTHROUGHS))
    parser.add_argument("--params", type=str, default="params.yaml")
    args = parser.parse_args(argv)

    env = load_env()
    seed = set_global_seed(env["SEED"])
    print(f"[INFO] Experiment: {env['EXPERIMENT_NAME']} | stage: {env['RUN_STAGE']} | seed: {seed}")

    cfg = load_params(args.params)
    cfg.setdefault("data", {}).setdefault("cache_dir", env["DATA_DIR"])

    labs = (cfg.get("labs") or list(WALKTHROUGHS)) if args.lab == "all" else [args.lab]
    tracker = ExperimentTracker(env["EXPERIMENT_NAME"], env["MLFLOW_TRACKING_URI"],
                                tags={"stage": env["RUN_STAGE"]})
    summary = {}
    for lab in labs:
        print("=" * 70); print(f"[PIPELINE] Lab: {lab}"); print("=" * 70)
        summary[lab] = run_lab(lab, cfg, seed=seed, tracker=tracker)

    print("=" * 70); print("[INFO] Pipeline Summary"); print("=" * 70)
    for lab, metrics in summary.items():
        print(f"{lab}: {len(metrics)} metrics")
    print("\n[INFO] ✅ Full pipeline executed successfully!")
    return summary


if __name__ == "__main__":
    main()
