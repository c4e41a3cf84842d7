import os
import pandas as pd
import statsmodels.api as sm

# Catalogue entries (Rdatasets package/item) for each supported dataset.
DATASET_SOURCES = {
    "wage": {"package": "ISLR", "item": "Wage"},
    "boston": {"package": "MASS", "item": "Boston"},
}

EXPECTED_COLUMNS = {
    "wage": ["year", "age", "education", "wage"],
    "boston": [
        "crim", "zn", "indus", "chas", "nox", "rm", "age",
        "dis", "rad", "tax", "ptratio", "black", "lstat", "medv",
    ],
}


class DataLoader:
    """
    Handles loading, validation and light preprocessing of the Wage and
    Boston reference datasets.
    """

    def __init__(self, dataset: str, cache_dir: str = "data/raw"):
        """
        Initialize DataLoader for one of the catalogued datasets.
        """
        if dataset not in DATASET_SOURCES:
            raise ValueError(
                f"Unsupported dataset '{dataset}'. Use one of: {list(DATASET_SOURCES)}"
            )
        self.dataset = dataset
        self.cache_dir = cache_dir
        self.cache_path = os.path.join(cache_dir, f"{dataset}.csv")

    def fetch(self) -> pd.DataFrame:
        """
        Download the dataset from the Rdatasets catalogue through statsmodels.
        """
        source = DATASET_SOURCES[self.dataset]
        print(f"[INFO] Fetching {source['package']}::{source['item']} ...")
        df = sm.datasets.get_rdataset(source["item"], source["package"]).data
        return df.reset_index(drop=True)

    def load_data(self) -> pd.DataFrame:
        """
        Load dataset from the CSV cache (fetching it first if needed) and
        validate its columns.
        """
        if os.path.exists(self.cache_path):
            df = pd.read_csv(self.cache_path)
        else:
            df = self.fetch()
            os.makedirs(self.cache_dir, exist_ok=True)
            df.to_csv(self.cache_path, index=False)
            print(f"[INFO] Cached dataset to: {self.cache_path}")
        print(f"[INFO] Loaded {self.dataset}: Rows: {df.shape[0]}, Columns: {df.shape[1]}")

        missing_cols = [c for c in EXPECTED_COLUMNS[self.dataset] if c not in df.columns]
        if missing_cols:
            raise ValueError(f"Missing expected columns: {missing_cols}")

        print("[INFO] Column validation passed.")
        return df

    def preprocess(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Return a cleaned copy. Wage education labels are normalized to
        plain strings; Boston is used as is.
        """
        df = df.copy()
        if self.dataset == "wage":
            df["education"] = df["education"].astype(str).str.strip()
        return df

    def run(self) -> pd.DataFrame:
        """
        Execute load → preprocess.
        """
        return self.preprocess(self.load_data())
