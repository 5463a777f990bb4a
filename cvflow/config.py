"""
Configuration for the model evaluation workflow.
Paths, fold/split settings, and constants.
"""
from pathlib import Path

# Project root (parent of cvflow/)
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Data paths (raw CSVs are read-only)
DATA_DIR = PROJECT_ROOT / "data"
DATASET_CSV = DATA_DIR / "dataset.csv"

# Output paths
PREDICTIONS_DIR = PROJECT_ROOT / "predictions"
MODEL_ARTIFACT_DIR = PROJECT_ROOT / "data" / "processed"
LOG_DIR = PROJECT_ROOT / "logs"

# Outcome and identifier columns
TARGET_COL = "outcome"
ID_COL = "id"

# Validation settings
TEST_SIZE = 0.25
RANDOM_STATE = 42
N_FOLDS = 10
N_JOBS = 1

LOG_LEVEL = "INFO"
