"""
Prediction pipeline.
Loads the saved model, predicts on a CSV, writes a predictions CSV.
"""
import pickle
from pathlib import Path

import pandas as pd

from cvflow.config import DATASET_CSV, MODEL_ARTIFACT_DIR, PREDICTIONS_DIR
from cvflow.data import load_dataset
from cvflow.model import predict_candidate
from cvflow.train import MODEL_FILE, ARTIFACTS_FILE


def run_predict_pipeline(
    input_path=DATASET_CSV,
    output_name: str = "predictions.csv",
    artifact_dir=MODEL_ARTIFACT_DIR,
    output_dir=PREDICTIONS_DIR,
) -> str:
    """
    Load data, predict with the saved model, write predictions.
    Returns path to written predictions file.
    """
    artifact_dir = Path(artifact_dir)
    artifacts_path = artifact_dir / ARTIFACTS_FILE
    model_path = artifact_dir / MODEL_FILE
    if not artifacts_path.exists() or not model_path.exists():
        raise FileNotFoundError(
            f"Model artifacts not found. Run train.py first.\n"
            f"Expected: {model_path} and {artifacts_path}"
        )

    with open(model_path, "rb") as f:
        model = pickle.load(f)
    with open(artifacts_path, "rb") as f:
        artifacts = pickle.load(f)

    target_col = artifacts["target_col"]
    id_col = artifacts["id_col"]

    df = load_dataset(input_path)
    ids = df[id_col].values if id_col in df.columns else df.index.values

    preds = predict_candidate(model, df, target_col=target_col)

    predictions = pd.DataFrame({
        id_col: ids,
        target_col: preds,
    })
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    out_path = output_dir / output_name
    predictions.to_csv(out_path, index=False)
    print(f"Predictions written to {out_path} ({len(predictions)} rows)")
    return str(out_path)


if __name__ == "__main__":
    run_predict_pipeline()
