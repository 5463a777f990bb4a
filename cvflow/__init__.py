from cvflow.errors import CVFlowError, InvalidParameter, EmptyFold, CellFailure, FitFailure, ScoreFailure
from cvflow.folds import assign_folds, assign_stratified_folds
from cvflow.evaluate import evaluate, EvaluationReport, FoldResult
from cvflow.metrics import rmse, accuracy, roc_auc, get_scorer
from cvflow.model import ModelSpec, fit_candidate, predict_candidate

__version__ = "0.1.0"
