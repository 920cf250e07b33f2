# Core components for sentiment classification

from .exceptions import InvalidInputError, NonConvergenceWarning, SentimentError, TrainingError
from .metrics import (
    accuracy_score,
    precision_score,
    recall_score,
    f1_score,
    confusion_matrix,
    roc_auc_score,
    roc_curve,
    log_loss,
    classification_report,
    evaluate,
)
from .splitting import train_test_split
from .types import FeatureVector, LabeledExample, Metrics, Model, Prediction

__all__ = [
    "InvalidInputError",
    "NonConvergenceWarning",
    "SentimentError",
    "TrainingError",
    "accuracy_score",
    "precision_score",
    "recall_score",
    "f1_score",
    "confusion_matrix",
    "roc_auc_score",
    "roc_curve",
    "log_loss",
    "classification_report",
    "evaluate",
    "train_test_split",
    "FeatureVector",
    "LabeledExample",
    "Metrics",
    "Model",
    "Prediction",
]
