# Model implementations for sentiment classification

from .sdca import SdcaConfig, SdcaLogisticRegression
from .predictor import predict, predict_batch
from .persistence import load_model, save_model
from .logistic_regression import HashedSdcaLogRegEstimator, create_lr_factory

__all__ = [
    "SdcaConfig",
    "SdcaLogisticRegression",
    "predict",
    "predict_batch",
    "load_model",
    "save_model",
    "HashedSdcaLogRegEstimator",
    "create_lr_factory",
]
