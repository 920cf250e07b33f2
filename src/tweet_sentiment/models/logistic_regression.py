# logistic_regression.py
from typing import Any, Dict, List, Optional

import numpy as np

from ..core.exceptions import InvalidInputError
from ..core.metrics import evaluate
from ..core.types import FeatureVector, Metrics, Model
from ..features.hashing import FeaturizerConfig, TextFeaturizer, Vocabulary
from .sdca import SdcaConfig, SdcaLogisticRegression

_FEATURIZER_KEYS = tuple(FeaturizerConfig().to_dict())
_SDCA_KEYS = tuple(SdcaConfig().to_dict())

# The one fixed pipeline configuration: hashed word 1-2 grams + tf-idf + SDCA
DEFAULT_PARAMS: Dict[str, Any] = {**FeaturizerConfig().to_dict(), **SdcaConfig().to_dict()}


class HashedSdcaLogRegEstimator:
    """Hashed n-gram featurizer + SDCA logistic regression as an sklearn-style estimator.

    params (anything missing falls back to DEFAULT_PARAMS):
      - n_features, ngram_range, char_ngram_range, use_idf, norm, hash_seed, n_jobs: featurizer
      - l2_regularization, max_iterations, convergence_tolerance, seed, bias: SDCA trainer
    """

    def __init__(self, **params: Any):
        unknown = set(params) - set(DEFAULT_PARAMS)
        if unknown:
            raise InvalidInputError(f"Unknown estimator params: {sorted(unknown)}")
        self.p = {**DEFAULT_PARAMS, **params}
        self.featurizer = TextFeaturizer(FeaturizerConfig(**{k: self.p[k] for k in _FEATURIZER_KEYS}))
        self.trainer = SdcaLogisticRegression(SdcaConfig(**{k: self.p[k] for k in _SDCA_KEYS}))
        self.vocab: Optional[Vocabulary] = None
        self.model: Optional[Model] = None

    @classmethod
    def from_configs(cls, featurizer: FeaturizerConfig, sdca: SdcaConfig) -> "HashedSdcaLogRegEstimator":
        return cls(**featurizer.to_dict(), **sdca.to_dict())

    def _features(self, texts) -> List[FeatureVector]:
        if self.vocab is None or self.model is None:
            raise InvalidInputError("Estimator is not fitted yet; call fit() first")
        return self.featurizer.transform_batch(list(texts), self.vocab)

    def fit(self, texts, y):
        # the vocabulary only ever sees training text
        self.vocab, vectors = self.featurizer.fit_transform(list(texts))
        self.model = self.trainer.fit(vectors, list(y), n_features=self.vocab.n_features)
        return self

    def decision_function(self, texts) -> np.ndarray:
        return self.model.decision_function(self._features(texts))

    def predict_proba(self, texts) -> np.ndarray:
        p1 = self.model.predict_proba(self._features(texts))
        return np.vstack([1 - p1, p1]).T

    def predict(self, texts) -> np.ndarray:
        return self.predict_proba(texts)[:, 1] >= 0.5

    def evaluate(self, texts, y, threshold: float = 0.5) -> Metrics:
        return evaluate(self.model, self._features(texts), list(y), threshold=threshold)


def create_lr_factory(defaults: Optional[Dict[str, Any]] = None):
    defaults = dict(defaults or {})

    def factory(params: Optional[Dict[str, Any]] = None):
        cfg = {**defaults, **(params or {})}
        return HashedSdcaLogRegEstimator(**cfg)

    return factory
