#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Data model for the sentiment pipeline.

All values here are immutable once built:
- LabeledExample: one (text, label) record from the loader
- FeatureVector: sparse hashed features of one text
- Model: fitted linear weights + bias
- Metrics: evaluation results on held-out data
- Prediction: classifier output for one text
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Sequence, Tuple, Union

import numpy as np
from scipy import sparse
from scipy.special import expit

from .exceptions import InvalidInputError


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class LabeledExample:
    text: str
    label: bool


@dataclass(frozen=True, eq=False)
class FeatureVector:
    """
    Sparse feature vector of dimensionality ``n_features``.

    ``indices`` are sorted and unique, ``values`` holds the matching weights.
    """

    indices: np.ndarray
    values: np.ndarray
    n_features: int

    def __post_init__(self):
        indices = np.ascontiguousarray(self.indices, dtype=np.int64)
        values = np.ascontiguousarray(self.values, dtype=np.float64)
        if indices.shape != values.shape:
            raise ValueError("indices and values must have the same shape")
        object.__setattr__(self, "indices", _readonly(indices))
        object.__setattr__(self, "values", _readonly(values))

    @classmethod
    def zeros(cls, n_features: int) -> "FeatureVector":
        return cls(np.empty(0, dtype=np.int64), np.empty(0, dtype=np.float64), n_features)

    @property
    def nnz(self) -> int:
        return int(self.indices.size)

    def dot(self, weights: np.ndarray) -> float:
        return float(np.dot(weights[self.indices], self.values))

    def to_dense(self) -> np.ndarray:
        out = np.zeros(self.n_features, dtype=np.float64)
        out[self.indices] = self.values
        return out

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FeatureVector):
            return NotImplemented
        return (
            self.n_features == other.n_features
            and np.array_equal(self.indices, other.indices)
            and np.array_equal(self.values, other.values)
        )


FeatureInput = Union[sparse.spmatrix, Sequence[FeatureVector]]


def as_csr(features: FeatureInput, n_features: int) -> sparse.csr_matrix:
    """Stack feature vectors (or accept a sparse matrix) as an n x D CSR matrix."""
    if sparse.issparse(features):
        X = sparse.csr_matrix(features, dtype=np.float64, copy=True)
        if X.shape[1] != n_features:
            raise InvalidInputError(
                f"feature matrix has {X.shape[1]} columns, expected {n_features}"
            )
        return X

    features = list(features)
    indptr = np.zeros(len(features) + 1, dtype=np.int64)
    for i, fv in enumerate(features):
        if fv.n_features != n_features:
            raise InvalidInputError(
                f"feature vector {i} has dimension {fv.n_features}, expected {n_features}"
            )
        indptr[i + 1] = indptr[i] + fv.nnz
    if features:
        indices = np.concatenate([fv.indices for fv in features])
        data = np.concatenate([fv.values for fv in features])
    else:
        indices = np.empty(0, dtype=np.int64)
        data = np.empty(0, dtype=np.float64)
    return sparse.csr_matrix((data, indices, indptr), shape=(len(features), n_features))


@dataclass(frozen=True, eq=False)
class Model:
    """
    Fitted linear classifier: ``p(positive | x) = sigmoid(w . x + b)``.

    ``n_iterations``, ``duality_gap`` and ``converged`` describe the SDCA run
    that produced the weights. When the run did not converge they refer to the
    pass whose weights were kept.
    """

    weights: np.ndarray
    bias: float
    n_iterations: int = 0
    duality_gap: float = float("nan")
    converged: bool = False

    def __post_init__(self):
        weights = np.array(self.weights, dtype=np.float64, copy=True)
        object.__setattr__(self, "weights", _readonly(weights))
        object.__setattr__(self, "bias", float(self.bias))

    @property
    def n_features(self) -> int:
        return int(self.weights.shape[0])

    def decision_function(self, features: FeatureInput) -> np.ndarray:
        X = as_csr(features, self.n_features)
        return np.asarray(X @ self.weights, dtype=np.float64) + self.bias

    def predict_proba(self, features: FeatureInput) -> np.ndarray:
        return expit(self.decision_function(features))

    def score_one(self, vector: FeatureVector) -> float:
        return vector.dot(self.weights) + self.bias

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Model):
            return NotImplemented
        return self.bias == other.bias and np.array_equal(self.weights, other.weights)


@dataclass(frozen=True)
class Metrics:
    accuracy: float
    auc: float
    f1: float
    positive_precision: float = 0.0
    positive_recall: float = 0.0
    negative_precision: float = 0.0
    negative_recall: float = 0.0
    log_loss: float = float("nan")
    log_loss_reduction: float = float("nan")
    entropy: float = float("nan")
    confusion_matrix: Tuple[Tuple[int, ...], ...] = ()
    n_examples: int = 0

    def __post_init__(self):
        cm = tuple(tuple(int(v) for v in row) for row in self.confusion_matrix)
        object.__setattr__(self, "confusion_matrix", cm)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Prediction:
    text: str
    label: bool
    probability: float
    score: float

    @property
    def sentiment(self) -> str:
        return "Positive" if self.label else "Negative"

    def to_dict(self) -> Dict[str, Any]:
        return {**asdict(self), "sentiment": self.sentiment}
