#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
L2-regularised logistic regression trained with Stochastic Dual Coordinate Ascent.

Primal (labels y in {-1, +1}, score z = w.x + b, bias as a constant feature 1):

    P(w, b) = 1/n sum_i log(1 + exp(-y_i z_i)) + lambda/2 (|w|^2 + b^2)

Dual, with alpha_i = y_i beta_i and beta_i in [0, 1]:

    D(alpha) = 1/n sum_i H(beta_i) - lambda/2 (|w|^2 + b^2)
    w = 1/(lambda n) sum_i alpha_i x_i,  b = 1/(lambda n) sum_i alpha_i

where H is the binary entropy (natural log). Each coordinate step maximises D
over a single beta_i exactly, then applies the matching primal update
w += dalpha_i x_i / (lambda n). Training stops once the duality gap P - D drops
below ``convergence_tolerance * P`` or after ``max_iterations`` passes.
"""
from __future__ import annotations

import logging
import math
import warnings
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np
from scipy import sparse
from scipy.special import xlogy

from ..core.exceptions import InvalidInputError, NonConvergenceWarning, TrainingError
from ..core.types import FeatureInput, Model, as_csr

logger = logging.getLogger(__name__)

_NEWTON_MAX_STEPS = 60
_NEWTON_TOL = 1e-12


@dataclass(frozen=True)
class SdcaConfig:
    """
    Trainer settings.

    Attributes:
        l2_regularization: lambda, strength of the L2 penalty (> 0)
        max_iterations: cap on full passes over the training data
        convergence_tolerance: stop when duality gap <= tolerance * primal objective
        seed: seeds the per-pass example permutation
        bias: learn an intercept (constant feature of value 1)
    """

    l2_regularization: float = 1e-4
    max_iterations: int = 100
    convergence_tolerance: float = 1e-4
    seed: int = 42
    bias: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _sigmoid(t: float) -> float:
    if t >= 0:
        return 1.0 / (1.0 + math.exp(-t))
    e = math.exp(t)
    return e / (1.0 + e)


def solve_dual_coordinate(beta0: float, margin: float, q: float) -> float:
    """
    Exact maximiser of the dual objective along one coordinate.

    In logit space t = logit(beta) the optimum is the root of

        f(t) = t + margin + q (sigmoid(t) - beta0)

    with margin = y_i (w.x_i + b) at the current iterate and
    q = (|x_i|^2 + 1) / (lambda n). f is strictly increasing, and its root lies in
    [-margin - q (1 - beta0), -margin + q beta0]; Newton steps that leave the
    bracket fall back to bisection.
    """
    lo = -margin - q * (1.0 - beta0)
    hi = -margin + q * beta0
    # the q -> 0 solution, pulled into the bracket
    t = min(max(-margin, lo), hi)
    for _ in range(_NEWTON_MAX_STEPS):
        s = _sigmoid(t)
        f = t + margin + q * (s - beta0)
        if f > 0:
            hi = t
        else:
            lo = t
        step = f / (1.0 + q * s * (1.0 - s))
        t_new = t - step
        if not lo < t_new < hi:
            t_new = 0.5 * (lo + hi)
        if abs(t_new - t) <= _NEWTON_TOL * (1.0 + abs(t)):
            t = t_new
            break
        t = t_new
    return _sigmoid(t)


def _binary_entropy(beta: np.ndarray) -> np.ndarray:
    return -(xlogy(beta, beta) + xlogy(1.0 - beta, 1.0 - beta))


def _objectives(
    X: sparse.csr_matrix,
    y: np.ndarray,
    beta: np.ndarray,
    w: np.ndarray,
    b: float,
    lam: float,
) -> Tuple[float, float]:
    z = np.asarray(X @ w, dtype=np.float64) + b
    reg = 0.5 * lam * (float(np.dot(w, w)) + b * b)
    primal = float(np.mean(np.logaddexp(0.0, -y * z))) + reg
    dual = float(np.mean(_binary_entropy(beta))) - reg
    return primal, dual


class SdcaLogisticRegression:
    """Fits a Model on hashed feature vectors with SDCA."""

    def __init__(self, config: Optional[SdcaConfig] = None, **params: Any):
        if config is None:
            config = SdcaConfig(**params)
        elif params:
            raise TypeError("pass either an SdcaConfig or keyword params, not both")
        self.config = config
        self.history_: list = []

    def _validate(self, n_rows: int, n_labels: int) -> None:
        cfg = self.config
        if n_rows != n_labels:
            raise TrainingError(
                f"features and labels have mismatched lengths ({n_rows} vs {n_labels})"
            )
        if n_rows == 0:
            raise TrainingError("Cannot train on zero examples")
        if not cfg.l2_regularization > 0:
            raise TrainingError(f"l2_regularization must be > 0, got {cfg.l2_regularization}")
        if cfg.max_iterations < 1:
            raise TrainingError(f"max_iterations must be >= 1, got {cfg.max_iterations}")
        if cfg.convergence_tolerance < 0:
            raise TrainingError(
                f"convergence_tolerance must be >= 0, got {cfg.convergence_tolerance}"
            )

    def fit(
        self,
        features: FeatureInput,
        labels: Sequence[bool],
        n_features: Optional[int] = None,
    ) -> Model:
        """
        Train on feature vectors (or a CSR matrix) and boolean labels.

        Args:
            features: one FeatureVector per example, or an n x D sparse matrix
            labels: True for positive, False for negative
            n_features: dimensionality D; inferred from the features if omitted

        Returns:
            The fitted Model (best primal objective seen if not converged)
        """
        labels = list(labels)
        if not sparse.issparse(features):
            features = list(features)
        n_rows = features.shape[0] if sparse.issparse(features) else len(features)
        self._validate(n_rows, len(labels))

        if n_features is None:
            n_features = features.shape[1] if sparse.issparse(features) else features[0].n_features
        try:
            X = as_csr(features, n_features)
        except InvalidInputError as exc:
            raise TrainingError(str(exc)) from exc
        X.sum_duplicates()

        cfg = self.config
        n = X.shape[0]
        lam = float(cfg.l2_regularization)
        lam_n = lam * n
        bias_value = 1.0 if cfg.bias else 0.0
        y = np.where(np.asarray(labels).astype(bool), 1.0, -1.0)

        w = np.zeros(n_features, dtype=np.float64)
        b = 0.0
        beta = np.zeros(n, dtype=np.float64)
        sq_norms = np.asarray(X.multiply(X).sum(axis=1), dtype=np.float64).ravel() + bias_value
        indptr, indices, data = X.indptr, X.indices, X.data

        rng = np.random.default_rng(cfg.seed)
        # (primal, weights, bias, pass, gap) of the lowest primal seen
        best = (math.inf, w.copy(), b, 0, math.inf)
        gap = math.inf
        converged = False
        self.history_ = []
        n_passes = 0

        logger.info(
            "SDCA: %d examples, %d features, lambda=%g, max_iterations=%d",
            n, n_features, lam, cfg.max_iterations,
        )
        for n_passes in range(1, cfg.max_iterations + 1):
            for i in rng.permutation(n):
                lo_i, hi_i = indptr[i], indptr[i + 1]
                idx = indices[lo_i:hi_i]
                vals = data[lo_i:hi_i]
                yi = y[i]
                margin = yi * (float(np.dot(w[idx], vals)) + b * bias_value)
                q = sq_norms[i] / lam_n
                if q == 0.0:
                    # no features and no bias: closed form, and no primal change
                    beta[i] = _sigmoid(-margin)
                    continue
                new_beta = solve_dual_coordinate(beta[i], margin, q)
                delta = new_beta - beta[i]
                if delta == 0.0:
                    continue
                beta[i] = new_beta
                c = yi * delta / lam_n
                w[idx] += c * vals
                b += c * bias_value

            primal, dual = _objectives(X, y, beta, w, b, lam)
            gap = primal - dual
            self.history_.append({"iteration": n_passes, "primal": primal, "dual": dual, "gap": gap})
            logger.debug("pass %d: primal=%.6g dual=%.6g gap=%.3g", n_passes, primal, dual, gap)
            if primal < best[0]:
                best = (primal, w.copy(), b, n_passes, gap)
            if gap <= cfg.convergence_tolerance * max(primal, np.finfo(float).tiny):
                converged = True
                break

        if converged:
            logger.info("SDCA converged after %d passes (duality gap %.3g)", n_passes, gap)
            return Model(weights=w, bias=b, n_iterations=n_passes, duality_gap=gap, converged=True)

        msg = (
            f"SDCA did not converge within {cfg.max_iterations} passes "
            f"(duality gap {gap:.3g}, tolerance {cfg.convergence_tolerance:g}); "
            "returning the best model found"
        )
        logger.warning(msg)
        warnings.warn(msg, NonConvergenceWarning, stacklevel=2)
        _, best_w, best_b, best_pass, best_gap = best
        return Model(
            weights=best_w, bias=best_b, n_iterations=best_pass, duality_gap=best_gap, converged=False
        )
