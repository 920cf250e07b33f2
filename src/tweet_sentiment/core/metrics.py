#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Binary Classification Metrics Implementation from Scratch

This module implements the evaluation metrics of the sentiment classifier
without using sklearn.metrics:
- Confusion Matrix
- Accuracy
- Precision / Recall / F1 for either class
- ROC curve and rank-based AUC (ties share their average rank)
- Log loss, log-loss reduction and prior entropy
- Classification Report
- evaluate(): all of the above for a fitted Model on held-out features
"""

import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np
from scipy.stats import rankdata

from .exceptions import InvalidInputError
from .types import FeatureInput, Metrics, Model

logger = logging.getLogger(__name__)

# keeps log() finite for probabilities of exactly 0 or 1
_EPS = 1e-15


def _as_bool_pair(y_true, y_pred) -> Tuple[np.ndarray, np.ndarray]:
    y_true = np.asarray(y_true).astype(bool)
    y_pred = np.asarray(y_pred).astype(bool)
    if y_true.shape != y_pred.shape:
        raise InvalidInputError("y_true and y_pred must have the same length")
    return y_true, y_pred


def confusion_matrix(y_true: Sequence[bool], y_pred: Sequence[bool]) -> np.ndarray:
    """
    Compute the 2x2 confusion matrix.

    Rows are true labels, columns predicted labels, ordered (negative, positive):
        [[tn, fp],
         [fn, tp]]
    """
    y_true, y_pred = _as_bool_pair(y_true, y_pred)
    cm = np.zeros((2, 2), dtype=int)
    for t, p in zip(y_true, y_pred):
        cm[int(t), int(p)] += 1
    return cm


def accuracy_score(y_true: Sequence[bool], y_pred: Sequence[bool]) -> float:
    y_true, y_pred = _as_bool_pair(y_true, y_pred)
    if len(y_true) == 0:
        return 0.0
    return float(np.sum(y_true == y_pred) / len(y_true))


def _safe_ratio(num: float, den: float, what: str) -> float:
    if den == 0:
        logger.warning("%s is ill-defined (no samples); reporting 0.0", what)
        return 0.0
    return float(num / den)


def precision_score(y_true, y_pred, positive: bool = True) -> float:
    """Precision of the ``positive`` class (True by default); 0.0 if nothing was predicted as it."""
    cm = confusion_matrix(y_true, y_pred)
    k = int(positive)
    tp = cm[k, k]
    return _safe_ratio(tp, np.sum(cm[:, k]), f"Precision for class {positive}")


def recall_score(y_true, y_pred, positive: bool = True) -> float:
    """Recall of the ``positive`` class (True by default); 0.0 if the class never occurs."""
    cm = confusion_matrix(y_true, y_pred)
    k = int(positive)
    tp = cm[k, k]
    return _safe_ratio(tp, np.sum(cm[k, :]), f"Recall for class {positive}")


def f1_score(y_true, y_pred, positive: bool = True) -> float:
    """
    F1 score of one class: harmonic mean of its precision and recall.

    Defined as 0.0 when precision and recall are both 0.
    """
    precision = precision_score(y_true, y_pred, positive)
    recall = recall_score(y_true, y_pred, positive)
    if precision + recall == 0:
        return 0.0
    return 2 * precision * recall / (precision + recall)


def roc_curve(y_true, y_score) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    ROC curve over every distinct score threshold.

    Returns:
        (fpr, tpr, thresholds), thresholds descending and starting at +inf
    """
    y_true = np.asarray(y_true).astype(bool)
    y_score = np.asarray(y_score, dtype=np.float64)
    if y_true.shape != y_score.shape:
        raise InvalidInputError("y_true and y_score must have the same length")

    order = np.argsort(-y_score, kind="mergesort")
    y_sorted = y_true[order]
    s_sorted = y_score[order]
    # last position of each group of equal scores
    distinct = np.where(np.diff(s_sorted))[0]
    cut = np.r_[distinct, y_sorted.size - 1]
    tps = np.cumsum(y_sorted)[cut]
    fps = (cut + 1) - tps

    n_pos = max(int(y_true.sum()), 1)
    n_neg = max(int((~y_true).sum()), 1)
    tpr = np.r_[0.0, tps / n_pos]
    fpr = np.r_[0.0, fps / n_neg]
    thresholds = np.r_[np.inf, s_sorted[cut]]
    return fpr, tpr, thresholds


def roc_auc_score(y_true, y_score) -> float:
    """
    Area under the ROC curve from ranks (Mann-Whitney U).

    Tied scores share their average rank, which gives the same area as the
    trapezoid rule over all distinct thresholds. NaN when only one class is present.
    """
    y_true = np.asarray(y_true).astype(bool)
    y_score = np.asarray(y_score, dtype=np.float64)
    if y_true.shape != y_score.shape:
        raise InvalidInputError("y_true and y_score must have the same length")

    n_pos = int(y_true.sum())
    n_neg = int(y_true.size - n_pos)
    if n_pos == 0 or n_neg == 0:
        logger.warning("AUC is undefined when only one class is present; reporting NaN")
        return float("nan")

    ranks = rankdata(y_score, method="average")
    u = ranks[y_true].sum() - n_pos * (n_pos + 1) / 2.0
    return float(u / (n_pos * n_neg))


def log_loss(y_true, y_prob) -> float:
    """Mean binary cross-entropy in bits."""
    y_true = np.asarray(y_true).astype(bool)
    p = np.clip(np.asarray(y_prob, dtype=np.float64), _EPS, 1.0 - _EPS)
    if y_true.shape != p.shape:
        raise InvalidInputError("y_true and y_prob must have the same length")
    if y_true.size == 0:
        return float("nan")
    losses = np.where(y_true, -np.log2(p), -np.log2(1.0 - p))
    return float(losses.mean())


def prior_entropy(y_true) -> float:
    """Entropy (bits) of the label distribution; the log loss of always predicting the prior."""
    y_true = np.asarray(y_true).astype(bool)
    if y_true.size == 0:
        return float("nan")
    prior = float(y_true.mean())
    if prior in (0.0, 1.0):
        return 0.0
    return -(prior * math.log2(prior) + (1.0 - prior) * math.log2(1.0 - prior))


def classification_report(
    y_true,
    y_pred,
    target_names: Optional[List[str]] = None,
    digits: int = 2,
) -> str:
    """
    Generate classification report from scratch.

    Args:
        y_true: Ground truth labels
        y_pred: Predicted labels
        target_names: Names for (negative, positive)
        digits: Number of decimal places to show

    Returns:
        Formatted classification report string
    """
    if target_names is None:
        target_names = ["Negative", "Positive"]
    if len(target_names) != 2:
        raise InvalidInputError("target_names must name exactly 2 classes")

    cm = confusion_matrix(y_true, y_pred)
    support = np.sum(cm, axis=1)
    precision = [precision_score(y_true, y_pred, c) for c in (False, True)]
    recall = [recall_score(y_true, y_pred, c) for c in (False, True)]
    f1 = [f1_score(y_true, y_pred, c) for c in (False, True)]

    width = max(max(len(name) for name in target_names), len("accuracy"))
    report = f"{'':>{width}} {'precision':>9} {'recall':>9} {'f1-score':>9} {'support':>9}\n"
    report += "\n"
    for name, p, r, f, s in zip(target_names, precision, recall, f1, support):
        report += f"{name:>{width}} {p:>9.{digits}f} {r:>9.{digits}f} {f:>9.{digits}f} {s:>9}\n"
    report += "\n"
    acc = accuracy_score(y_true, y_pred)
    report += f"{'accuracy':>{width}} {'':>9} {'':>9} {acc:>9.{digits}f} {np.sum(support):>9}\n"
    return report


def evaluate(
    model: Model,
    test_features: FeatureInput,
    test_labels: Sequence[bool],
    threshold: float = 0.5,
) -> Metrics:
    """
    Score a fitted model on held-out data.

    Args:
        model: fitted Model
        test_features: CSR matrix or sequence of FeatureVector, one row per example
        test_labels: ground-truth labels, same length as test_features
        threshold: probability at or above which a prediction is positive

    Returns:
        Metrics for the test set
    """
    y_true = np.asarray(list(test_labels)).astype(bool)
    n_rows = test_features.shape[0] if hasattr(test_features, "shape") else len(test_features)
    if n_rows == 0 or y_true.size == 0:
        raise InvalidInputError("Cannot evaluate on an empty test set")
    if n_rows != y_true.size:
        raise InvalidInputError(
            f"test_features has {n_rows} rows but test_labels has {y_true.size} entries"
        )

    proba = model.predict_proba(test_features)
    y_pred = proba >= threshold

    ll = log_loss(y_true, proba)
    ent = prior_entropy(y_true)
    llr = (ent - ll) / ent if ent > 0 else float("nan")

    metrics = Metrics(
        accuracy=accuracy_score(y_true, y_pred),
        auc=roc_auc_score(y_true, proba),
        f1=f1_score(y_true, y_pred, True),
        positive_precision=precision_score(y_true, y_pred, True),
        positive_recall=recall_score(y_true, y_pred, True),
        negative_precision=precision_score(y_true, y_pred, False),
        negative_recall=recall_score(y_true, y_pred, False),
        log_loss=ll,
        log_loss_reduction=llr,
        entropy=ent,
        confusion_matrix=confusion_matrix(y_true, y_pred),
        n_examples=int(y_true.size),
    )
    logger.info(
        "Evaluated %d examples: accuracy=%.4f auc=%.4f f1=%.4f",
        metrics.n_examples,
        metrics.accuracy,
        metrics.auc,
        metrics.f1,
    )
    return metrics
