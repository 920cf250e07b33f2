# predictor.py
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List

from scipy.special import expit

from ..core.exceptions import InvalidInputError
from ..core.types import Model, Prediction
from ..features.hashing import Vocabulary, transform


def _check_compatible(model: Model, vocab: Vocabulary) -> None:
    if model.n_features != vocab.n_features:
        raise InvalidInputError(
            f"model has {model.n_features} weights but vocabulary hashes into "
            f"{vocab.n_features} buckets"
        )


def _predict_one(model: Model, vocab: Vocabulary, text: str, threshold: float) -> Prediction:
    score = model.score_one(transform(text, vocab))
    prob = float(expit(score))
    return Prediction(text=text, label=prob >= threshold, probability=prob, score=score)


def predict(model: Model, vocab: Vocabulary, text: str, threshold: float = 0.5) -> Prediction:
    """Classify a single text."""
    _check_compatible(model, vocab)
    return _predict_one(model, vocab, text, threshold)


def predict_batch(
    model: Model,
    vocab: Vocabulary,
    texts: Iterable[str],
    n_jobs: int = 1,
    threshold: float = 0.5,
) -> List[Prediction]:
    """
    Classify many texts, one Prediction per input in input order.

    Model and vocabulary are only read, so texts are featurized on a thread
    pool when n_jobs > 1.
    """
    _check_compatible(model, vocab)
    texts = list(texts)
    if n_jobs <= 1 or len(texts) < 2:
        return [_predict_one(model, vocab, t, threshold) for t in texts]
    with ThreadPoolExecutor(max_workers=n_jobs) as pool:
        return list(pool.map(lambda t: _predict_one(model, vocab, t, threshold), texts))
