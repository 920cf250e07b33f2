# tests/test_predictor.py
from __future__ import annotations

import numpy as np
import pytest

from tweet_sentiment.core.exceptions import InvalidInputError
from tweet_sentiment.core.types import Model
from tweet_sentiment.features.hashing import FeaturizerConfig, TextFeaturizer
from tweet_sentiment.models.predictor import predict, predict_batch
from tweet_sentiment.models.sdca import SdcaLogisticRegression


@pytest.fixture
def fitted():
    texts = ["great buy bullish", "terrible crash bearish"]
    labels = [True, False]
    featurizer = TextFeaturizer(FeaturizerConfig(n_features=2 ** 16))
    vocab, vectors = featurizer.fit_transform(texts)
    model = SdcaLogisticRegression().fit(vectors, labels)
    return model, vocab


def test_single_prediction_fields(fitted):
    model, vocab = fitted
    p = predict(model, vocab, "bullish rally")
    assert p.text == "bullish rally"
    assert 0.0 < p.probability < 1.0
    assert p.label == (p.probability >= 0.5)
    assert p.sentiment in ("Positive", "Negative")


def test_batch_matches_input_order(fitted):
    model, vocab = fitted
    texts = ["great buy", "no overlap at all", "terrible crash"]
    batch = predict_batch(model, vocab, texts, n_jobs=3)

    assert [p.text for p in batch] == texts
    assert [p.probability for p in batch] == [predict(model, vocab, t).probability for t in texts]
    # known-distinct outputs: positive words > unseen words > negative words
    assert batch[0].probability > batch[1].probability > batch[2].probability
    assert batch[0].label and not batch[2].label


def test_batch_sequential_and_threaded_agree(fitted):
    model, vocab = fitted
    texts = [f"post {i} {'bullish' if i % 2 else 'bearish'}" for i in range(20)]
    assert predict_batch(model, vocab, texts, n_jobs=1) == predict_batch(model, vocab, texts, n_jobs=4)


def test_batch_does_not_mutate_model_or_vocab(fitted):
    model, vocab = fitted
    weights_before = model.weights.copy()
    idf_before = vocab.idf.copy()
    predict_batch(model, vocab, ["great buy", "terrible crash", ""], n_jobs=2)
    assert np.array_equal(model.weights, weights_before)
    assert np.array_equal(vocab.idf, idf_before)


def test_empty_batch_and_empty_text(fitted):
    model, vocab = fitted
    assert predict_batch(model, vocab, []) == []
    p = predict(model, vocab, "")
    # no features: probability comes from the bias alone
    assert p.score == pytest.approx(model.bias)


def test_dimension_mismatch_rejected(fitted):
    _, vocab = fitted
    other = Model(weights=np.zeros(8), bias=0.0)
    with pytest.raises(InvalidInputError):
        predict(other, vocab, "bullish")
    with pytest.raises(InvalidInputError):
        predict_batch(other, vocab, ["bullish"])
