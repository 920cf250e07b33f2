# tests/test_pipeline.py
from __future__ import annotations

import json
import math
from pathlib import Path

import numpy as np
import pytest

from tweet_sentiment.core.exceptions import InvalidInputError
from tweet_sentiment.core.types import LabeledExample
from tweet_sentiment.experiments.pipeline import (
    SAMPLE_BATCH,
    PipelineConfig,
    SentimentPipeline,
)
from tweet_sentiment.features.hashing import FeaturizerConfig
from tweet_sentiment.models.logistic_regression import (
    DEFAULT_PARAMS,
    HashedSdcaLogRegEstimator,
    create_lr_factory,
)
from tweet_sentiment.models.persistence import load_model
from tweet_sentiment.models.predictor import predict
from tweet_sentiment.models.sdca import SdcaConfig


def write_posts_csv(path: Path, posts) -> Path:
    lines = ["SentimentText,Sentiment"]
    for p in posts:
        text = p.text.replace('"', '""')
        lines.append(f'"{text}",{int(p.label)}')
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


# -------------------------------
# End-to-end
# -------------------------------
def test_lexical_overlap_drives_prediction():
    train = [
        LabeledExample("great buy bullish", True),
        LabeledExample("terrible crash bearish", False),
    ]
    pipeline = SentimentPipeline(PipelineConfig(model_path=None, results_dir=None))
    pipeline.train(train)
    assert pipeline.predict("bullish rally").probability > 0.5
    assert pipeline.predict("bearish rally").probability < 0.5


def test_run_writes_model_and_summary(tmp_path, posts):
    csv = write_posts_csv(tmp_path / "tweet_labelled.csv", posts)
    config = PipelineConfig(
        csv_path=csv,
        stratify=True,
        featurizer=FeaturizerConfig(n_features=2 ** 14),
        model_path=tmp_path / "model.zip",
        results_dir=tmp_path / "results",
    )
    pipeline = SentimentPipeline(config)
    summary = pipeline.run()

    assert summary["n_examples"] == len(posts)
    assert summary["n_test"] == 8
    assert summary["n_train"] == 32
    assert summary["metrics"]["accuracy"] == 1.0
    assert summary["metrics"]["auc"] == 1.0
    assert len(summary["batch_predictions"]) == len(SAMPLE_BATCH)
    assert [p["text"] for p in summary["batch_predictions"]] == SAMPLE_BATCH

    on_disk = json.loads((tmp_path / "results" / "experiment_summary.json").read_text(encoding="utf-8"))
    assert on_disk["metrics"]["f1"] == summary["metrics"]["f1"]

    model, vocab = load_model(tmp_path / "model.zip")
    assert model == pipeline.model
    assert predict(model, vocab, "bullish breakout").probability == pytest.approx(
        pipeline.predict("bullish breakout").probability
    )


def test_vocabulary_is_fit_on_training_split_only(posts):
    pipeline = SentimentPipeline(
        PipelineConfig(featurizer=FeaturizerConfig(n_features=2 ** 14), model_path=None, results_dir=None)
    )
    pipeline.load_data(posts)
    train, test = pipeline.split()
    pipeline.train()
    assert pipeline.vocab.n_documents == len(train)
    metrics = pipeline.evaluate()
    assert metrics.n_examples == len(test)


def test_run_with_plots(tmp_path, posts):
    config = PipelineConfig(
        stratify=True,
        featurizer=FeaturizerConfig(n_features=2 ** 12),
        model_path=None,
        results_dir=tmp_path,
        plots=True,
    )
    summary = SentimentPipeline(config).run(examples=posts)
    for p in summary["plots"]:
        assert Path(p).exists()
    assert "model_path" not in summary


def test_pipeline_errors():
    pipeline = SentimentPipeline(PipelineConfig(model_path=None, results_dir=None))
    with pytest.raises(InvalidInputError):
        pipeline.load_data()
    with pytest.raises(InvalidInputError):
        pipeline.load_data([])
    with pytest.raises(InvalidInputError):
        pipeline.predict("bullish")


# -------------------------------
# Estimator wrapper
# -------------------------------
def test_estimator_fit_predict(posts):
    texts = [p.text for p in posts]
    labels = [p.label for p in posts]
    est = create_lr_factory({"n_features": 2 ** 12})({"max_iterations": 50})
    assert isinstance(est, HashedSdcaLogRegEstimator)
    assert est.p["max_iterations"] == 50
    assert est.p["l2_regularization"] == DEFAULT_PARAMS["l2_regularization"]

    est.fit(texts, labels)
    proba = est.predict_proba(texts)
    assert proba.shape == (len(texts), 2)
    assert np.allclose(proba.sum(axis=1), 1.0)
    assert list(est.predict(texts)) == labels
    assert est.evaluate(texts, labels).accuracy == 1.0


def test_estimator_rejects_unknown_params_and_unfitted_use():
    with pytest.raises(InvalidInputError):
        HashedSdcaLogRegEstimator(C=1.0)
    with pytest.raises(InvalidInputError):
        HashedSdcaLogRegEstimator().predict(["bullish"])


def test_summary_is_json_serialisable(posts):
    config = PipelineConfig(
        stratify=True, featurizer=FeaturizerConfig(n_features=2 ** 12), model_path=None, results_dir=None
    )
    summary = SentimentPipeline(config).run(examples=posts)
    text = json.dumps(summary)
    assert not math.isnan(json.loads(text)["metrics"]["accuracy"])


def test_default_params_follow_config_defaults():
    assert DEFAULT_PARAMS == {**FeaturizerConfig().to_dict(), **SdcaConfig().to_dict()}
    est = HashedSdcaLogRegEstimator()
    assert est.featurizer.config == FeaturizerConfig()
    assert est.trainer.config == SdcaConfig()


def test_pipeline_trains_through_the_estimator(posts):
    config = PipelineConfig(
        featurizer=FeaturizerConfig(n_features=2 ** 12),
        sdca=SdcaConfig(l2_regularization=1e-3, max_iterations=30),
        stratify=True,
        model_path=None,
        results_dir=None,
    )
    pipeline = SentimentPipeline(config)
    assert isinstance(pipeline.estimator, HashedSdcaLogRegEstimator)
    assert pipeline.estimator.featurizer.config == config.featurizer
    assert pipeline.estimator.trainer.config == config.sdca

    pipeline.load_data(posts)
    pipeline.split()
    model = pipeline.train()
    assert model is pipeline.estimator.model
    assert pipeline.vocab is pipeline.estimator.vocab
    assert pipeline.estimator.trainer.history_

    texts = [e.text for e in pipeline.test_set]
    labels = [e.label for e in pipeline.test_set]
    assert pipeline.evaluate() == pipeline.estimator.evaluate(texts, labels)
