#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Main Pipeline for Financial Post Sentiment Classification

This module orchestrates one end-to-end run:
1. Data loading
2. Deterministic train/test split
3. Featurizer fit (training split only) + SDCA training
4. Evaluation on the held-out split
5. Single and batch predictions on sample posts
6. Saving the model container and a JSON summary
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..core.exceptions import InvalidInputError
from ..core.splitting import train_test_split
from ..core.types import LabeledExample, Metrics, Model, Prediction
from ..features.hashing import FeaturizerConfig, Vocabulary
from ..models.logistic_regression import HashedSdcaLogRegEstimator
from ..models.persistence import save_model
from ..models.predictor import predict, predict_batch
from ..models.sdca import SdcaConfig
from ..prepare_dataset import LABEL_COL, TEXT_COL, load_labeled_csv

logger = logging.getLogger(__name__)

SAMPLE_STATEMENT = "$TSLA is going to the moon, these bears must have missed battery day!"
SAMPLE_BATCH = [
    "$SPY crossed below the 50ma, taking the whole market with it",
    "Bullish $WKHS, just keeps going up",
    "$SPY $QQQ net non-commercial NQ futs to -134,311 contracts, surpassing the peak "
    "bearish sentiment during and after the financial crisis...",
]


@dataclass
class PipelineConfig:
    csv_path: Optional[Path] = None
    text_col: str = TEXT_COL
    label_col: str = LABEL_COL
    clean_text: bool = False
    test_fraction: float = 0.2
    seed: int = 42
    stratify: bool = False
    featurizer: FeaturizerConfig = field(default_factory=FeaturizerConfig)
    sdca: SdcaConfig = field(default_factory=SdcaConfig)
    model_path: Optional[Path] = Path("model.zip")
    results_dir: Optional[Path] = Path("results")
    plots: bool = False

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["featurizer"] = self.featurizer.to_dict()
        for k in ("csv_path", "model_path", "results_dir"):
            d[k] = None if d[k] is None else str(d[k])
        return d


class SentimentPipeline:
    """
    End-to-end sentiment pipeline.

    The pipeline value is built explicitly and carries all state of one run;
    each step can also be called on its own (e.g. from tests with in-memory data).
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()
        self.estimator = HashedSdcaLogRegEstimator.from_configs(self.config.featurizer, self.config.sdca)
        self.examples: List[LabeledExample] = []
        self.train_set: List[LabeledExample] = []
        self.test_set: List[LabeledExample] = []
        self.metrics: Optional[Metrics] = None

    @property
    def vocab(self) -> Optional[Vocabulary]:
        return self.estimator.vocab

    @property
    def model(self) -> Optional[Model]:
        return self.estimator.model

    # ---------- steps ----------
    def load_data(self, examples: Optional[Sequence[LabeledExample]] = None) -> List[LabeledExample]:
        if examples is None:
            if self.config.csv_path is None:
                raise InvalidInputError("No csv_path configured and no examples given")
            examples = load_labeled_csv(
                self.config.csv_path,
                text_col=self.config.text_col,
                label_col=self.config.label_col,
                clean=self.config.clean_text,
            )
        self.examples = list(examples)
        if not self.examples:
            raise InvalidInputError("Dataset is empty")
        return self.examples

    def split(self):
        self.train_set, self.test_set = train_test_split(
            self.examples,
            test_fraction=self.config.test_fraction,
            seed=self.config.seed,
            stratify=self.config.stratify,
        )
        return self.train_set, self.test_set

    def train(self, train_set: Optional[Sequence[LabeledExample]] = None) -> Model:
        train_set = list(train_set if train_set is not None else self.train_set)
        self.estimator.fit([e.text for e in train_set], [e.label for e in train_set])
        return self.model

    def _require_fitted(self) -> None:
        if self.model is None or self.vocab is None:
            raise InvalidInputError("Pipeline has no fitted model; call train() first")

    def evaluate(self, test_set: Optional[Sequence[LabeledExample]] = None) -> Metrics:
        self._require_fitted()
        test_set = list(test_set if test_set is not None else self.test_set)
        self.metrics = self.estimator.evaluate([e.text for e in test_set], [e.label for e in test_set])
        return self.metrics

    def predict(self, text: str) -> Prediction:
        self._require_fitted()
        return predict(self.model, self.vocab, text)

    def predict_batch(self, texts: Sequence[str]) -> List[Prediction]:
        self._require_fitted()
        return predict_batch(self.model, self.vocab, texts, n_jobs=self.config.featurizer.n_jobs)

    def save(self, path: Optional[Path] = None) -> Path:
        self._require_fitted()
        path = path or self.config.model_path
        if path is None:
            raise InvalidInputError("No model path configured")
        return save_model(path, self.model, self.vocab)

    # ---------- full run ----------
    def run(
        self,
        examples: Optional[Sequence[LabeledExample]] = None,
        sample_text: str = SAMPLE_STATEMENT,
        sample_batch: Sequence[str] = tuple(SAMPLE_BATCH),
    ) -> Dict[str, Any]:
        """Run every step and return a JSON-serialisable summary."""
        self.load_data(examples)
        self.split()
        self.train()
        metrics = self.evaluate()
        single = self.predict(sample_text)
        batch = self.predict_batch(list(sample_batch))

        summary: Dict[str, Any] = {
            "timestamp": datetime.now().isoformat(timespec="seconds"),
            "config": self.config.to_dict(),
            "n_examples": len(self.examples),
            "n_train": len(self.train_set),
            "n_test": len(self.test_set),
            "training": {
                "n_iterations": self.model.n_iterations,
                "duality_gap": self.model.duality_gap,
                "converged": self.model.converged,
            },
            "metrics": metrics.to_dict(),
            "single_prediction": single.to_dict(),
            "batch_predictions": [p.to_dict() for p in batch],
        }

        if self.config.model_path is not None:
            summary["model_path"] = str(self.save())

        if self.config.results_dir is not None:
            results_dir = Path(self.config.results_dir)
            results_dir.mkdir(parents=True, exist_ok=True)
            if self.config.plots:
                # imported lazily so headless runs without --plots never touch matplotlib
                from .visualization import plot_confusion_matrix, plot_roc_curve

                y_score = self.estimator.predict_proba([e.text for e in self.test_set])[:, 1]
                y_true = [e.label for e in self.test_set]
                summary["plots"] = [
                    str(plot_roc_curve(y_true, y_score, results_dir)),
                    str(plot_confusion_matrix(metrics.confusion_matrix, results_dir)),
                ]
            out_path = results_dir / "experiment_summary.json"
            with open(out_path, "w", encoding="utf-8") as f:
                json.dump(summary, f, ensure_ascii=False, indent=2)
            summary["summary_path"] = str(out_path)
            logger.info("Saved summary: %s", out_path)

        return summary
