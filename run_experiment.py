#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Train, evaluate and save the financial-post sentiment classifier.

- Run from project root (works with or without `pip install -e .`).
- Loads the labelled CSV, splits it, fits hashed n-gram features + SDCA
  logistic regression, prints test metrics and sample predictions,
  then writes model.zip and results/experiment_summary.json.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# ---------------------------------------------------------------------
# Ensure we can import `tweet_sentiment` from src/ without installing
# ---------------------------------------------------------------------
ROOT = Path(__file__).parent.resolve()
SRC_DIR = ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from tweet_sentiment.core.exceptions import SentimentError  # noqa: E402
from tweet_sentiment.experiments.pipeline import PipelineConfig, SentimentPipeline  # noqa: E402
from tweet_sentiment.features.hashing import FeaturizerConfig  # noqa: E402
from tweet_sentiment.models.sdca import SdcaConfig  # noqa: E402


def _resolve_csv(csv_path: Path | None) -> Path:
    """Locate the labelled CSV from --csv (defaults to ROOT/Data/tweet_labelled.csv)."""
    if csv_path is None:
        csv_path = ROOT / "Data" / "tweet_labelled.csv"
    p = csv_path if csv_path.is_absolute() else (Path.cwd() / csv_path)
    if not p.exists():
        raise FileNotFoundError(f"CSV not found: {p}. Pass --csv explicitly.")
    return p


def build_config(args: argparse.Namespace) -> PipelineConfig:
    char_range = (args.char_ngram, args.char_ngram) if args.char_ngram else None
    featurizer = FeaturizerConfig(
        n_features=2 ** args.hash_bits,
        ngram_range=(1, args.ngram_max),
        char_ngram_range=char_range,
        use_idf=not args.no_idf,
        norm=None if args.no_norm else "l2",
        n_jobs=args.jobs,
    )
    sdca = SdcaConfig(
        l2_regularization=args.l2,
        max_iterations=args.max_iter,
        convergence_tolerance=args.tol,
        seed=args.seed,
    )
    return PipelineConfig(
        csv_path=_resolve_csv(args.csv),
        text_col=args.text_col,
        label_col=args.label_col,
        clean_text=args.clean,
        test_fraction=args.test_fraction,
        seed=args.seed,
        stratify=args.stratify,
        featurizer=featurizer,
        sdca=sdca,
        model_path=args.model_out,
        results_dir=args.results_dir,
        plots=args.plots,
    )


def _print_metrics(metrics) -> None:
    print("=============== Evaluating Model accuracy with Test data===============")
    print()
    print("Model quality metrics evaluation")
    print("--------------------------------")
    print(f"Accuracy: {metrics.accuracy:.2%}")
    print(f"Auc: {metrics.auc:.2%}")
    print(f"F1Score: {metrics.f1:.2%}")
    print(f"LogLoss: {metrics.log_loss:.4f}  (reduction {metrics.log_loss_reduction:.2%})")
    print(f"Confusion matrix ((tn, fp), (fn, tp)): {metrics.confusion_matrix}")
    print()
    print("=============== End of model evaluation ===============")


def _print_prediction(p) -> None:
    print(f"Sentiment: {p['text']} | Prediction: {p['sentiment']} | Probability: {p['probability']:.4f}")


def main() -> int:
    ap = argparse.ArgumentParser(description="Train the financial-post sentiment classifier")
    ap.add_argument("--csv", type=Path, default=None, help="Labelled CSV (default: Data/tweet_labelled.csv)")
    ap.add_argument("--text-col", default="SentimentText")
    ap.add_argument("--label-col", default="Sentiment")
    ap.add_argument("--clean", action="store_true", help="Normalise URLs/mentions/HTML before featurizing")
    ap.add_argument("--test-fraction", type=float, default=0.2)
    ap.add_argument("--seed", type=int, default=42)
    ap.add_argument("--stratify", action="store_true", help="Keep label balance in train and test")

    # Featurizer
    ap.add_argument("--hash-bits", type=int, default=20, help="Feature dimensionality D = 2**bits")
    ap.add_argument("--ngram-max", type=int, default=2, help="Largest word n-gram order")
    ap.add_argument("--char-ngram", type=int, default=0, help="Also hash char n-grams of this length (0 = off)")
    ap.add_argument("--no-idf", action="store_true")
    ap.add_argument("--no-norm", action="store_true")
    ap.add_argument("--jobs", type=int, default=1, help="Featurization threads")

    # SDCA
    ap.add_argument("--l2", type=float, default=1e-4, help="L2 regularization strength")
    ap.add_argument("--max-iter", type=int, default=100, help="Maximum SDCA passes")
    ap.add_argument("--tol", type=float, default=1e-4, help="Relative duality gap tolerance")

    # Outputs
    ap.add_argument("--model-out", type=Path, default=Path("model.zip"))
    ap.add_argument("--results-dir", type=Path, default=Path("results"))
    ap.add_argument("--plots", action="store_true", help="Save ROC curve and confusion matrix PNGs")
    ap.add_argument("-v", "--verbose", action="store_true")

    args = ap.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    try:
        pipeline = SentimentPipeline(build_config(args))
        summary = pipeline.run()
    except SentimentError as exc:
        logging.getLogger("run_experiment").error("%s", exc)
        return 1

    print()
    _print_metrics(pipeline.metrics)

    print()
    print("=============== Prediction Test of model with a single sample and test dataset ===============")
    _print_prediction(summary["single_prediction"])
    print("=============== End of Predictions ===============")

    print()
    print("=============== Prediction Test of loaded model with multiple samples ===============")
    print()
    for p in summary["batch_predictions"]:
        _print_prediction(p)
    print()
    print("=============== End of predictions ===============")

    if "model_path" in summary:
        print(f"Saved model: {summary['model_path']}")
    if "summary_path" in summary:
        print(f"Saved summary: {summary['summary_path']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
