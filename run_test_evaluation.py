#!/usr/bin/env python
"""
Evaluate a saved model container on a labelled CSV.
"""
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.resolve() / "src"))

from tweet_sentiment.core.exceptions import SentimentError  # noqa: E402
from tweet_sentiment.core.metrics import classification_report, evaluate  # noqa: E402
from tweet_sentiment.features.hashing import transform_batch  # noqa: E402
from tweet_sentiment.models.persistence import load_model  # noqa: E402
from tweet_sentiment.prepare_dataset import load_labeled_csv  # noqa: E402


def main():
    import argparse

    parser = argparse.ArgumentParser(
        description="Evaluate a saved sentiment model on labelled data"
    )
    parser.add_argument(
        "--model",
        default="model.zip",
        help="Path to a model container written by run_experiment.py (default: model.zip)",
    )
    parser.add_argument(
        "--data-path",
        required=True,
        help="Labelled CSV to evaluate on",
    )
    parser.add_argument("--text-col", default="SentimentText")
    parser.add_argument("--label-col", default="Sentiment")
    parser.add_argument(
        "--output",
        default=None,
        help="Optional path for a JSON copy of the metrics",
    )
    parser.add_argument("--jobs", type=int, default=1, help="Featurization threads")

    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

    try:
        model, vocab = load_model(args.model)
        examples = load_labeled_csv(args.data_path, args.text_col, args.label_col)
        vectors = transform_batch([e.text for e in examples], vocab, n_jobs=args.jobs)
        labels = [e.label for e in examples]
        metrics = evaluate(model, vectors, labels)
    except SentimentError as exc:
        logging.getLogger("run_test_evaluation").error("%s", exc)
        return 1

    print("=" * 80)
    print(f"TEST SET EVALUATION - {args.model} on {args.data_path}")
    print("=" * 80)
    print(f"Examples: {metrics.n_examples}")
    print(f"Accuracy: {metrics.accuracy:.2%}")
    print(f"Auc: {metrics.auc:.2%}")
    print(f"F1Score: {metrics.f1:.2%}")
    print()
    y_pred = model.predict_proba(vectors) >= 0.5
    print(classification_report(labels, y_pred, digits=4))

    if args.output:
        out = Path(args.output)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(metrics.to_dict(), indent=2), encoding="utf-8")
        print(f"Saved metrics: {out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
