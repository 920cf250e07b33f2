#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Load labelled financial posts (e.g. Data/tweet_labelled.csv):
- Read a header-row CSV with quoted fields
- Map the sentiment column to bool {negative: False, positive: True}
- Optionally clean text (HTML/url/user -> placeholders, whitespace collapse)
- Return LabeledExample records for the pipeline

The CLI prints a short summary of the file for a quick sanity check.
"""
from __future__ import annotations

import html
import json
import logging
import re
import unicodedata
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .core.exceptions import InvalidInputError
from .core.types import LabeledExample

logger = logging.getLogger(__name__)

TEXT_COL = "SentimentText"
LABEL_COL = "Sentiment"

TAG_RE = re.compile(r"<[^>]+>")
URL_RE = re.compile(r"(https?://\S+|www\.\S+)")
USER_RE = re.compile(r"(^|[^A-Za-z0-9_])@([A-Za-z0-9_]{1,15})")

LABEL_MAP = {
    "1": True, "true": True, "positive": True, "pos": True, "yes": True,
    "0": False, "false": False, "negative": False, "neg": False, "no": False,
}


def strip_control_chars(s: str) -> str:
    return "".join(ch for ch in s if ch.isprintable())


def normalize_text(text: str) -> str:
    s = str(text)
    s = html.unescape(s).replace("<br />", " ")
    s = TAG_RE.sub(" ", s)
    s = unicodedata.normalize("NFKC", s)
    s = URL_RE.sub(" URL ", s)
    s = USER_RE.sub(r"\1USER", s)
    s = strip_control_chars(s)
    s = re.sub(r"\s+", " ", s).strip()
    return s


def parse_label(value) -> Optional[bool]:
    """Map a raw label cell to bool; None when it cannot be interpreted."""
    if isinstance(value, bool):
        return value
    if value is None or (isinstance(value, float) and value != value):
        return None
    key = str(value).strip().lower()
    # pandas reads 0/1 columns with missing cells as floats
    if key in ("1.0", "0.0"):
        key = key[0]
    return LABEL_MAP.get(key)


def load_dataframe(
    csv_path: str | Path,
    text_col: str = TEXT_COL,
    label_col: str = LABEL_COL,
    clean: bool = False,
) -> pd.DataFrame:
    """Read the CSV and return a tidy frame with columns text (str) and label (bool)."""
    csv_path = Path(csv_path)
    df = pd.read_csv(csv_path, sep=",", header=0, quotechar='"')
    missing = [c for c in (text_col, label_col) if c not in df.columns]
    if missing:
        raise InvalidInputError(
            f"{csv_path} is missing column(s) {missing}; found {list(df.columns)}"
        )

    before = len(df)
    df = df.dropna(subset=[text_col, label_col])
    labels = df[label_col].map(parse_label)
    df = pd.DataFrame({"text": df[text_col].astype(str), "label": labels}).dropna(subset=["label"])
    df["label"] = df["label"].astype(bool)
    if clean:
        df["text"] = df["text"].map(normalize_text)
    df = df.reset_index(drop=True)

    dropped = before - len(df)
    if dropped:
        logger.warning("Dropped %d of %d rows with missing text or unreadable labels", dropped, before)
    logger.info("[data] rows=%d, balance=%s", len(df), df["label"].value_counts().to_dict())
    return df


def load_labeled_csv(
    csv_path: str | Path,
    text_col: str = TEXT_COL,
    label_col: str = LABEL_COL,
    clean: bool = False,
) -> List[LabeledExample]:
    """
    Load labelled examples from a CSV file.

    Args:
        csv_path: Path to the CSV (header row, comma separated, quoted fields allowed)
        text_col: Column holding the post text
        label_col: Column holding the sentiment label
        clean: Apply normalize_text to every post

    Returns:
        List of LabeledExample in file order
    """
    df = load_dataframe(csv_path, text_col, label_col, clean)
    return [LabeledExample(text=t, label=bool(l)) for t, l in zip(df["text"], df["label"])]


def main():
    """Print a summary of a labelled CSV."""
    import argparse

    parser = argparse.ArgumentParser()
    parser.add_argument("--src", required=True, help="Path to labelled CSV")
    parser.add_argument("--text-col", default=TEXT_COL)
    parser.add_argument("--label-col", default=LABEL_COL)
    parser.add_argument("--clean", action="store_true", help="Normalise text before summarising")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    df = load_dataframe(args.src, args.text_col, args.label_col, args.clean)
    meta = {
        "src": str(args.src),
        "rows": int(len(df)),
        "class_balance": {str(k): int(v) for k, v in df["label"].value_counts().items()},
    }
    print(json.dumps(meta, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
