# tests/test_prepare_dataset.py
from __future__ import annotations

from pathlib import Path

import pytest

from tweet_sentiment.core.exceptions import InvalidInputError
from tweet_sentiment.core.types import LabeledExample
from tweet_sentiment.prepare_dataset import load_labeled_csv, normalize_text, parse_label

CSV_TEXT = '''SentimentText,Sentiment
"Bullish $WKHS, just keeps going up",1
$SPY crossed below the 50ma,0
"great, buy",positive
"what now",maybe
,1
"$QQQ ""puts"" printing",False
'''


def write_csv(tmp_path: Path, text: str = CSV_TEXT, name: str = "tweet_labelled.csv") -> Path:
    p = tmp_path / name
    p.write_text(text, encoding="utf-8")
    return p


def test_load_labeled_csv_parses_quotes_and_labels(tmp_path):
    examples = load_labeled_csv(write_csv(tmp_path))
    assert examples == [
        LabeledExample("Bullish $WKHS, just keeps going up", True),
        LabeledExample("$SPY crossed below the 50ma", False),
        LabeledExample("great, buy", True),
        LabeledExample('$QQQ "puts" printing', False),
    ]


def test_custom_columns_and_cleaning(tmp_path):
    csv = write_csv(
        tmp_path,
        "post,label\n\"see https://t.co/x @trader &amp; buy\",pos\n",
        name="custom.csv",
    )
    examples = load_labeled_csv(csv, text_col="post", label_col="label", clean=True)
    assert examples == [LabeledExample("see URL USER & buy", True)]


def test_missing_columns_rejected(tmp_path):
    csv = write_csv(tmp_path, "text,label\nhello,1\n", name="wrong.csv")
    with pytest.raises(InvalidInputError):
        load_labeled_csv(csv)


def test_normalize_text():
    assert normalize_text("Check https://x.com @bob &amp; more") == "Check URL USER & more"
    assert normalize_text("  line<br />break  ") == "line break"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1", True), (1, True), (1.0, True), ("TRUE", True), ("Positive", True), (True, True),
        ("0", False), (0, False), ("false", False), ("neg", False), (False, False),
        ("maybe", None), (None, None), (float("nan"), None),
    ],
)
def test_parse_label(raw, expected):
    assert parse_label(raw) is expected
