# tests/conftest.py
from __future__ import annotations

from typing import List

import pytest

from tweet_sentiment.core.types import LabeledExample
from tweet_sentiment.features.hashing import FeaturizerConfig

POSITIVE_WORDS = ["bullish", "buy", "moon", "rally", "breakout", "calls"]
NEGATIVE_WORDS = ["bearish", "sell", "crash", "dump", "puts", "tank"]
TICKERS = ["$TSLA", "$SPY", "$AAPL", "$QQQ", "$WKHS"]


def make_posts(n_per_class: int = 20) -> List[LabeledExample]:
    """Synthetic posts whose label is fully determined by their vocabulary."""
    posts = []
    for i in range(n_per_class):
        ticker = TICKERS[i % len(TICKERS)]
        pos = " ".join(POSITIVE_WORDS[(i + k) % len(POSITIVE_WORDS)] for k in range(3))
        neg = " ".join(NEGATIVE_WORDS[(i + k) % len(NEGATIVE_WORDS)] for k in range(3))
        posts.append(LabeledExample(text=f"{ticker} {pos} today", label=True))
        posts.append(LabeledExample(text=f"{ticker} {neg} today", label=False))
    return posts


@pytest.fixture
def small_config() -> FeaturizerConfig:
    return FeaturizerConfig(n_features=2 ** 12)


@pytest.fixture
def posts() -> List[LabeledExample]:
    return make_posts()
