# tests/test_splitting.py
from __future__ import annotations

import pytest

from tweet_sentiment.core.exceptions import InvalidInputError
from tweet_sentiment.core.splitting import split_indices, train_test_split
from tweet_sentiment.core.types import LabeledExample


def examples(n: int, pos_every: int = 3):
    return [LabeledExample(text=f"post {i}", label=(i % pos_every == 0)) for i in range(n)]


@pytest.mark.parametrize("n", [1, 2, 3, 10, 57, 200])
@pytest.mark.parametrize("fraction", [0.01, 0.2, 0.5, 0.75, 0.99])
@pytest.mark.parametrize("stratify", [False, True])
def test_split_is_an_exact_partition(n, fraction, stratify):
    data = examples(n)
    train, test = train_test_split(data, fraction, seed=7, stratify=stratify)

    train_texts = [e.text for e in train]
    test_texts = [e.text for e in test]
    assert not set(train_texts) & set(test_texts)
    assert sorted(train_texts + test_texts) == sorted(e.text for e in data)
    assert len(train) + len(test) == n
    assert abs(len(test) - fraction * n) <= 1


def test_split_is_reproducible():
    data = examples(100)
    assert train_test_split(data, 0.2, seed=42) == train_test_split(data, 0.2, seed=42)


def test_seed_changes_the_split():
    data = examples(100)
    _, test_a = train_test_split(data, 0.2, seed=1)
    _, test_b = train_test_split(data, 0.2, seed=2)
    assert test_a != test_b


def test_subsets_keep_input_order():
    data = examples(50)
    train, test = train_test_split(data, 0.3, seed=3)
    position = {e.text: i for i, e in enumerate(data)}
    assert [position[e.text] for e in train] == sorted(position[e.text] for e in train)
    assert [position[e.text] for e in test] == sorted(position[e.text] for e in test)


def test_stratified_split_keeps_label_balance():
    data = examples(90, pos_every=3)  # 30 positive, 60 negative
    train, test = train_test_split(data, 0.2, seed=0, stratify=True)
    assert sum(e.label for e in test) == 6
    assert sum(not e.label for e in test) == 12
    assert sum(e.label for e in train) == 24


def test_split_indices_sizes():
    tr, te = split_indices(10, 0.2, seed=42)
    assert len(te) == 2 and len(tr) == 8
    assert sorted(tr + te) == list(range(10))


def test_empty_dataset_rejected():
    with pytest.raises(InvalidInputError):
        train_test_split([], 0.2)
    with pytest.raises(InvalidInputError):
        train_test_split([], 0.2, stratify=True)


@pytest.mark.parametrize("fraction", [0.0, 1.0, -0.1, 1.5])
def test_fraction_outside_open_interval_rejected(fraction):
    with pytest.raises(InvalidInputError):
        train_test_split(examples(10), fraction)
