#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Hashed n-gram featurizer.

Turns raw post text into fixed-dimensionality sparse vectors:
- tokenize: case-fold + split on non-alphanumeric boundaries
- word n-grams (and optional char n-grams) hashed with MurmurHash3 into
  ``n_features`` buckets (hashing trick, same hash as sklearn's HashingVectorizer)
- term-frequency weights, optionally scaled by smoothed IDF learned in ``fit``
- optional L2 row normalisation

``fit`` must only ever see the training split; the resulting Vocabulary is then
shared read-only by every later ``transform`` (train, test and inference text).
"""
from __future__ import annotations

import logging
import math
import re
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np
from sklearn.utils import murmurhash3_32

from ..core.exceptions import InvalidInputError
from ..core.types import FeatureVector

logger = logging.getLogger(__name__)

TOKEN_RE = re.compile(r"[^\W_]+")
# keeps char n-gram keys apart from word n-gram keys
CHAR_PREFIX = "\x01c:"


@dataclass(frozen=True)
class FeaturizerConfig:
    """
    Featurizer settings.

    Attributes:
        n_features: number of hash buckets D (feature dimensionality)
        ngram_range: (min_n, max_n) word n-gram orders
        char_ngram_range: (min_n, max_n) char n-gram orders, or None to disable
        use_idf: scale term frequencies by IDF computed on the training corpus
        norm: "l2" to L2-normalise each vector, None to keep raw weights
        hash_seed: MurmurHash3 seed
        n_jobs: worker threads for batch transforms
    """

    n_features: int = 2 ** 20
    ngram_range: Tuple[int, int] = (1, 2)
    char_ngram_range: Optional[Tuple[int, int]] = None
    use_idf: bool = True
    norm: Optional[str] = "l2"
    hash_seed: int = 0
    n_jobs: int = 1

    def __post_init__(self):
        object.__setattr__(self, "ngram_range", tuple(self.ngram_range))
        if self.char_ngram_range is not None:
            object.__setattr__(self, "char_ngram_range", tuple(self.char_ngram_range))
        self.validate()

    def validate(self) -> None:
        if int(self.n_features) < 1:
            raise InvalidInputError(f"n_features must be >= 1, got {self.n_features}")
        _check_range("ngram_range", self.ngram_range)
        if self.char_ngram_range is not None:
            _check_range("char_ngram_range", self.char_ngram_range)
        if self.norm not in (None, "l2"):
            raise InvalidInputError(f"Unknown norm: {self.norm!r} (expected 'l2' or None)")
        if int(self.n_jobs) < 1:
            raise InvalidInputError(f"n_jobs must be >= 1, got {self.n_jobs}")

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["ngram_range"] = list(self.ngram_range)
        if self.char_ngram_range is not None:
            d["char_ngram_range"] = list(self.char_ngram_range)
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FeaturizerConfig":
        return cls(**d)


def _check_range(name: str, rng: Sequence[int]) -> None:
    if len(rng) != 2 or rng[0] < 1 or rng[1] < rng[0]:
        raise InvalidInputError(f"{name} must be (min_n, max_n) with 1 <= min_n <= max_n, got {rng}")


@dataclass(frozen=True, eq=False)
class Vocabulary:
    """
    Read-only state learned by ``TextFeaturizer.fit``.

    With the hashing trick every bucket in [0, n_features) is a valid feature
    index, so the vocabulary only carries the config and the IDF weights.
    """

    config: FeaturizerConfig
    idf: Optional[np.ndarray]
    n_documents: int

    def __post_init__(self):
        if self.idf is not None:
            idf = np.array(self.idf, dtype=np.float64, copy=True)
            if idf.shape != (self.config.n_features,):
                raise InvalidInputError(
                    f"idf has shape {idf.shape}, expected ({self.config.n_features},)"
                )
            idf.setflags(write=False)
            object.__setattr__(self, "idf", idf)

    @property
    def n_features(self) -> int:
        return self.config.n_features

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vocabulary):
            return NotImplemented
        if self.config != other.config or self.n_documents != other.n_documents:
            return False
        if self.idf is None or other.idf is None:
            return self.idf is None and other.idf is None
        return np.array_equal(self.idf, other.idf)


# ---------- tokenization ----------
def tokenize(text: Optional[str]) -> List[str]:
    if not text:
        return []
    return TOKEN_RE.findall(text.casefold())


def iter_ngrams(tokens: Sequence[str], ngram_range: Tuple[int, int]) -> Iterator[str]:
    min_n, max_n = ngram_range
    for n in range(min_n, max_n + 1):
        for i in range(len(tokens) - n + 1):
            yield " ".join(tokens[i : i + n])


def iter_char_ngrams(tokens: Sequence[str], ngram_range: Tuple[int, int]) -> Iterator[str]:
    joined = " ".join(tokens)
    min_n, max_n = ngram_range
    for n in range(min_n, max_n + 1):
        for i in range(len(joined) - n + 1):
            yield CHAR_PREFIX + joined[i : i + n]


def hash_ngram(ngram: str, n_features: int, seed: int = 0) -> int:
    return murmurhash3_32(ngram, seed=seed, positive=True) % n_features


def hashed_counts(text: Optional[str], config: FeaturizerConfig) -> Counter:
    """Bucket -> raw term count for one text (colliding n-grams are summed)."""
    tokens = tokenize(text)
    keys: Iterable[str] = iter_ngrams(tokens, config.ngram_range)
    counts = Counter(hash_ngram(k, config.n_features, config.hash_seed) for k in keys)
    if config.char_ngram_range is not None:
        counts.update(
            hash_ngram(k, config.n_features, config.hash_seed)
            for k in iter_char_ngrams(tokens, config.char_ngram_range)
        )
    return counts


def transform(text: Optional[str], vocab: Vocabulary) -> FeatureVector:
    """Featurize a single text against a fitted vocabulary."""
    config = vocab.config
    counts = hashed_counts(text, config)
    if not counts:
        return FeatureVector.zeros(config.n_features)

    indices = np.fromiter(sorted(counts), dtype=np.int64, count=len(counts))
    values = np.fromiter((counts[i] for i in indices), dtype=np.float64, count=len(counts))
    if vocab.idf is not None:
        values = values * vocab.idf[indices]
    if config.norm == "l2":
        norm = math.sqrt(float(np.dot(values, values)))
        if norm > 0.0:
            values = values / norm
    return FeatureVector(indices, values, config.n_features)


class TextFeaturizer:
    """fit on the training corpus, then transform any text with the learned Vocabulary."""

    def __init__(self, config: Optional[FeaturizerConfig] = None, **params: Any):
        if config is None:
            config = FeaturizerConfig(**params)
        elif params:
            raise TypeError("pass either a FeaturizerConfig or keyword params, not both")
        self.config = config

    def fit(self, corpus: Iterable[str]) -> Vocabulary:
        texts = list(corpus)
        if not texts:
            raise InvalidInputError("Cannot fit featurizer on an empty corpus")

        n_docs = len(texts)
        idf = None
        if self.config.use_idf:
            df = np.zeros(self.config.n_features, dtype=np.float64)
            for t in texts:
                buckets = list(hashed_counts(t, self.config))
                df[buckets] += 1.0
            # smoothed idf, as if one extra document contained every term
            idf = np.log((1.0 + n_docs) / (1.0 + df)) + 1.0
            logger.info(
                "Fitted IDF over %d documents (%d non-empty buckets of %d)",
                n_docs,
                int(np.count_nonzero(df)),
                self.config.n_features,
            )
        else:
            logger.info("Featurizer fitted on %d documents (tf only)", n_docs)
        return Vocabulary(config=self.config, idf=idf, n_documents=n_docs)

    @staticmethod
    def transform(text: Optional[str], vocab: Vocabulary) -> FeatureVector:
        return transform(text, vocab)

    def transform_batch(
        self, texts: Iterable[str], vocab: Vocabulary, n_jobs: Optional[int] = None
    ) -> List[FeatureVector]:
        return transform_batch(texts, vocab, n_jobs or self.config.n_jobs)

    def fit_transform(self, corpus: Iterable[str]) -> Tuple[Vocabulary, List[FeatureVector]]:
        texts = list(corpus)
        vocab = self.fit(texts)
        return vocab, self.transform_batch(texts, vocab)


def transform_batch(
    texts: Iterable[str], vocab: Vocabulary, n_jobs: int = 1
) -> List[FeatureVector]:
    """Featurize many texts; output order matches input order."""
    texts = list(texts)
    if n_jobs <= 1 or len(texts) < 2:
        return [transform(t, vocab) for t in texts]
    with ThreadPoolExecutor(max_workers=n_jobs) as pool:
        return list(pool.map(lambda t: transform(t, vocab), texts))
