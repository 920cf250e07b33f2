# Text featurization

from .hashing import FeaturizerConfig, TextFeaturizer, Vocabulary, tokenize, transform, transform_batch

__all__ = [
    "FeaturizerConfig",
    "TextFeaturizer",
    "Vocabulary",
    "tokenize",
    "transform",
    "transform_batch",
]
