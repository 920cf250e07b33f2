"""
This package trains and serves a binary sentiment classifier for short
financial social-media posts.

Key modules:
- core.types / core.exceptions: data model and error taxonomy
- core.splitting: seeded train/test split
- core.metrics: accuracy, AUC, F1 and friends implemented from scratch
- features.hashing: hashed n-gram tf-idf featurizer
- models.sdca: SDCA-trained L2 logistic regression
- models.predictor: single and batch inference
- models.persistence: model + vocabulary container
- experiments.pipeline: end-to-end orchestration
"""

__version__ = "0.1.0"
