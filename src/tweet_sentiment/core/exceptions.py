# exceptions.py
"""Error taxonomy shared by every stage of the sentiment pipeline."""


class SentimentError(Exception):
    """Base class for errors raised by tweet_sentiment."""


class InvalidInputError(SentimentError, ValueError):
    """Malformed, empty or mismatched input handed in by the caller."""


class TrainingError(SentimentError):
    """A precondition of the trainer was violated before optimisation started."""


class NonConvergenceWarning(UserWarning):
    """SDCA hit its pass cap before the duality gap reached the tolerance.

    The trainer still returns the best model it found.
    """
