# splitting.py
import logging
import random
from typing import Dict, List, Sequence, Tuple

from .exceptions import InvalidInputError
from .types import LabeledExample

logger = logging.getLogger(__name__)


def _check_fraction(test_fraction: float) -> None:
    if not 0.0 < test_fraction < 1.0:
        raise InvalidInputError(f"test_fraction must be in (0, 1), got {test_fraction}")


def split_indices(n: int, test_fraction: float, seed: int = 42) -> Tuple[List[int], List[int]]:
    """Seeded shuffle of range(n) cut into (train_idx, test_idx), both sorted."""
    if n <= 0:
        raise InvalidInputError("Cannot split an empty dataset")
    _check_fraction(test_fraction)
    rng = random.Random(seed)
    idx = list(range(n))
    rng.shuffle(idx)
    n_test = int(round(test_fraction * n))
    return sorted(idx[n_test:]), sorted(idx[:n_test])


def stratified_split_indices(
    labels: Sequence[bool], test_fraction: float, seed: int = 42
) -> Tuple[List[int], List[int]]:
    """Same as split_indices but each label bucket is cut separately."""
    if len(labels) == 0:
        raise InvalidInputError("Cannot split an empty dataset")
    _check_fraction(test_fraction)
    rng = random.Random(seed)
    # bucket by label, in order of first appearance
    buckets: Dict[bool, List[int]] = {}
    for i, yi in enumerate(labels):
        buckets.setdefault(bool(yi), []).append(i)

    train_idx, test_idx = [], []
    for b in buckets.values():
        rng.shuffle(b)
        n_test = int(round(test_fraction * len(b)))
        test_idx.extend(b[:n_test])
        train_idx.extend(b[n_test:])
    return sorted(train_idx), sorted(test_idx)


def train_test_split(
    examples: Sequence[LabeledExample],
    test_fraction: float = 0.2,
    seed: int = 42,
    stratify: bool = False,
) -> Tuple[List[LabeledExample], List[LabeledExample]]:
    """
    Deterministically partition examples into (train, test).

    Args:
        examples: labeled examples to split
        test_fraction: share of examples that goes to the test set, in (0, 1)
        seed: shuffle seed; identical input + seed gives identical splits
        stratify: keep the label balance in both subsets

    Returns:
        (train, test), each in the input's relative order
    """
    examples = list(examples)
    if stratify:
        tr, te = stratified_split_indices([e.label for e in examples], test_fraction, seed)
    else:
        tr, te = split_indices(len(examples), test_fraction, seed)
    train = [examples[i] for i in tr]
    test = [examples[i] for i in te]
    logger.info("Data split: %d train, %d test (test_fraction=%.2f)", len(train), len(test), test_fraction)
    return train, test
