# persistence.py
"""
Save / load a fitted Model together with its Vocabulary.

The container is a zip archive written by ``numpy.savez_compressed``:
weights.npy, bias.npy, idf.npy (when IDF is used) and header.npy, a JSON
string with the featurizer config, training diagnostics and format version.
"""
import json
import logging
import zipfile
from pathlib import Path
from typing import Tuple, Union

import numpy as np

from ..core.exceptions import InvalidInputError
from ..core.types import Model
from ..features.hashing import FeaturizerConfig, Vocabulary

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


def save_model(path: Union[str, Path], model: Model, vocab: Vocabulary) -> Path:
    path = Path(path)
    if model.n_features != vocab.n_features:
        raise InvalidInputError(
            f"model has {model.n_features} weights but vocabulary has {vocab.n_features} buckets"
        )
    path.parent.mkdir(parents=True, exist_ok=True)

    header = {
        "format_version": FORMAT_VERSION,
        "featurizer": vocab.config.to_dict(),
        "n_documents": vocab.n_documents,
        "has_idf": vocab.idf is not None,
        "n_iterations": model.n_iterations,
        "duality_gap": model.duality_gap,
        "converged": model.converged,
    }
    arrays = {
        "header": np.array(json.dumps(header)),
        "weights": model.weights,
        "bias": np.array(model.bias, dtype=np.float64),
    }
    if vocab.idf is not None:
        arrays["idf"] = vocab.idf

    # write through a file handle so numpy keeps the exact file name (e.g. model.zip)
    with open(path, "wb") as f:
        np.savez_compressed(f, **arrays)
    logger.info("Saved model (%d features) to %s", model.n_features, path)
    return path


def load_model(path: Union[str, Path]) -> Tuple[Model, Vocabulary]:
    path = Path(path)
    try:
        with np.load(path, allow_pickle=False) as data:
            header = json.loads(str(data["header"].item()))
            weights = data["weights"]
            bias = float(data["bias"])
            idf = data["idf"] if "idf" in data.files else None
    except (KeyError, ValueError, zipfile.BadZipFile) as exc:
        raise InvalidInputError(f"{path} is not a valid model file: {exc}") from exc

    version = header.get("format_version")
    if version != FORMAT_VERSION:
        raise InvalidInputError(f"Unsupported model format version: {version!r}")
    if header.get("has_idf") and idf is None:
        raise InvalidInputError(f"{path} is missing the idf array")

    config = FeaturizerConfig.from_dict(header["featurizer"])
    vocab = Vocabulary(config=config, idf=idf, n_documents=int(header["n_documents"]))
    model = Model(
        weights=weights,
        bias=bias,
        n_iterations=int(header.get("n_iterations", 0)),
        duality_gap=float(header.get("duality_gap", float("nan"))),
        converged=bool(header.get("converged", False)),
    )
    if model.n_features != vocab.n_features:
        raise InvalidInputError(
            f"{path}: model has {model.n_features} weights but vocabulary has {vocab.n_features} buckets"
        )
    logger.info("Loaded model (%d features) from %s", model.n_features, path)
    return model, vocab
