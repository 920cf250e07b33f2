# visualization.py
from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import seaborn as sns  # noqa: E402

from ..core.metrics import roc_auc_score, roc_curve  # noqa: E402


def plot_roc_curve(y_true, y_score, save_dir: Path) -> Path:
    fpr, tpr, _ = roc_curve(y_true, y_score)
    auc = roc_auc_score(y_true, y_score)
    save_dir = Path(save_dir)
    save_dir.mkdir(parents=True, exist_ok=True)

    plt.figure(figsize=(5, 5))
    plt.plot(fpr, tpr, label=f"SDCA logistic regression (AUC = {auc:.3f})")
    plt.plot([0, 1], [0, 1], linestyle="--", color="grey", label="chance")
    plt.xlabel("False positive rate")
    plt.ylabel("True positive rate")
    plt.title("ROC curve (test split)")
    plt.legend(loc="lower right")
    plt.tight_layout()
    out = save_dir / "roc_curve.png"
    plt.savefig(out, dpi=200)
    plt.close()
    return out


def plot_confusion_matrix(cm, save_dir: Path) -> Path:
    """Heatmap of a 2x2 confusion matrix (rows true, columns predicted)."""
    cm = np.asarray(cm, dtype=int)
    save_dir = Path(save_dir)
    save_dir.mkdir(parents=True, exist_ok=True)

    plt.figure(figsize=(4.5, 4))
    sns.heatmap(
        cm,
        annot=True,
        fmt="d",
        cmap="Blues",
        xticklabels=["Negative", "Positive"],
        yticklabels=["Negative", "Positive"],
    )
    plt.xlabel("Predicted")
    plt.ylabel("True")
    plt.title("Confusion matrix (test split)")
    plt.tight_layout()
    out = save_dir / "confusion_matrix.png"
    plt.savefig(out, dpi=200)
    plt.close()
    return out
