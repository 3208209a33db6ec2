"""Figure récapitulative d'une campagne."""

from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd

from .batch import BatchSummary, RunStatus


def plot_batch(runs: pd.DataFrame, summary: BatchSummary, out_path: str | Path) -> Path:
    """Produit la figure : histogramme des volumes manquants + répartition des runs."""

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    fig, (ax_hist, ax_bar) = plt.subplots(1, 2, figsize=(10, 4))

    missed = runs.loc[runs["status"] == RunStatus.MISSED.value, "shortfall_mb"]
    if missed.empty:
        ax_hist.text(0.5, 0.5, "Aucun dépassement d'échéance", ha="center", va="center", transform=ax_hist.transAxes)
    else:
        ax_hist.hist(missed.to_numpy(dtype=float), bins=min(40, max(5, len(missed) // 10)), color="tab:red", alpha=0.8)
    ax_hist.set_xlabel("Volume restant (Mb)")
    ax_hist.set_ylabel("Runs")
    ax_hist.set_title("Volume manquant des runs en échec")
    ax_hist.grid(True, alpha=0.25)

    labels = ["complete", "missed", "empty"]
    counts = [summary.complete_count, summary.miss_count, summary.empty_count]
    ax_bar.bar(labels, counts, color=["tab:green", "tab:red", "tab:gray"])
    ax_bar.set_ylabel("Runs")
    ax_bar.set_title(f"Miss ratio {summary.miss_ratio:.4f} | flag ratio {summary.flag_ratio:.4f}")
    ax_bar.grid(True, axis="y", alpha=0.25)

    fig.tight_layout()
    fig.savefig(out_path, dpi=150)
    plt.close(fig)
    return out_path
