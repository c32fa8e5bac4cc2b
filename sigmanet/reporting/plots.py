"""Headless-safe plotting of training curves."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping


class PlotAdapter:
    """Collect epoch metrics and optionally emit matplotlib figures.

    ``close`` writes ``cost.png`` and ``accuracy.png`` into ``run_dir``, each
    with a training and a validation series.
    """

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._history: List[Mapping[str, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        if not self.enable_plots:
            return
        self._history.append({"epoch": float(epoch), **metrics})

    def close(self) -> List[Path]:
        if not self.enable_plots or not self._history:
            return []
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        epochs = [row["epoch"] for row in self._history]
        written = []
        for name in ("cost", "accuracy"):
            fig, ax = plt.subplots()
            ax.plot(epochs, [row.get(f"train_{name}") for row in self._history], label="training")
            ax.plot(
                epochs,
                [row.get(f"val_{name}") for row in self._history],
                label="validation",
                color="orange",
            )
            ax.set_xlabel("epochs")
            ax.set_ylabel(name)
            ax.legend()
            path = self.run_dir / f"{name}.png"
            fig.savefig(path)
            plt.close(fig)
            written.append(path)
        return written

    __call__ = on_epoch


__all__ = ["PlotAdapter"]
