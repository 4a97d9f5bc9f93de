"""Metrics sinks that record the worst example error of every iteration."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Mapping


class JsonlSink:
    """Append-only JSONL writer for per-iteration metrics."""

    def __init__(self, path: str | Path, *, seed: int | None = None) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.seed = seed

    def on_epoch(self, iteration: int, metrics: Mapping[str, float]) -> None:
        record = {"iteration": int(iteration), "seed": self.seed}
        record.update({k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))})
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    __call__ = on_epoch


class CsvSink:
    """Write metrics to CSV with a stable schema."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")

    def on_epoch(self, iteration: int, metrics: Mapping[str, float]) -> None:
        row = {"iteration": int(iteration)}
        row.update({k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))})
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=sorted(row.keys()))
            if handle.tell() == 0:
                writer.writeheader()
            writer.writerow(row)
