from __future__ import annotations

import argparse
import csv
import json
import sys
import time
from pathlib import Path
from statistics import mean, pstdev

# logical XOR mapped onto the tanh range; the third input is a constant bias unit
XOR_INPUTS = [[0.0, 0.0, 1.0], [0.0, 1.0, 1.0], [1.0, 0.0, 1.0], [1.0, 1.0, 1.0]]
XOR_TARGETS = [[-1.0], [1.0], [1.0], [-1.0]]


def _fmt_mu_sigma(vals):
    mu = mean(vals)
    sd = pstdev(vals) if len(vals) > 1 else 0.0
    return f"{mu:.4f} ± {sd:.4f}"


def main():
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))

    import numpy as np

    from abcdnet import ABCDNetwork, Trainer, TrainingConfig

    ap = argparse.ArgumentParser()
    ap.add_argument("--seeds", nargs="+", type=int, default=[123, 124, 125])
    ap.add_argument("--lrs", nargs="+", type=float, default=[0.1, 0.3])
    ap.add_argument("--hidden", nargs=2, type=int, default=[4, 4])
    ap.add_argument("--max-iterations", type=int, default=5000)
    ap.add_argument("--threshold", type=float, default=1e-3)
    ap.add_argument("--out", type=str, default=".artifacts/bench")
    args = ap.parse_args()

    out = Path(args.out)
    out.mkdir(parents=True, exist_ok=True)
    runs = []
    for lr in args.lrs:
        for s in args.seeds:
            network = ABCDNetwork([3, args.hidden[0], args.hidden[1], 1])
            network.randomize_weights(-1.0, 1.0, rng=np.random.default_rng(s))
            config = TrainingConfig(
                learning_rate=lr,
                error_threshold=args.threshold,
                max_iterations=args.max_iterations,
            )
            started = time.perf_counter()
            state = Trainer(network, config, report_every=0).train_on_set(XOR_INPUTS, XOR_TARGETS)
            elapsed = time.perf_counter() - started
            runs.append(
                {
                    "lr": lr,
                    "seed": s,
                    "iterations": state.iterations_completed,
                    "worst_error": state.worst_example_error,
                    "converged": state.error_threshold_satisfied,
                    "seconds": elapsed,
                }
            )
    (out / "results.jsonl").write_text(
        "\n".join(json.dumps(x) for x in runs), encoding="utf-8"
    )

    csv_path = out / "bench_micro.csv"
    with csv_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["lr", "seeds", "iterations_mu", "worst_error_mu", "converged", "seconds_mu"])
        for lr in args.lrs:
            group = [r for r in runs if r["lr"] == lr]
            w.writerow(
                [
                    lr,
                    len(group),
                    f"{mean(r['iterations'] for r in group):.1f}",
                    f"{mean(r['worst_error'] for r in group):.6f}",
                    sum(r["converged"] for r in group),
                    f"{mean(r['seconds'] for r in group):.4f}",
                ]
            )

    md_path = out / "bench_micro.md"
    lines = []
    lines.append("### Micro-Benchmark: online backpropagation on XOR")
    lines.append("")
    lines.append(
        f"- Seeds: `{args.seeds}`; Hidden: `{args.hidden}`; "
        f"Max iterations: `{args.max_iterations}`; Threshold: `{args.threshold}`"
    )
    lines.append("")
    lines.append("| LR | Iterations (μ±σ) | Worst Error (μ±σ) | Converged | Seconds (μ±σ) |")
    lines.append("|---|---:|---:|---:|---:|")
    for lr in args.lrs:
        group = [r for r in runs if r["lr"] == lr]
        lines.append(
            f"| {lr} | {_fmt_mu_sigma([r['iterations'] for r in group])} | "
            f"{_fmt_mu_sigma([r['worst_error'] for r in group])} | "
            f"{sum(r['converged'] for r in group)}/{len(group)} | "
            f"{_fmt_mu_sigma([r['seconds'] for r in group])} |"
        )
    md_path.write_text("\n".join(lines), encoding="utf-8")
    print("Wrote:", csv_path, md_path)


if __name__ == "__main__":
    main()
