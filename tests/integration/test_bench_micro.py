import json
import subprocess
import sys


def test_bench_micro_runs_quickly(tmp_path):
    out = tmp_path / "bench"
    subprocess.check_call(
        [
            sys.executable,
            "scripts/bench_micro.py",
            "--seeds",
            "123",
            "--lrs",
            "0.1",
            "0.3",
            "--max-iterations",
            "50",
            "--out",
            str(out),
        ]
    )
    md = (out / "bench_micro.md").read_text(encoding="utf-8")
    assert "| 0.1 |" in md and "| 0.3 |" in md
    runs = [json.loads(line) for line in (out / "results.jsonl").read_text().splitlines()]
    assert len(runs) == 2
    assert all(run["iterations"] <= 50 for run in runs)
    assert (out / "bench_micro.csv").exists()
