import json
import re
from pathlib import Path

import pytest

from cli.main import main

TRAIN_CONFIG = """LAYER_SIZES:3-4-4-1
randomizeWeights:true
RANDOM_WEIGHT_MIN:-1.0
RANDOM_WEIGHT_MAX:1.0
weightsInputFilename:
allocateForTraining:true
lambda:0.3
errorThreshold:0.0002
maxIterations:40
weightsOutputFilename:weights/xor.txt
saveWeightsEvery:0
saveWeightsAtEnd:true
"""

RUN_CONFIG = TRAIN_CONFIG.replace("randomizeWeights:true", "randomizeWeights:false").replace(
    "weightsInputFilename:\n", "weightsInputFilename:weights/xor.txt\n"
).replace("allocateForTraining:true", "allocateForTraining:false")


def _write_workspace(root: Path) -> None:
    (root / "control").mkdir()
    (root / "configs").mkdir()
    (root / "sets").mkdir()
    (root / "configs" / "train.txt").write_text(TRAIN_CONFIG, encoding="utf-8")
    (root / "configs" / "run.txt").write_text(RUN_CONFIG, encoding="utf-8")
    (root / "sets" / "in.txt").write_text(
        "NUM_INPUT_UNITS:3\nNUM_MEMBERS:4\n\n0,0,1\n0,1,1\n1,0,1\n1,1,1\n", encoding="utf-8"
    )
    (root / "sets" / "t.txt").write_text(
        "NUM_OUTPUT_UNITS:1\nNUM_MEMBERS:4\n\n-1\n1\n1\n-1\n", encoding="utf-8"
    )
    (root / "control" / "default.txt").write_text(
        "doTrainNotRun:true\nnetworkConfigurationFilename:configs/train.txt\n"
        "inputSetFilename:sets/in.txt\ntargetSetFilename:sets/t.txt\n",
        encoding="utf-8",
    )
    (root / "control" / "run.txt").write_text(
        "doTrainNotRun:false\nnetworkConfigurationFilename:configs/run.txt\n"
        "inputSetFilename:sets/in.txt\ntargetSetFilename:sets/t.txt\n",
        encoding="utf-8",
    )


def test_cli_trains_then_runs(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    _write_workspace(tmp_path)

    main(["--seed", "3", "--metrics-dir", "runs/xor", "--report-every", "10"])
    out = capsys.readouterr().out
    assert "Using default control filename" in out
    assert "numIterations" in out
    assert re.search(r"maxIterationsReached\s+= True", out)
    assert Path("weights/xor.txt").read_text(encoding="utf-8").startswith(
        "NUM_LAYERS:4\nLAYER_SIZES:3-4-4-1\n"
    )
    records = [json.loads(line) for line in Path("runs/xor/metrics.jsonl").read_text().splitlines()]
    assert [r["iteration"] for r in records] == list(range(1, 41))
    assert records[0]["seed"] == 3
    assert Path("runs/xor/metrics.csv").exists()

    main(["control/run.txt"])
    out = capsys.readouterr().out
    assert "Using provided control filename control/run.txt" in out
    assert "Running network" in out
    assert "T[0]" in out and "F[0]" in out and "Member 3" in out


def test_cli_reports_missing_control_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as excinfo:
        main(["control/missing.txt"])
    assert "An exception has terminated execution" in str(excinfo.value.code)


def test_cli_reports_topology_mismatch(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write_workspace(tmp_path)
    (tmp_path / "sets" / "in.txt").write_text(
        "NUM_INPUT_UNITS:2\nNUM_MEMBERS:1\n\n0,0\n", encoding="utf-8"
    )
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert "number of input units" in str(excinfo.value.code)


def test_cli_reports_undecodable_set_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write_workspace(tmp_path)
    (tmp_path / "sets" / "in.txt").write_bytes(b"NUM_INPUT_UNITS:3\nNUM_MEMBERS:1\n\n\xff,0,1\n")
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert "not valid UTF-8" in str(excinfo.value.code)
