"""Console tables and summaries for training and running a network."""

from __future__ import annotations

from typing import Dict

import numpy as np
import pandas as pd

from ..config import NetworkConfig
from ..core.types import Array, StoppingState


def _member_index(count: int) -> pd.Index:
    return pd.Index([f"Member {member}" for member in range(count)], name="Member #")


def output_table(outputs: Array) -> pd.DataFrame:
    """One row per member with the network outputs ``F[i]``."""

    outputs = np.atleast_2d(np.asarray(outputs, dtype=np.float64))
    columns = [f"F[{i}]" for i in range(outputs.shape[1])]
    return pd.DataFrame(outputs, columns=columns, index=_member_index(outputs.shape[0]))


def comparison_table(outputs: Array, targets: Array) -> pd.DataFrame:
    """Interleave targets ``T[i]`` and outputs ``F[i]`` for every output unit."""

    outputs = np.atleast_2d(np.asarray(outputs, dtype=np.float64))
    targets = np.atleast_2d(np.asarray(targets, dtype=np.float64))
    if outputs.shape != targets.shape:
        raise ValueError(
            f"Outputs {outputs.shape} and targets {targets.shape} must have the same shape"
        )
    frame = pd.DataFrame(index=_member_index(outputs.shape[0]))
    for i in range(outputs.shape[1]):
        frame[f"T[{i}]"] = targets[:, i]
        frame[f"F[{i}]"] = outputs[:, i]
    return frame


def training_summary(config: NetworkConfig, state: StoppingState) -> Dict[str, object]:
    return {
        "numIterations": state.iterations_completed,
        "maximumSetError": state.worst_example_error,
        "maxIterationsReached": state.max_iterations_reached,
        "errorThresholdSatisfied": state.error_threshold_satisfied,
        "lambda": config.training.learning_rate,
        "errorThreshold": config.training.error_threshold,
        "maxIterations": config.training.max_iterations,
        "checkpoints": ",".join(str(it) for it in state.checkpoints) or "none",
    }


def network_summary(config: NetworkConfig, *, training: bool = False) -> Dict[str, object]:
    topology = config.topology
    summary: Dict[str, object] = {
        "NUM_INPUT_UNITS": topology.num_inputs,
        "NUM_HIDDEN_UNITS": ",".join(str(size) for size in topology.hidden_sizes),
        "NUM_OUTPUT_UNITS": topology.num_outputs,
        "weights": config.weight_init.describe(),
        "allocateForTraining": config.allocate_for_training,
    }
    if training:
        checkpoint = config.checkpoint
        summary["weightsOutputFile"] = str(checkpoint.path) if checkpoint.path else "none"
        summary["saveWeightsEvery"] = checkpoint.save_every
        summary["saveWeightsAtEnd"] = checkpoint.save_at_end
    return summary


def format_summary(summary: Dict[str, object]) -> str:
    width = max((len(key) for key in summary), default=0)
    return "\n".join(f"{key.ljust(width)} = {value}" for key, value in summary.items())


__all__ = [
    "comparison_table",
    "format_summary",
    "network_summary",
    "output_table",
    "training_summary",
]
