"""Online training loop for :class:`~abcdnet.core.network.ABCDNetwork`."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence

import numpy as np

from ..core.errors import ConfigError, ValidationError
from ..core.network import ABCDNetwork
from ..core.types import Array, StoppingState, TrainingConfig
from ..data import sets

logger = logging.getLogger(__name__)


def _as_matrix(values: Sequence[Sequence[float]] | Array, width: int, what: str) -> Array:
    try:
        matrix = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{what} set is not a numeric matrix: {exc}") from exc
    if matrix.size == 0:
        matrix = matrix.reshape(0, width)
    if matrix.ndim != 2 or matrix.shape[1] != width:
        raise ValidationError(
            f"{what} set rows must have {width} values, got shape {matrix.shape}"
        )
    return matrix


@dataclass(frozen=True)
class CheckpointPolicy:
    """Where and how often weights are written while training."""

    path: Path | None = None
    save_every: int = 0
    save_at_end: bool = False

    def __post_init__(self) -> None:
        if self.save_every < 0:
            raise ConfigError(f"save_every must not be negative, got {self.save_every}")
        if self.path is None and (self.save_every or self.save_at_end):
            raise ConfigError("A weights output file is required to save checkpoints")
        if self.path is not None:
            object.__setattr__(self, "path", Path(self.path))

    def due(self, iteration: int) -> bool:
        return self.save_every > 0 and iteration % self.save_every == 0


class Trainer:
    """Repeat online backpropagation over an example set until it stops.

    Training ends when the worst per-example error of an epoch drops below
    ``config.error_threshold`` or after ``config.max_iterations`` epochs.
    Each example's error is measured right after its own forward pass while
    the weights keep moving through the epoch, so the error that stops
    training trails the returned weights by up to one epoch of updates.
    """

    def __init__(
        self,
        network: ABCDNetwork,
        config: TrainingConfig,
        checkpoint: CheckpointPolicy | None = None,
        callbacks: Sequence[object] | None = None,
        report_every: int = 20,
    ) -> None:
        if not network.allocated_for_training:
            raise ConfigError("The network was not allocated for training")
        self.network = network
        self.config = config
        self.checkpoint = checkpoint or CheckpointPolicy()
        self.callbacks = list(callbacks or [])
        self.report_every = report_every
        self.state = StoppingState()

    def train_on_set(
        self,
        input_set: Sequence[Sequence[float]] | Array,
        target_set: Sequence[Sequence[float]] | Array,
    ) -> StoppingState:
        inputs, targets = self._check_sets(input_set, target_set)
        config = self.config
        state = StoppingState()
        self.state = state
        saved_this_iteration = False
        started = time.perf_counter()

        while not state.stopped:
            worst = 0.0
            for member_inputs, member_targets in zip(inputs, targets):
                self.network.train_on_member(member_inputs, member_targets, config.learning_rate)
                worst = max(worst, self.network.error())

            state.iterations_completed += 1
            state.worst_example_error = worst
            state.max_iterations_reached = state.iterations_completed >= config.max_iterations
            state.error_threshold_satisfied = worst < config.error_threshold

            saved_this_iteration = self.checkpoint.due(state.iterations_completed)
            if saved_this_iteration:
                self._save(state)
            self._emit_epoch(state.iterations_completed, {"worst_error": worst})
            if self.report_every and state.iterations_completed % self.report_every == 0:
                logger.info(
                    "Completed iteration %d with error %g and %.0f milliseconds elapsed",
                    state.iterations_completed,
                    worst,
                    (time.perf_counter() - started) * 1000.0,
                )

        if self.checkpoint.save_at_end and not saved_this_iteration:
            self._save(state, at_end=True)
        return state

    def train_on_files(self, input_path: str | Path, target_path: str | Path) -> StoppingState:
        topology = self.network.topology
        inputs = sets.read_input_set(input_path, topology.num_inputs)
        targets = sets.read_target_set(target_path, topology.num_outputs)
        return self.train_on_set(inputs, targets)

    # ------------------------------------------------------------------
    # Internal helpers

    def _check_sets(
        self,
        input_set: Sequence[Sequence[float]] | Array,
        target_set: Sequence[Sequence[float]] | Array,
    ) -> tuple[Array, Array]:
        topology = self.network.topology
        inputs = _as_matrix(input_set, topology.num_inputs, "Input")
        targets = _as_matrix(target_set, topology.num_outputs, "Target")
        if inputs.shape[0] != targets.shape[0]:
            raise ValidationError(
                f"The input set has {inputs.shape[0]} members but the target set has "
                f"{targets.shape[0]}"
            )
        return inputs, targets

    def _save(self, state: StoppingState, *, at_end: bool = False) -> None:
        path = self.checkpoint.path
        if path is None:
            raise ConfigError("A weights output file is required to save checkpoints")
        self.network.save_weights(path)
        state.checkpoints.append(state.iterations_completed)
        logger.info(
            "Saved weights %son iteration %d to %s",
            "at end " if at_end else "",
            state.iterations_completed,
            path.name,
        )

    def _emit_epoch(self, iteration: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(iteration, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(iteration, metrics)


__all__ = ["CheckpointPolicy", "Trainer"]
