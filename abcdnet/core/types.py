"""Core typing contracts for ABCDNet."""

from __future__ import annotations

import numbers
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .errors import ConfigError

Array = np.ndarray

NUM_LAYERS = 4


@dataclass(frozen=True)
class Topology:
    """Layer sizes of the input, hidden-1, hidden-2 and output layers."""

    layer_sizes: Tuple[int, ...]

    def __post_init__(self) -> None:
        if len(self.layer_sizes) != NUM_LAYERS:
            raise ConfigError(
                f"Expected {NUM_LAYERS} layer sizes but got {len(self.layer_sizes)}: "
                f"{list(self.layer_sizes)}"
            )
        for size in self.layer_sizes:
            if isinstance(size, bool) or not isinstance(size, numbers.Integral):
                raise ConfigError(f"Layer sizes must be integers, got {size!r}")
            if size < 1:
                raise ConfigError(f"Layer sizes must be positive, got {list(self.layer_sizes)}")

    @classmethod
    def from_sizes(cls, sizes: Sequence[int] | "Topology") -> "Topology":
        if isinstance(sizes, Topology):
            return sizes
        try:
            values = tuple(sizes)
        except TypeError as exc:
            raise ConfigError(f"Layer sizes must be a sequence, got {sizes!r}") from exc
        topology = cls(values)
        return cls(tuple(int(size) for size in topology.layer_sizes))

    @property
    def num_inputs(self) -> int:
        return self.layer_sizes[0]

    @property
    def num_outputs(self) -> int:
        return self.layer_sizes[-1]

    @property
    def hidden_sizes(self) -> Tuple[int, ...]:
        return self.layer_sizes[1:-1]

    @property
    def weight_shapes(self) -> List[Tuple[int, int]]:
        sizes = self.layer_sizes
        return [(src, dest) for src, dest in zip(sizes[:-1], sizes[1:])]

    def describe(self) -> str:
        return "-".join(str(size) for size in self.layer_sizes)


@dataclass
class ActivationState:
    """Unit values of every layer, overwritten on each forward pass."""

    units: List[Array]

    @classmethod
    def allocate(cls, topology: Topology) -> "ActivationState":
        return cls(units=[np.zeros(size, dtype=np.float64) for size in topology.layer_sizes])


@dataclass
class TrainingState:
    """Bookkeeping captured by the detailed forward pass.

    ``theta`` is only kept for the two hidden layers and ``psi`` only for
    hidden-2 and the output layer; the remaining slots stay ``None``.
    """

    theta: List[Optional[Array]]
    psi: List[Optional[Array]]
    targets: Array

    @classmethod
    def allocate(cls, topology: Topology) -> "TrainingState":
        sizes = topology.layer_sizes
        theta: List[Optional[Array]] = [None] * NUM_LAYERS
        psi: List[Optional[Array]] = [None] * NUM_LAYERS
        for layer in (1, 2):
            theta[layer] = np.zeros(sizes[layer], dtype=np.float64)
        for layer in (2, 3):
            psi[layer] = np.zeros(sizes[layer], dtype=np.float64)
        return cls(theta=theta, psi=psi, targets=np.zeros(sizes[-1], dtype=np.float64))


@dataclass(frozen=True)
class TrainingConfig:
    """Parameters of a single training run."""

    learning_rate: float
    error_threshold: float
    max_iterations: int

    def __post_init__(self) -> None:
        if self.max_iterations < 1:
            raise ConfigError(
                f"max_iterations must be at least 1, got {self.max_iterations}"
            )


@dataclass
class StoppingState:
    """Progress of the most recent ``train_on_set`` call."""

    iterations_completed: int = 0
    max_iterations_reached: bool = False
    error_threshold_satisfied: bool = False
    worst_example_error: float = 0.0
    checkpoints: List[int] = field(default_factory=list)

    @property
    def stopped(self) -> bool:
        return self.max_iterations_reached or self.error_threshold_satisfied
