"""Fixed-depth A-B-C-D feed-forward network trained by backpropagation."""

from __future__ import annotations

import math
from pathlib import Path
from typing import List, Sequence

import numpy as np

from ..data import weights as weights_io
from .activations import activation, activation_derivative
from .errors import ConfigError, ValidationError
from .types import ActivationState, Array, Topology, TrainingState


def _as_vector(values: Sequence[float] | Array, width: int, what: str) -> Array:
    try:
        vector = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"The provided {what} are not a numeric vector: {exc}") from exc
    if vector.shape != (width,):
        raise ValidationError(
            f"The provided number of {what} ({vector.size}) does not match "
            f"the network's number of {what} ({width})."
        )
    return vector


class ABCDNetwork:
    """Multilayer perceptron with one input, two hidden and one output layer.

    The depth is fixed, the activation is the hyperbolic tangent and training
    is strictly online: each example updates the weights before the next one
    is presented. Networks built with ``allocate_for_training=False`` only
    carry the units and the weights and can run but not train.
    """

    def __init__(
        self,
        topology: Topology | Sequence[int],
        *,
        allocate_for_training: bool = True,
    ) -> None:
        self.topology = Topology.from_sizes(topology)
        self.state = ActivationState.allocate(self.topology)
        self.weights: List[Array] = [
            np.zeros(shape, dtype=np.float64) for shape in self.topology.weight_shapes
        ]
        self.training: TrainingState | None = None
        if allocate_for_training:
            self.training = TrainingState.allocate(self.topology)

    # ------------------------------------------------------------------
    # Weights

    @property
    def allocated_for_training(self) -> bool:
        return self.training is not None

    def randomize_weights(
        self, low: float, high: float, rng: np.random.Generator | None = None
    ) -> None:
        """Draw every weight uniformly from ``[low, high)``."""

        if not (math.isfinite(low) and math.isfinite(high)) or low >= high:
            raise ConfigError(
                f"Random weight range [{low}, {high}) is empty; the minimum must be "
                "strictly below the maximum"
            )
        rng = rng or np.random.default_rng()
        for idx, shape in enumerate(self.topology.weight_shapes):
            self.weights[idx] = rng.uniform(low, high, size=shape)

    def set_weights(self, weights: Sequence[Array]) -> None:
        """Copy ``weights`` into the tensor after checking every shape."""

        expected = self.topology.weight_shapes
        if len(weights) != len(expected):
            raise ValidationError(
                f"Expected {len(expected)} weight matrices but got {len(weights)}"
            )
        staged = [np.array(w, dtype=np.float64) for w in weights]
        provided = [tuple(w.shape) for w in staged]
        if provided != expected:
            raise ValidationError(
                f"The provided weight shapes {provided} do not match the network "
                f"weight shapes {expected}."
            )
        self.weights = staged

    def load_weights(self, path: str | Path) -> None:
        _, loaded = weights_io.load(path, expected=self.topology)
        self.set_weights(loaded)

    def save_weights(self, path: str | Path) -> Path:
        return weights_io.save(path, self.topology, self.weights)

    # ------------------------------------------------------------------
    # Running

    @property
    def units(self) -> List[Array]:
        return self.state.units

    @property
    def outputs(self) -> Array:
        return self.state.units[-1]

    def _load_inputs(self, inputs: Sequence[float] | Array) -> None:
        self.state.units[0] = _as_vector(inputs, self.topology.num_inputs, "input units")

    def _execute_without_details(self) -> None:
        a = self.state.units
        for layer in range(1, len(a)):
            a[layer][:] = activation(a[layer - 1] @ self.weights[layer - 1])

    def run_on_member(self, inputs: Sequence[float] | Array) -> Array:
        """Propagate one input vector and return a copy of the outputs."""

        self._load_inputs(inputs)
        self._execute_without_details()
        return self.outputs.copy()

    def run_on_set(self, input_set: Sequence[Sequence[float]] | Array) -> Array:
        rows = [self.run_on_member(member) for member in input_set]
        if not rows:
            return np.zeros((0, self.topology.num_outputs), dtype=np.float64)
        return np.vstack(rows)

    # ------------------------------------------------------------------
    # Training

    def _require_training(self) -> TrainingState:
        if self.training is None:
            raise ConfigError("The network was not allocated for training")
        return self.training

    def _execute_with_details(self) -> None:
        training = self._require_training()
        a = self.state.units
        theta = training.theta
        for layer in (1, 2):
            np.dot(a[layer - 1], self.weights[layer - 1], out=theta[layer])
            a[layer][:] = activation(theta[layer])

        net = a[2] @ self.weights[2]
        a[3][:] = activation(net)
        training.psi[3][:] = (training.targets - a[3]) * activation_derivative(net)

    def _backpropagate(self, learning_rate: float) -> None:
        training = self._require_training()
        a = self.state.units
        theta, psi = training.theta, training.psi
        w = self.weights

        # hidden-2 -> output; omega reads w[2] before it is updated
        omega_j = w[2] @ psi[3]
        w[2] += learning_rate * np.outer(a[2], psi[3])
        psi[2][:] = omega_j * activation_derivative(theta[2])

        # hidden-1 -> hidden-2, then input -> hidden-1 from the transient psi_k
        omega_k = w[1] @ psi[2]
        w[1] += learning_rate * np.outer(a[1], psi[2])
        psi_k = omega_k * activation_derivative(theta[1])
        w[0] += learning_rate * np.outer(a[0], psi_k)

    def train_on_member(
        self,
        inputs: Sequence[float] | Array,
        targets: Sequence[float] | Array,
        learning_rate: float,
    ) -> None:
        """Run the detailed forward pass and apply one backpropagation step."""

        training = self._require_training()
        self._load_inputs(inputs)
        training.targets = _as_vector(targets, self.topology.num_outputs, "output units")
        self._execute_with_details()
        self._backpropagate(learning_rate)

    def error(self) -> float:
        """Half the squared error between the targets and the last outputs."""

        training = self._require_training()
        diff = training.targets - self.outputs
        return float(0.5 * np.dot(diff, diff))

    def __repr__(self) -> str:
        return (
            f"ABCDNetwork(topology={self.topology.describe()}, "
            f"allocate_for_training={self.allocated_for_training})"
        )


__all__ = ["ABCDNetwork"]
