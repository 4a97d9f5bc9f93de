"""Network configuration and control files."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

import numpy as np

from .core.errors import ConfigError, MalformedInputError, NetworkError
from .core.network import ABCDNetwork
from .core.types import Topology, TrainingConfig
from .data.text import FieldReader, read_text
from .training.trainer import CheckpointPolicy

DEFAULT_CONTROL_FILE = Path("control") / "default.txt"


@dataclass(frozen=True)
class WeightInit:
    """How the weights of a freshly built network are initialised."""

    randomize: bool
    low: float
    high: float
    input_path: Path | None = None
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.randomize and not self.low < self.high:
            raise ConfigError(
                f"RANDOM_WEIGHT_MIN ({self.low}) must be below RANDOM_WEIGHT_MAX ({self.high})"
            )
        if not self.randomize and self.input_path is None:
            raise ConfigError("A weights input file is required when weights are not randomized")

    def describe(self) -> str:
        if self.randomize:
            return f"Randomized weights in the range [{self.low},{self.high})"
        return f"Loaded weights from file {self.input_path}"


@dataclass(frozen=True)
class NetworkConfig:
    topology: Topology
    weight_init: WeightInit
    allocate_for_training: bool
    training: TrainingConfig
    checkpoint: CheckpointPolicy


@dataclass(frozen=True)
class ControlFile:
    """Which configuration and example sets to use, and whether to train."""

    train: bool
    network_config: Path
    input_set: Path
    target_set: Path


def _optional_path(value: str | None) -> Path | None:
    if value is None or not str(value).strip():
        return None
    return Path(str(value).strip())


def parse_network_config(text: str, source: str = "network configuration file") -> NetworkConfig:
    """Parse the sectioned ``LABEL:value`` network configuration layout."""

    reader = FieldReader(text, source)
    topology = Topology.from_sizes(reader.sizes("LAYER_SIZES"))

    randomize = reader.boolean("randomizeWeights")
    low = reader.real("RANDOM_WEIGHT_MIN")
    high = reader.real("RANDOM_WEIGHT_MAX")
    weights_in = _optional_path(reader.field("weightsInputFilename"))

    allocate = reader.boolean("allocateForTraining")
    training = TrainingConfig(
        learning_rate=reader.real("lambda"),
        error_threshold=reader.real("errorThreshold"),
        max_iterations=reader.integer("maxIterations"),
    )

    weights_out = _optional_path(reader.field("weightsOutputFilename"))
    save_every = reader.integer("saveWeightsEvery")
    save_at_end = reader.boolean("saveWeightsAtEnd")

    return NetworkConfig(
        topology=topology,
        weight_init=WeightInit(randomize, low, high, weights_in),
        allocate_for_training=allocate,
        training=training,
        checkpoint=CheckpointPolicy(weights_out, save_every, save_at_end),
    )


def _section(data: Mapping[str, object], key: str) -> Mapping[str, object]:
    value = data.get(key, {})
    if not isinstance(value, Mapping):
        raise MalformedInputError(f"Configuration section {key!r} must be a mapping")
    return value


def _flag(section: Mapping[str, object], key: str, default: bool) -> bool:
    value = section.get(key, default)
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
        return value.strip().lower() == "true"
    raise MalformedInputError(f"Configuration key {key!r} must be true or false, got {value!r}")


def config_from_mapping(data: Mapping[str, object]) -> NetworkConfig:
    """Build a :class:`NetworkConfig` from a decoded JSON/YAML mapping."""

    if "layer_sizes" not in data:
        raise MalformedInputError("Configuration is missing required key 'layer_sizes'")
    sizes = data["layer_sizes"]
    if isinstance(sizes, str):
        try:
            sizes = [int(token) for token in sizes.split("-")]
        except ValueError as exc:
            raise MalformedInputError(f"Invalid layer_sizes: {data['layer_sizes']!r}") from exc
    weights = _section(data, "weights")
    training = _section(data, "training")
    output = _section(data, "output")
    try:
        seed = weights.get("seed")
        return NetworkConfig(
            topology=Topology.from_sizes(sizes),  # type: ignore[arg-type]
            weight_init=WeightInit(
                randomize=_flag(weights, "randomize", True),
                low=float(weights.get("min", -1.0)),  # type: ignore[arg-type]
                high=float(weights.get("max", 1.0)),  # type: ignore[arg-type]
                input_path=_optional_path(weights.get("input_file")),  # type: ignore[arg-type]
                seed=None if seed is None else int(seed),  # type: ignore[arg-type]
            ),
            allocate_for_training=_flag(training, "allocate", True),
            training=TrainingConfig(
                learning_rate=float(training.get("learning_rate", 0.3)),  # type: ignore[arg-type]
                error_threshold=float(training.get("error_threshold", 2e-4)),  # type: ignore[arg-type]
                max_iterations=int(training.get("max_iterations", 100_000)),  # type: ignore[arg-type]
            ),
            checkpoint=CheckpointPolicy(
                path=_optional_path(output.get("file")),  # type: ignore[arg-type]
                save_every=int(output.get("save_every", 0)),  # type: ignore[arg-type]
                save_at_end=_flag(output, "save_at_end", False),
            ),
        )
    except NetworkError:
        raise
    except (TypeError, ValueError) as exc:
        raise MalformedInputError(f"Invalid network configuration: {exc}") from exc


def _read_mapping(path: Path, text: str) -> Mapping[str, object]:
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except ImportError as exc:
            raise ConfigError("PyYAML is required to load YAML network configurations") from exc
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise MalformedInputError(f"Invalid network configuration {path.name}: {exc}") from exc
    else:
        try:
            data = json.loads(text or "{}")
        except json.JSONDecodeError as exc:
            raise MalformedInputError(f"Invalid network configuration {path.name}: {exc}") from exc
    if not isinstance(data, Mapping):
        raise MalformedInputError(f"Network configuration {path.name} must decode to a mapping")
    return data


def load_network_config(path: str | Path) -> NetworkConfig:
    """Read a network configuration from the text, JSON or YAML layout."""

    path = Path(path)
    text = read_text(path, "Network configuration file")
    if path.suffix.lower() in {".json", ".yaml", ".yml"}:
        return config_from_mapping(_read_mapping(path, text))
    return parse_network_config(text)


def build_network(config: NetworkConfig, rng: np.random.Generator | None = None) -> ABCDNetwork:
    """Allocate a network for ``config`` and initialise its weights."""

    network = ABCDNetwork(config.topology, allocate_for_training=config.allocate_for_training)
    init = config.weight_init
    if init.randomize:
        if rng is None and init.seed is not None:
            rng = np.random.default_rng(init.seed)
        network.randomize_weights(init.low, init.high, rng=rng)
    else:
        if init.input_path is None:
            raise ConfigError("A weights input file is required when weights are not randomized")
        network.load_weights(init.input_path)
    return network


def read_control_file(path: str | Path) -> ControlFile:
    reader = FieldReader(read_text(path, "Control file"), "control file")
    train = reader.boolean("doTrainNotRun")
    paths = [
        _optional_path(reader.field(label))
        for label in ("networkConfigurationFilename", "inputSetFilename", "targetSetFilename")
    ]
    if any(p is None for p in paths):
        raise MalformedInputError("Invalid control file. Every file name must be provided.")
    network_config, input_set, target_set = paths
    return ControlFile(train, network_config, input_set, target_set)  # type: ignore[arg-type]


__all__ = [
    "ControlFile",
    "DEFAULT_CONTROL_FILE",
    "NetworkConfig",
    "WeightInit",
    "build_network",
    "config_from_mapping",
    "load_network_config",
    "parse_network_config",
    "read_control_file",
]
