"""ABCDNet public API."""

from .core import activations  # noqa: F401
from .core import errors  # noqa: F401
from .core import types  # noqa: F401
from .core.network import ABCDNetwork
from .core.types import StoppingState, Topology, TrainingConfig
from .config import build_network, load_network_config, read_control_file
from .training.trainer import CheckpointPolicy, Trainer

__all__ = [
    "ABCDNetwork",
    "CheckpointPolicy",
    "StoppingState",
    "Topology",
    "Trainer",
    "TrainingConfig",
    "activations",
    "build_network",
    "errors",
    "load_network_config",
    "read_control_file",
    "types",
]
