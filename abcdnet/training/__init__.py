"""Training loops for ABCDNet."""

from .trainer import CheckpointPolicy, Trainer

__all__ = ["CheckpointPolicy", "Trainer"]
