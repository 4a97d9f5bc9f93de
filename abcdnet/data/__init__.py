"""File formats for ABCDNet: weight checkpoints and example sets."""

from . import sets, text, weights

__all__ = ["sets", "text", "weights"]
