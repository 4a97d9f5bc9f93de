"""Core numerical primitives for ABCDNet."""

from . import activations, errors, types
from .network import ABCDNetwork

__all__ = ["ABCDNetwork", "activations", "errors", "types"]
