"""Exception taxonomy shared by the engine, the file formats and the CLI."""

from __future__ import annotations


class NetworkError(Exception):
    """Base class for every failure raised by :mod:`abcdnet`."""


class ConfigError(NetworkError, ValueError):
    """A configuration value is structurally impossible (bad sizes, empty range)."""


class NotFoundError(NetworkError, FileNotFoundError):
    """A referenced file does not exist."""


class MalformedInputError(NetworkError, ValueError):
    """A text format has the wrong token type or ends prematurely."""


class ValidationError(NetworkError, ValueError):
    """Parsed values are inconsistent with the network they are meant for."""


class CheckpointIOError(NetworkError, OSError):
    """Writing a weight checkpoint failed."""


__all__ = [
    "NetworkError",
    "ConfigError",
    "NotFoundError",
    "MalformedInputError",
    "ValidationError",
    "CheckpointIOError",
]
