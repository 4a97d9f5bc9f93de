"""Weight checkpoint format.

A checkpoint is plain text::

    NUM_LAYERS:4
    LAYER_SIZES:2-2-2-1

    w[0][0][0],w[0][0][1]
    w[0][1][0],w[0][1][1]

    ...

Each of the three weight matrices is preceded by a blank line and written as
one comma-separated row per source unit. Values use Python's shortest
round-trip float representation, so a save followed by a load reproduces the
tensor exactly.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence, Tuple

import numpy as np

from ..core.errors import CheckpointIOError, ValidationError
from ..core.types import NUM_LAYERS, Array, Topology
from .text import FieldReader, format_row, read_text

_SOURCE = "weights file"


def dumps(topology: Topology, weights: Sequence[Array]) -> str:
    """Serialise ``weights`` for ``topology`` to the checkpoint text layout."""

    lines = [f"NUM_LAYERS:{NUM_LAYERS}", f"LAYER_SIZES:{topology.describe()}"]
    for matrix in weights:
        lines.append("")
        lines.extend(format_row(row) for row in matrix)
    return "\n".join(lines) + "\n"


def _check_sizes(num_layers: int, sizes: List[int], expected: Topology | None) -> Topology:
    if num_layers != NUM_LAYERS:
        raise ValidationError(
            f"Invalid {_SOURCE}. The provided number of layers ({num_layers}) does not "
            f"match the network number of layers ({NUM_LAYERS})."
        )
    provided = "-".join(str(size) for size in sizes)
    if len(sizes) != num_layers:
        raise ValidationError(
            f"Invalid {_SOURCE}. NUM_LAYERS declares {num_layers} layers but "
            f"LAYER_SIZES lists {len(sizes)} ({provided})."
        )
    if expected is not None and tuple(sizes) != expected.layer_sizes:
        raise ValidationError(
            f"Invalid {_SOURCE}. The provided layer sizes ({provided}) do not match "
            f"the network layer sizes ({expected.describe()})."
        )
    try:
        return Topology.from_sizes(sizes)
    except ValueError as exc:
        raise ValidationError(f"Invalid {_SOURCE}. {exc}") from exc


def loads(text: str, expected: Topology | None = None) -> Tuple[Topology, List[Array]]:
    """Parse checkpoint ``text``.

    The header is validated against ``expected`` before any weight row is read.
    """

    reader = FieldReader(text, _SOURCE)
    num_layers = reader.integer("NUM_LAYERS")
    sizes = reader.sizes("LAYER_SIZES")
    topology = _check_sizes(num_layers, sizes, expected)

    weights: List[Array] = []
    for src, dest in topology.weight_shapes:
        reader.blank()
        weights.append(np.vstack([reader.row(dest) for _ in range(src)]))
    reader.expect_end()
    return topology, weights


def save(path: str | Path, topology: Topology, weights: Sequence[Array]) -> Path:
    """Write a checkpoint to ``path``, creating parent directories."""

    path = Path(path)
    payload = dumps(topology, weights)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(payload, encoding="utf-8")
    except OSError as exc:
        raise CheckpointIOError(
            f"IO exception encountered while writing weights to {path}: {exc}"
        ) from exc
    return path


def load(path: str | Path, expected: Topology | None = None) -> Tuple[Topology, List[Array]]:
    return loads(read_text(path, "Weights input file"), expected=expected)


__all__ = ["dumps", "loads", "save", "load"]
