"""Readers and writers for input and target example-set files.

Three layouts are supported:

* a *set* file declaring ``NUM_INPUT_UNITS`` (or ``NUM_OUTPUT_UNITS`` for
  targets) and ``NUM_MEMBERS``, a blank line, then one comma-separated row per
  member;
* a *member* file declaring ``NUM_INPUT_UNITS`` followed by a single row;
* a *super* file declaring ``NUM_MEMBERS``, a blank line, then one member-file
  path per line.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import numpy as np

from ..core.errors import ValidationError
from ..core.types import Array
from .text import FieldReader, format_row, read_text

_KINDS = {
    "input": ("NUM_INPUT_UNITS", "input units"),
    "target": ("NUM_OUTPUT_UNITS", "output units"),
}
_MEMBERS = "NUM_MEMBERS"


def _units_label(kind: str) -> tuple[str, str]:
    try:
        return _KINDS[kind]
    except KeyError as exc:
        raise ValueError(f"Unknown set kind: {kind!r}") from exc


def _check_width(declared: int, width: int, kind: str, source: str) -> None:
    _, noun = _units_label(kind)
    if declared != width:
        raise ValidationError(
            f"Invalid {source}. The provided number of {noun} ({declared}) does not "
            f"match the network's number of {noun} ({width})."
        )


def _read_rows(reader: FieldReader, count: int, width: int) -> Array:
    if count < 0:
        raise ValidationError(f"Invalid {reader.source}. {_MEMBERS} must not be negative")
    if count == 0:
        reader.expect_end()
        return np.zeros((0, width), dtype=np.float64)
    reader.blank()
    rows = np.vstack([reader.row(width) for _ in range(count)])
    reader.expect_end()
    return rows


def read_set(path: str | Path, width: int, kind: str = "input") -> Array:
    """Read a simple set file whose rows are ``width`` wide."""

    label, _ = _units_label(kind)
    source = f"{kind} set file"
    reader = FieldReader(read_text(path, f"{kind.capitalize()} set file"), source)
    declared = reader.integer(label)
    _check_width(declared, width, kind, source)
    count = reader.integer(_MEMBERS)
    return _read_rows(reader, count, width)


def read_member(path: str | Path, width: int) -> Array:
    """Read a single-member input file."""

    source = "input member file"
    reader = FieldReader(read_text(path, "Input member file"), source)
    declared = reader.integer(_KINDS["input"][0])
    _check_width(declared, width, "input", source)
    row = reader.row(width)
    reader.expect_end()
    return row


def read_super_set(path: str | Path, width: int) -> Array:
    """Read a super file listing one member file per example."""

    source = "super input set file"
    reader = FieldReader(read_text(path, "Super input file"), source)
    count = reader.integer(_MEMBERS)
    if count < 0:
        raise ValidationError(f"Invalid {source}. {_MEMBERS} must not be negative")
    reader.blank()
    paths = [reader.line("a member file path") for _ in range(count)]
    reader.expect_end()
    members = [read_member(member, width) for member in paths]
    if not members:
        return np.zeros((0, width), dtype=np.float64)
    return np.vstack(members)


def read_input_set(path: str | Path, width: int) -> Array:
    """Read an input set, accepting either the simple or the super layout."""

    reader = FieldReader(read_text(path, "Input set file"), "input set file")
    if reader.peek_label().upper() == _MEMBERS:
        return read_super_set(path, width)
    return read_set(path, width, kind="input")


def read_target_set(path: str | Path, width: int) -> Array:
    return read_set(path, width, kind="target")


def write_set(path: str | Path, rows: Sequence[Sequence[float]] | Array, kind: str = "input") -> Path:
    """Write ``rows`` in the simple set layout."""

    label, _ = _units_label(kind)
    matrix = np.atleast_2d(np.asarray(rows, dtype=np.float64))
    lines = [f"{label}:{matrix.shape[1]}", f"{_MEMBERS}:{matrix.shape[0]}", ""]
    lines.extend(format_row(row) for row in matrix)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def write_member(path: str | Path, values: Sequence[float] | Array) -> Path:
    vector = np.asarray(values, dtype=np.float64).ravel()
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        f"{_KINDS['input'][0]}:{vector.size}\n{format_row(vector)}\n", encoding="utf-8"
    )
    return path


def write_super_set(path: str | Path, member_paths: Sequence[str | Path]) -> Path:
    lines = [f"{_MEMBERS}:{len(member_paths)}", ""]
    lines.extend(str(member) for member in member_paths)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


__all__ = [
    "read_set",
    "read_member",
    "read_super_set",
    "read_input_set",
    "read_target_set",
    "write_set",
    "write_member",
    "write_super_set",
]
