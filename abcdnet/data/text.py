"""Line reader shared by the ``LABEL:value`` text formats."""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

import numpy as np

from ..core.errors import MalformedInputError, NotFoundError
from ..core.types import Array

_TRUE = {"true"}
_FALSE = {"false"}


def read_text(path: str | Path, what: str) -> str:
    """Return the contents of ``path`` or raise :class:`NotFoundError`."""

    path = Path(path)
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise NotFoundError(f"{what} not found: {path}") from exc
    except IsADirectoryError as exc:
        raise NotFoundError(f"{what} is a directory, not a file: {path}") from exc
    except UnicodeDecodeError as exc:
        raise MalformedInputError(f"{what} is not valid UTF-8 text: {path}") from exc


class FieldReader:
    """Sequential reader over header fields, blank separators and comma rows."""

    def __init__(self, text: str, source: str) -> None:
        self.source = source
        self._lines = text.splitlines()
        self._pos = 0

    # ------------------------------------------------------------------
    # Low level

    def _fail(self, message: str) -> MalformedInputError:
        return MalformedInputError(f"Invalid {self.source} (line {self._pos}): {message}")

    def _skip_blank(self) -> None:
        while self._pos < len(self._lines) and not self._lines[self._pos].strip():
            self._pos += 1

    def _next_raw(self, expecting: str) -> str:
        if self._pos >= len(self._lines):
            raise self._fail(f"ran out of data while expecting {expecting}")
        line = self._lines[self._pos]
        self._pos += 1
        return line.strip()

    def line(self, expecting: str = "a value") -> str:
        """Return the next non-blank line."""

        self._skip_blank()
        return self._next_raw(expecting)

    def blank(self) -> None:
        """Consume one blank separator line."""

        line = self._next_raw("a blank separator line")
        if line:
            raise self._fail(f"expected a blank separator line but found {line!r}")

    def at_end(self) -> bool:
        self._skip_blank()
        return self._pos >= len(self._lines)

    def expect_end(self) -> None:
        """Require that only blank lines remain."""

        if not self.at_end():
            line = self._lines[self._pos].strip()
            self._pos += 1
            raise self._fail(f"unexpected data after the declared rows: {line!r}")

    def peek_label(self) -> str:
        """Return the label of the next field without consuming it."""

        start = self._pos
        try:
            label, _ = self._split(self.line("a labelled field"))
        finally:
            self._pos = start
        return label

    def _split(self, line: str) -> Tuple[str, str]:
        label, sep, value = line.partition(":")
        if not sep:
            raise self._fail(f"expected 'LABEL:value' but found {line!r}")
        return label.strip(), value.strip()

    # ------------------------------------------------------------------
    # Typed fields

    def field(self, label: str) -> str:
        found, value = self._split(self.line(f"the field {label!r}"))
        if found.lower() != label.lower():
            raise self._fail(f"expected the field {label!r} but found {found!r}")
        return value

    def integer(self, label: str) -> int:
        value = self.field(label)
        try:
            return int(value)
        except ValueError:
            raise self._fail(f"{label} must be an integer, got {value!r}") from None

    def real(self, label: str) -> float:
        value = self.field(label)
        try:
            return float(value)
        except ValueError:
            raise self._fail(f"{label} must be a number, got {value!r}") from None

    def boolean(self, label: str) -> bool:
        value = self.field(label)
        lowered = value.lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise self._fail(f"{label} must be 'true' or 'false', got {value!r}")

    def sizes(self, label: str) -> List[int]:
        value = self.field(label)
        try:
            return [int(token) for token in value.split("-")]
        except ValueError:
            raise self._fail(
                f"{label} must be hyphen-separated integers, got {value!r}"
            ) from None

    def row(self, width: int) -> Array:
        """Parse the next line as exactly ``width`` comma-separated floats."""

        line = self._next_raw(f"a row of {width} values")
        tokens = [token.strip() for token in line.split(",")] if line else []
        if len(tokens) != width:
            raise self._fail(f"expected {width} comma-separated values but found {len(tokens)}")
        try:
            return np.array([float(token) for token in tokens], dtype=np.float64)
        except ValueError:
            raise self._fail(f"row contains a non-numeric value: {line!r}") from None


def format_row(values: Array) -> str:
    """Render a vector as a comma-separated row that parses back exactly."""

    return ",".join(repr(float(value)) for value in values)


__all__ = ["FieldReader", "format_row", "read_text"]
