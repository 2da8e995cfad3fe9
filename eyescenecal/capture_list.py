"""Captured calibration images with their detected circle-grid centres."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np

BOARD_SIZE = (4, 11)
"""Circles per row and number of rows of the asymmetric circle grid."""


@dataclass(frozen=True)
class Capture:
    """One captured image, the circle centres found in it and whether the grid was found."""

    centers: tuple[tuple[float, float], ...]
    found: bool
    image: Any = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "centers", tuple((float(x), float(y)) for x, y in self.centers)
        )
        object.__setattr__(self, "found", bool(self.found))


class CaptureList:
    """Ordered list of captures, oldest first."""

    def __init__(self, captures: Sequence[Capture] = ()) -> None:
        self._captures: list[Capture] = list(captures)

    def append(self, capture: Capture) -> None:
        """Add a capture at the end of the list."""
        self._captures.append(capture)

    def remove(self, index: int) -> Capture:
        """Remove and return the capture at the given position."""
        if not -len(self._captures) <= index < len(self._captures):
            raise IndexError(f"no capture at position {index}")
        return self._captures.pop(index)

    def remove_bad(self) -> int:
        """Drop every capture in which the grid was not found; return how many went."""
        before = len(self._captures)
        self._captures = [capture for capture in self._captures if capture.found]
        return before - len(self._captures)

    def __len__(self) -> int:
        return len(self._captures)

    def __iter__(self) -> Iterator[Capture]:
        return iter(self._captures)

    def __getitem__(self, index: int) -> Capture:
        return self._captures[index]

    def centers(self) -> list[list[tuple[float, float]]]:
        """Circle centres of every capture, in list order."""
        return [list(capture.centers) for capture in self._captures]

    def all_found(self) -> bool:
        """Whether the grid was found in every capture."""
        return all(capture.found for capture in self._captures)


def board_object_points(width: int, height: int) -> np.ndarray:
    """Object points of an asymmetric circle grid, row by row, shape (width*height, 3)."""
    if width <= 0 or height <= 0:
        raise ValueError("board width and height must be positive")
    return np.array(
        [
            (float(2 * col + row % 2), float(row), 0.0)
            for row in range(height)
            for col in range(width)
        ]
    )