"""Fixed parameters of the calibration rig: small board mounted on the big board."""

from __future__ import annotations

import numpy as np

SCALE_FACTOR = 0.137625838926174
"""Circle spacing of the small board divided by that of the big board."""

BIG_BOARD_SPACING_MM = 47.68
"""Distance between neighbouring circle centres on the big board, the unit length."""


def format_number(value: float) -> str:
    """A number in the short general form used for display, six significant digits."""
    return f"{float(value):.6g}"


def rig_matrix() -> np.ndarray:
    """4x4 transform taking small-board coordinates to big-board coordinates."""
    matrix = np.eye(4)
    matrix[0, 0] = -1.0
    matrix[1, 1] = 1.0
    matrix[2, 2] = -1.0
    matrix[0, 3] = 5.68817114093960
    matrix[1, 3] = 6.68590604026846
    matrix[2, 3] = -43.20469798657718
    return matrix


def rig_description(scale: float) -> str:
    """Explanatory note on the rig parameters and the board pattern."""
    pattern = "o\t\to\t\to\t\to\n\to\t\to\t\to\t\to\n" * 5 + "o\t\to\t\to\t\to"
    parts = [
        "RIG PARAMETERS ARE HARD CODED NUMBERS, CHANGE SOURCE CODE IF NEEDED",
        "d_small : vertical (=horizental) distance between two circle centers on small board",
        "d_big : vertical (=horizental) distance between two circle centers on big board",
        "scaling factor : sf = d_small / d_big = " + format_number(scale),
        f"unit length is d_big = {BIG_BOARD_SPACING_MM} mm",
        "pattern:",
        pattern,
        "(0,0,0) at the upper left circle center, x-axis to right, y-axis down",
        "\n4x4 matrix tells how to rotate/translate small board coordiante to the big board coordiante"
        "\ni.e., first 3 element of first column gives the big board x-axis observed in small board o-x-y-z"
        "\nassuming no translation",
    ]
    return "\n\n".join(parts)