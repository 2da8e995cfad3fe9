"""Reading and writing camera parameter files: plain text tables and OpenCV-style YAML."""

from __future__ import annotations

import math
import os
import re
from collections.abc import Iterable
from pathlib import Path

import numpy as np

PathLike = str | os.PathLike

_DTYPES = {
    "u": np.uint8,
    "c": np.int8,
    "w": np.uint16,
    "s": np.int16,
    "i": np.int32,
    "f": np.float32,
    "d": np.float64,
}

_VALUES_PER_LINE = 4


class StorageError(Exception):
    """A parameter file could not be read or holds unusable data."""


def format_row(values: Iterable[float]) -> str:
    """Values in scientific notation with 15 digits after the point, tab separated."""
    return "\t".join(f"{float(value):.15e}" for value in values)


def write_matrix_text(path: PathLike, matrix) -> None:
    """Write a matrix as text, each value followed by a tab, one row per line."""
    rows = np.atleast_2d(np.asarray(matrix, dtype=np.float64))
    Path(path).write_text("".join(format_row(row) + "\t\n" for row in rows))


def _format_value(value, code: str) -> str:
    if code in ("f", "d"):
        number = float(value)
        if math.isnan(number):
            return ".Nan"
        if math.isinf(number):
            return ".Inf" if number > 0 else "-.Inf"
        return repr(number)
    return str(int(value))


def _parse_value(token: str) -> float:
    lowered = token.lower()
    special = {".nan": math.nan, ".inf": math.inf, "+.inf": math.inf, "-.inf": -math.inf}
    if lowered in special:
        return special[lowered]
    try:
        return float(token)
    except ValueError as exc:
        raise StorageError(f"bad matrix value {token!r}") from exc


def write_opencv_yaml(path: PathLike, name: str, matrix) -> None:
    """Write a matrix under the given name as an OpenCV YAML matrix node."""
    array = np.asarray(matrix)
    if array.ndim == 1:
        array = array.reshape(-1, 1)
    if array.ndim != 2:
        raise StorageError("only two-dimensional matrices can be stored")
    code = next((c for c, dtype in _DTYPES.items() if array.dtype == dtype), None)
    if code is None:
        array = array.astype(np.float64)
        code = "d"
    values = [_format_value(value, code) for value in array.ravel()]
    chunks = [
        ", ".join(values[start : start + _VALUES_PER_LINE])
        for start in range(0, len(values), _VALUES_PER_LINE)
    ]
    data = ",\n       ".join(chunks)
    rows, cols = array.shape
    Path(path).write_text(
        "%YAML:1.0\n"
        "---\n"
        f"{name}: !!opencv-matrix\n"
        f"   rows: {rows}\n"
        f"   cols: {cols}\n"
        f"   dt: {code}\n"
        f"   data: [ {data} ]\n"
    )


def _field(block: str, key: str, pattern: str, path: PathLike, name: str) -> str:
    match = re.search(rf"^\s*{key}\s*:\s*{pattern}", block, re.M)
    if match is None:
        raise StorageError(f"matrix {name!r} in {path} has no {key}")
    return match.group(1)


def read_opencv_yaml(path: PathLike, name: str) -> np.ndarray:
    """Read the OpenCV YAML matrix node with the given name."""
    try:
        text = Path(path).read_text()
    except OSError as exc:
        raise StorageError(f"cannot open {path}: {exc}") from exc

    header = re.search(
        rf"^{re.escape(name)}[ \t]*:[ \t]*!!opencv-matrix[ \t]*$", text, re.M
    )
    if header is None:
        raise StorageError(f"no matrix named {name!r} in {path}")
    body = text[header.end() :]
    following = re.search(r"^\S", body, re.M)
    block = body if following is None else body[: following.start()]

    rows = int(_field(block, "rows", r"(\d+)", path, name))
    cols = int(_field(block, "cols", r"(\d+)", path, name))
    code = _field(block, "dt", r"\"?(\w+)\"?", path, name)
    if code not in _DTYPES:
        raise StorageError(f"unsupported element type {code!r} in {path}")

    data = re.search(r"data\s*:\s*\[(.*?)\]", block, re.S)
    if data is None:
        raise StorageError(f"matrix {name!r} in {path} has no data")
    tokens = [token.strip() for token in data.group(1).split(",") if token.strip()]
    if len(tokens) != rows * cols:
        raise StorageError(
            f"matrix {name!r} in {path} declares {rows}x{cols} but holds {len(tokens)} values"
        )
    values = [_parse_value(token) for token in tokens]
    return np.array(values, dtype=_DTYPES[code]).reshape(rows, cols)


def _load_double_matrix(path: PathLike, name: str, shape: tuple[int, int], what: str) -> np.ndarray:
    matrix = read_opencv_yaml(path, name)
    if matrix.size == 0:
        raise StorageError(f"no data found in {what}")
    if matrix.shape != shape:
        raise StorageError(f"{what} must be {shape[0]}x{shape[1]}, found {matrix.shape}")
    if matrix.dtype != np.float64:
        raise StorageError(f"{what} must hold double values")
    return matrix


def load_camera_matrix(path: PathLike) -> np.ndarray:
    """Read the 3x3 camera matrix stored under "intrinsic"."""
    return _load_double_matrix(path, "intrinsic", (3, 3), "camera matrix")


def load_distortion(path: PathLike) -> np.ndarray:
    """Read the 5x1 distortion vector stored under "distortion"."""
    return _load_double_matrix(path, "distortion", (5, 1), "distortion vector")