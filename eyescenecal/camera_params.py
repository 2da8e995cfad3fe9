"""Saving single-camera calibration results and naming captured image files."""

from __future__ import annotations

from pathlib import Path

import numpy as np

from eyescenecal.pose import rodrigues
from eyescenecal.storage import PathLike, format_row, write_matrix_text, write_opencv_yaml


def _vectors(values, what: str) -> list[np.ndarray]:
    vectors = []
    for value in values:
        array = np.asarray(value, dtype=np.float64).ravel()
        if array.size != 3:
            raise ValueError(f"every {what} must have three components")
        vectors.append(array)
    return vectors


def _lines(rows) -> str:
    return "".join(format_row(row) + "\n" for row in rows)


def save_camera_parameters(directory: PathLike, camera_matrix, dist_coeffs, rvecs, tvecs) -> list[Path]:
    """Write intrinsics, distortion and per-view poses into a directory.

    Produces cam.txt, cam.yaml, dst.txt, dst.yaml, rvecs.txt, tvecs.txt and
    rmats.txt, and returns their paths in that order.
    """
    folder = Path(directory)
    camera = np.asarray(camera_matrix, dtype=np.float64)
    if camera.shape != (3, 3):
        raise ValueError(f"camera matrix must be 3x3, found {camera.shape}")
    distortion = np.asarray(dist_coeffs, dtype=np.float64).ravel()
    if distortion.size != 5:
        raise ValueError("distortion must hold five coefficients")
    rotations = _vectors(rvecs, "rotation vector")
    translations = _vectors(tvecs, "translation vector")
    if len(rotations) != len(translations):
        raise ValueError("rotation and translation vector counts differ")

    paths = {
        name: folder / name
        for name in ("cam.txt", "cam.yaml", "dst.txt", "dst.yaml", "rvecs.txt", "tvecs.txt", "rmats.txt")
    }

    write_matrix_text(paths["cam.txt"], camera)
    write_opencv_yaml(paths["cam.yaml"], "intrinsic", camera)

    paths["dst.txt"].write_text(format_row(distortion) + "\t")
    write_opencv_yaml(paths["dst.yaml"], "distortion", distortion.reshape(5, 1))

    paths["rvecs.txt"].write_text(_lines(rotations))
    paths["tvecs.txt"].write_text(_lines(translations))
    paths["rmats.txt"].write_text(
        _lines(row for rvec in rotations for row in rodrigues(rvec))
    )
    return list(paths.values())


def numbered_file_names(directory: PathLike, stem: str, count: int) -> list[Path]:
    """Paths directory/stem.0.bmp, directory/stem.1.bmp, ... for count images."""
    if count < 0:
        raise ValueError("count must not be negative")
    folder = Path(directory)
    return [folder / f"{stem}.{index}.bmp" for index in range(count)]