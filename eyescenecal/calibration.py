"""Eye-to-scene camera transform from image pairs of the two-board calibration rig."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from eyescenecal.pose import PoseError, pose_matrix, solve_pnp

logger = logging.getLogger(__name__)

BOARD_COLUMNS = 4
"""Circles per row of the asymmetric circle grid."""

BOARD_ROWS = 11
"""Rows of the asymmetric circle grid."""


class CalibrationError(Exception):
    """The calibration inputs are unusable or no image pair gave a pose."""


def big_board_points() -> np.ndarray:
    """Circle centres of the big board in its own coordinates, row by row, shape (44, 3)."""
    return np.array(
        [
            (float(BOARD_ROWS - 1 - row), float(2 * col + row % 2), 0.0)
            for row in range(BOARD_ROWS)
            for col in range(BOARD_COLUMNS)
        ]
    )


def small_board_points(scale: float) -> np.ndarray:
    """Circle centres of the small board, the big board's layout shrunk by the scale."""
    return big_board_points() * float(scale)


def _matrix(value, shape: tuple[int, int], what: str) -> np.ndarray:
    array = np.asarray(value, dtype=np.float64)
    if array.shape != shape:
        raise CalibrationError(f"{what} must be {shape[0]}x{shape[1]}, found {array.shape}")
    if not np.isfinite(array).all():
        raise CalibrationError(f"{what} must hold finite values")
    return array


def _distortion(value, what: str) -> np.ndarray:
    array = np.asarray(value, dtype=np.float64)
    if array.size != 5:
        raise CalibrationError(f"{what} must hold five coefficients")
    return array.reshape(5, 1)


def _unit(vector: np.ndarray) -> np.ndarray:
    length = np.linalg.norm(vector)
    if length == 0 or not np.isfinite(length):
        raise CalibrationError("rotations cannot be averaged: degenerate axes")
    return vector / length


def average_transform(rotations: Sequence, translations: Sequence) -> np.ndarray:
    """4x4 transform from the mean translation and a re-orthogonalised mean rotation."""
    rotation_list = [_matrix(r, (3, 3), "rotation") for r in rotations]
    translation_list = [np.asarray(t, dtype=np.float64).reshape(3) for t in translations]
    if len(rotation_list) != len(translation_list):
        raise CalibrationError("rotation and translation counts differ")
    if not rotation_list:
        raise CalibrationError("nothing to average")

    translation = np.mean(translation_list, axis=0)
    mean_rotation = np.mean(rotation_list, axis=0)

    x_old = mean_rotation[:, 0]
    y_old = mean_rotation[:, 1]
    z_old = np.cross(x_old, y_old)
    bisector = _unit(x_old + y_old)
    across = _unit(np.cross(bisector, z_old))
    x_new = _unit(bisector + across)
    y_new = _unit(bisector - across)
    z_new = _unit(np.cross(x_new, y_new))

    result = np.eye(4)
    result[:3, 0] = x_new
    result[:3, 1] = y_new
    result[:3, 2] = z_new
    result[:3, 3] = translation
    return result


def calibrate(
    eye_camera_matrix,
    eye_distortion,
    scene_camera_matrix,
    scene_distortion,
    rig_matrix,
    scale,
    eye_centers,
    scene_centers,
) -> np.ndarray:
    """4x4 transform from the (virtual) eye camera to the scene camera.

    Each pair gives the small board's pose in the eye camera and the big board's
    pose in the scene camera; with the rig transform between the boards these chain
    into one eye-to-scene transform. Pairs whose pose cannot be found are skipped,
    and the rest are averaged.
    """
    eye_camera = _matrix(eye_camera_matrix, (3, 3), "eye camera matrix")
    scene_camera = _matrix(scene_camera_matrix, (3, 3), "scene camera matrix")
    eye_dist = _distortion(eye_distortion, "eye distortion")
    scene_dist = _distortion(scene_distortion, "scene distortion")
    rig = _matrix(rig_matrix, (4, 4), "rig matrix")
    scale = float(scale)
    if not 0 < scale < 1:
        raise CalibrationError("scaling factor must lie strictly between 0 and 1")

    eye_list = list(eye_centers)
    scene_list = list(scene_centers)
    if len(eye_list) != len(scene_list):
        raise CalibrationError("numbers of eye and scene images differ")
    if not eye_list:
        raise CalibrationError("no image pairs of virtual eye cam and scene cam")

    small = small_board_points(scale)
    big = big_board_points()

    rotations: list[np.ndarray] = []
    translations: list[np.ndarray] = []
    for index, (eye, scene) in enumerate(zip(eye_list, scene_list)):
        try:
            eye_pose = pose_matrix(*solve_pnp(small, eye, eye_camera, eye_dist))
            scene_pose = pose_matrix(*solve_pnp(big, scene, scene_camera, scene_dist))
        except PoseError as exc:
            logger.warning("pose estimation failed for image pair %d: %s", index, exc)
            continue
        product = scene_pose @ rig @ np.linalg.inv(eye_pose)
        logger.debug("image pair %d: transform as product:\n%s", index, product)
        rotations.append(product[:3, :3].copy())
        translations.append(product[:3, 3].copy())

    if not rotations:
        raise CalibrationError("no image pair gave a usable pose")

    result = average_transform(rotations, translations)
    logger.info("average over %d image pairs", len(rotations))
    return result